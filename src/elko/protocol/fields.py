"""Protocol constants.

Keep these in one place to avoid stringly-typed message handling.
"""

# Reserved object references, always present in a session's object table.

SESSION = "session"
ERROR = "error"
DIRECTOR = "director"

# Operations understood by the client-side object model.

MAKE = "make"
DELETE = "delete"
EXIT = "exit"
DEBUG = "debug"
READY = "ready"

# Operations sent by the client.

ENTERCONTEXT = "entercontext"
AUTH = "auth"
RESERVE = "reserve"

# Connection tasks, as reported to a failure callback.

CONNECT = "connect"
SELECT = "select"
XMIT = "xmit"
DISCONNECT = "disconnect"
SEND = "send"

TASKS = (CONNECT, SELECT, XMIT, DISCONNECT, SEND)

# Error tag used when a response is missing the field that would explain
# what went wrong.

UNKNOWN_PROBLEM = "unknownProblem"
MALFORMED_RESPONSE = "malformedResponse"
