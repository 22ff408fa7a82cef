""" Python client for elko servers. This includes the transport bindings
    that carry line-delimited JSON messages to and from a server, the
    connection that sequences and batches them, and the session that keeps
    the client-side object table and dispatches inbound messages to it.
"""

# Utility components.

from . import json
from . import weakref
from . import config
from . import trace

# Submodules used by multiple other components.

from . import protocol
from . import transport
from . import model

# Primary public-facing interfaces.

from . import connection
from . import basic
from . import session

from .connection import Connection
from .model import Mod, SessionObject, TypeDefinition
from .session import Session

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
