"""Transport layer implementations."""

from .base import (
    Duplex,
    Polling,
    TransportError,
    TransportClosed,
    TransportConnectionError,
)


def polling(name, poll_timeout=None):
    """Return a new polling binding for the configured transport *name*."""

    if name == "legacy":
        from . import legacy
        return legacy.Binding(poll_timeout=poll_timeout)

    from . import http
    return http.Binding(poll_timeout=poll_timeout)


def duplex(name, url, inbound=None):
    """Return a new duplex binding for the configured transport *name*.

    The *inbound* address applies only to ZeroMQ, which receives on a
    separate socket from the one it sends on.
    """

    if name == "zmq":
        from . import zmq
        return zmq.Binding(url, inbound)
    elif name == "websocket":
        from . import websocket
        return websocket.Binding(url)
    else:
        raise ValueError(f"not a duplex transport: {name!r}")
