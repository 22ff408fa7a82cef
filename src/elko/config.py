""" Runtime settings for elko clients. Settings are drawn from the process
    environment, in the same way the choice of transport backend is made
    for the rest of the package:

    ``ELKO_TRANSPORT``
        Which binding to use for a server root that does not name its own
        scheme: ``http`` (the default), ``legacy``, ``websocket``, or
        ``zmq``.

    ``ELKO_TRACE``
        The trace level name used by :func:`elko.trace.configure`; one of
        ``FATAL``, ``ERROR``, ``WARNING`` (the default), ``DEBUG``, or
        ``VERBOSE``.

    ``ELKO_POLL_TIMEOUT``
        Upper bound, in seconds, for a single long-poll select request. By
        default there is no client-side bound; the server is responsible for
        ending a long poll in a timely fashion.

    ``ELKO_ZMQ_INBOUND``
        Where a ZeroMQ connection receives messages from the server:
        ``SUB:host:port`` subscribes to the server's PUB socket, and
        ``PULL:port`` listens locally for the server to push to. Unset, a
        ZeroMQ connection is send-only.
"""

import os

transports = ('http', 'legacy', 'websocket', 'zmq')


class Settings:
    """ A plain container for the settings described above. Instances are
        normally created by :func:`load`, but can be constructed directly by
        applications (and tests) that want to ignore the environment.
    """

    def __init__(self, transport='http', trace='WARNING', poll_timeout=None, zmq_inbound=None):

        transport = transport.lower()

        if transport not in transports:
            raise ValueError('unknown transport: ' + repr(transport))

        if poll_timeout is not None:
            poll_timeout = float(poll_timeout)
            if poll_timeout <= 0:
                poll_timeout = None

        self.transport = transport
        self.trace = trace.upper()
        self.poll_timeout = poll_timeout
        self.zmq_inbound = zmq_inbound or None


    def __repr__(self):
        return 'Settings(transport=%r, trace=%r, poll_timeout=%r, zmq_inbound=%r)' % (self.transport, self.trace, self.poll_timeout, self.zmq_inbound)


# end of class Settings



def load(environ=None):
    """ Return a :class:`Settings` instance populated from *environ*, which
        defaults to :data:`os.environ`.
    """

    if environ is None:
        environ = os.environ

    transport = environ.get('ELKO_TRANSPORT', 'http')
    trace = environ.get('ELKO_TRACE', 'WARNING')
    poll_timeout = environ.get('ELKO_POLL_TIMEOUT')
    zmq_inbound = environ.get('ELKO_ZMQ_INBOUND')

    if poll_timeout == '':
        poll_timeout = None

    return Settings(transport, trace, poll_timeout, zmq_inbound)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
