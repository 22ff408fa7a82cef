""" The basic object types every session understands, and the reserved
    objects every session contains.
"""

import logging

from . import model
from .protocol import fields

logger = logging.getLogger(__name__)


def position(descriptor):
    pos = descriptor.get('pos')
    if not pos:
        pos = {'x': 0, 'y': 0}
    return pos


class Context(model.SessionObject):
    """ A place users and items can be in. The server sends 'ready' once it
        has finished describing the context and everything in it.
    """

    def __init__(self, session, ref, mods=(), descriptor=None):

        model.SessionObject.__init__(self, session, ref, mods, descriptor)
        self.name = self.descriptor.get('name') or ref
        self.ready = False


    def op_ready(self, message):
        self.ready = True
        logger.debug('context %r is ready', self.ref)


class User(model.SessionObject):

    def __init__(self, session, ref, mods=(), descriptor=None):

        model.SessionObject.__init__(self, session, ref, mods, descriptor)
        self.name = self.descriptor.get('name') or ref
        self.pos = position(self.descriptor)


class Item(model.SessionObject):

    def __init__(self, session, ref, mods=(), descriptor=None):

        model.SessionObject.__init__(self, session, ref, mods, descriptor)
        self.name = self.descriptor.get('name') or ref
        self.pos = position(self.descriptor)
        self.cont = bool(self.descriptor.get('cont'))
        self.portable = bool(self.descriptor.get('portable'))


definitions = (
    model.TypeDefinition('context', Context),
    model.TypeDefinition('user', User),
    model.TypeDefinition('item', Item),
)


class Root(model.SessionObject):
    """ The 'session' object, container of every top-level object. The
        server addresses it to make contexts and to close the session.
    """

    def __init__(self, session):
        model.SessionObject.__init__(self, session, fields.SESSION)


    def op_delete(self, message):
        logger.error('server attempted to delete the session object')


    def op_exit(self, message):

        if message.why:
            logger.warning('session closed by server: %s', message.why)
        else:
            logger.warning('session closed by server: %r', message)

        self.session.disconnect()


# end of class Root



class ErrorSink(model.Dispatchable):
    """ The 'error' object, which receives diagnostics from the server.
    """

    def __init__(self, session):
        model.Dispatchable.__init__(self, session, fields.ERROR)


    def op_debug(self, message):
        logger.error('server debug message: %s', message.msg)


# end of class ErrorSink



class Director(model.Dispatchable):
    """ The ephemeral 'director' object, which waits for the director's
        answer to a reservation request for *context*. A grant closes the
        director connection and enters the context on the granted host,
        using the reservation as the credential; a denial ends the attempt.
    """

    def __init__(self, session, context, userinfo=None, template=None):

        model.Dispatchable.__init__(self, session, fields.DIRECTOR)

        if userinfo is None:
            userinfo = dict()

        self.context = context
        self.userinfo = userinfo
        self.template = template


    def op_reserve(self, message):

        session = self.session
        session.disconnect()

        if message.deny:
            logger.error('reservation failure: %s', message.deny)
            return

        userinfo = dict(self.userinfo)
        userinfo['auth'] = message.reservation
        session.connect_to_context(message.hostport, self.context, userinfo, self.template)


# end of class Director


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
