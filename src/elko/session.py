""" A :class:`Session` is the application's view of one server: it drives a
    :class:`elko.connection.Connection`, keeps the table of objects the
    server has described, and routes every inbound message to the object
    it addresses.
"""

import asyncio
import logging

from . import basic
from . import config
from . import connection
from . import model
from .protocol import fields
from .protocol import message as messages
from .protocol.message import MessageError

logger = logging.getLogger(__name__)


class Session:
    """ The object table and the type table are both scoped to the
        :class:`Session` instance. The object table always contains the
        reserved 'session' and 'error' objects; the type table starts out
        with the basic 'context', 'user', and 'item' types, and applications
        add their own types and mods with :func:`add_type` before connecting.

        The *settings* default to :func:`elko.config.load`. The
        *connection_factory* defaults to :func:`elko.connection.create`,
        and is called with the server root, the receiver, the failure
        callback, and the settings.
    """

    def __init__(self, settings=None, connection_factory=None):

        if settings is None:
            settings = config.load()

        if connection_factory is None:
            connection_factory = connection.create

        self.settings = settings
        self.connection_factory = connection_factory
        self.connection = None
        self.user = None
        self.context = None
        self.objects = dict()
        self.types = dict()

        self._retiring = set()

        for definition in basic.definitions:
            self.add_type(definition)

        self.root = basic.Root(self)
        self.error = basic.ErrorSink(self)
        self.add_object(self.root)
        self.add_object(self.error)


    def add_type(self, definition):
        """ Register a :class:`elko.model.TypeDefinition`. A definition with
            the same tag as an existing one replaces it; this is how an
            application substitutes its own class for a basic type.
        """

        self.types[definition.tag] = definition


    def get_type(self, tag):
        return self.types.get(tag)


    def add_object(self, thing):
        self.objects[thing.ref] = thing


    def get_object(self, ref):
        return self.objects.get(ref)


    def remove_object(self, thing):

        if self.objects.get(thing.ref) is thing:
            del self.objects[thing.ref]


    def make_object(self, descriptor):
        """ Construct, but do not register, a new object from *descriptor*.
            A descriptor whose type is missing or unknown gets a
            :class:`elko.model.Plain` object instead; otherwise every mod
            named in the descriptor is constructed and attached.
        """

        tag = descriptor.get('type')
        definition = None

        if tag is None:
            logger.warning('make with no type for new object %r', descriptor.get('ref'))
        else:
            definition = self.types.get(tag)
            if definition is None:
                logger.warning('make specifies unknown object type %r (ignored)', tag)

        if definition is None or definition.mod:
            return model.Plain.from_descriptor(self, descriptor)

        mods = self.make_mods(descriptor.get('mods') or ())
        return definition.make(self, descriptor, mods)


    def make_mods(self, descriptors):

        mods = list()

        for descriptor in descriptors:
            tag = descriptor.get('type')
            definition = self.types.get(tag)

            if definition is None or not definition.mod:
                logger.warning('unknown mod type %r (ignored)', tag)
                continue

            mods.append(definition.make(self, descriptor))

        return mods


    def dispatch(self, raw):
        """ Deliver one inbound message to the object it addresses. Nothing
            that goes wrong here affects the connection: a malformed message,
            an unknown target or operation, or an exception raised by the
            handler is logged, and the message is dropped.
        """

        try:
            message = messages.parse(raw)
        except MessageError as error:
            logger.error('dropped malformed message: %s', error)
            return

        target = self.objects.get(message.to)

        if target is None:
            logger.error('server sent message to unknown object %r', message.to)
            return

        handler = target.operations.get(message.op)

        if handler is None:
            logger.error('server sent message to %r with unsupported op %r', message.to, message.op)
            return

        try:
            handler(message)
        except Exception:
            logger.exception('error handling message %r', message)


    def send(self, message):
        """ Send a message to the server on this session's connection.
        """

        if self.connection is None:
            raise RuntimeError('session is not connected')

        self.connection.send(message)


    def connect(self, root):
        """ Establish this session's connection to the server at *root*.
            Any existing connection is retired first. Must be called from
            within a running event loop.
        """

        self._retire()

        self.connection = self.connection_factory(root, self.dispatch, self._failure, self.settings)
        self.connection.connect()
        return self.connection


    def disconnect(self):
        """ Terminate this session's connection to the server. The object
            table is cleared of everything but the reserved objects.
        """

        self._retire()

        self.objects = dict()
        self.root.contents = list()
        self.user = None
        self.context = None

        self.add_object(self.root)
        self.add_object(self.error)


    async def close(self):
        """ Disconnect, and wait until every connection this session has used
            has released its resources.
        """

        self.disconnect()

        if self._retiring:
            await asyncio.gather(*self._retiring, return_exceptions=True)


    def connect_to_context(self, root, context, userinfo=None, template=None):
        """ Connect to the server at *root* and ask to enter *context*,
            optionally generated from the context *template*. The *userinfo*
            dictionary supplies the identity fields for the request; see
            :func:`elko.protocol.message.entercontext`. If those fields are
            inconsistent nothing is connected or sent, and None is returned.
        """

        try:
            request = messages.entercontext(context, userinfo, template)
        except MessageError as error:
            logger.error('%s', error)
            return None

        self.connect(root)
        self.connection.send(request)
        return self.connection


    def connect_to_context_via_director(self, root, context, userinfo=None, template=None):
        """ Ask the director at *root* for a reservation to enter *context*,
            then enter it on whichever server the director names. The
            arguments are otherwise the same as :func:`connect_to_context`.
        """

        director = basic.Director(self, context, userinfo, template)

        self.connect(root)
        self.add_object(director)

        request = dict()
        request['to'] = fields.DIRECTOR
        request['op'] = fields.AUTH
        self.connection.send(request)

        request = dict()
        request['to'] = fields.DIRECTOR
        request['op'] = fields.RESERVE
        request['protocol'] = self.connection.protocol
        request['context'] = context
        self.connection.send(request)

        return self.connection


    def _failure(self, description, task, error):
        logger.error('server connection error: %r, task=%s, error=%s', description, task, error)


    def _retire(self):

        previous = self.connection
        self.connection = None

        if previous is None:
            return

        previous.disconnect()

        # A connection that never started has nothing to release.

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return

        task = loop.create_task(previous.close())
        self._retiring.add(task)
        task.add_done_callback(self._retiring.discard)


# end of class Session


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
