""" A :class:`Connection` turns a transport binding into a reliable, ordered
    channel to the server: outbound messages are queued and transmitted in
    batches, with at most one transmission in flight, and inbound messages
    are handed to a receiver callback in the order the server sent them.

    Everything here runs on a single asyncio event loop. Network operations
    are the only suspension points; each runs inside a task owned by the
    connection, and every continuation checks whether the connection has
    since been disconnected before doing anything else. There is no locking.
"""

import asyncio
import enum
import logging
import time

from . import config
from . import transport
from .protocol import fields
from .protocol import wire
from .transport import TransportClosed, TransportError

logger = logging.getLogger(__name__)


class State(enum.Enum):
    INIT = 'init'
    CONNECTING = 'connecting'
    CONNECTED = 'connected'
    DISCONNECTED = 'disconnected'


class Connection:
    """ Common machinery for every connection type: the outbound queue, the
        *hold* flag that keeps a second transmission from starting while one
        is in flight, and the failure contract.

        The *receiver* is called once for each inbound message, with the
        decoded message as its only argument. The *failure* callback, if
        any, is called at most once, with a human-readable description, the
        task that failed (one of 'connect', 'select', 'xmit', 'disconnect',
        or 'send'), and a short error tag. After it has been called the
        connection is permanently broken; further calls to :func:`send` are
        accepted and quietly discarded.

        Subclasses implement :func:`_connect` and :func:`_xmit`.
    """

    def __init__(self, root, receiver, failure=None, binding=None):

        self.root = root
        self.receiver = receiver
        self.failure = failure
        self.binding = binding
        self.state = State.INIT
        self.hold = True
        self.queue = list()

        self._failed = False
        self._closed = False
        self._loop = None
        self._tasks = set()
        self._protected = set()


    def __repr__(self):
        return '%s(%r, %s)' % (self.__class__.__name__, self.root, self.state.value)


    @property
    def disconnected(self):
        return self.state is State.DISCONNECTED


    @property
    def protocol(self):
        """ The protocol name a director needs in order to issue a reservation
            usable over this kind of connection.
        """

        return self.binding.protocol


    def connect(self):
        """ Begin connecting to the server. This returns immediately; the
            handshake proceeds in the background on the running event loop.
        """

        if self.state is not State.INIT:
            raise RuntimeError('connect() may only be called once per connection')

        self._loop = asyncio.get_running_loop()
        self.state = State.CONNECTING
        self._spawn(self._connect())


    def send(self, message):
        """ Queue *message* for transmission. The *message* may be a
            dictionary, a :class:`elko.protocol.Message`, or already-encoded
            JSON text. The actual transmission is always scheduled for later;
            it never happens within the caller's stack, which makes it safe
            to call :func:`send` from inside a receiver callback.
        """

        if not message:
            return

        self.queue.append(wire.encode(message))

        if not self.hold and not self.disconnected:
            self._loop.call_soon(self._flush)


    def disconnect(self):
        """ Break the connection. Calling this more than once is harmless.
        """

        if self._closed:
            return

        self._closed = True
        self._disconnect()
        self.state = State.DISCONNECTED


    async def close(self):
        """ Disconnect, cancel any outstanding network activity other than
            the disconnect request itself, wait for it all to settle, and
            release the binding's resources.
        """

        self.disconnect()

        current = asyncio.current_task()
        pending = [task for task in self._tasks if task is not current]

        for task in pending:
            if task not in self._protected:
                task.cancel()

        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        if self.binding is not None:
            await self.binding.close()


    def _disconnect(self):
        """ Subclass hook for any transport-specific disconnect activity.
        """

        pass


    def _spawn(self, coroutine, cancellable=True):

        task = self._loop.create_task(coroutine)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        if not cancellable:
            self._protected.add(task)
            task.add_done_callback(self._protected.discard)

        return task


    def _flush(self):
        """ Transmit everything currently queued, as a single batch, unless
            a transmission is already in flight; in that case the queue will
            be flushed again once the in-flight transmission is acknowledged.
        """

        if self.hold or self.disconnected or not self.queue:
            return

        body = wire.join(self.queue)
        self.queue = list()
        self.hold = True
        self._spawn(self._xmit(body))


    def _deliver(self, message):

        try:
            self.receiver(message)
        except Exception:
            logger.exception('receiver raised while handling %r', message)


    def _fail(self, description, task, error):
        """ Mark this connection as permanently broken and, the first time
            only, tell the failure callback about it.
        """

        self.state = State.DISCONNECTED

        if self._failed:
            return

        self._failed = True
        logger.warning('%r failed: %s (task=%s, error=%s)', self, description, task, error)

        if self.failure is None:
            return

        try:
            self.failure(description, task, error)
        except Exception:
            logger.exception('failure callback raised')


    async def _connect(self):
        raise NotImplementedError('subclasses must implement _connect()')


    async def _xmit(self, body):
        raise NotImplementedError('subclasses must implement _xmit()')


# end of class Connection



class PollingConnection(Connection):
    """ A connection over a polling binding. The server assigns a session id
        on connect; thereafter a long-poll select request is always
        outstanding to receive messages, and xmit requests carry outbound
        batches. Both directions are sequenced: each response carries the
        sequence number to use on the next request in that direction.

        A *root* without a scheme is assumed to be http://.
    """

    def __init__(self, root, receiver, failure=None, binding=None):

        if not root.startswith(('http://', 'https://')):
            root = 'http://' + root

        root = root.rstrip('/')

        if binding is None:
            binding = transport.polling('http')

        Connection.__init__(self, root, receiver, failure, binding)

        self.session_id = None
        self.select_seq = 1
        self.xmit_seq = 1


    async def _connect(self):

        # The nonce keeps any intervening cache from answering for the server.

        nonce = int(time.time() * 1000)
        url = '%s/connect/%d' % (self.root, nonce)

        try:
            text = await self.binding.get(url)
        except TransportError as error:
            self._fail('connect request failed, status=' + error.status, fields.CONNECT, error.status)
            return

        if self.disconnected:
            return

        data = wire.decode(text)
        session_id = None
        problem = None

        if data is None:
            problem = fields.MALFORMED_RESPONSE
        else:
            session_id = data.get('sessionid')
            problem = data.get('error')

        if problem or not session_id:
            problem = problem or fields.UNKNOWN_PROBLEM
            self._fail('connect request failed, problem=%s' % (problem), fields.CONNECT, problem)
            return

        self.session_id = session_id
        self.select_seq = 1
        self.xmit_seq = 1
        self.state = State.CONNECTED
        logger.debug('%r established session %s', self, session_id)

        self._spawn(self._select())

        self.hold = False
        self._flush()


    async def _select(self):
        """ The select loop. Exactly one select request is outstanding at any
            time; the messages from one response are all delivered, in order,
            before the next request is issued.
        """

        while not self.disconnected:
            url = '%s/select/%s/%d' % (self.root, self.session_id, self.select_seq)

            try:
                text = await self.binding.get(url, long_poll=True)
            except TransportError as error:
                if not self.disconnected:
                    self._fail('select request failed, status=' + error.status, fields.SELECT, error.status)
                return

            if self.disconnected:
                # Stale response for a connection that is no longer wanted.
                return

            data = wire.decode(text)

            if data is None:
                self._fail('select request failed, problem=' + fields.MALFORMED_RESPONSE, fields.SELECT, fields.MALFORMED_RESPONSE)
                return

            messages = data.get('msgs')

            if messages is None:
                messages = ()
            elif not isinstance(messages, list):
                self._fail('select request failed, problem=' + fields.MALFORMED_RESPONSE, fields.SELECT, fields.MALFORMED_RESPONSE)
                return

            for message in messages:
                if self.disconnected:
                    # A receiver disconnected; the rest are stale.
                    return
                self._deliver(message)

            if self.disconnected:
                return

            problem = data.get('error')
            seqnum = wire.sequence(data.get('seqnum'))

            if problem or seqnum is None or seqnum < 0:
                problem = problem or fields.UNKNOWN_PROBLEM
                self._fail('select request failed, problem=%s' % (problem), fields.SELECT, problem)
                return

            if seqnum == 0:
                # The server has ended the session gracefully.
                logger.debug('%r select loop ended by server', self)
                return

            self.select_seq = seqnum

            # Yield before reissuing, so that anything scheduled by the
            # receiver runs ahead of the next select.

            await asyncio.sleep(0)


    async def _xmit(self, body):

        url = '%s/xmit/%s/%d' % (self.root, self.session_id, self.xmit_seq)

        try:
            text = await self.binding.post(url, body)
        except TransportError as error:
            if not self.disconnected:
                self._fail('xmit request failed, status=' + error.status, fields.XMIT, error.status)
            return

        if self.disconnected:
            return

        data = wire.decode(text)
        seqnum = None
        problem = None

        if data is None:
            problem = fields.MALFORMED_RESPONSE
        else:
            seqnum = wire.sequence(data.get('seqnum'))
            problem = data.get('error')

        if problem or seqnum is None or seqnum <= 0:
            problem = problem or fields.UNKNOWN_PROBLEM
            self._fail('xmit request failed, problem=%s' % (problem), fields.XMIT, problem)
            return

        self.xmit_seq = seqnum
        self.hold = False

        # The queue may have been refilled while the request was in flight.

        self._flush()


    def _disconnect(self):

        if self.session_id is None:
            return

        # Anything still queued rides along with the disconnect request.

        url = '%s/disconnect/%s' % (self.root, self.session_id)
        body = wire.join(self.queue)
        self.queue = list()
        self.session_id = None
        self._spawn(self._post_disconnect(url, body), cancellable=False)


    async def _post_disconnect(self, url, body):

        try:
            await self.binding.post(url, body)
        except TransportError as error:
            # The result of a disconnect is ignored, successful or not.
            logger.debug('%r disconnect request failed: %s', self, error)


# end of class PollingConnection



class SocketConnection(Connection):
    """ A connection over a duplex binding (a WebSocket, or a ZeroMQ socket).
        There is no session id and there are no sequence numbers; the
        transport itself guarantees order and delivery. Opening the channel
        does what a successful connect handshake does for a polling
        connection: any queued messages are flushed.
    """

    def __init__(self, root, receiver, failure=None, binding=None):

        if binding is None:
            binding = transport.duplex('websocket', root)

        Connection.__init__(self, root, receiver, failure, binding)


    async def _connect(self):

        try:
            await self.binding.open()
        except TransportError as error:
            self._fail('socket open failure: ' + str(error), fields.CONNECT, error.status)
            return

        if self.disconnected:
            await self.binding.close()
            return

        self.state = State.CONNECTED
        self.hold = False
        self._flush()

        self._spawn(self._read())


    async def _read(self):

        while not self.disconnected:
            try:
                frame = await self.binding.recv()
            except TransportClosed:
                if not self.disconnected:
                    logger.info('%r closed by server', self)
                    self.state = State.DISCONNECTED
                return
            except TransportError as error:
                if not self.disconnected:
                    self._fail('socket error: ' + str(error), fields.SELECT, error.status)
                return

            if self.disconnected:
                return

            message = wire.decode(frame)

            if message is None:
                logger.error('%r dropped malformed frame: %r', self, frame)
                continue

            self._deliver(message)


    async def _xmit(self, body):

        try:
            await self.binding.send(body)
        except TransportError as error:
            if not self.disconnected:
                self._fail('socket send failure: ' + str(error), fields.SEND, error.status)
            return

        if self.disconnected:
            return

        self.hold = False
        self._flush()


    def _disconnect(self):

        if self._loop is not None:
            self._spawn(self.binding.close(), cancellable=False)


# end of class SocketConnection



def create(root, receiver, failure=None, settings=None):
    """ Factory function for a :class:`Connection` instance appropriate for
        the server *root*. A ws:// or wss:// root always gets a WebSocket,
        a tcp:// root always gets ZeroMQ; anything else uses the transport
        named in *settings* (see :mod:`elko.config`), which defaults to an
        httpx long-poll binding.

        The returned connection has not been started; call its
        :func:`Connection.connect` method from within a running event loop.
    """

    if settings is None:
        settings = config.load()

    name = settings.transport

    if root.startswith(('ws://', 'wss://')):
        name = 'websocket'
    elif root.startswith('tcp://'):
        name = 'zmq'

    if name in ('websocket', 'zmq'):
        binding = transport.duplex(name, root, settings.zmq_inbound)
        return SocketConnection(root, receiver, failure, binding)

    binding = transport.polling(name, poll_timeout=settings.poll_timeout)
    return PollingConnection(root, receiver, failure, binding)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
