import asyncio

import httpx
import pytest
import requests

import elko
from elko.transport import TransportConnectionError
from elko.transport import http, legacy, websocket, zmq


def test_http_binding():

    seen = list()

    def handler(request):
        seen.append(request)
        if request.url.path.startswith('/xmit'):
            return httpx.Response(200, text='{"seqnum":2}')
        if request.url.path.startswith('/select'):
            return httpx.Response(503)
        return httpx.Response(200, text='{"sessionid":"S1"}')

    async def scenario():
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        binding = http.Binding(client=client)

        text = await binding.get('http://example.com/connect/1')
        assert text == '{"sessionid":"S1"}'

        text = await binding.post('http://example.com/xmit/S1/1', '{"a":1}\n{"b":2}')
        assert text == '{"seqnum":2}'
        assert seen[-1].method == 'POST'
        assert seen[-1].content == b'{"a":1}\n{"b":2}'
        assert seen[-1].headers['content-type'] == 'text/plain'

        with pytest.raises(TransportConnectionError) as caught:
            await binding.get('http://example.com/select/S1/1', long_poll=True)

        assert caught.value.status == '503'

        await binding.close()

    asyncio.run(scenario())


def test_http_binding_network_error():

    def handler(request):
        raise httpx.ConnectError('refused', request=request)

    async def scenario():
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        binding = http.Binding(client=client)

        with pytest.raises(TransportConnectionError) as caught:
            await binding.get('http://example.com/connect/1')

        assert caught.value.status == 'error'
        await binding.close()

    asyncio.run(scenario())


class FakeResponse:

    def __init__(self, status, text):
        self.status_code = status
        self.text = text
        self.encoding = None


    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError('bad status', response=self)


def test_legacy_binding(monkeypatch):

    seen = list()
    answers = [FakeResponse(200, '{"seqnum":2}'), FakeResponse(404, '')]

    def request(self, method, url, data=None, headers=None, timeout=None):
        seen.append((method, url, data, headers, timeout))
        return answers.pop(0)

    monkeypatch.setattr(requests.Session, 'request', request)

    async def scenario():
        binding = legacy.Binding(poll_timeout=None, timeout=5)

        text = await binding.post('http://example.com/xmit/S1/1', '{"a":1}')
        assert text == '{"seqnum":2}'

        with pytest.raises(TransportConnectionError) as caught:
            await binding.get('http://example.com/select/S1/1', long_poll=True)

        assert caught.value.status == '404'
        await binding.close()

    asyncio.run(scenario())

    assert seen[0] == ('POST', 'http://example.com/xmit/S1/1', b'{"a":1}', {'Content-Type': 'text/plain'}, 5)
    assert seen[1][0] == 'GET'
    assert seen[1][4] is None


def test_legacy_binding_timeout(monkeypatch):

    def request(self, method, url, data=None, headers=None, timeout=None):
        raise requests.Timeout('slow')

    monkeypatch.setattr(requests.Session, 'request', request)

    async def scenario():
        binding = legacy.Binding()
        with pytest.raises(TransportConnectionError) as caught:
            await binding.get('http://example.com/connect/1')
        return caught.value.status

    assert asyncio.run(scenario()) == 'timeout'


def test_websocket_normalize():

    assert websocket.normalize('http://example.com/ws') == 'ws://example.com/ws'
    assert websocket.normalize('https://example.com/ws') == 'wss://example.com/ws'
    assert websocket.normalize('wss://example.com') == 'wss://example.com'
    assert websocket.normalize('example.com:9000') == 'ws://example.com:9000'


def test_websocket_closed_binding():

    async def scenario():
        binding = websocket.Binding('example.com')
        assert binding.is_open == False

        with pytest.raises(elko.transport.TransportClosed):
            await binding.recv()

        with pytest.raises(TransportConnectionError):
            await binding.send('{}')

        await binding.close()

    asyncio.run(scenario())


def test_zmq_framing():

    framed = zmq.frame('{"a":1}\n{"b":2}')
    assert framed == b'{"a":1}\n\n{"b":2}\n\n'

    assert zmq.unframe(framed) == ['{"a":1}', '{"b":2}']
    assert zmq.unframe(b'{"a":1}\n\n\0\0') == ['{"a":1}']

    binding = zmq.Binding('example.com:9000')
    assert binding.url == 'tcp://example.com:9000'
    assert binding.is_open == False
    assert binding.inbound is None


def test_zmq_inbound_address():

    import zmq as pyzmq

    assert zmq.inbound_address('SUB:example.com:9001') == (pyzmq.SUB, 'tcp://example.com:9001')
    assert zmq.inbound_address('example.com:9001') == (pyzmq.SUB, 'tcp://example.com:9001')
    assert zmq.inbound_address('PULL:9002') == (pyzmq.PULL, 'tcp://*:9002')
    assert zmq.inbound_address('PULL:example.com:9002') == (pyzmq.PULL, 'tcp://*:9002')

    with pytest.raises(ValueError):
        zmq.Binding('example.com:9000', inbound='PULL:nowhere')


def test_zmq_push_to_pull_listener():
    """ The server listens for client traffic on a bound PULL socket; the
        binding must deliver to it.
    """

    import zmq as pyzmq

    async def scenario():
        listener = zmq.zmq_context.socket(pyzmq.PULL)
        listener.setsockopt(pyzmq.LINGER, 0)
        port = listener.bind_to_random_port('tcp://127.0.0.1')

        binding = zmq.Binding('127.0.0.1:%d' % (port))
        await binding.open()
        assert binding.is_open

        await binding.send('{"to":"session","op":"hello"}\n{"to":"session","op":"bye"}')
        blob = await asyncio.wait_for(listener.recv(), 5)
        assert zmq.unframe(blob) == ['{"to":"session","op":"hello"}', '{"to":"session","op":"bye"}']

        await binding.close()
        listener.close()

    asyncio.run(scenario())


def test_zmq_pull_inbound():
    """ With a PULL inbound address the binding listens locally and the
        server pushes to it.
    """

    import zmq as pyzmq

    async def scenario():
        listener = zmq.zmq_context.socket(pyzmq.PULL)
        listener.setsockopt(pyzmq.LINGER, 0)
        port = listener.bind_to_random_port('tcp://127.0.0.1')

        reserved = zmq.zmq_context.socket(pyzmq.PULL)
        inbound_port = reserved.bind_to_random_port('tcp://127.0.0.1')
        reserved.close(linger=0)

        binding = zmq.Binding('127.0.0.1:%d' % (port), inbound='PULL:%d' % (inbound_port))
        await binding.open()

        server = zmq.zmq_context.socket(pyzmq.PUSH)
        server.setsockopt(pyzmq.LINGER, 0)
        server.connect('tcp://127.0.0.1:%d' % (inbound_port))
        await server.send(zmq.frame('{"to":"session","op":"one"}\n{"to":"session","op":"two"}'))

        first = await asyncio.wait_for(binding.recv(), 5)
        second = await asyncio.wait_for(binding.recv(), 5)
        assert first == '{"to":"session","op":"one"}'
        assert second == '{"to":"session","op":"two"}'

        server.close()
        await binding.close()
        listener.close()

    asyncio.run(scenario())


def test_zmq_send_only_recv_ends_on_close():

    async def scenario():
        binding = zmq.Binding('127.0.0.1:1')
        waiting = asyncio.ensure_future(binding.recv())
        await asyncio.sleep(0)
        assert not waiting.done()

        await binding.close()

        with pytest.raises(elko.transport.TransportClosed):
            await asyncio.wait_for(waiting, 5)

    asyncio.run(scenario())


def test_duplex_factory():

    assert elko.transport.duplex('websocket', 'example.com').protocol == 'ws'
    assert elko.transport.duplex('zmq', 'tcp://example.com:1').protocol == 'zmq'
    assert elko.transport.duplex('zmq', 'tcp://example.com:1', 'SUB:example.com:2').inbound == 'SUB:example.com:2'

    with pytest.raises(ValueError):
        elko.transport.duplex('http', 'example.com')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
