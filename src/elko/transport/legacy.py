""" Long-poll transport binding layered on the blocking :mod:`requests`
    helper. Some deployments cannot use an asynchronous HTTP client (a
    restrictive proxy, a vendored HTTP stack, an older interpreter image
    with :mod:`requests` as the only sanctioned client); this binding shims
    that helper into the same asynchronous capability set as
    :mod:`elko.transport.http`.

    Each request runs in a worker thread via :func:`asyncio.to_thread`, and
    each uses its own one-shot :class:`requests.Session`: the helper is
    treated like a restricted request object that supports exactly one
    GET or POST with a text/plain body and nothing else. That restriction is
    also what guarantees a select and an xmit in flight at the same time
    never share a pooled socket.
"""

import asyncio
import logging

import requests

from .base import Polling, TransportConnectionError

logger = logging.getLogger(__name__)

default_timeout = 30.0


class Binding(Polling):

    def __init__(self, poll_timeout=None, timeout=default_timeout):
        self.poll_timeout = poll_timeout
        self.timeout = timeout


    async def get(self, url, long_poll=False):

        if long_poll:
            timeout = self.poll_timeout
        else:
            timeout = self.timeout

        return await asyncio.to_thread(_exchange, 'GET', url, None, timeout)


    async def post(self, url, body):
        return await asyncio.to_thread(_exchange, 'POST', url, body, self.timeout)


# end of class Binding



def _exchange(method, url, body, timeout):
    """ Perform one blocking request and return the response body. This is
        the only code in the binding that runs off the event loop thread; it
        touches no shared state.
    """

    logger.debug('%s %s', method, url)

    headers = dict()
    if body is not None:
        headers['Content-Type'] = 'text/plain'
        body = body.encode('utf-8')

    with requests.Session() as http:
        try:
            response = http.request(method, url, data=body, headers=headers, timeout=timeout)
            response.raise_for_status()
        except requests.Timeout as error:
            raise TransportConnectionError('%s %s timed out' % (method, url), 'timeout') from error
        except requests.HTTPError as error:
            code = error.response.status_code
            raise TransportConnectionError('%s %s: HTTP error %d' % (method, url, code), str(code)) from error
        except requests.RequestException as error:
            raise TransportConnectionError('%s %s: %s' % (method, url, error), 'error') from error

    # The protocol is JSON, which is always UTF-8; requests would otherwise
    # guess ISO-8859-1 for a text/plain response without a charset.

    response.encoding = 'utf-8'
    return response.text


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
