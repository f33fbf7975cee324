# -*- coding: utf-8 -*-
import tornado.httpclient
from tornado.concurrent import future_add_done_callback
from tornado.httputil import HTTPHeaders

from aerodramus import VERSION
from aerodramus.core import log
from aerodramus.promise import Progress
from aerodramus.stack.network import TransportError
from aerodramus.stack.network.http import DataPromise, settle_response

__all__ = ['HttpClient']


class _Transfer:
    def __init__(self):
        self.deferred = None
        self.task = None
        self.headers = HTTPHeaders()
        self.chunks = []
        self.received = 0

    def header_line(self, line):
        if line.startswith("HTTP/"):
            # a new response, e.g. after a redirect
            self.headers.clear()
            self.chunks = []
            self.received = 0
        elif line.strip():
            self.headers.parse_line(line.rstrip("\r\n"))

    def content_length(self):
        value = self.headers.get('Content-Length')
        if value is not None and value.strip().isdigit():
            return int(value)
        return None

    def data_received(self, chunk):
        self.chunks.append(chunk)
        self.received += len(chunk)
        self.deferred.notify(Progress(self.received, self.content_length()))

    def body(self):
        return b"".join(self.chunks)


class HttpClient:
    def __init__(self, http_client=None):
        self._http_client = http_client

    @property
    def http_client(self):
        if self._http_client is None:
            return tornado.httpclient.AsyncHTTPClient()
        return self._http_client

    def data_task(self, request, **kwargs):
        """
        Fetch ``request`` (a URL or an HTTPRequest) and return a
        DataPromise of the response body.  Progress is notified for every
        chunk received.  Must be called on the IOLoop's thread.
        """
        if not isinstance(request, tornado.httpclient.HTTPRequest):
            request = tornado.httpclient.HTTPRequest(request, **kwargs)
        if request.user_agent is None:
            request.user_agent = 'aerodramus/%s' % VERSION
        transfer = _Transfer()

        def setup(deferred):
            transfer.deferred = deferred
            request.header_callback = transfer.header_line
            request.streaming_callback = transfer.data_received

            def fetched(future):
                if future.cancelled():
                    deferred.reject(TransportError(
                        "%s %s cancelled" % (request.method, request.url)))
                    return
                try:
                    response = future.result()
                except Exception as e:
                    log.debug("%s %s failed: %s", request.method,
                              request.url, e)
                    settle_response(deferred, None,
                                    code=getattr(e, 'code', None), error=e)
                    return
                settle_response(deferred, transfer.body(), code=response.code)

            transfer.task = self.http_client.fetch(request, raise_error=False)
            future_add_done_callback(transfer.task, fetched)

        promise = DataPromise(setup, headers=transfer.headers)
        promise.task = transfer.task
        return promise
