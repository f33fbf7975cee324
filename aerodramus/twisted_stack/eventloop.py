import threading

from twisted.internet import reactor
from twisted.internet.error import ReactorNotRunning

from aerodramus.core import log_exception


class EventLoop:
    def __init__(self):
        self._halted = False
        self._thread_ident = threading.get_ident()

    def queue_task(self, delay, callable, *args, **kw):
        def task():
            try:
                callable(*args, **kw)
            except Exception:
                log_exception()

        if threading.get_ident() != self._thread_ident:
            reactor.callFromThread(reactor.callLater, delay, task)
        else:
            return reactor.callLater(delay, task)

    def run(self):
        if not self._halted:
            self._thread_ident = threading.get_ident()
            reactor.run()

    def halt(self):
        try:
            reactor.stop()
        except ReactorNotRunning:
            self._halted = True

evlp = EventLoop()
queue_task = evlp.queue_task
run = evlp.run
halt = evlp.halt
