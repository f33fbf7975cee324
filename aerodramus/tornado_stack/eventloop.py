from tornado.ioloop import IOLoop

from aerodramus.core import log_exception


class Task:
    def __init__(self, tornado_ioloop, timeout):
        self._timeout = timeout
        self._tornado_ioloop = tornado_ioloop

    def cancel(self):
        self._tornado_ioloop.remove_timeout(self._timeout)


class EventLoop:
    def __init__(self):
        self._tornado_ioloop = IOLoop.current()

    def _ioloop(self):
        # a loop running on this thread wins over the one we were built with
        current = IOLoop.current(instance=False)
        if current is not None:
            return current
        return self._tornado_ioloop

    def queue_task(self, delay, callable, *args, **kw):
        def task():
            try:
                callable(*args, **kw)
            except Exception:
                log_exception()

        tornado_ioloop = self._ioloop()
        self._tornado_ioloop = tornado_ioloop

        def queue():
            timeout = tornado_ioloop.call_later(delay, task)
            return Task(tornado_ioloop, timeout)

        if IOLoop.current(instance=False) is not tornado_ioloop:
            tornado_ioloop.add_callback(queue)
        else:
            return queue()

    def run(self):
        self._tornado_ioloop = self._ioloop()
        self._tornado_ioloop.start()

    def halt(self):
        self._ioloop().stop()

evlp = EventLoop()
queue_task = evlp.queue_task
run = evlp.run
halt = evlp.halt
