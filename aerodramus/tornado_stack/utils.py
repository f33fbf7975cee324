from tornado.concurrent import Future, future_set_result_unless_cancelled, \
    future_set_exc_info
from tornado.ioloop import IOLoop


def promise_to_future(promise):
    """
    Wrap a promise in a tornado Future bound to the current IOLoop, so it
    can be awaited from a coroutine.  The promise may be settled from any
    thread.
    """
    future = Future()
    tornado_ioloop = IOLoop.current()

    def set_result(value):
        future_set_result_unless_cancelled(future, value)

    def set_error(error):
        if future.done():
            return
        if isinstance(error, BaseException):
            future_set_exc_info(future, (type(error), error,
                                         error.__traceback__))
        else:
            future.set_exception(Exception(error))

    promise.on_success(lambda value: tornado_ioloop.add_callback(set_result, value))
    promise.on_failure(lambda error: tornado_ioloop.add_callback(set_error, error))
    return future
