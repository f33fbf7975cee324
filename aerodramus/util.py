from aerodramus.stack.eventloop import queue_task
from aerodramus.promise import Promise


def sleep(seconds):
    return Promise(lambda deferred: queue_task(seconds, deferred.resolve, None))


def after(promise, seconds):
    """
    A promise that repeats ``promise``'s outcome, and each of its progress
    notifications, ``seconds`` after it happened.
    """
    def setup(deferred):
        promise.on_success(
            lambda value: queue_task(seconds, deferred.resolve, value))
        promise.on_failure(
            lambda error: queue_task(seconds, deferred.reject, error))
        promise.on_progress(
            lambda progress: queue_task(seconds, deferred.notify, progress))
    return Promise(setup)
