# A promise is settled through its Deferred: resolve() or reject() exactly
# once, notify() any number of times before that.  Consumers subscribe with
# on_success/on_failure/on_progress, or derive new promises with then().
import threading
import weakref

from aerodramus.callback import CallbackList, ONCE, MEMORY

PENDING = 'pending'
RESOLVED = 'resolved'
REJECTED = 'rejected'


class Progress:
    def __init__(self, completed, total=None):
        self.completed = completed
        self.total = total

    @property
    def fraction_completed(self):
        if not self.total:
            return 0.0
        return max(0.0, min(1.0, float(self.completed) / self.total))

    def __eq__(self, other):
        if not isinstance(other, Progress):
            return NotImplemented
        return (self.completed, self.total) == (other.completed, other.total)

    def __repr__(self):
        return "<%s %s/%s>" % (self.__class__.__name__, self.completed,
                               self.total)


def _settled(ref, state, outcome):
    deferred = ref()
    if deferred is not None:
        deferred._settle(state, outcome)


class Deferred:
    """
    The settlement handle handed to a promise's setup routine.

    It owns the promise's three callback lists.  Its own handlers on those
    lists only hold a weak reference back to it, so a Deferred (and the
    Promise around it) is freed as soon as nobody else refers to it.
    """

    def __init__(self):
        self.state = PENDING
        self.value = None
        self.error = None
        self._direction = None
        self._claim_lock = threading.Lock()
        self.success_list = CallbackList(ONCE | MEMORY)
        self.failure_list = CallbackList(ONCE | MEMORY)
        self.progress_list = CallbackList(MEMORY)

        ref = weakref.ref(self)
        self.success_list.add(lambda value: _settled(ref, RESOLVED, value))
        self.failure_list.add(lambda error: _settled(ref, REJECTED, error))

    def _claim(self, direction):
        with self._claim_lock:
            if self._direction is None:
                self._direction = direction
            return self._direction == direction

    def _settle(self, state, outcome):
        self.state = state
        if state == RESOLVED:
            self.value = outcome
            self.failure_list.disable()
        else:
            self.error = outcome
            self.success_list.disable()
        self.progress_list.lock()

    def resolve(self, value=None):
        if self._claim(RESOLVED):
            self.success_list.fire(value)

    def reject(self, error):
        if self._claim(REJECTED):
            self.failure_list.fire(error)

    def notify(self, progress):
        self.progress_list.fire(progress)


class Promise:
    """
    A single-settlement asynchronous result.

    ``setup`` is called synchronously with the promise's Deferred; it
    usually starts some asynchronous work that settles the Deferred later::

        def fetch(deferred):
            queue_task(1, deferred.resolve, "done")

        Promise(fetch).then(str.upper).on_success(print)

    Handlers added after settlement are called right away with the
    outcome, exactly once.
    """

    def __init__(self, setup=None):
        self._deferred = Deferred()
        if setup is not None:
            try:
                setup(self._deferred)
            except Exception as e:
                self._deferred.reject(e)

    @property
    def state(self):
        return self._deferred.state

    @property
    def value(self):
        return self._deferred.value

    @property
    def error(self):
        return self._deferred.error

    def on_success(self, handler):
        self._deferred.success_list.add(handler)
        return self

    def on_failure(self, handler):
        self._deferred.failure_list.add(handler)
        return self

    def on_progress(self, handler):
        self._deferred.progress_list.add(handler)
        return self

    def on_settled(self, handler):
        return self.on_success(lambda value: handler(value, None)) \
                   .on_failure(lambda error: handler(None, error))

    def then(self, on_success=None, on_failure=None, on_progress=None):
        """
        Derive a promise from this one.

        The value returned by ``on_success`` resolves the derived promise;
        if it is itself a Promise, the derived promise follows it instead.
        An exception raised by ``on_success`` rejects the derived promise.
        ``on_failure`` and ``on_progress`` map the error and the progress
        values on their way through.
        """
        def setup(deferred):
            def succeeded(value):
                if on_success is None:
                    deferred.resolve(value)
                    return
                try:
                    returned = on_success(value)
                except Exception as e:
                    deferred.reject(e)
                    return
                if isinstance(returned, Promise):
                    returned.on_success(deferred.resolve) \
                            .on_failure(deferred.reject) \
                            .on_progress(deferred.notify)
                else:
                    deferred.resolve(returned)

            def failed(error):
                if on_failure is not None:
                    try:
                        error = on_failure(error)
                    except Exception as e:
                        error = e
                deferred.reject(error)

            def progressed(progress):
                if on_progress is not None:
                    progress = on_progress(progress)
                deferred.notify(progress)

            self.on_success(succeeded) \
                .on_failure(failed) \
                .on_progress(progressed)
        return Promise(setup)

    def after(self, seconds):
        from aerodramus.util import after
        return after(self, seconds)

    def is_pending(self):
        return self.state == PENDING

    def is_settled(self):
        return not self.is_pending()

    def is_resolved(self):
        return self.state == RESOLVED

    def is_rejected(self):
        return self.state == REJECTED

    def __repr__(self):
        if self.is_resolved():
            state = "resolved(%r)" % (self.value,)
        elif self.is_rejected():
            state = "rejected(%r)" % (self.error,)
        else:
            state = PENDING
        return "<%s.%s object at 0x%x; state: %s>" % (
            self.__class__.__module__, self.__class__.__name__, id(self),
            state)


def when(*promises):
    """
    Join several promises: resolves with the list of their values, in
    argument order, once every one of them has resolved.  The first
    rejection rejects the join; progress from any of them is forwarded as
    it arrives.
    """
    def setup(deferred):
        if not promises:
            deferred.resolve([])
            return
        lock = threading.Lock()
        results = [None] * len(promises)
        remaining = [len(promises)]

        for index, promise in enumerate(promises):
            def succeeded(value, index=index):
                with lock:
                    results[index] = value
                    remaining[0] -= 1
                    done = remaining[0] == 0
                if done:
                    deferred.resolve(results)
            promise.on_success(succeeded) \
                   .on_failure(deferred.reject) \
                   .on_progress(deferred.notify)
    return Promise(setup)

Promise.when = staticmethod(when)


def resolved(value=None):
    return Promise(lambda deferred: deferred.resolve(value))


def rejected(error):
    return Promise(lambda deferred: deferred.reject(error))
