# Sort of like jQuery's Callbacks: an ordered list of handlers that can be
# fired with an argument, optionally only once, optionally remembering the
# last argument for handlers added later.
import threading
from collections import deque

from aerodramus import core

NONE = 0
# the list can only be fired once
ONCE = 1 << 0
# handlers added after a fire are called right away with the last argument
MEMORY = 1 << 1
# a handler returning False stops delivery of the current argument
STOP_ON_FALSE = 1 << 2

_option_names = ((ONCE, 'ONCE'),
                 (MEMORY, 'MEMORY'),
                 (STOP_ON_FALSE, 'STOP_ON_FALSE'))


def describe_options(options):
    return "|".join(name for flag, name in _option_names
                    if options & flag) or 'NONE'


class CallbackList:
    """
    An ordered, multi-subscriber dispatcher.

    Handlers run synchronously on whichever thread calls fire(), in the
    order they were added.  A fire() issued while the list is already
    dispatching (from a handler, or from another thread) only queues its
    argument; the dispatching context delivers it once the current argument
    has reached every handler.
    """

    def __init__(self, options=NONE):
        self._options = options
        self._lock = threading.Lock()
        self._handlers = []
        self._pending = deque()
        self._memory = None
        self._has_memory = False
        self._current = None
        self._has_current = False
        self._firing_index = 0
        self._firing_start = 0
        self._fired = False
        self._firing = False
        self._locked = False

    @property
    def options(self):
        return self._options

    def add(self, handler):
        if not callable(handler):
            raise TypeError("'%s' object is not callable" %
                            type(handler).__name__)
        with self._lock:
            if self._handlers is None:
                return self
            self._handlers.append(handler)
            if self._firing or not self._has_memory:
                return self
            # replay the memory to the new handler only
            self._firing_start = len(self._handlers) - 1
            self._pending.append(self._memory)
            self._firing = True
        self._dispatch()
        return self

    def fire(self, argument=None):
        with self._lock:
            if self._locked:
                return self
            self._pending.append(argument)
            if self._firing:
                return self
            self._firing = True
            if self._options & ONCE:
                self._locked = True
        self._dispatch()
        return self

    def _next(self):
        # called with the lock held
        while True:
            if self._handlers is None:
                return None
            if self._has_current and self._firing_index < len(self._handlers):
                handler = self._handlers[self._firing_index]
                self._firing_index += 1
                return handler, self._current
            if not self._pending:
                return None
            self._current = self._pending.popleft()
            self._has_current = True
            self._memory = self._current
            self._has_memory = True
            self._fired = True
            self._firing_index = self._firing_start
            self._firing_start = 0

    def _stop(self):
        # forget the argument so add() doesn't replay a half delivery
        self._firing_index = len(self._handlers or ())
        self._memory = None
        self._has_memory = False

    def _finish(self):
        self._firing = False
        self._current = None
        self._has_current = False
        self._firing_start = 0
        if not self._options & MEMORY:
            self._memory = None
            self._has_memory = False
        if self._locked and self._handlers is not None:
            # keep an empty list if we have memory for future add() calls,
            # otherwise the list is spent
            self._handlers = [] if self._has_memory else None

    def _dispatch(self):
        try:
            while True:
                with self._lock:
                    step = self._next()
                    if step is None:
                        self._finish()
                        return
                handler, argument = step
                try:
                    result = core.call(handler, argument)
                except Exception:
                    core.log_exception()
                    continue
                if self._options & STOP_ON_FALSE:
                    if not isinstance(result, bool):
                        with self._lock:
                            self._stop()
                        raise TypeError(
                            "handler '%s' of a STOP_ON_FALSE list returned "
                            "%r instead of True or False" %
                            (core.callable_name(handler), result))
                    if not result:
                        with self._lock:
                            self._stop()
        except BaseException:
            with self._lock:
                self._pending.clear()
                self._finish()
            raise

    def remove_all(self):
        with self._lock:
            if self._handlers is not None:
                del self._handlers[:]
        return self

    def is_empty(self):
        return not self._handlers

    def disable(self):
        with self._lock:
            self._disable()
        return self

    def _disable(self):
        self._locked = True
        self._memory = None
        self._has_memory = False
        self._handlers = None
        self._pending.clear()

    def is_disabled(self):
        return self._handlers is None

    def lock(self):
        """
        Refuse further fire() calls and drop anything still queued.  With
        nothing in memory the list is disabled outright; otherwise add()
        keeps replaying the memory.
        """
        with self._lock:
            self._locked = True
            self._pending.clear()
            if not self._has_memory:
                self._disable()
        return self

    def is_locked(self):
        return self._locked

    def is_fired(self):
        return self._fired

    def __repr__(self):
        return "<%s.%s object at 0x%x; options: %s>" % (
            self.__class__.__module__, self.__class__.__name__, id(self),
            describe_options(self._options))
