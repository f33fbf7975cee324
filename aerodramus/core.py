import sys
import time
import logging

logging.basicConfig(stream=sys.stderr,
                    format="%(message)s")
log = logging.getLogger("aerodramus")

blocking_warn_threshold = 500 # ms


def callable_name(f):
    name = getattr(f, '__qualname__', None) or getattr(f, '__name__', None)
    if name is None:
        return repr(f)
    return name


def call(callback, *args):
    """
    Invoke a subscriber synchronously and return its result.  Anything
    that keeps the calling context for longer than
    blocking_warn_threshold milliseconds is reported, since every other
    subscriber of the same dispatch waits for it.
    """
    start = time.time()
    try:
        return callback(*args)
    finally:
        duration = (time.time() - start) * 1000
        if duration > blocking_warn_threshold:
            log.warning("callback '%s' blocked for %dms",
                        callable_name(callback), duration)


def log_exception(e=None):
    if e is None:
        e = sys.exc_info()[1]
    log.error("%s: %s", type(e).__name__, e,
              exc_info=(type(e), e, e.__traceback__))
