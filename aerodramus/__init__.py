# -*- coding: utf-8 -*-
#
# callback lists and promises

VERSION = '0.3.0'

_stack_name = None
_stacks = ('tornado', 'twisted')


def init(stack_name):
    global _stack_name
    if stack_name not in _stacks:
        raise ValueError("unknown stack '%s', expected one of %s" %
                         (stack_name, ", ".join(_stacks)))
    if _stack_name is not None and _stack_name != stack_name:
        import sys
        if 'aerodramus.stack.eventloop' in sys.modules:
            raise RuntimeError("stack '%s' is already loaded" % _stack_name)
    _stack_name = stack_name


from aerodramus.core import log, log_exception
from aerodramus.callback import (CallbackList, NONE, ONCE, MEMORY,
                                 STOP_ON_FALSE)
from aerodramus.promise import (Promise, Deferred, Progress, when, resolved,
                                rejected, PENDING, RESOLVED, REJECTED)
