from twisted.python.failure import Failure
from twisted.internet.defer import Deferred


def promise_to_deferred(promise):
    df = Deferred()
    def call_deferred_back(v, df=df):
        df.callback(v)
    def call_deferred_err(e, df=df):
        if not isinstance(e, BaseException):
            e = Exception(e)
        df.errback(Failure(e, type(e), e.__traceback__))
    promise.on_success(call_deferred_back).on_failure(call_deferred_err)
    return df
