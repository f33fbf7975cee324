class TransportError(Exception):
    """The request never produced a usable response."""

    def __init__(self, message, code=None, original=None):
        Exception.__init__(self, message)
        self.code = code
        self.original = original


class DecodingError(Exception):
    """A response body could not be decoded into the requested shape."""

    def __init__(self, message, kind=None):
        Exception.__init__(self, message)
        self.kind = kind
