# -*- coding: utf-8 -*-
import io
import codecs
from collections import namedtuple

from tornado.escape import json_decode

import aerodramus
from aerodramus.promise import Promise
from aerodramus.stack.network import TransportError, DecodingError

DEFAULT_ENCODING = 'utf-8'


class JSONObject(namedtuple('JSONObject', 'kind value')):
    ARRAY = 'array'
    DICTIONARY = 'dictionary'

    __slots__ = ()

    def is_array(self):
        return self.kind == self.ARRAY

    def is_dictionary(self):
        return self.kind == self.DICTIONARY


def is_success_code(code):
    return 200 <= code < 300


def settle_response(deferred, body, code=None, error=None):
    """
    Settle ``deferred`` from the outcome of a transfer: a transport error
    rejects, a non-HTTP transfer (no status code) or a 2xx status resolves
    with the body, and any other status rejects.
    """
    if error is not None:
        deferred.reject(TransportError(str(error), code=code, original=error))
    elif code is None or is_success_code(code):
        deferred.resolve(body)
    else:
        deferred.reject(TransportError("HTTP %s" % code, code=code))


def charset_of(content_type):
    if not content_type:
        return None
    for param in content_type.split(";")[1:]:
        name, _, value = param.strip().partition("=")
        if name.strip().lower() == 'charset':
            value = value.strip().strip('"\'')
            try:
                return codecs.lookup(value).name
            except LookupError:
                return None
    return None


def decode_json(body):
    try:
        value = json_decode(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodingError("invalid JSON: %s" % e, kind='json')
    if isinstance(value, list):
        return JSONObject(JSONObject.ARRAY, value)
    elif isinstance(value, dict):
        return JSONObject(JSONObject.DICTIONARY, value)
    raise DecodingError("JSON top level is a %s, not an array or an object" %
                        type(value).__name__, kind='json')


def decode_string(body, encoding=None):
    encoding = encoding or DEFAULT_ENCODING
    try:
        return body.decode(encoding)
    except UnicodeDecodeError as e:
        raise DecodingError("body is not valid %s: %s" % (encoding, e),
                            kind='string')


def decode_image(body):
    from PIL import Image, UnidentifiedImageError
    try:
        image = Image.open(io.BytesIO(body))
        image.load()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise DecodingError("body is not a decodable image: %s" % e,
                            kind='image')
    return image


class DataPromise(Promise):
    """
    A promise of a raw response body.  ``headers`` is whatever mapping of
    response headers the transfer fills in as they arrive; ``task`` is the
    stack's handle on the transfer in flight.
    """

    def __init__(self, setup=None, headers=None):
        self.headers = headers
        self.task = None
        Promise.__init__(self, setup)

    def cancel(self):
        """Abandon the transfer; a pending promise rejects with TransportError."""
        if self.task is not None and not self.task.done():
            self.task.cancel()

    @property
    def encoding(self):
        if self.headers is None:
            return None
        return charset_of(self.headers.get('Content-Type'))

    @property
    def json_value(self):
        return self.then(decode_json)

    @property
    def string_value(self):
        return self.then(lambda body: decode_string(body, self.encoding))

    @property
    def image_value(self):
        return self.then(decode_image)


if aerodramus._stack_name is None:
    aerodramus.init('tornado')

if aerodramus._stack_name == 'tornado':
    from aerodramus.tornado_stack.network.http import *
