# Copyright (c) 2020 the xrpc developers
#
#    xrpc is free software; you can redistribute it and/or
#    modify it under the terms of the GNU Lesser General Public
#    License as published by the Free Software Foundation;
#    version 2.1 of the License.
#
#    This software is distributed in the hope that it will be useful,
#    but WITHOUT ANY WARRANTY; without even the implied warranty of
#    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
#    Lesser General Public License for more details.
#
#    You should have received a copy of the GNU Lesser General Public
#    License along with this software; if not, write to the Free Software
#    Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA  02110-1301  USA

"""
Conversions between XML-RPC values and python data

to_value() turns python data into a Value.  from_value() goes the other way
for a requested python type and returns None when the value cannot be
represented as that type.  The rules are lossy and asymmetric
(a null becomes 0, 0.0, False or '' depending on the target), all of them
live in the two dispatch tables below.
"""

import datetime
import logging
import re
import types
import urllib.parse

from xrpc.value import (
    ARRAY,
    BINARY,
    BOOL,
    DATETIME,
    DICTIONARY,
    DOUBLE,
    INT,
    NULL,
    STRING,
    Call,
    Fault,
    Response,
    Value,
)

logger = logging.getLogger('xrpc.convert')

# strings accepted as true when converting to bool, compared lowercased
TRUTHY = ('yes', 'true', '1', u'да')

DATETIME_RE = re.compile(r'^([0-9]{4})([0-9]{2})([0-9]{2})T([0-9]{2}):([0-9]{2}):([0-9]{2})$')

# plain ascii numerals, no digit separators or surrounding whitespace
INT_RE = re.compile(r'[+-]?[0-9]+')
DOUBLE_RE = re.compile(r'[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?'
                       r'|[+-]?(?:inf|infinity|nan)', re.IGNORECASE)


def format_datetime(dt):
    """Render a datetime (or date) in the fixed YYYYMMDDTHH:MM:SS layout"""
    return "%04i%02i%02iT%02i:%02i:%02i" % (
        dt.year, dt.month, dt.day,
        getattr(dt, 'hour', 0), getattr(dt, 'minute', 0), getattr(dt, 'second', 0))


def parse_datetime(stamp):
    """Parse the fixed YYYYMMDDTHH:MM:SS layout, None if it does not fit"""
    if len(stamp) != 17:
        return None
    m = DATETIME_RE.match(stamp)
    if not m:
        return None
    try:
        return datetime.datetime(*[int(part) for part in m.groups()])
    except ValueError:
        # well formed, but not a calendar date
        return None


def parse_int(text):
    """Parse a decimal integer, None unless the whole text is one"""
    if not INT_RE.fullmatch(text):
        return None
    return int(text)


def parse_double(text):
    if not DOUBLE_RE.fullmatch(text):
        return None
    return float(text)


# python -> Value


def to_value(obj):
    """Convert python data to a Value

    Raises TypeError for objects that have no XML-RPC representation and
    ValueError for text XML cannot carry.
    """
    if isinstance(obj, Value):
        return obj
    for klass in type(obj).__mro__:
        f = to_dispatch.get(klass)
        if f is not None:
            return f(obj)
    raise TypeError("cannot marshal %s objects" % type(obj))


def _none_to_value(obj):
    return Value.null()


def _str_to_value(obj):
    return Value.string(str(obj))


def _bool_to_value(obj):
    return Value.boolean(obj)


def _int_to_value(obj):
    return Value.integer(obj)


def _float_to_value(obj):
    return Value.double(obj)


def _bytes_to_value(obj):
    return Value.binary(obj)


def _sequence_to_value(obj):
    return Value.array([to_value(v) for v in obj])


def _set_to_value(obj):
    try:
        items = sorted(obj)
    except TypeError:
        # mixed or unorderable members, keep iteration order
        items = list(obj)
    return Value.array([to_value(v) for v in items])


def _dict_to_value(obj):
    members = {}
    for key, member in obj.items():
        if not isinstance(key, str):
            raise TypeError("dictionary key must be string")
        members[key] = to_value(member)
    return Value.dictionary(members)


def _datetime_to_value(obj):
    return Value.datetime(format_datetime(obj))


def _url_to_value(obj):
    return Value.string(obj.geturl())


def _call_to_value(obj):
    from xrpc import multicall
    return multicall.encode_call(obj)


def _fault_to_value(obj):
    from xrpc import multicall
    return multicall.encode_fault(obj)


def _response_to_value(obj):
    from xrpc import multicall
    return multicall.encode_response(obj)


# Value -> python


def from_value(value, klass=Value, item_type=None):
    """Convert a Value to the python type klass

    item_type selects the member type for list, tuple, set, frozenset and
    dict targets (default: leave members as Values).  Returns None when the
    value cannot be converted.
    """
    if klass is Value:
        return value
    try:
        f = from_dispatch[klass]
    except KeyError:
        raise TypeError("no conversion from XML-RPC values to %s" % klass)
    return f(value, item_type)


def _value_to_str(value, item_type=None):
    kind = value.kind
    if kind in (STRING, DATETIME):
        return value.payload
    if kind == BOOL:
        return value.payload and 'true' or 'false'
    if kind in (INT, DOUBLE):
        return str(value.payload)
    if kind == NULL:
        return ''
    return None


def _value_to_int(value, item_type=None):
    kind = value.kind
    if kind == STRING:
        return parse_int(value.payload)
    if kind == BOOL:
        return value.payload and 1 or 0
    if kind == INT:
        return value.payload
    if kind == DOUBLE:
        try:
            return int(value.payload)
        except (ValueError, OverflowError):
            # nan, inf
            return None
    if kind == NULL:
        return 0
    return None


def _value_to_float(value, item_type=None):
    kind = value.kind
    if kind == STRING:
        return parse_double(value.payload)
    if kind == BOOL:
        return value.payload and 1.0 or 0.0
    if kind in (INT, DOUBLE):
        return float(value.payload)
    if kind == NULL:
        return 0.0
    return None


def _value_to_bool(value, item_type=None):
    kind = value.kind
    if kind == STRING:
        return value.payload.lower() in TRUTHY
    if kind == BOOL:
        return value.payload
    if kind in (INT, DOUBLE):
        return value.payload != 0
    if kind == NULL:
        return False
    return None


def _value_to_bytes(value, item_type=None):
    if value.kind == BINARY:
        return value.payload
    return None


def _value_to_list(value, item_type=None):
    if value.kind != ARRAY:
        return None
    result = []
    for element in value.payload:
        converted = from_value(element, item_type or Value)
        if converted is None:
            return None
        result.append(converted)
    return result


def _value_to_tuple(value, item_type=None):
    result = _value_to_list(value, item_type)
    if result is None:
        return None
    return tuple(result)


def _value_to_set(value, item_type=None):
    result = _value_to_list(value, item_type)
    if result is None:
        return None
    return set(result)


def _value_to_frozenset(value, item_type=None):
    result = _value_to_list(value, item_type)
    if result is None:
        return None
    return frozenset(result)


def _value_to_dict(value, item_type=None):
    if value.kind != DICTIONARY:
        return None
    result = {}
    for key, member in value.payload.items():
        converted = from_value(member, item_type or Value)
        if converted is None:
            logger.warning("Skipping struct member %r: cannot convert %r to %s",
                           key, member, item_type)
            continue
        result[key] = converted
    return result


def _value_to_datetime(value, item_type=None):
    if value.kind != DATETIME:
        return None
    return parse_datetime(value.payload)


def _value_to_date(value, item_type=None):
    dt = _value_to_datetime(value)
    if dt is None:
        return None
    return dt.date()


def _value_to_url(value, item_type=None, parse=urllib.parse.urlsplit):
    if value.kind != STRING:
        return None
    s = value.payload
    if not s or s != s.strip() or ' ' in s:
        return None
    try:
        url = parse(s)
    except ValueError:
        return None
    if not url.scheme or not (url.netloc or url.path):
        return None
    return url


def _value_to_parsed_url(value, item_type=None):
    return _value_to_url(value, item_type, parse=urllib.parse.urlparse)


# the conversion tables, keyed by python type

to_dispatch = {
    type(None): _none_to_value,
    str: _str_to_value,
    bool: _bool_to_value,
    int: _int_to_value,
    float: _float_to_value,
    bytes: _bytes_to_value,
    bytearray: _bytes_to_value,
    list: _sequence_to_value,
    tuple: _sequence_to_value,
    types.GeneratorType: _sequence_to_value,
    set: _set_to_value,
    frozenset: _set_to_value,
    dict: _dict_to_value,
    datetime.datetime: _datetime_to_value,
    datetime.date: _datetime_to_value,
    urllib.parse.SplitResult: _url_to_value,
    urllib.parse.ParseResult: _url_to_value,
    Call: _call_to_value,
    Fault: _fault_to_value,
    Response: _response_to_value,
}

from_dispatch = {
    str: _value_to_str,
    int: _value_to_int,
    float: _value_to_float,
    bool: _value_to_bool,
    bytes: _value_to_bytes,
    list: _value_to_list,
    tuple: _value_to_tuple,
    set: _value_to_set,
    frozenset: _value_to_frozenset,
    dict: _value_to_dict,
    datetime.datetime: _value_to_datetime,
    datetime.date: _value_to_date,
    urllib.parse.SplitResult: _value_to_url,
    urllib.parse.ParseResult: _value_to_parsed_url,
}
