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
XML-RPC value model

A Value is a tagged union: the kind names one of the XML-RPC types and the
payload carries the python data for it.  Values, calls and responses are
immutable once built.
"""

import re

from xrpc.errors import GenericError

NULL = 'null'
STRING = 'string'
BOOL = 'bool'
INT = 'int'
DOUBLE = 'double'
DATETIME = 'dateTime'
BINARY = 'binary'
ARRAY = 'array'
DICTIONARY = 'dictionary'

SCALAR_KINDS = (STRING, BOOL, INT, DOUBLE, DATETIME, BINARY)
KINDS = (NULL,) + SCALAR_KINDS + (ARRAY, DICTIONARY)

MAXI8 = 2 ** 63 - 1
MINI8 = -2 ** 63

# characters XML 1.0 documents cannot carry, not even as references
XML_ILLEGAL_RE = re.compile(r'[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]')


def check_text(s):
    match = XML_ILLEGAL_RE.search(s)
    if match:
        raise ValueError("character %r cannot be represented in XML" % match.group())
    return s


class _Frozen(object):
    """Mixin refusing attribute assignment after __init__"""

    __slots__ = ()

    def __setattr__(self, name, value):
        raise AttributeError("%s is immutable" % self.__class__.__name__)

    def __delattr__(self, name):
        raise AttributeError("%s is immutable" % self.__class__.__name__)


class Value(_Frozen):

    __slots__ = ('kind', 'payload')

    def __init__(self, kind=NULL, payload=None):
        if kind not in KINDS:
            raise ValueError("unknown value kind: %r" % kind)
        object.__setattr__(self, 'kind', kind)
        object.__setattr__(self, 'payload', payload)

    # constructors, one per kind

    @classmethod
    def null(cls):
        return cls(NULL)

    @classmethod
    def string(cls, s):
        if not isinstance(s, str):
            raise TypeError("string value expected, got %r" % type(s))
        return cls(STRING, check_text(s))

    @classmethod
    def boolean(cls, flag):
        return cls(BOOL, bool(flag))

    @classmethod
    def integer(cls, number):
        number = int(number)
        if number > MAXI8 or number < MINI8:
            raise OverflowError("int exceeds XML-RPC limits")
        return cls(INT, number)

    @classmethod
    def double(cls, number):
        return cls(DOUBLE, float(number))

    @classmethod
    def datetime(cls, stamp):
        """Wrap a raw YYYYMMDDTHH:MM:SS string, it is not interpreted"""
        if not isinstance(stamp, str):
            raise TypeError("dateTime value expected as string, got %r" % type(stamp))
        return cls(DATETIME, check_text(stamp))

    @classmethod
    def binary(cls, data):
        return cls(BINARY, bytes(data))

    @classmethod
    def array(cls, elements=()):
        elements = tuple(elements)
        for element in elements:
            if not isinstance(element, Value):
                raise TypeError("array elements must be values, got %r" % type(element))
        return cls(ARRAY, elements)

    @classmethod
    def dictionary(cls, members=None):
        """Build a struct value from a mapping or from (key, value) pairs

        When a key repeats, the last value wins.
        """
        members = dict(members or {})
        for key, member in members.items():
            if not isinstance(key, str):
                raise TypeError("struct keys must be strings, got %r" % type(key))
            check_text(key)
            if not isinstance(member, Value):
                raise TypeError("struct members must be values, got %r" % type(member))
        return cls(DICTIONARY, members)

    # accessors

    @property
    def is_null(self):
        return self.kind == NULL

    @property
    def count(self):
        """0 for null, 1 for scalars, the size for arrays and structs"""
        if self.kind == NULL:
            return 0
        if self.kind in (ARRAY, DICTIONARY):
            return len(self.payload)
        return 1

    def keys(self):
        """Struct keys in lexicographic order, empty for other kinds"""
        if self.kind != DICTIONARY:
            return []
        return sorted(self.payload)

    def __getitem__(self, key):
        """Look up a struct member by name or an element by position

        Positional access on a struct sorts the keys on every call, callers
        doing repeated indexed access should cache keys() instead.
        Misses never raise, they return a null value.
        """
        if isinstance(key, str):
            if self.kind != DICTIONARY:
                return Value.null()
            return self.payload.get(key, Value.null())
        if self.kind == ARRAY:
            if 0 <= key < len(self.payload):
                return self.payload[key]
            return Value.null()
        if self.kind == DICTIONARY:
            if 0 <= key < len(self.payload):
                return self.payload[self.keys()[key]]
            return Value.null()
        if self.kind == NULL or key != 0:
            return Value.null()
        return self

    def get(self, key, default=None):
        if self.kind == DICTIONARY and key in self.payload:
            return self.payload[key]
        return default

    # lossy projections, see xrpc.convert for the rules

    @property
    def string_value(self):
        from xrpc.convert import from_value
        return from_value(self, str)

    @property
    def int_value(self):
        from xrpc.convert import from_value
        return from_value(self, int)

    @property
    def double_value(self):
        from xrpc.convert import from_value
        return from_value(self, float)

    @property
    def bool_value(self):
        from xrpc.convert import from_value
        return from_value(self, bool)

    # comparison and printing walk nested values with explicit stacks, like
    # the parser and the marshaller

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        pending = [(self, other)]
        while pending:
            a, b = pending.pop()
            if a is b:
                continue
            if a.kind != b.kind:
                return False
            if a.kind == ARRAY:
                if len(a.payload) != len(b.payload):
                    return False
                pending.extend(zip(a.payload, b.payload))
            elif a.kind == DICTIONARY:
                if a.payload.keys() != b.payload.keys():
                    return False
                pending.extend([(m, b.payload[k]) for k, m in a.payload.items()])
            elif a.payload != b.payload:
                return False
        return True

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def _shallow(self):
        if self.kind in (ARRAY, DICTIONARY):
            return (self.kind, len(self.payload))
        return (self.kind, self.payload)

    def __hash__(self):
        # only one level deep, equal values still hash equal
        if self.kind == ARRAY:
            return hash((ARRAY, tuple([v._shallow() for v in self.payload])))
        if self.kind == DICTIONARY:
            return hash((DICTIONARY, frozenset([(k, v._shallow())
                                                for k, v in self.payload.items()])))
        return hash(self._shallow())

    def __repr__(self):
        if self.kind == NULL:
            return "Value.null()"
        if self.kind in (ARRAY, DICTIONARY):
            return "<Value %s: %s>" % (self.kind, self)
        return "<Value %s: %r>" % (self.kind, self.payload)

    def __str__(self):
        out = []
        # Values still to print, interleaved with literal text
        pending = [self]
        while pending:
            item = pending.pop()
            if not isinstance(item, Value):
                out.append(item)
                continue
            kind = item.kind
            if kind == ARRAY:
                parts = ["[ "]
                for i, v in enumerate(item.payload):
                    if i:
                        parts.append(", ")
                    parts.append(v)
                parts.append(" ]")
                pending.extend(reversed(parts))
            elif kind == DICTIONARY:
                parts = ["{ "]
                for i, (k, v) in enumerate(item.payload.items()):
                    if i:
                        parts.append(" ")
                    parts.extend(["%s = " % k, v, ";"])
                parts.append(" }")
                pending.extend(reversed(parts))
            elif kind == NULL:
                out.append("<null>")
            elif kind == STRING:
                out.append('"%s"' % item.payload)
            elif kind == BOOL:
                out.append(item.payload and "true" or "false")
            elif kind == BINARY:
                out.append("<binary: %i bytes>" % len(item.payload))
            else:
                out.append(str(item.payload))
        return ''.join(out)


class Call(_Frozen):
    """An XML-RPC method call: a method name and positional parameters

    Parameters may be given as Values or as python data, which is run
    through xrpc.convert.to_value.
    """

    __slots__ = ('method_name', 'parameters')

    def __init__(self, method_name, *params):
        from xrpc.convert import to_value
        object.__setattr__(self, 'method_name', check_text(method_name))
        object.__setattr__(self, 'parameters', tuple([to_value(p) for p in params]))

    @classmethod
    def from_params(cls, method_name, params):
        return cls(method_name, *params)

    def __getitem__(self, index):
        if 0 <= index < len(self.parameters):
            return self.parameters[index]
        return Value.null()

    def __len__(self):
        return len(self.parameters)

    def __eq__(self, other):
        if not isinstance(other, Call):
            return NotImplemented
        return (self.method_name == other.method_name and
                self.parameters == other.parameters)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash((self.method_name, self.parameters))

    def __repr__(self):
        return "<Call %s>" % self

    def __str__(self):
        return "%s(%s)" % (self.method_name, ", ".join([str(p) for p in self.parameters]))


class Fault(GenericError):
    """A remote error: integer code plus reason text"""

    def __init__(self, code, reason=None):
        code = int(code)
        if reason is None:
            reason = "Call failed with code: %i" % code
        check_text(reason)
        super(Fault, self).__init__(code, reason)
        self.code = code
        self.reason = reason

    # the names used by xmlrpc.client
    @property
    def faultCode(self):
        return self.code

    @property
    def faultString(self):
        return self.reason

    def __eq__(self, other):
        if not isinstance(other, Fault):
            return NotImplemented
        return self.code == other.code and self.reason == other.reason

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash((self.code, self.reason))

    def __repr__(self):
        return "<Fault %i: %r>" % (self.code, self.reason)

    def __str__(self):
        return "%i: %s" % (self.code, self.reason)


class Response(_Frozen):
    """Either a fault or a single value

    Response(value) wraps python data or a Value, Response(fault=f) or
    Response.from_fault(f) builds a fault response.
    """

    __slots__ = ('fault', 'value')

    def __init__(self, value=None, fault=None):
        if fault is None and isinstance(value, Fault):
            fault = value
        if fault is not None:
            if not isinstance(fault, Fault):
                raise TypeError("fault must be a Fault instance")
            object.__setattr__(self, 'fault', fault)
            object.__setattr__(self, 'value', None)
        else:
            from xrpc.convert import to_value
            object.__setattr__(self, 'fault', None)
            object.__setattr__(self, 'value', to_value(value))

    @classmethod
    def from_value(cls, value):
        return cls(value)

    @classmethod
    def from_fault(cls, fault):
        return cls(fault=fault)

    @classmethod
    def from_error(cls, error):
        """Turn an arbitrary exception into a fault with code 500

        The reason is the exception text, so avoid this for errors that may
        carry data the caller should not see.  Characters XML cannot carry
        are replaced with U+FFFD.
        """
        reason = XML_ILLEGAL_RE.sub(u"\ufffd", str(error))
        return cls(fault=Fault(500, reason))

    @property
    def is_fault(self):
        return self.fault is not None

    def result(self):
        """Return the value, or raise the fault"""
        if self.fault is not None:
            raise self.fault
        return self.value

    def __eq__(self, other):
        if not isinstance(other, Response):
            return NotImplemented
        return self.fault == other.fault and self.value == other.value

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash((self.fault, self.value))

    def __repr__(self):
        if self.fault is not None:
            return "<Response fault %r>" % self.fault
        return "<Response value %r>" % self.value
