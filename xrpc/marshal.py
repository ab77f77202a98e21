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
XML-RPC serialization

Every Value has an XML form, so nothing in here fails for a Value, Call,
Response or Fault.
"""

import base64

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


def escape(s):
    s = s.replace("&", "&amp;")
    s = s.replace("<", "&lt;")
    s = s.replace(">", "&gt;")
    s = s.replace("'", "&apos;")
    s = s.replace('"', "&quot;")
    # XML parsers fold a raw carriage return into a newline
    return s.replace("\r", "&#13;")


def xmlheader(encoding=None):
    if encoding and encoding.lower().replace('_', '-') not in ('utf-8', 'utf8'):
        return '<?xml version="1.0" encoding="%s"?>\n' % encoding
    return '<?xml version="1.0"?>\n'  # utf-8 is default


class Marshaller(object):
    """Writes values as <value> elements

    With allow_none, null is written as <value><null/></value>, otherwise as
    the <value/> shorthand.  Nested arrays and structs are written from an
    explicit work stack, so nesting depth is not limited by recursion.
    """

    dispatch = {}

    def __init__(self, allow_none=False):
        self.allow_none = allow_none

    def dumps(self, value):
        out = []
        self._dump(value, out.append)
        return ''.join(out)

    def dump_params(self, params, write):
        write("<params>")
        for param in params:
            write("<param>")
            self._dump(param, write)
            write("</param>")
        write("</params>")

    def _dump(self, value, write):
        # the stack holds Values still to be written and closing markup
        pending = [value]
        while pending:
            item = pending.pop()
            if isinstance(item, Value):
                f = self.dispatch[item.kind]
                f(self, item, write, pending)
            else:
                write(item)

    def dump_null(self, value, write, pending):
        if self.allow_none:
            write("<value><null/></value>")
        else:
            write("<value/>")
    dispatch[NULL] = dump_null

    def dump_string(self, value, write, pending):
        write("<value><string>")
        write(escape(value.payload))
        write("</string></value>")
    dispatch[STRING] = dump_string

    def dump_bool(self, value, write, pending):
        write("<value><boolean>")
        write(value.payload and "1" or "0")
        write("</boolean></value>")
    dispatch[BOOL] = dump_bool

    def dump_int(self, value, write, pending):
        write("<value><i4>")
        write(str(value.payload))
        write("</i4></value>")
    dispatch[INT] = dump_int

    def dump_double(self, value, write, pending):
        write("<value><double>")
        write(repr(value.payload))
        write("</double></value>")
    dispatch[DOUBLE] = dump_double

    def dump_datetime(self, value, write, pending):
        # the stamp is not interpreted, only escaped
        write("<value><dateTime.iso8601>")
        write(escape(value.payload))
        write("</dateTime.iso8601></value>")
    dispatch[DATETIME] = dump_datetime

    def dump_binary(self, value, write, pending):
        write("<value><base64>")
        write(base64.b64encode(value.payload).decode('ascii'))
        write("</base64></value>")
    dispatch[BINARY] = dump_binary

    def dump_array(self, value, write, pending):
        write("<value><array><data>")
        pending.append("</data></array></value>")
        pending.extend(reversed(value.payload))
    dispatch[ARRAY] = dump_array

    def dump_struct(self, value, write, pending):
        write("<value><struct>")
        pending.append("</struct></value>")
        parts = []
        for key, member in value.payload.items():
            parts.append("<member><name>%s</name>" % escape(key))
            parts.append(member)
            parts.append("</member>")
        pending.extend(reversed(parts))
    dispatch[DICTIONARY] = dump_struct


def dumps_value(value, allow_none=False):
    """Return the <value> element for a single value"""
    return Marshaller(allow_none=allow_none).dumps(value)


def dumps_call(call, encoding=None, allow_none=False):
    """Encode a method call document"""
    m = Marshaller(allow_none=allow_none)
    parts = [
        xmlheader(encoding),
        "<methodCall><methodName>", escape(call.method_name), "</methodName>",
    ]
    m.dump_params(call.parameters, parts.append)
    parts.append("</methodCall>")
    return ''.join(parts)


def dumps_fault(fault, encoding=None):
    """Encode a fault response document"""
    parts = (
        xmlheader(encoding),
        "<methodResponse><fault><value><struct>"
        "<member><name>faultCode</name>"
        "<value><int>", str(fault.code), "</int></value></member>"
        "<member><name>faultString</name>"
        "<value><string>", escape(fault.reason), "</string></value></member>"
        "</struct></value></fault></methodResponse>"
    )
    return ''.join(parts)


def dumps_response(response, encoding=None, allow_none=False):
    """Encode a method response document, either a value or a fault"""
    if response.fault is not None:
        return dumps_fault(response.fault, encoding=encoding)
    m = Marshaller(allow_none=allow_none)
    parts = [xmlheader(encoding), "<methodResponse>"]
    m.dump_params((response.value,), parts.append)
    parts.append("</methodResponse>")
    return ''.join(parts)


def dumps(obj, encoding=None, allow_none=False):
    """Encode a Call, Response, Fault or Value

    Calls, responses and faults give complete documents, a bare value gives
    its <value> element.
    """
    if isinstance(obj, Call):
        return dumps_call(obj, encoding=encoding, allow_none=allow_none)
    elif isinstance(obj, Response):
        return dumps_response(obj, encoding=encoding, allow_none=allow_none)
    elif isinstance(obj, Fault):
        return dumps_fault(obj, encoding=encoding)
    elif isinstance(obj, Value):
        return dumps_value(obj, allow_none=allow_none)
    raise TypeError('cannot serialize %s objects' % type(obj))
