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
XML-RPC parsing

The Unmarshaller is driven by expat start/end/data events.  Nested arrays and
structs are rebuilt with two stacks: one slot per open <value> element and
one entry per pending struct member name.  A slot is None while untyped, a
list while an array is being filled, a dict while a struct is being filled,
or a finished Value.
"""

import base64
import binascii
import logging
from xml.parsers import expat

from xrpc.convert import parse_double, parse_int
from xrpc.errors import ParseError
from xrpc.value import DICTIONARY, INT, MAXI8, MINI8, Call, Fault, Response, Value

logger = logging.getLogger('xrpc.parser')

# codes for faults that could not be decoded
FAULT_NO_VALUE = -1337
FAULT_NOT_STRUCT = -1338
FAULT_BAD_CODE = -1339


def decode_fault(value):
    """Build a Fault from a {faultCode, faultString} struct

    Malformed faults do not fail, they give a fault with one of the
    FAULT_* codes above.
    """
    if value is None:
        logger.warning("No value for fault")
        return Fault(FAULT_NO_VALUE, "parse error")
    if value.kind != DICTIONARY:
        logger.warning("Unexpected value for fault: %r", value)
        return Fault(FAULT_NOT_STRUCT, "parse error, fault value")
    code = value['faultCode']
    if code.kind != INT:
        logger.warning("Unexpected values for fault: %s", value)
        return Fault(FAULT_BAD_CODE, "parse error, fault value %s" % value)
    reason = None
    if 'faultString' in value.payload:
        reason = value['faultString'].string_value
    return Fault(code.payload, reason)


def _finish(slot):
    if isinstance(slot, list):
        return Value.array(slot)
    if isinstance(slot, dict):
        return Value.dictionary(slot)
    return slot


class Unmarshaller(object):
    """Collects a call or a response from parser events

    One instance handles one document.  After feed() either method_name and
    params are set (a methodCall) or response is (a methodResponse).
    """

    def __init__(self):
        self.method_name = None
        self.params = None
        self.response = None
        self._values = []
        self._names = []
        self._cdata = None
        self._raw = b''
        self._parser = None

    def feed(self, data):
        """Parse a complete document given as str or bytes

        Raises expat.ExpatError for malformed XML and ParseError for XML that
        is not XML-RPC.
        """
        if isinstance(data, str):
            # pyexpat hands str input to expat as utf-8
            self._raw = data.encode('utf-8')
        elif b'\x00' in data[:4]:
            # utf-16 or utf-32, the empty element check needs ascii bytes
            self._raw = None
        else:
            self._raw = bytes(data)
        parser = expat.ParserCreate()
        parser.StartElementHandler = self.start
        parser.EndElementHandler = self.end
        parser.CharacterDataHandler = self.char_data
        parser.StartDoctypeDeclHandler = self.doctype
        self._parser = parser
        try:
            parser.Parse(data, True)
        finally:
            self._parser = None

    # working state helpers

    def _consume(self):
        if self._cdata is None:
            return ''
        text = ''.join(self._cdata)
        self._cdata = None
        return text

    def _capture(self):
        self._cdata = []

    def _set_current(self, slot):
        if not self._values:
            raise ParseError("no current value")
        if self._values[-1] is not None:
            raise ParseError("value already has a type")
        self._values[-1] = slot

    def _pop(self):
        if not self._values:
            return None
        return _finish(self._values.pop())

    def _self_closing(self):
        # expat reports <value/> as a start and an end event, for an
        # explicit end tag the end event position is at '</value'
        if self._raw is None:
            return False
        index = self._parser.CurrentByteIndex
        return not self._raw.startswith(b'</value', index)

    # event handlers

    def doctype(self, name, sysid, pubid, has_internal_subset):
        raise ParseError("document type declarations are not allowed")

    def char_data(self, text):
        if self._cdata is not None:
            self._cdata.append(text)

    start_dispatch = {}
    dispatch = {}

    def start(self, tag, attrs):
        try:
            f = self.start_dispatch[tag]
        except KeyError:
            raise ParseError("unexpected XML-RPC tag: %s" % tag)
        f(self)

    def end(self, tag):
        try:
            f = self.dispatch[tag]
        except KeyError:
            raise ParseError("unexpected XML-RPC tag: %s" % tag)
        f(self)

    # start tags

    def start_ignore(self):
        pass
    for tag in ('fault', 'params', 'member', 'data', 'null'):
        start_dispatch[tag] = start_ignore

    def start_capture(self):
        self._capture()
    for tag in ('methodName', 'name', 'string', 'i4', 'int', 'i8', 'double',
                'float', 'boolean', 'base64', 'dateTime.iso8601'):
        start_dispatch[tag] = start_capture
    del tag

    def start_methodCall(self):
        self.method_name = ''
        self.params = []
    start_dispatch['methodCall'] = start_methodCall

    def start_methodResponse(self):
        del self._values[:]
    start_dispatch['methodResponse'] = start_methodResponse

    def start_param(self):
        del self._values[:]
    start_dispatch['param'] = start_param

    def start_value(self):
        if self._values and not isinstance(self._values[-1], (list, dict)):
            # only arrays and struct members hold nested values
            raise ParseError("value inside a value")
        self._values.append(None)
        # an untyped value is a string, so collect its text
        self._capture()
    start_dispatch['value'] = start_value

    def start_array(self):
        self._cdata = None
        self._set_current([])
    start_dispatch['array'] = start_array

    def start_struct(self):
        self._cdata = None
        self._set_current({})
    start_dispatch['struct'] = start_struct

    # end tags

    def end_ignore(self):
        pass
    dispatch['params'] = end_ignore
    def end_array(self):
        if not self._values or not isinstance(self._values[-1], list):
            raise ParseError("unexpected content in array")
    dispatch['array'] = end_array

    def end_struct(self):
        if not self._values or not isinstance(self._values[-1], dict):
            raise ParseError("unexpected content in struct")
    dispatch['struct'] = end_struct

    def end_methodCall(self):
        if self.params is None:
            raise ParseError("methodCall end without a call")
    dispatch['methodCall'] = end_methodCall

    def end_methodResponse(self):
        if self.response is not None:
            # already holds the fault
            return
        value = self._pop()
        if value is None:
            raise ParseError("response had no value")
        self.response = Response(value)
    dispatch['methodResponse'] = end_methodResponse

    def end_methodName(self):
        if self.params is None:
            raise ParseError("methodName outside of methodCall")
        self.method_name = self._consume()
    dispatch['methodName'] = end_methodName

    def end_fault(self):
        value = self._pop()
        del self._values[:]
        self.response = Response(fault=decode_fault(value))
    dispatch['fault'] = end_fault

    def end_param(self):
        if self.params is None:
            # response parameter, picked up by </methodResponse>
            return
        value = self._pop()
        if value is None:
            raise ParseError("found no value for parameter")
        del self._values[:]
        self.params.append(value)
    dispatch['param'] = end_param

    def end_name(self):
        self._names.append(self._consume())
    dispatch['name'] = end_name

    def end_value(self):
        if not self._values:
            raise ParseError("empty value stack at value end")
        if self._values[-1] is None:
            if self._self_closing():
                self._consume()
                self._values[-1] = Value.null()
            else:
                self._values[-1] = Value.string(self._consume())
        if len(self._values) > 1 and isinstance(self._values[-2], list):
            element = self._pop()
            self._values[-1].append(element)
    dispatch['value'] = end_value

    def end_member(self):
        if not self._names:
            raise ParseError("struct member without a name")
        name = self._names.pop()
        element = self._pop()
        if element is None:
            raise ParseError("struct member %r without a value" % name)
        if not self._values or not isinstance(self._values[-1], dict):
            raise ParseError("member outside of struct")
        self._values[-1][name] = element
    dispatch['member'] = end_member

    def end_data(self):
        if not self._values or not isinstance(self._values[-1], list):
            raise ParseError("data outside of array")
    dispatch['data'] = end_data

    def end_null(self):
        self._cdata = None
        self._set_current(Value.null())
    dispatch['null'] = end_null

    def end_string(self):
        self._set_current(Value.string(self._consume()))
    dispatch['string'] = end_string

    def end_int(self):
        number = parse_int(self._consume())
        if number is None or number > MAXI8 or number < MINI8:
            number = 0
        self._set_current(Value.integer(number))
    dispatch['i4'] = end_int
    dispatch['int'] = end_int
    dispatch['i8'] = end_int

    def end_double(self):
        number = parse_double(self._consume())
        if number is None:
            number = 0.0
        self._set_current(Value.double(number))
    dispatch['double'] = end_double
    dispatch['float'] = end_double

    def end_boolean(self):
        text = self._consume().strip()
        self._set_current(Value.boolean(text not in ('', '0')))
    dispatch['boolean'] = end_boolean

    def end_base64(self):
        text = ''.join(self._consume().split())
        try:
            data = base64.b64decode(text.encode('ascii'), validate=True)
        except (binascii.Error, ValueError):
            data = b''
        self._set_current(Value.binary(data))
    dispatch['base64'] = end_base64

    def end_dateTime(self):
        # kept as the raw string, no timezone is given on the wire
        self._set_current(Value.datetime(self._consume()))
    dispatch['dateTime.iso8601'] = end_dateTime


def _feed(data):
    u = Unmarshaller()
    try:
        u.feed(data)
    except expat.ExpatError as e:
        logger.debug("Malformed XML-RPC document: %s", e)
        return None
    except ParseError as e:
        logger.debug("Invalid XML-RPC document: %s", e)
        return None
    return u


def parse_call(data):
    """Parse a methodCall document

    Returns a Call, or None if the document is not a well formed call.
    """
    u = _feed(data)
    if u is None or u.params is None:
        return None
    return Call.from_params(u.method_name, u.params)


def parse_response(data):
    """Parse a methodResponse document

    Returns a Response, or None if the document is not a well formed
    response.  A malformed fault still gives a fault response.
    """
    u = _feed(data)
    if u is None:
        return None
    return u.response
