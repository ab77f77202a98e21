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
The system.multicall convention

A batch is one call to system.multicall whose only parameter is an array of
{methodName, params} structs.  The reply is an array with one entry per
call: a fault struct, or the result wrapped in a single element array.
"""

import logging

from xrpc.parser import decode_fault
from xrpc.value import ARRAY, DICTIONARY, NULL, Call, Response, Value

logger = logging.getLogger('xrpc.multicall')

MULTICALL = 'system.multicall'


def encode_call(call):
    return Value.dictionary({
        'methodName': Value.string(call.method_name),
        'params': Value.array(call.parameters),
    })


def decode_call(value):
    """Decode a {methodName, params} struct, None if it is not one

    A missing or null params member means no parameters, any params value
    other than an array is taken as the only parameter.
    """
    if value.kind != DICTIONARY:
        logger.warning("Invalid call, not a struct: %s", value)
        return None
    name = value.get('methodName')
    if name is None or name.string_value is None:
        logger.warning("Invalid call, no method: %s", value)
        return None
    params = value.get('params')
    if params is None or params.kind == NULL:
        parameters = ()
    elif params.kind == ARRAY:
        parameters = params.payload
    else:
        parameters = (params,)
    return Call.from_params(name.string_value, parameters)


def encode_fault(fault):
    return Value.dictionary({
        'faultCode': Value.integer(fault.code),
        'faultString': Value.string(fault.reason),
    })


def encode_response(response):
    if response.fault is not None:
        return encode_fault(response.fault)
    return Value.array([response.value])


def decode_response(value):
    """Decode one multicall result entry, None if it is neither form"""
    if value.kind == DICTIONARY:
        return Response(fault=decode_fault(value))
    if value.kind == ARRAY and value.count == 1:
        return Response(value[0])
    logger.warning("Invalid multicall result: %s", value)
    return None


def encode_calls(calls):
    return Value.array([encode_call(c) for c in calls])


def decode_calls(value):
    """Decode the array parameter of a system.multicall

    Returns a list of Calls (None entries for invalid ones), or None if the
    value is not an array.
    """
    if value.kind != ARRAY:
        return None
    return [decode_call(v) for v in value.payload]


def encode_responses(responses):
    return Value.array([encode_response(r) for r in responses])


def decode_responses(value):
    """Decode a system.multicall result into a list of Responses

    Returns None if the value is not an array or an entry cannot be decoded.
    """
    if value.kind != ARRAY:
        return None
    result = []
    for entry in value.payload:
        response = decode_response(entry)
        if response is None:
            return None
        result.append(response)
    return result


def multicall(calls):
    """Build the system.multicall Call for a batch of calls"""
    return Call(MULTICALL, encode_calls(calls))
