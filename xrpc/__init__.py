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
xrpc: an XML-RPC codec

    >>> call = xrpc.Call('sample.sum', 17, 13)
    >>> xrpc.parse_call(xrpc.dumps(call)) == call
    True
"""

from xrpc.errors import (  # noqa: F401
    ClientError,
    GenericError,
    HTTPError,
    InvalidResponseError,
    NoContentError,
    ParseError,
    TransportError,
)
from xrpc.value import Call, Fault, Response, Value  # noqa: F401
from xrpc.convert import from_value, to_value  # noqa: F401
from xrpc.marshal import (  # noqa: F401
    dumps,
    dumps_call,
    dumps_fault,
    dumps_response,
    dumps_value,
)
from xrpc.parser import parse_call, parse_response  # noqa: F401
from xrpc import multicall  # noqa: F401

__version__ = '1.0.0'
