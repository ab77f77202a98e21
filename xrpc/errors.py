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

"""Exception classes shared by the codec and the client"""


class GenericError(Exception):
    """Base class for xrpc errors"""

    def __str__(self):
        try:
            return str(self.args[0]['args'][0])
        except Exception:
            try:
                return str(self.args[0])
            except Exception:
                return str(self.__dict__)


class ParseError(GenericError):
    """Raised by the parser handlers for structurally invalid documents"""


class ClientError(GenericError):
    """Base class for errors raised while performing a remote call"""


class TransportError(ClientError):
    """The HTTP request itself failed"""

    def __init__(self, error):
        super(ClientError, self).__init__(error)
        self.error = error

    def __str__(self):
        return "transport error: %s" % self.error


class HTTPError(ClientError):
    """The endpoint answered with a status other than 200"""

    def __init__(self, status, headers=None):
        super(ClientError, self).__init__(status)
        self.status = status
        if headers is None:
            headers = {}
        self.headers = headers

    def __str__(self):
        return "HTTP error %s" % self.status


class NoContentError(ClientError):
    """The endpoint returned an empty body"""

    def __str__(self):
        return "the endpoint returned no content"


class InvalidResponseError(ClientError):
    """The returned body could not be parsed as an XML-RPC response"""

    def __init__(self, content):
        super(ClientError, self).__init__(content)
        self.content = content

    def __str__(self):
        return "invalid XML-RPC response"
