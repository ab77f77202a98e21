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
HTTP client for XML-RPC endpoints

    session = ClientSession('http://ccu:2001/RPC2')
    session.system.listMethods()
    session.call('sample.sum', 17, 13)
"""

import logging

import requests

from xrpc import multicall as mc
from xrpc.errors import (
    HTTPError,
    InvalidResponseError,
    NoContentError,
    TransportError,
)
from xrpc.marshal import dumps_call
from xrpc.parser import parse_response
from xrpc.value import Call

logger = logging.getLogger('xrpc.client')

DEFAULT_OPTS = {
    'encoding': 'utf-8',
    'allow_none': False,
    'timeout': 60 * 60 * 12,
    'auth': None,
    'verify': True,
}


def charset_for(encoding):
    """Content-Type charset name for an encoding, None if unknown"""
    normalized = encoding.lower().replace('_', '-')
    if normalized in ('utf-8', 'utf8'):
        return 'UTF-8'
    if normalized in ('iso-8859-1', 'latin-1', 'latin1'):
        return 'ISO-8859-1'
    return None


class VirtualMethod(object):
    # some magic to bind an XML-RPC method to an RPC server.
    # supports "nested" methods (e.g. examples.getStateName)
    def __init__(self, func, name):
        self.__func = func
        self.__name = name

    def __getattr__(self, name):
        if name.startswith('__'):
            raise AttributeError(name)
        return type(self)(self.__func, "%s.%s" % (self.__name, name))

    def __call__(self, *args):
        return self.__func(self.__name, args)


class ClientSession(object):
    """A connection to one XML-RPC endpoint

    opts may override the keys of DEFAULT_OPTS.  Calls block until the
    response arrives; one session should not be shared between threads.
    """

    def __init__(self, baseurl, opts=None, session=None):
        self.baseurl = baseurl
        self.opts = dict(DEFAULT_OPTS)
        if opts:
            self.opts.update(opts)
        if session is None:
            session = requests.Session()
        self.rsession = session

    def _headers(self, content):
        charset = charset_for(self.opts['encoding'])
        if charset:
            ctype = 'text/xml; charset="%s"' % charset
        else:
            ctype = 'text/xml'
        headers = {
            'Content-Type': ctype,
            'Content-Length': str(len(content)),
        }
        if self.opts['auth']:
            headers['Authorization'] = self.opts['auth']
        return headers

    def _post(self, call):
        encoding = self.opts['encoding']
        content = dumps_call(call, encoding=encoding, allow_none=self.opts['allow_none'])
        content = content.encode(encoding, 'xmlcharrefreplace')
        logger.debug("Calling %s at %s", call.method_name, self.baseurl)
        try:
            r = self.rsession.post(self.baseurl, data=content,
                                   headers=self._headers(content),
                                   timeout=self.opts['timeout'],
                                   verify=self.opts['verify'])
        except requests.exceptions.RequestException as e:
            logger.debug("Request to %s failed: %s", self.baseurl, e)
            raise TransportError(e)
        if r.status_code != 200:
            # anything but 200 is an error for XML-RPC
            raise HTTPError(r.status_code, r.headers)
        if not r.content:
            raise NoContentError()
        response = parse_response(r.content)
        if response is None:
            raise InvalidResponseError(r.content)
        return response

    def call_response(self, call):
        """Send a Call and return the Response, faults are not raised"""
        return self._post(call)

    def call(self, name, *args):
        """Call a remote method and return its result Value

        name is either a method name, followed by the parameters, or a
        complete Call.  A fault response is raised as the Fault.
        """
        if isinstance(name, Call):
            if args:
                raise TypeError("no extra parameters allowed with a Call")
            call = name
        else:
            call = Call(name, *args)
        return self._post(call).result()

    def _callMethod(self, name, args):
        return self.call(name, *args)

    def multicall(self, calls):
        """Send several calls as one system.multicall

        Returns a list of Responses in the order of the calls.
        """
        calls = list(calls)
        result = self.call(mc.multicall(calls))
        responses = mc.decode_responses(result)
        if responses is None or len(responses) != len(calls):
            raise InvalidResponseError(result)
        return responses

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)
        return VirtualMethod(self._callMethod, name)
