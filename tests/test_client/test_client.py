import unittest

import mock
import requests

import xrpc
from xrpc import multicall as mc
from xrpc.client import ClientSession, VirtualMethod, charset_for
from xrpc.value import Call, Fault, Response, Value


def http_response(content, status_code=200, headers=None):
    r = mock.MagicMock()
    r.status_code = status_code
    r.headers = headers or {}
    if isinstance(content, str):
        content = content.encode('utf-8')
    r.content = content
    return r


class TestClientSession(unittest.TestCase):

    def setUp(self):
        self.rsession = mock.MagicMock()
        self.session = ClientSession('http://ccu:2001/RPC2', session=self.rsession)
        self.post = self.rsession.post

    def respond(self, response, **kwargs):
        self.post.return_value = http_response(xrpc.dumps(response), **kwargs)

    def test_default_session(self):
        with mock.patch('requests.Session') as Session:
            session = ClientSession('http://ccu:2001/RPC2')
        self.assertEqual(session.rsession, Session.return_value)
        self.assertEqual(session.opts['timeout'], 60 * 60 * 12)
        self.assertEqual(session.opts['encoding'], 'utf-8')

    def test_call(self):
        self.respond(Response(30))
        result = self.session.call('sample.sum', 17, 13)
        self.assertEqual(result, Value.integer(30))

        self.post.assert_called_once()
        args, kwargs = self.post.call_args
        self.assertEqual(args, ('http://ccu:2001/RPC2',))
        self.assertEqual(kwargs['timeout'], 60 * 60 * 12)
        self.assertEqual(kwargs['verify'], True)
        data = kwargs['data']
        self.assertIsInstance(data, bytes)
        self.assertEqual(xrpc.parse_call(data), Call('sample.sum', 17, 13))
        self.assertEqual(kwargs['headers'], {
            'Content-Type': 'text/xml; charset="UTF-8"',
            'Content-Length': str(len(data)),
        })

    def test_call_object(self):
        self.respond(Response('ok'))
        call = Call('ping')
        self.assertEqual(self.session.call(call), Value.string('ok'))
        data = self.post.call_args[1]['data']
        self.assertEqual(xrpc.parse_call(data), call)
        with self.assertRaises(TypeError):
            self.session.call(call, 1)

    def test_opts(self):
        session = ClientSession('https://ccu/RPC2', session=self.rsession, opts={
            'encoding': 'ISO-8859-1',
            'auth': 'Basic YWRtaW46c2VjcmV0',
            'timeout': 5,
            'verify': False,
            'allow_none': True,
        })
        self.respond(Response(None))
        self.assertEqual(session.call('echo', u'grüezi', None), Value.null())
        kwargs = self.post.call_args[1]
        self.assertEqual(kwargs['timeout'], 5)
        self.assertEqual(kwargs['verify'], False)
        headers = kwargs['headers']
        self.assertEqual(headers['Content-Type'], 'text/xml; charset="ISO-8859-1"')
        self.assertEqual(headers['Authorization'], 'Basic YWRtaW46c2VjcmV0')
        data = kwargs['data']
        self.assertTrue(data.startswith(b'<?xml version="1.0" encoding="ISO-8859-1"?>'))
        self.assertIn(u'grüezi'.encode('latin-1'), data)
        self.assertIn(b'<null/>', data)
        self.assertEqual(xrpc.parse_call(data), Call('echo', u'grüezi', None))

    def test_call_response(self):
        fault = Fault(4, 'Too many parameters.')
        self.respond(Response(fault))
        r = self.session.call_response(Call('sample.sum', 1, 2, 3))
        self.assertEqual(r, Response(fault))

    def test_fault(self):
        self.respond(Fault(4, 'Too many parameters.'))
        with self.assertRaises(Fault) as cm:
            self.session.call('sample.sum', 1, 2, 3)
        self.assertEqual(cm.exception.code, 4)
        self.assertEqual(cm.exception.reason, 'Too many parameters.')

    def test_http_error(self):
        self.post.return_value = http_response('', status_code=401,
                                               headers={'WWW-Authenticate': 'Basic'})
        with self.assertRaises(xrpc.HTTPError) as cm:
            self.session.call('ping')
        self.assertEqual(cm.exception.status, 401)
        self.assertEqual(cm.exception.headers['WWW-Authenticate'], 'Basic')

    def test_no_content(self):
        self.post.return_value = http_response(b'')
        with self.assertRaises(xrpc.NoContentError):
            self.session.call('ping')

    def test_invalid_response(self):
        self.post.return_value = http_response(b'<html>oops</html>')
        with self.assertRaises(xrpc.InvalidResponseError) as cm:
            self.session.call('ping')
        self.assertEqual(cm.exception.content, b'<html>oops</html>')

        # a call document is not a response either
        self.post.return_value = http_response(xrpc.dumps(Call('ping')))
        with self.assertRaises(xrpc.InvalidResponseError):
            self.session.call('ping')

    def test_transport_error(self):
        error = requests.exceptions.ConnectionError('connection refused')
        self.post.side_effect = error
        with self.assertRaises(xrpc.TransportError) as cm:
            self.session.call('ping')
        self.assertIs(cm.exception.error, error)
        self.assertIsInstance(cm.exception, xrpc.ClientError)

    def test_virtual_methods(self):
        self.respond(Response(['a', 'b']))
        result = self.session.system.listMethods()
        self.assertEqual(result, Value.array([Value.string('a'), Value.string('b')]))
        data = self.post.call_args[1]['data']
        self.assertEqual(xrpc.parse_call(data), Call('system.listMethods'))

        self.respond(Response(30))
        self.session.sample.sum(17, 13)
        data = self.post.call_args[1]['data']
        self.assertEqual(xrpc.parse_call(data), Call('sample.sum', 17, 13))

    def test_private_attributes(self):
        with self.assertRaises(AttributeError):
            self.session._secret
        with self.assertRaises(AttributeError):
            self.session.system.__secret__
        self.post.assert_not_called()

    def test_multicall(self):
        self.respond(Response(mc.encode_responses([
            Response(30),
            Response(Fault(4, 'Too many parameters.')),
        ])))
        calls = [Call('sample.sum', 17, 13), Call('sample.sum', 1, 2, 3)]
        responses = self.session.multicall(calls)
        self.assertEqual(responses, [
            Response(30),
            Response(Fault(4, 'Too many parameters.')),
        ])
        data = self.post.call_args[1]['data']
        self.assertEqual(xrpc.parse_call(data), mc.multicall(calls))

    def test_multicall_mismatch(self):
        self.respond(Response(mc.encode_responses([Response(30)])))
        with self.assertRaises(xrpc.InvalidResponseError):
            self.session.multicall([Call('a'), Call('b')])

        self.respond(Response('not a list'))
        with self.assertRaises(xrpc.InvalidResponseError):
            self.session.multicall([Call('a')])


class TestHelpers(unittest.TestCase):

    def test_charset(self):
        self.assertEqual(charset_for('utf-8'), 'UTF-8')
        self.assertEqual(charset_for('UTF8'), 'UTF-8')
        self.assertEqual(charset_for('latin_1'), 'ISO-8859-1')
        self.assertIsNone(charset_for('cp1252'))

    def test_unknown_charset_header(self):
        session = ClientSession('http://ccu/RPC2', opts={'encoding': 'cp1252'},
                                session=mock.MagicMock())
        self.assertEqual(session._headers(b'abc'), {
            'Content-Type': 'text/xml',
            'Content-Length': '3',
        })

    def test_virtual_method(self):
        func = mock.MagicMock()
        method = VirtualMethod(func, 'a')
        method.b.c(1, 2)
        func.assert_called_once_with('a.b.c', (1, 2))


if __name__ == '__main__':
    unittest.main()
