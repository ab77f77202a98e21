# coding=utf-8
import io
import logging
import unittest

import mock
import requests

import xrpc
from xrpc.value import Fault, Value

from xrpc_cli import call as cli
from xrpc_cli.lib import arg_filter, setup_logging


class TestArgFilter(unittest.TestCase):

    def test_arg_filter(self):
        self.assertEqual(arg_filter('17'), 17)
        self.assertEqual(arg_filter('1.5'), 1.5)
        self.assertEqual(arg_filter('True'), True)
        self.assertEqual(arg_filter('None'), None)
        self.assertEqual(arg_filter('SeePusher'), 'SeePusher')
        self.assertEqual(arg_filter('[1, 2]'), '[1, 2]')
        self.assertEqual(arg_filter('[1, 2]', parse_json=True), [1, 2])
        self.assertEqual(arg_filter('{"a": 1}', parse_json=True), {'a': 1})
        self.assertEqual(arg_filter('{oops', parse_json=True), '{oops')


class TestSetupLogging(unittest.TestCase):

    def setUp(self):
        self.logger = logging.getLogger('xrpc')
        self.saved = self.logger.handlers[:], self.logger.level
        self.logger.handlers = []

    def tearDown(self):
        self.logger.handlers, level = self.saved
        self.logger.setLevel(level)

    def test_single_handler(self):
        options = mock.MagicMock(debug=False, quiet=False)
        setup_logging(options)
        setup_logging(options)
        self.assertEqual(len(self.logger.handlers), 1)
        self.assertEqual(self.logger.level, logging.WARN)

    def test_levels(self):
        self.assertIs(setup_logging(mock.MagicMock(debug=True, quiet=False)), self.logger)
        self.assertEqual(self.logger.level, logging.DEBUG)
        setup_logging(mock.MagicMock(debug=False, quiet=True))
        self.assertEqual(self.logger.level, logging.ERROR)
        self.assertEqual(len(self.logger.handlers), 1)


class TestErrors(unittest.TestCase):

    def test_exit_codes(self):
        cases = [
            (Fault(4, 'nope'), 12),
            (xrpc.InvalidResponseError(b'<html/>'), 13),
            (xrpc.NoContentError(), 14),
            (xrpc.TransportError(requests.exceptions.ConnectionError('refused')), 15),
            (xrpc.HTTPError(401), 41),
            (xrpc.HTTPError(403), 43),
            (xrpc.HTTPError(404), 44),
            (xrpc.HTTPError(500), 50),
            (xrpc.HTTPError(502), 20),
            (ValueError('other'), 10),
        ]
        for error, code in cases:
            self.assertEqual(cli.exit_code_for(error), code, error)

    def test_describe(self):
        self.assertEqual(cli.describe_error(Fault(4, 'nope')),
                         'An XML-RPC fault was returned: 4: nope')
        self.assertEqual(cli.describe_error(xrpc.HTTPError(404)),
                         'Did not find endpoint: HTTP 404')
        self.assertEqual(
            cli.describe_error(xrpc.HTTPError(401, {'WWW-Authenticate': 'Basic realm="ccu"'})),
            'Authentication error: Basic realm="ccu"')
        self.assertEqual(cli.describe_error(xrpc.HTTPError(401)),
                         'Authentication error: no-authenticate')
        self.assertEqual(cli.describe_error(xrpc.HTTPError(502)),
                         'HTTP endpoint error: 502')
        self.assertEqual(cli.describe_error(xrpc.InvalidResponseError(b'<html/>')),
                         'Endpoint response could not be parsed as XML-RPC:\n----\n<html/>\n---')
        self.assertEqual(cli.describe_error(xrpc.NoContentError()),
                         'The endpoint returned no content')

    def test_check_url(self):
        self.assertTrue(cli.check_url('http://ccu:2001/RPC2'))
        self.assertTrue(cli.check_url('https://ccu'))
        self.assertFalse(cli.check_url('ftp://ccu/'))
        self.assertFalse(cli.check_url('ccu:2001'))
        self.assertFalse(cli.check_url('http://'))
        self.assertFalse(cli.check_url('http://[broken/'))


class TestHandleCall(unittest.TestCase):

    def setUp(self):
        self.session = mock.MagicMock()
        self.options, _ = cli.get_options(['http://ccu:2001/RPC2', 'ping'])

    @mock.patch('sys.stdout', new_callable=io.StringIO)
    def test_call(self, stdout):
        self.session.call.return_value = Value.integer(30)
        args = ['http://ccu:2001/RPC2', 'sample.sum', '17', '13']
        rv = cli.handle_call(self.options, args, session=self.session)
        self.assertEqual(rv, 0)
        self.session.call.assert_called_once_with('sample.sum', 17, 13)
        self.assertEqual(stdout.getvalue(), 'Result: 30\n')

    @mock.patch('sys.stdout', new_callable=io.StringIO)
    def test_string_args(self, stdout):
        options, args = cli.get_options(['--string', 'http://ccu/RPC2', 'echo', '17', 'True'])
        self.session.call.return_value = Value.string('17')
        cli.handle_call(options, args, session=self.session)
        self.session.call.assert_called_once_with('echo', '17', 'True')
        self.assertEqual(stdout.getvalue(), 'Result: "17"\n')

    @mock.patch('sys.stderr', new_callable=io.StringIO)
    def test_fault(self, stderr):
        self.session.call.side_effect = Fault(4, 'Too many parameters.')
        with self.assertRaises(SystemExit) as cm:
            cli.handle_call(self.options, ['http://ccu/RPC2', 'sample.sum', '1'],
                            session=self.session)
        self.assertEqual(cm.exception.code, 12)
        self.assertEqual(stderr.getvalue(),
                         'An XML-RPC fault was returned: 4: Too many parameters.\n')

    @mock.patch('sys.stderr', new_callable=io.StringIO)
    def test_http_error(self, stderr):
        self.session.call.side_effect = xrpc.HTTPError(404)
        with self.assertRaises(SystemExit) as cm:
            cli.handle_call(self.options, ['http://ccu/RPC2', 'ping'], session=self.session)
        self.assertEqual(cm.exception.code, 44)
        self.assertEqual(stderr.getvalue(), 'Did not find endpoint: HTTP 404\n')

    @mock.patch('sys.stderr', new_callable=io.StringIO)
    def test_bad_url(self, stderr):
        with self.assertRaises(SystemExit) as cm:
            cli.handle_call(self.options, ['ccu:2001', 'ping'], session=self.session)
        self.assertEqual(cm.exception.code, 2)
        self.assertEqual(stderr.getvalue(), 'Invalid URL: ccu:2001\n')
        self.session.call.assert_not_called()

    @mock.patch('xrpc_cli.call.ClientSession')
    @mock.patch('sys.stdout', new_callable=io.StringIO)
    def test_session_opts(self, stdout, ClientSession):
        options, args = cli.get_options(['--timeout', '5', '--noverify', '--null',
                                         '--auth', 'Basic abc', '--encoding', 'ISO-8859-1',
                                         'https://ccu/RPC2', 'ping'])
        ClientSession.return_value.call.return_value = Value.boolean(True)
        cli.handle_call(options, args)
        ClientSession.assert_called_once_with('https://ccu/RPC2', opts={
            'encoding': 'ISO-8859-1',
            'allow_none': True,
            'timeout': 5,
            'auth': 'Basic abc',
            'verify': False,
        })
        self.assertEqual(stdout.getvalue(), 'Result: true\n')


class TestMain(unittest.TestCase):

    @mock.patch('sys.stderr', new_callable=io.StringIO)
    def test_usage(self, stderr):
        with self.assertRaises(SystemExit) as cm:
            cli.main(['http://ccu/RPC2'])
        self.assertEqual(cm.exception.code, 1)
        self.assertIn('[options] <url> <method> [arguments]', stderr.getvalue())

    @mock.patch('xrpc_cli.call.setup_logging')
    @mock.patch('xrpc_cli.call.ClientSession')
    @mock.patch('sys.stdout', new_callable=io.StringIO)
    def test_main(self, stdout, ClientSession, setup_logging):
        ClientSession.return_value.call.return_value = Value.array([])
        self.assertEqual(cli.main(['http://ccu/RPC2', 'system.listMethods']), 0)
        self.assertEqual(stdout.getvalue(), 'Result: [  ]\n')

    @mock.patch('xrpc_cli.call.setup_logging')
    @mock.patch('xrpc_cli.call.ClientSession')
    @mock.patch('sys.stderr', new_callable=io.StringIO)
    def test_unexpected_error(self, stderr, ClientSession, setup_logging):
        setup_logging.return_value.isEnabledFor.return_value = False
        ClientSession.return_value.call.side_effect = RuntimeError('kaboom')
        self.assertEqual(cli.main(['http://ccu/RPC2', 'ping']), 10)
        self.assertEqual(stderr.getvalue(), 'Call failed with error: kaboom\n')

    @mock.patch('xrpc_cli.call.setup_logging')
    @mock.patch('xrpc_cli.call.ClientSession')
    @mock.patch('sys.stderr', new_callable=io.StringIO)
    def test_interrupted(self, stderr, ClientSession, setup_logging):
        ClientSession.return_value.call.side_effect = KeyboardInterrupt()
        self.assertEqual(cli.main(['http://ccu/RPC2', 'ping']), 10)
        self.assertEqual(stderr.getvalue(), 'Interrupted\n')


if __name__ == '__main__':
    unittest.main()
