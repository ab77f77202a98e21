# coding=utf-8
import logging
import os
import sys
import traceback
import urllib.parse
from optparse import OptionParser

import xrpc
from xrpc.client import ClientSession

from xrpc_cli.lib import (
    EXIT_BAD_URL,
    EXIT_ERROR,
    EXIT_FAULT,
    EXIT_HTTP,
    EXIT_HTTP_STATUS,
    EXIT_INVALID_RESPONSE,
    EXIT_NO_CONTENT,
    EXIT_OK,
    EXIT_TRANSPORT,
    EXIT_USAGE,
    arg_filter,
    error,
    setup_logging,
    warn,
)


def get_options(args=None, progname=None):
    if progname is None:
        progname = os.path.basename(sys.argv[0]) or 'xrpc-call'
    usage = "%s [options] <url> <method> [arguments]" % progname
    parser = OptionParser(usage=usage, prog=progname)
    parser.add_option("--json", action="store_true", default=False,
                      help="parse arguments as JSON where possible")
    parser.add_option("--string", action="store_true", default=False,
                      help="pass all arguments as strings")
    parser.add_option("--encoding", default="utf-8",
                      help="request encoding [default: %default]")
    parser.add_option("--auth", help="value for the Authorization header")
    parser.add_option("--timeout", type="int", default=60,
                      help="request timeout in seconds [default: %default]")
    parser.add_option("--noverify", action="store_true", default=False,
                      help="do not verify the server certificate")
    parser.add_option("--null", action="store_true", default=False,
                      help="send None as <null/> instead of an empty value")
    parser.add_option("-d", "--debug", action="store_true", default=False,
                      help="show debug output")
    parser.add_option("-q", "--quiet", action="store_true", default=False,
                      help="run quietly")
    (options, args) = parser.parse_args(args)
    if len(args) < 2:
        parser.print_usage(sys.stderr)
        sys.exit(EXIT_USAGE)
    return options, args


def check_url(url):
    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in ('http', 'https') and bool(parts.netloc)


def exit_code_for(e):
    """Map a failed call to the exit status of its category"""
    if isinstance(e, xrpc.Fault):
        return EXIT_FAULT
    if isinstance(e, xrpc.InvalidResponseError):
        return EXIT_INVALID_RESPONSE
    if isinstance(e, xrpc.NoContentError):
        return EXIT_NO_CONTENT
    if isinstance(e, xrpc.TransportError):
        return EXIT_TRANSPORT
    if isinstance(e, xrpc.HTTPError):
        return EXIT_HTTP_STATUS.get(e.status, EXIT_HTTP)
    return EXIT_ERROR


def describe_error(e):
    if isinstance(e, xrpc.Fault):
        return "An XML-RPC fault was returned: %s" % e
    if isinstance(e, xrpc.InvalidResponseError):
        content = e.content
        if isinstance(content, bytes):
            content = content.decode('utf-8', 'replace')
        return "Endpoint response could not be parsed as XML-RPC:\n----\n%s\n---" % content
    if isinstance(e, xrpc.NoContentError):
        return "The endpoint returned no content"
    if isinstance(e, xrpc.TransportError):
        return "A transport error occurred: %s" % e.error
    if isinstance(e, xrpc.HTTPError):
        if e.status == 401:
            challenge = e.headers.get('WWW-Authenticate', 'no-authenticate')
            return "Authentication error: %s" % challenge
        if e.status == 403:
            return "Access to endpoint forbidden: HTTP 403"
        if e.status == 404:
            return "Did not find endpoint: HTTP 404"
        if e.status == 500:
            return "Server error: HTTP 500"
        return "HTTP endpoint error: %s" % e.status
    return "Call failed with error: %s" % e


def handle_call(options, args, session=None):
    url, method = args[0], args[1]
    if not check_url(url):
        error("Invalid URL: %s" % url, EXIT_BAD_URL)
    if options.string:
        params = args[2:]
    else:
        params = [arg_filter(arg, parse_json=options.json) for arg in args[2:]]
    if session is None:
        session = ClientSession(url, opts={
            'encoding': options.encoding,
            'allow_none': options.null,
            'timeout': options.timeout,
            'auth': options.auth,
            'verify': not options.noverify,
        })
    try:
        result = session.call(method, *params)
    except (xrpc.Fault, xrpc.ClientError) as e:
        error(describe_error(e), exit_code_for(e))
    print("Result:", result)
    return EXIT_OK


def main(args=None):
    options, args = get_options(args)
    logger = setup_logging(options)
    try:
        return handle_call(options, args)
    except KeyboardInterrupt:
        warn("Interrupted")
        return EXIT_ERROR
    except Exception as e:
        if logger.isEnabledFor(logging.DEBUG):
            tb_str = ''.join(traceback.format_exception(*sys.exc_info()))
            logger.debug(tb_str)
        warn(describe_error(e))
        return EXIT_ERROR
