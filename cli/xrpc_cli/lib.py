# coding=utf-8
import json
import logging
import sys

# exit statuses, one per failure category
EXIT_OK = 0
EXIT_USAGE = 1
EXIT_BAD_URL = 2
EXIT_ERROR = 10
EXIT_FAULT = 12
EXIT_INVALID_RESPONSE = 13
EXIT_NO_CONTENT = 14
EXIT_TRANSPORT = 15
EXIT_HTTP = 20
EXIT_HTTP_STATUS = {
    401: 41,
    403: 43,
    404: 44,
    500: 50,
}

ARGMAP = {'None': None,
          'True': True,
          'False': False}


def arg_filter(arg, parse_json=False):
    try:
        return int(arg)
    except ValueError:
        pass
    try:
        return float(arg)
    except ValueError:
        pass
    if arg in ARGMAP:
        return ARGMAP[arg]
    # handle lists/dicts?
    if parse_json:
        try:
            return json.loads(arg)
        except ValueError:
            pass
    return arg


def error(msg=None, code=1):
    if msg:
        sys.stderr.write(msg + "\n")
        sys.stderr.flush()
    sys.exit(code)


def warn(msg):
    sys.stderr.write(msg + "\n")
    sys.stderr.flush()


def setup_logging(options):
    logger = logging.getLogger("xrpc")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        fmt = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        handler.setFormatter(logging.Formatter(fmt))
        handler.setLevel(logging.DEBUG)
        logger.addHandler(handler)
    if options.debug:
        logger.setLevel(logging.DEBUG)
    elif options.quiet:
        logger.setLevel(logging.ERROR)
    else:
        logger.setLevel(logging.WARN)
    return logger
