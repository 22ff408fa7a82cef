""" Trace levels for elko clients, expressed as standard :mod:`logging`
    levels. Every module in the package logs through a logger in the
    ``elko`` namespace; :func:`configure` is a convenience for applications
    that want those messages on stderr without setting up logging themselves.
"""

import logging

from . import config

VERBOSE = 5
logging.addLevelName(VERBOSE, 'VERBOSE')

levels = dict()
levels['ALWAYS'] = logging.CRITICAL
levels['FATAL'] = logging.CRITICAL
levels['ERROR'] = logging.ERROR
levels['WARNING'] = logging.WARNING
levels['DEBUG'] = logging.DEBUG
levels['VERBOSE'] = VERBOSE

log_format = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def level(name):
    """ Translate a trace level *name* to a :mod:`logging` level number.
        Integers are passed through unchanged.
    """

    if isinstance(name, int):
        return name

    try:
        return levels[name.upper()]
    except KeyError:
        raise ValueError('unknown trace level: ' + repr(name))


def configure(name=None):
    """ Attach a stderr handler to the ``elko`` logger and set its level.
        If *name* is not specified the ``ELKO_TRACE`` setting is used.
        Calling this more than once adjusts the level without adding
        another handler.
    """

    if name is None:
        name = config.load().trace

    logger = logging.getLogger('elko')
    logger.setLevel(level(name))

    for handler in logger.handlers:
        if getattr(handler, '_elko_trace', False):
            return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(log_format))
    handler._elko_trace = True
    logger.addHandler(handler)

    return logger


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
