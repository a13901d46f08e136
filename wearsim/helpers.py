# Copyright (c) 2023 Ian Hill
# SPDX-License-Identifier: Apache-2.0

"""Internal helper functions used within wearsim to streamline the package."""

from __future__ import annotations

import logging
import coloredlogs
import importlib

from wearsim.exceptions import InvalidTypeError

__all__ = ['logger', 'configure_logger', 'set_log_level', 'TIME_UNIT_MAP', 'SECONDS_PER_UNIT']

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class _OnceFilter(logging.Filter):
    """Drops repeats of any warning (or worse) that has already been emitted since the last reset."""
    def __init__(self):
        super().__init__()
        self.seen = set()

    def filter(self, record):
        if record.levelno < logging.WARNING:
            return True
        msg = record.getMessage()
        if msg in self.seen:
            return False
        self.seen.add(msg)
        return True

    def reset(self):
        self.seen.clear()


### Instantiate default logger upon import of this file so that it is always configured ###
logger = logging.getLogger('wearsim')
# Log output handlers can have their own logging levels, internal logger will collect all levels
logger.setLevel(logging.DEBUG)
_once_filter = _OnceFilter()
logger.addFilter(_once_filter)

# Change a few colours for the logging output, making message times appear in a mid-blue and the logger name in green
custom_field_styles = coloredlogs.DEFAULT_FIELD_STYLES
custom_field_styles['asctime']['color'] = 24
custom_field_styles['name']['color'] = 22
custom_level_styles = coloredlogs.DEFAULT_LEVEL_STYLES
custom_level_styles['info']['color'] = 'white'
# Install one default colourized stream handler set to level INFO; no log files by default
coloredlogs.install(level='INFO', logger=logger, fmt=LOG_FORMAT,
                    level_styles=custom_level_styles, field_styles=custom_field_styles)


def configure_logger(logging_level: int = None,
                     file_handler: logging.FileHandler = None, stream_handler: logging.StreamHandler = None):
    """
    Configure the logger based on the user's preference.

    Parameters
    ----------
    logging_level: int, optional
        The global logging level to set for the logger. If provided, the logger's level will be set to this
        value. Default is None.
    file_handler: logging.FileHandler, optional
        A custom file handler to be added to the logger. If provided, the default file handler (if exists) will be
        removed and the custom one will be added. Default is None.
    stream_handler: logging.StreamHandler, optional
        A custom stream handler to be added to the logger. If provided, the default stream handler (if exists) will
        be removed and the custom one will be added. Default is None.

    Notes
    -----
    This function assumes that the logger has one stream and one file handler maximum.
    """
    if logging_level:
        logger.setLevel(logging_level)

    # Identify any existing logging output handlers based on their types
    existing_stream_handler = None
    existing_file_handler = None
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            existing_stream_handler = handler
        elif isinstance(handler, logging.FileHandler):
            existing_file_handler = handler

    if stream_handler:
        if existing_stream_handler:
            logger.removeHandler(existing_stream_handler)
        logger.addHandler(stream_handler)
    if file_handler:
        if existing_file_handler:
            logger.removeHandler(existing_file_handler)
        logger.addHandler(file_handler)


def set_log_level(level: int | str):
    """Re-install the colourized stream handler at a new output level, e.g. DEBUG to see simulation progress."""
    coloredlogs.install(level=level, logger=logger, fmt=LOG_FORMAT,
                        level_styles=custom_level_styles, field_styles=custom_field_styles)


def _reset_warnings():
    """Forget which warnings have been emitted so that a new simulation run reports them afresh."""
    _once_filter.reset()


# Each larger unit is built from the previous one; months are taken as four weeks and years as twelve such months
SECONDS_PER_UNIT = {'seconds': 1.0}
SECONDS_PER_UNIT['minutes'] = SECONDS_PER_UNIT['seconds'] * 60
SECONDS_PER_UNIT['hours'] = SECONDS_PER_UNIT['minutes'] * 60
SECONDS_PER_UNIT['days'] = SECONDS_PER_UNIT['hours'] * 24
SECONDS_PER_UNIT['weeks'] = SECONDS_PER_UNIT['days'] * 7
SECONDS_PER_UNIT['months'] = SECONDS_PER_UNIT['weeks'] * 4
SECONDS_PER_UNIT['years'] = SECONDS_PER_UNIT['months'] * 12

TIME_UNIT_MAP = {'s': 'seconds', 'seconds': 'seconds', 'min': 'minutes', 'minutes': 'minutes',
                 'h': 'hours', 'hours': 'hours', 'd': 'days', 'days': 'days', 'w': 'weeks', 'weeks': 'weeks',
                 'mo': 'months', 'months': 'months', 'y': 'years', 'years': 'years'}


def _convert_time(time: float, units: str, **kwargs) -> float: # noqa: UnusedParameter
    """Helper function compatible with pandas apply() function for converting seconds to other time units."""
    try:
        return time / SECONDS_PER_UNIT[TIME_UNIT_MAP[units]]
    except KeyError as e:
        raise InvalidTypeError(f"Unknown time unit '{units}', options are seconds, minutes, hours, days, weeks, "
                               "months, and years.") from e


def _linterp(x: float, start: tuple, end: tuple) -> float:
    """Linearly interpolate the y value at x between the two (x, y) points 'start' and 'end'."""
    return start[1] + (end[1] - start[1]) * (x - start[0]) / (end[0] - start[0])


def _on_demand_import(module: str, pypi_name: str = None):
    try:
        mod = importlib.import_module(module)
        return mod
    except ImportError:
        # Module name and pypi package name do not always match, we want to tell the user the package to install
        if not pypi_name:
            pypi_name = module
        hint = f"Trying to use a feature that requires the optional {module} module. " \
               f"Please install package '{pypi_name}' first."

        class FailedImport:
            """By returning a class that raises an error when used, we can try to import modules at the top of each file
            and only raise errors if we try to use methods of modules that failed to import"""
            def __getattr__(self, attr):
                raise ImportError(hint)

        return FailedImport()
