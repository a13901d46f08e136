# Copyright (c) 2024 Ian Hill
# SPDX-License-Identifier: Apache-2.0

import logging
from io import StringIO
from unittest import TestCase

from wearsim.helpers import logger, configure_logger, _reset_warnings
from wearsim.cookbook import single_unit_chip, build_mechs
from wearsim.sim import simulate


class TestLogger(TestCase):
    def setUp(self):
        self.handlers = logger.handlers[:]
        self.level = logger.level

    def tearDown(self):
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        for handler in self.handlers:
            logger.addHandler(handler)
        logger.setLevel(self.level)
        _reset_warnings()

    def test_logger_name(self):
        """Test that the logger has the correct name."""
        with self.assertLogs() as captured_logs:
            logger.info("Testing logger's name.")
        self.assertEqual(captured_logs.records[0].name, 'wearsim')

    def test_logger_format(self):
        """Test that the handlers include the expected fields, colour codes may be added around them"""
        for handler in logger.handlers:
            for field in ['%(asctime)s', '%(name)s', '%(levelname)s', '%(message)s']:
                self.assertIn(field, handler.formatter._fmt)

    def test_warning_dedup(self):
        """Each distinct warning is only reported once until reset."""
        with self.assertLogs('wearsim', level='WARNING') as captured_logs:
            logger.warning('Repeated warning')
            logger.warning('Repeated warning')
            logger.warning('Another warning')
            logger.error('Repeated error')
            logger.error('Repeated error')
        self.assertEqual([rec.getMessage() for rec in captured_logs.records],
                         ['Repeated warning', 'Another warning', 'Repeated error'])
        _reset_warnings()
        with self.assertLogs('wearsim', level='WARNING') as captured_logs:
            logger.warning('Repeated warning')
        self.assertEqual(len(captured_logs.records), 1)

    def test_info_not_deduplicated(self):
        with self.assertLogs('wearsim', level='INFO') as captured_logs:
            logger.info('Progress')
            logger.info('Progress')
        self.assertEqual(len(captured_logs.records), 2)

    def test_simulate_logging(self):
        """Test the logging output of a simulation through custom handlers."""
        chip = single_unit_chip(vdd=1, temperature=350)
        mechs = build_mechs('tddb')

        # Simulation progress is only reported at the debug level
        log_stream = StringIO()
        stream_handler = logging.StreamHandler(stream=log_stream)
        stream_handler.setLevel(logging.INFO)
        configure_logger(stream_handler=stream_handler)
        simulate(chip, mechs, 5, seed=1)
        self.assertEqual(log_stream.getvalue(), '')

        log_stream = StringIO()
        stream_handler = logging.StreamHandler(stream=log_stream)
        stream_handler.setLevel(logging.DEBUG)
        configure_logger(stream_handler=stream_handler)
        simulate(chip, mechs, 5, seed=1)
        self.assertIn('Beginning Monte Carlo iteration 4', log_stream.getvalue())

        # Global logger level overrides the handler
        log_stream = StringIO()
        stream_handler = logging.StreamHandler(stream=log_stream)
        stream_handler.setLevel(logging.DEBUG)
        configure_logger(logging_level=logging.WARNING, stream_handler=stream_handler)
        simulate(chip, mechs, 5, seed=1)
        self.assertEqual(log_stream.getvalue(), '')
