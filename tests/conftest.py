# Copyright (c) 2023 Ian Hill
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures and helpers for testing the stochastic simulation methods."""

import pytest

from wearsim.helpers import _reset_warnings
from wearsim.models import FRESH, Unit, DataPoint


class FixedRNG:
    """Non-stochastic stand-in for a numpy Generator that returns a repeating sequence of values from random()."""
    def __init__(self, *values):
        self.values = list(values)
        self.i = 0

    def random(self):
        val = self.values[self.i % len(self.values)]
        self.i += 1
        return val


@pytest.fixture(autouse=True)
def fresh_warnings():
    # Each test should see every warning regardless of what earlier tests logged
    _reset_warnings()
    yield
    _reset_warnings()


@pytest.fixture
def fixed_rng():
    return FixedRNG


@pytest.fixture
def write_file(tmp_path):
    """Write some text to a file in the test's temporary directory and return the file path."""
    def _write(name, text):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        return str(path)
    return _write


@pytest.fixture
def const_unit():
    """Build a plain unit with a single constant-conditions fresh trace."""
    def _build(name='u0', uid=0, duration=1, **conditions):
        return Unit(name, uid, {FRESH: [DataPoint(duration, duration, conditions)]})
    return _build
