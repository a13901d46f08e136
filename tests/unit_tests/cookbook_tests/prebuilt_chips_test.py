# Copyright (c) 2024 Ian Hill
# SPDX-License-Identifier: Apache-2.0

from wearsim.cookbook.chips import constant_trace, single_unit_chip, k_of_n_chip
from wearsim.models import FRESH, Core, Unit


def test_constant_trace():
    trace = constant_trace(vdd=1.1, temperature=300)
    assert len(trace) == 1
    assert trace[0].duration == 1 and trace[0].time == 1
    assert trace[0]['vdd'] == 1.1


def test_single_unit_chip():
    chip = single_unit_chip('core', 'parallel', 3, power=0.5)
    assert len(chip.units) == 1
    unit = chip.units[0]
    assert isinstance(unit, Core)
    assert unit.copies == 3 and not unit.serial
    assert unit.traces[FRESH][0]['power'] == 0.5
    assert chip.root.children == [unit]
    assert chip.root.failures == 0


def test_k_of_n_chip():
    chip = k_of_n_chip(4, 2, activity=1)
    assert [unit.name for unit in chip.units] == ['unit0', 'unit1', 'unit2', 'unit3']
    assert all(type(unit) is Unit for unit in chip.units)
    assert chip.root.failures == 2
    assert chip.units[3].traces[FRESH][0]['activity'] == 1
