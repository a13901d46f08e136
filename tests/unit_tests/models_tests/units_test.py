# Copyright (c) 2024 Ian Hill
# SPDX-License-Identifier: Apache-2.0

import math
import logging
import pytest
from scipy.special import gamma

from wearsim.models import *
from wearsim.exceptions import InvalidTypeError, UserConfigError

TDDB_MTTF = 9175


def test_unit_defaults():
    unit = Unit('u0', defaults={'vdd': 0.9})
    fresh = unit.traces[FRESH]
    assert len(fresh) == 1
    assert fresh[0]['vdd'] == 0.9
    assert fresh[0]['temperature'] == 350
    assert fresh[0]['activity'] == 0
    # Frequencies are given in MHz
    assert fresh[0]['frequency'] == 1e9

    trace = [DataPoint(5, 5, {'frequency': 2000, 'temperature': 300})]
    core = Core('c0', 3, {FRESH: trace})
    assert core.uid == 3
    assert core.traces[FRESH][0]['frequency'] == 2e9
    assert core.traces[FRESH][0]['temperature'] == 300
    assert core.traces[FRESH][0]['peak_power'] == 1
    # The original trace is untouched
    assert trace[0]['frequency'] == 2000


def test_unit_invalid():
    with pytest.raises(UserConfigError):
        Unit('u0', traces={FRESH: []})
    with pytest.raises(UserConfigError):
        Unit('u0', copies=0)
    with pytest.raises(UserConfigError):
        Unit('u0', redundancy='mirrored', copies=2)
    with pytest.raises(UserConfigError):
        Unit('u0').compute_reliability([])
    assert unit_class('memory') is Memory
    with pytest.raises(InvalidTypeError):
        unit_class('gpu')

    with pytest.raises(UserConfigError):
        Core('c0', traces={FRESH: [DataPoint(1, 1, {'peak_power': 0})]})
    with pytest.raises(UserConfigError):
        Core('c0', defaults={'peak_power': 0})


def test_subthreshold_unit_does_not_age():
    unit = Unit('u0', traces={FRESH: [DataPoint(1, 1, {'vdd': 0.45, 'activity': 0.5})]})
    unit.compute_reliability([HCI()])
    assert unit.aging_rate() == math.inf


def test_activity():
    nbti, hci, tddb = NBTI(), HCI(), TDDB()
    data = DataPoint(2, 2, {'activity': 0.3, 'power': 1.5, 'peak_power': 6, 'frequency': 1e9})
    assert Unit('u').activity(data, tddb) == 0.3
    assert Core('c').activity(data, tddb) == 0.25

    logic = Logic('l')
    # 0.3 activations over 2e9 cycles
    duty = 0.3 / 2e9
    assert math.isclose(logic.activity(data, hci), duty)
    assert math.isclose(logic.activity(data, nbti), 1 - duty * duty / 2)
    saturated = DataPoint(1, 1, {'activity': 5e9, 'frequency': 1e9})
    assert logic.activity(saturated, hci) == 1
    assert logic.activity(DataPoint(1, 0, {'activity': 5, 'frequency': 1e9}), hci) == 0

    mem = Memory('m')
    assert mem.activity(data, hci) == 0
    assert mem.activity(data, nbti) == 1
    assert mem.activity(data, tddb) == 1


def test_compute_reliability(const_unit):
    unit = const_unit(vdd=1, temperature=350)
    unit.compute_reliability([TDDB()])
    assert math.isclose(unit.dist().mttf(), TDDB_MTTF, rel_tol=1e-3)
    assert math.isclose(unit.aging_rate(), TDDB_MTTF / gamma(1.5), rel_tol=1e-3)
    assert unit.aging_rate() == unit.mech_aging_rate(MechType.TDDB)

    # Zero activity means no NBTI aging, leaving only TDDB
    unit.compute_reliability([NBTI(), TDDB()])
    assert unit.mech_aging_rate(MechType.NBTI) == math.inf
    assert math.isclose(unit.aging_rate(), unit.mech_aging_rate(MechType.TDDB))

    unit = const_unit(vdd=1, temperature=350, activity=1)
    unit.compute_reliability([HCI(), TDDB()])
    assert unit.aging_rate() < unit.mech_aging_rate(MechType.TDDB)
    assert unit.aging_rate() < unit.mech_aging_rate(MechType.HCI)
    # A unit has no aging rate in configurations where it has already failed
    assert unit.aging_rate(frozenset({'u0'})) == 0
    assert unit.failed_in_config(frozenset({'u0', 'u1'}))
    assert not unit.failed_in_config(FRESH)


def test_sampling(const_unit, fixed_rng):
    unit = const_unit(vdd=1, temperature=350)
    unit.compute_reliability([TDDB()])
    alpha = unit.aging_rate()
    assert unit.reliability(alpha) == pytest.approx(math.exp(-1))
    assert unit.inverse(math.exp(-1)) == pytest.approx(alpha)

    # Sampling a survival probability of exp(-1) from fresh lands on the scale parameter
    rng = fixed_rng(1 - math.exp(-1))
    assert unit.next_event_delay(rng) == pytest.approx(alpha)

    unit.update_reliability(alpha / 2)
    assert unit.age == pytest.approx(alpha / 2)
    assert unit.curr_reliability == pytest.approx(math.exp(-0.25))
    # Delays are relative to the unit's current age
    rng = fixed_rng(1 - math.exp(-0.75))
    assert unit.next_event_delay(rng) == pytest.approx(alpha / 2)

    # A draw of 0 is the current survival probability, the smallest possible delay
    assert unit.next_event_delay(fixed_rng(0)) == pytest.approx(0, abs=1e-6 * alpha)


def test_zero_aging_delay(const_unit, fixed_rng):
    unit = const_unit(vdd=1, temperature=350, activity=0)
    unit.compute_reliability([NBTI()])
    assert unit.next_event_delay(fixed_rng(0.5)) == math.inf
    unit.update_reliability(1e12)
    assert unit.curr_reliability == 1


def test_configurations(caplog):
    fresh = [DataPoint(1, 1, {'vdd': 1})]
    stressed = [DataPoint(1, 1, {'vdd': 1.1})]
    unit = Unit('u0', 0, {FRESH: fresh, frozenset({'u1'}): stressed})
    other = Unit('u1', 1)
    third = Unit('u2', 2)
    root = Group('root', [unit, other, third], failures=2)
    unit.compute_reliability([TDDB()])
    assert unit.aging_rate(frozenset({'u1'})) < unit.aging_rate()

    unit.set_configuration(root)
    assert unit.config == FRESH
    unit.update_reliability(3000)
    r_before = unit.curr_reliability

    other.retire()
    unit.set_configuration(root)
    assert unit.config == frozenset({'u1'})
    # Survival probability carries over the switch, the age is translated onto the new distribution
    unit.update_reliability(0)
    assert unit.curr_reliability == pytest.approx(r_before)
    assert unit.age == pytest.approx(unit.inverse(r_before))
    assert unit.age < 3000
    unit.update_reliability(100)
    assert unit.curr_reliability < r_before

    # Unknown configurations fall back to fresh with a single warning
    third.retire()
    with caplog.at_level(logging.WARNING, logger='wearsim'):
        unit.set_configuration(root)
        unit.set_configuration(root)
    assert unit.config == FRESH
    assert len([rec for rec in caplog.records if "Can't find configuration [u1,u2]" in rec.message]) == 1


def test_subtree_configuration():
    unit = Unit('u0', 0, {FRESH: [DataPoint(1, 1, {})], frozenset({'g'}): [DataPoint(1, 1, {'vdd': 1.2})]})
    a, b = Unit('a', 1), Unit('b', 2)
    inner = Group('g', [a, b])
    root = Group('root', [unit, inner], failures=1)
    a.retire()
    # Failed subtrees are not descended into, so only the group is part of the configuration
    unit.set_configuration(root)
    assert unit.config == frozenset({'g'})


def test_serial_redundancy():
    unit = Unit('u0', 0, {FRESH: [DataPoint(1, 1, {})]}, redundancy='serial', copies=2)
    unit.compute_reliability([TDDB()])
    unit.update_reliability(5000)
    unit.failure()
    assert not unit.failed()
    assert unit.remaining == 1
    # The spare has not aged
    assert unit.age == 0
    assert unit.curr_reliability == 1
    unit.update_reliability(100)
    unit.failure()
    assert unit.failed()

    unit.reset()
    assert not unit.failed()
    assert unit.remaining == 2
    assert unit.age == 0


def test_parallel_redundancy():
    unit = Unit('u0', 0, None, redundancy='parallel', copies=2)
    unit.compute_reliability([TDDB()])
    unit.update_reliability(5000)
    r_before = unit.curr_reliability
    unit.failure()
    assert not unit.failed()
    # All copies have been aging together
    assert unit.age == 5000
    assert unit.curr_reliability == r_before
    unit.failure()
    assert unit.failed()


def test_retire():
    unit = Unit('u0', copies=3)
    unit.retire()
    assert unit.failed()
    assert unit.remaining == 3
    unit.reset()
    assert not unit.failed()
