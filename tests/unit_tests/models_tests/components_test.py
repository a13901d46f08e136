# Copyright (c) 2024 Ian Hill
# SPDX-License-Identifier: Apache-2.0

import math
import pytest
import numpy as np

from wearsim.models.components import Component, Group, walk, conditional_walk
from wearsim.exceptions import UserConfigError


class Leaf(Component):
    """Component with a directly settable failure state."""
    def __init__(self, name, is_failed=False):
        super().__init__(name)
        self.is_failed = is_failed

    def failed(self):
        return self.is_failed


def test_group_failure_tolerance():
    leaves = [Leaf(f"l{i}") for i in range(4)]
    group = Group('g', leaves, failures=2)
    assert not group.failed()
    leaves[0].is_failed = True
    leaves[3].is_failed = True
    assert not group.failed()
    leaves[1].is_failed = True
    assert group.failed()

    # No tolerance means any failed child fails the group
    assert Group('g0', [Leaf('a'), Leaf('b', True)]).failed()
    assert not Group('g0', [Leaf('a'), Leaf('b')]).failed()
    with pytest.raises(UserConfigError):
        Group('bad', failures=-1)


def test_nested_groups():
    a, b, c = Leaf('a'), Leaf('b'), Leaf('c')
    inner = Group('inner', [b, c], failures=1)
    root = Group('root', [a, inner])
    b.is_failed = True
    assert not root.failed()
    c.is_failed = True
    assert inner.failed()
    assert root.failed()


def test_walk():
    a, b, c, d = Leaf('a'), Leaf('b'), Leaf('c'), Leaf('d')
    inner = Group('inner', [b, c])
    root = Group('root', [a, inner])
    root.add_child(d)
    assert [comp.name for comp in walk(root)] == ['root', 'a', 'inner', 'b', 'c', 'd']
    assert [comp.name for comp in walk(a)] == ['a']


def test_conditional_walk():
    b, c = Leaf('b'), Leaf('c')
    inner = Group('inner', [b, c])
    root = Group('root', [Leaf('a'), inner, Leaf('d')])
    visited = []

    def visit(comp):
        visited.append(comp.name)
        return comp.name != 'inner'
    conditional_walk(root, visit)
    assert visited == ['root', 'a', 'inner', 'd']


def test_ttf_statistics():
    comp = Leaf('a')
    assert math.isnan(comp.mttf())
    assert math.isnan(comp.std_ttf())
    assert all(math.isnan(bound) for bound in comp.mttf_interval())
    assert math.isnan(comp.aging_rate())

    comp.ttfs = [1.0]
    assert comp.mttf() == 1
    assert math.isnan(comp.std_ttf())

    comp.ttfs = [2.0, 4.0, 6.0, 8.0]
    assert comp.mttf() == 5
    assert math.isclose(comp.std_ttf(), np.std([2, 4, 6, 8], ddof=1))
    low, high = comp.mttf_interval()
    half_width = 1.96 * comp.std_ttf() / 2
    assert math.isclose(low, 5 - half_width)
    assert math.isclose(high, 5 + half_width)
    with pytest.raises(UserConfigError):
        comp.mttf_interval(0.99)
    assert str(comp) == 'a'
