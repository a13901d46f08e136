# Copyright (c) 2024 Ian Hill
# SPDX-License-Identifier: Apache-2.0

"""Composite component hierarchy defining how failures of individual units combine into system failure"""

from __future__ import annotations

import math
import numpy as np
from typing import Callable, Iterator

from wearsim.exceptions import UserConfigError

__all__ = ['Component', 'Group', 'walk', 'conditional_walk']

# Normal approximation for a two-sided 95% interval
Z_95 = 1.96


def walk(root: Component) -> Iterator[Component]:
    """Prefix depth-first traversal of the component tree, yielding each component before its children."""
    stack = [root]
    while stack:
        comp = stack.pop()
        yield comp
        stack.extend(reversed(comp.children))


def conditional_walk(root: Component, visit: Callable[[Component], bool]) -> None:
    """
    Prefix depth-first traversal of the component tree that only descends into a component's children if the visit
    function returns True for that component.

    Parameters
    ----------
    root: Component
        The component to start the traversal at
    visit: Callable
        Function called on each visited component, its return value determines whether to traverse the children
    """
    stack = [root]
    while stack:
        comp = stack.pop()
        if visit(comp):
            stack.extend(reversed(comp.children))


class Component:
    """
    A node in the system's failure dependency tree. Either a Group, whose failure depends on its children's failures,
    or a Unit, a leaf that ages and fails according to its reliability distribution.

    This class should not be instantiated directly, use an inheriting class.

    Attributes
    ----------
    name: str
        Identifying name of the component
    ttfs: list of float
        Simulated times to failure in seconds, one for each Monte-Carlo trial in which the component failed
    """
    def __init__(self, name: str):
        self.name = name
        self.ttfs = []

    @property
    def children(self) -> list[Component]:
        return []

    def failed(self) -> bool:
        raise NotImplementedError(f"Component {self.name} does not define a failure condition.")

    def aging_rate(self) -> float:
        return math.nan

    def mttf(self) -> float:
        """Sample mean of the simulated times to failure, NaN if the component never failed."""
        if not self.ttfs:
            return math.nan
        return float(np.mean(self.ttfs))

    def std_ttf(self) -> float:
        """Sample standard deviation of the simulated times to failure, NaN with fewer than two samples."""
        if len(self.ttfs) <= 1:
            return math.nan
        return float(np.std(self.ttfs, ddof=1))

    def mttf_interval(self, confidence: float = 0.95) -> tuple[float, float]:
        """
        Confidence interval on the MTTF using the normal approximation. Only the 95% interval is currently supported;
        small sample counts will give an interval that is too narrow compared to a Student's t interval.

        Parameters
        ----------
        confidence: float, optional
            Confidence level of the interval, only 0.95 is accepted (default 0.95)

        Returns
        -------
        tuple of float
            The lower and upper bounds of the interval, NaNs with fewer than two samples
        """
        if confidence != 0.95:
            raise UserConfigError(f"Only 95% MTTF confidence intervals are supported, got {confidence}.")
        if len(self.ttfs) <= 1:
            return math.nan, math.nan
        half_width = Z_95 * self.std_ttf() / math.sqrt(len(self.ttfs))
        mean = self.mttf()
        return mean - half_width, mean + half_width

    def __str__(self):
        return self.name


class Group(Component):
    """
    A component made up of other components that tolerates a fixed number of its children failing (k-out-of-n), and
    fails once one more child than that has failed.

    Attributes
    ----------
    name: str
    failures: int
        The number of child failures tolerated by the group
    """
    def __init__(self, name: str, children: list[Component] = None, failures: int = 0):
        """
        Parameters
        ----------
        name: str
            Identifying name for the group
        children: list of Component, optional
            The units and groups that belong to the group
        failures: int, optional
            The number of child failures the group can tolerate while still functioning (default 0)
        """
        super().__init__(name)
        if failures < 0:
            raise UserConfigError(f"Group {name} cannot tolerate a negative number of failures ({failures}).")
        self.failures = failures
        self._children = list(children) if children else []

    @property
    def children(self) -> list[Component]:
        return self._children

    def add_child(self, child: Component):
        self._children.append(child)

    def failed(self) -> bool:
        num_failed = 0
        for child in self._children:
            if child.failed():
                num_failed += 1
                if num_failed > self.failures:
                    return True
        return False

    def __repr__(self):
        return f"{self.name}({len(self._children)} children, failures={self.failures})"
