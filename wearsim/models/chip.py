# Copyright (c) 2024 Ian Hill
# SPDX-License-Identifier: Apache-2.0

"""Top-level physical model of a chip, made up of aging units arranged in a failure dependency tree"""

from __future__ import annotations

from wearsim.models.components import Component, Group, walk
from wearsim.models.mechanisms import FailMech
from wearsim.models.units import Unit
from wearsim.exceptions import UserConfigError
from wearsim.helpers import logger

__all__ = ['ChipMdl']


class ChipMdl:
    """
    Although this class is the top-level model for the chip, it is mostly a container for the set of units and the
    component tree that determines when the chip as a whole has failed.

    Attributes
    ----------
    name: str
        Descriptive name of the chip, defaults to the name of the root group
    root: Component
        The root of the component tree, the chip fails when it does
    units: list of Unit
        All the aging units within the chip, ordered by unit ID
    """
    def __init__(self, root: Component, units: list[Unit] = None, name: str = None):
        """
        Parameters
        ----------
        root: Component
            Root of the component tree
        units: list of Unit, optional
            The units in the chip, found from the component tree if not provided
        name: str, optional
            Descriptive name of the chip (default is the root component's name)
        """
        self.root = root
        self.name = name if name else root.name
        if units is None:
            units = [comp for comp in walk(root) if isinstance(comp, Unit)]
        names = [unit.name for unit in units]
        if len(set(names)) != len(names):
            raise UserConfigError(f"Unit names within chip {self.name} must be unique.")
        self.units = list(units)

        tree_units = {comp.name for comp in walk(root) if isinstance(comp, Unit)}
        for unit in self.units:
            if unit.name not in tree_units:
                logger.warning(f"Unit {unit.name} is not part of the failure dependency tree of {self.name}")

    @property
    def components(self) -> list[Component]:
        """All the components of the chip, the tree in prefix order followed by any units outside the tree."""
        comps = list(walk(self.root))
        seen = {id(comp) for comp in comps}
        comps.extend(unit for unit in self.units if id(unit) not in seen)
        return comps

    @property
    def groups(self) -> list[Group]:
        return [comp for comp in walk(self.root) if isinstance(comp, Group)]

    def unit(self, name: str) -> Unit:
        for unit in self.units:
            if unit.name == name:
                return unit
        raise KeyError(f"Chip {self.name} has no unit named {name}.")

    def compute_reliability(self, mechs: list[FailMech]):
        """Compute the reliability distributions of every unit for every configuration they have traces for."""
        for unit in self.units:
            logger.debug(f"Computing aging rates for unit {unit.name}")
            unit.compute_reliability(mechs)

    def reset(self):
        """Return all units to a fresh state before a new trial."""
        for unit in self.units:
            unit.reset()

    def clear_ttfs(self):
        for comp in self.components:
            comp.ttfs = []
