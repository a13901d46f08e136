# Copyright (c) 2024 Ian Hill
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from wearsim.models.chip import ChipMdl
from wearsim.models.components import Group
from wearsim.models.traces import DataPoint
from wearsim.models.units import FRESH, unit_class

__all__ = ['constant_trace', 'single_unit_chip', 'k_of_n_chip']


def constant_trace(duration: float = 1, **conditions) -> list[DataPoint]:
    """
    A workload trace with a single row, operating conditions held constant indefinitely.

    Parameters
    ----------
    duration: float, optional
        Duration of the row in seconds (default 1)
    **conditions
        Operating condition quantities, e.g. vdd, temperature, frequency (MHz), activity

    Returns
    -------
    list of DataPoint
        The single row trace
    """
    return [DataPoint(duration, duration, conditions)]


def single_unit_chip(unit_type: str = 'unit', redundancy: str = None, copies: int = 1, **conditions) -> ChipMdl:
    """
    A chip consisting of one unit under constant operating conditions, the chip fails when the unit does.

    Parameters
    ----------
    unit_type: str, optional
        Type of the unit, one of unit, core, logic, memory (default 'unit')
    redundancy: str, optional
        'serial' or 'parallel' redundancy of the unit copies
    copies: int, optional
        Number of redundant copies of the unit (default 1)
    **conditions
        Operating condition quantities for the unit, unspecified quantities take the unit type defaults

    Returns
    -------
    ChipMdl
        The constructed chip model
    """
    unit = unit_class(unit_type)('unit0', 0, {FRESH: constant_trace(**conditions)}, redundancy=redundancy,
                                 copies=copies)
    return ChipMdl(Group('chip', [unit]), [unit])


def k_of_n_chip(num_units: int = 2, failures: int = 1, unit_type: str = 'unit', **conditions) -> ChipMdl:
    """
    A chip of identical units under constant operating conditions that tolerates a given number of unit failures.

    Parameters
    ----------
    num_units: int, optional
        Number of units in the chip (default 2)
    failures: int, optional
        The number of unit failures the chip tolerates (default 1)
    unit_type: str, optional
        Type of the units (default 'unit')
    **conditions
        Operating condition quantities shared by all the units

    Returns
    -------
    ChipMdl
        The constructed chip model
    """
    cls = unit_class(unit_type)
    units = [cls(f"unit{i}", i, {FRESH: constant_trace(**conditions)}) for i in range(num_units)]
    return ChipMdl(Group('chip', units, failures), units)
