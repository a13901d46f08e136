# Copyright (c) 2024 Ian Hill
# SPDX-License-Identifier: Apache-2.0

"""Leaf components of the system that age under their workload traces and fail according to their reliability"""

from __future__ import annotations

import math
import numpy as np
from functools import reduce

from wearsim.models.components import Component, conditional_walk
from wearsim.models.mechanisms import FailMech, MechType
from wearsim.models.reliability import MTTFSegment, WeibullDist
from wearsim.models.traces import DataPoint
from wearsim.exceptions import InvalidTypeError, UserConfigError
from wearsim.helpers import logger

__all__ = ['FRESH', 'Unit', 'Core', 'Logic', 'Memory', 'UNIT_TYPES', 'unit_class', 'config_label']

# A configuration is the set of names of failed components; the fresh configuration has no failures
FRESH = frozenset()

HZ_PER_MHZ = 1e6


def config_label(config: frozenset) -> str:
    return '[' + ','.join(sorted(config)) + ']'


class Unit(Component):
    """
    A leaf component with its own aging behaviour. A unit's operating conditions, and therefore how quickly it ages,
    depend on which other components have already failed, so a unit holds one workload trace and reliability
    distribution for each such configuration of the system.

    Generic units read their duty cycle directly from an 'activity' trace column.

    Attributes
    ----------
    name: str
    uid: int
        Unique identifier of the unit within the chip
    traces: dict
        Mapping from configurations to the unit's workload trace under that configuration
    copies: int
        The number of redundant copies of the unit
    serial: bool
        Whether redundant copies are cold spares that only start to age once they take over (serial), or all age
        together (parallel)
    age: float
        Effective age in seconds of the currently active copy under the current configuration's distribution
    curr_reliability: float
        Survival probability of the currently active copy
    remaining: int
        Number of copies that have not yet failed
    config: frozenset
        The active configuration
    """
    unit_defaults = {'vdd': 1, 'temperature': 350, 'frequency': 1000, 'activity': 0}

    def __init__(self, name: str, uid: int = 0, traces: dict = None, defaults: dict = None,
                 redundancy: str = None, copies: int = 1):
        """
        Parameters
        ----------
        name: str
            Identifying name for the unit
        uid: int, optional
            Unique identifier for the unit (default 0)
        traces: dict, optional
            Mapping from configurations (sets of failed component names) to lists of DataPoint, frequencies in MHz
        defaults: dict, optional
            Values used for any quantity a trace row does not specify, overriding the unit type defaults
        redundancy: str, optional
            Redundancy type, 'serial' or 'parallel', only needed if there are multiple copies (default 'serial')
        copies: int, optional
            The number of redundant copies of the unit (default 1)
        """
        super().__init__(name)
        self.uid = uid
        if copies < 1:
            raise UserConfigError(f"Unit {name} must have at least one copy, got {copies}.")
        if redundancy not in (None, 'serial', 'parallel'):
            raise UserConfigError(f"Unit {name} redundancy type must be 'serial' or 'parallel', got '{redundancy}'.")
        self.copies = copies
        self.serial = redundancy != 'parallel'

        self.defaults = dict(self.unit_defaults)
        if defaults:
            self.defaults.update(defaults)

        traces = dict(traces) if traces else {}
        if FRESH not in traces:
            traces[FRESH] = [DataPoint(1, 1, {})]
        # Fill in the defaults for missing quantities, and convert frequencies from MHz to Hz
        self.traces = {}
        for config, trace in traces.items():
            if len(trace) == 0:
                raise UserConfigError(f"Trace for configuration {config_label(config)} of unit {name} is empty.")
            bound = []
            for point in trace:
                point = point.with_values(self.defaults)
                bound.append(point.with_values(frequency=point['frequency'] * HZ_PER_MHZ))
            self.traces[frozenset(config)] = bound

        self._mech_dists = {}
        self._dists = {}
        self.reset()

    def reset(self):
        """Restore the unit to a freshly manufactured state, ready for a new trial."""
        self.age = 0.0
        self.curr_reliability = 1.0
        self.remaining = self.copies
        self._failed = False
        self.config = FRESH
        self._prev_config = None

    def failed(self) -> bool:
        return self._failed

    def retire(self):
        """Mark the unit as failed without consuming its redundancy, used when a group containing it has failed."""
        self._failed = True

    def activity(self, data: DataPoint, mech: FailMech) -> float: # noqa: UnusedParameter
        """Duty cycle of the unit under the given operating conditions, as relevant to the given mechanism."""
        return data['activity']

    def compute_reliability(self, mechs: list[FailMech]):
        """
        Compute the reliability distributions for every configuration the unit has a trace for. Each mechanism gets its
        own distribution, and the overall distribution treats the mechanisms as independent competing failure causes.

        Parameters
        ----------
        mechs: list of FailMech
            The aging mechanisms to include
        """
        if not mechs:
            raise UserConfigError(f"Cannot compute reliability of unit {self.name} without any aging mechanisms.")
        for config, trace in self.traces.items():
            self._mech_dists[config] = {}
            for mech in mechs:
                segments = []
                for point in trace:
                    duty_cycle = min(self.activity(point, mech), 1.0)
                    segments.append(MTTFSegment(point.duration, mech.time_to_failure(point, duty_cycle)))
                self._mech_dists[config][mech.mech_type] = mech.distribution(segments)
            self._dists[config] = reduce(WeibullDist.combine, self._mech_dists[config].values())

    def dist(self, config: frozenset = None) -> WeibullDist:
        """The overall reliability distribution for a configuration, by default the active one."""
        return self._dists[self.config if config is None else config]

    def reliability(self, t: float, config: frozenset = None) -> float:
        return self.dist(config).reliability(t)

    def inverse(self, r: float, config: frozenset = None) -> float:
        return self.dist(config).inverse(r)

    def failed_in_config(self, config: frozenset) -> bool:
        return self.name in config

    def aging_rate(self, config: frozenset = FRESH) -> float:
        """Scale parameter of the overall distribution for a configuration, 0 if the unit has failed within it."""
        if self.failed_in_config(config):
            return 0.0
        return self._dists[config].rate

    def mech_aging_rate(self, mech_type: MechType) -> float:
        """Scale parameter for a single aging mechanism in the fresh configuration."""
        return self._mech_dists[FRESH][mech_type].rate

    def set_configuration(self, root: Component):
        """
        Determine the active configuration from the failed components in the tree, not descending into subtrees whose
        root has already failed. If the unit has no trace for the configuration, the fresh configuration is used as an
        approximation instead.

        Parameters
        ----------
        root: Component
            The root of the system's component tree
        """
        if self._failed:
            logger.warning(f"Setting configuration for failed unit {self.name}")
        if root.failed():
            logger.warning('Setting configuration for failed system')

        failed = set()

        def visit(comp):
            if comp.failed():
                failed.add(comp.name)
                return False
            return True
        conditional_walk(root, visit)

        self._prev_config = self.config
        config = frozenset(failed)
        if config not in self.traces:
            logger.warning(f"Can't find configuration {config_label(config)} for {self.name}; "
                           f"using configuration {config_label(FRESH)} instead")
            config = FRESH
        self.config = config

    def next_event_delay(self, rng: np.random.Generator) -> float:
        """
        Sample how long until the active copy of the unit fails, relative to its current age and assuming the active
        configuration does not change.

        Parameters
        ----------
        rng: numpy.random.Generator
            The random number generator to sample with

        Returns
        -------
        float
            Time until the next failure in seconds, infinite if the unit does not age
        """
        # Uniform over (0, curr_reliability]
        target = self.curr_reliability * (1.0 - rng.random())
        next_age = self.inverse(target)
        if math.isinf(next_age):
            return math.inf
        return max(next_age - self.inverse(self.curr_reliability), 0.0)

    def update_reliability(self, dt: float):
        """
        Advance the unit's age by dt. If the configuration changed since the last update, the age is first shifted so
        that the new configuration's distribution gives the same survival probability as the old one did; accumulated
        damage carries over rather than being reset. See Bolchini et al., "A lightweight and open-source framework for
        the lifetime estimation of multicore systems," ICCD 2014.

        Parameters
        ----------
        dt: float
            Elapsed time in seconds
        """
        dist = self.dist()
        if self._prev_config is not None and self._prev_config != self.config:
            rebased = dist.inverse(self.curr_reliability)
            if not math.isinf(rebased):
                self.age = rebased
        self._prev_config = self.config
        self.age += dt
        # A non-aging configuration holds the survival probability where it was
        if not math.isinf(dist.rate):
            self.curr_reliability = dist.reliability(self.age)

    def failure(self):
        """
        Fail the active copy of the unit. The unit itself only fails once no copies remain. When a serial spare takes
        over it starts from a fresh state, while parallel copies have been aging all along and keep the shared state.
        """
        self.remaining -= 1
        self._failed = self.remaining <= 0
        if self.serial and not self._failed:
            self.age = 0.0
            self.curr_reliability = 1.0
            self._prev_config = None

    def __repr__(self):
        return f"{type(self).__name__}({self.name})"


class Core(Unit):
    """
    A full processor core. Its activity is estimated as the fraction of its peak power that it currently draws.
    """
    unit_defaults = {**Unit.unit_defaults, 'power': 1, 'peak_power': 1}

    def __init__(self, name: str, uid: int = 0, traces: dict = None, defaults: dict = None,
                 redundancy: str = None, copies: int = 1):
        super().__init__(name, uid, traces, defaults, redundancy, copies)
        for config, trace in self.traces.items():
            if any(point['peak_power'] <= 0 for point in trace):
                raise UserConfigError(f"Peak power of core {name} must be positive in configuration "
                                      f"{config_label(config)}.")

    def activity(self, data: DataPoint, mech: FailMech) -> float: # noqa: UnusedParameter
        return data['power'] / data['peak_power']


class Logic(Unit):
    """
    A block made primarily of logic gates. Its activity is the number of times it was activated in a trace period
    divided by the number of clock cycles in that period. Not all PMOS transistors are stressed at once, so the
    integral of their expected duty cycles is used for NBTI instead (Oboril and Tahoori, DSN 2012).
    """
    def activity(self, data: DataPoint, mech: FailMech) -> float:
        cycles = data.duration * data['frequency']
        duty_cycle = min(data['activity'] / cycles, 1.0) if cycles > 0 else 0.0
        if mech.mech_type == MechType.NBTI:
            return 1 - duty_cycle * duty_cycle / 2
        return duty_cycle


class Memory(Unit):
    """
    A block made primarily of memory cells. Wear is data-dependent rather than usage-dependent; high-order bits tend
    to hold zeros and dominate degradation, so cells are treated as always stressed. Bit-cells do not switch in the way
    that drives HCI.
    """
    def activity(self, data: DataPoint, mech: FailMech) -> float: # noqa: UnusedParameter
        if mech.mech_type == MechType.HCI:
            return 0.0
        return 1.0


UNIT_TYPES = {'unit': Unit, 'core': Core, 'logic': Logic, 'memory': Memory}


def unit_class(type_name: str) -> type:
    """Look up a unit class by its type name as used in chip configuration files."""
    try:
        return UNIT_TYPES[type_name]
    except KeyError as e:
        raise InvalidTypeError(f"Unknown unit type '{type_name}', options are {', '.join(UNIT_TYPES)}.") from e
