# Copyright (c) 2023 Ian Hill
# SPDX-License-Identifier: Apache-2.0

"""wearsim top-level Monte-Carlo lifetime simulation functions"""

from __future__ import annotations

import math
import numpy as np

from wearsim.models import *
from wearsim.exceptions import UserConfigError
from wearsim.helpers import logger, _reset_warnings

__all__ = ['simulate', 'SimContext']


class SimContext:
    """
    State owned by a single simulation run: the chip being simulated, the aging mechanisms in use, the random number
    generator, and the trial bookkeeping. Nothing here outlives the run.

    Attributes
    ----------
    chip: ChipMdl
    mechs: list of FailMech
    rng: numpy.random.Generator
    completed: int
        Number of trials that ran until the chip failed
    abandoned: int
        Number of trials that could not progress to chip failure
    """
    def __init__(self, chip: ChipMdl, mechs: list[FailMech], seed: int = None):
        self.chip = chip
        self.mechs = list(mechs)
        self.rng = np.random.default_rng(seed)
        self.completed = 0
        self.abandoned = 0


def _retire_orphans(root: Component, healthy: list[Unit]) -> list[Unit]:
    """Retire the healthy units that sit underneath a failed group, they can no longer affect the system."""
    reachable = set()

    def visit(comp):
        if comp.failed():
            return False
        reachable.add(id(comp))
        return True
    conditional_walk(root, visit)

    in_tree = {id(comp) for comp in walk(root)}
    orphans = [unit for unit in healthy if id(unit) in in_tree and id(unit) not in reachable]
    for unit in orphans:
        unit.retire()
    return orphans


def _record_failures(root: Component, recorded: set, elapsed: float):
    """Append the elapsed time to the TTFs of every component that has failed for the first time in this trial."""
    for comp in walk(root):
        if comp.failed() and id(comp) not in recorded:
            recorded.add(id(comp))
            comp.ttfs.append(elapsed)


def _sim_trial(ctx: SimContext, trial: int) -> bool:
    """
    Simulate one full failure sequence of the chip, from all units fresh until the root component fails.

    Parameters
    ----------
    ctx: SimContext
        The simulation run the trial belongs to
    trial: int
        The trial number, used for reporting

    Returns
    -------
    bool
        True if the trial ran until the root failed, False if it had to be abandoned. Components that failed before
        an abandoned trial stopped keep their recorded times to failure
    """
    chip = ctx.chip
    chip.reset()
    # Kept as an ordered list so that seeded runs are reproducible
    healthy = list(chip.units)
    recorded = set()
    elapsed = 0.0

    while not chip.root.failed():
        # 1. Determine each surviving unit's operating configuration from the current set of failures
        for unit in chip.units:
            if not unit.failed():
                unit.set_configuration(chip.root)

        # 2. Sample each healthy unit's next failure, the earliest one is the next event
        delay, next_fail = math.inf, None
        for unit in healthy:
            unit_delay = unit.next_event_delay(ctx.rng)
            if unit_delay < delay:
                delay, next_fail = unit_delay, unit
        if next_fail is None:
            logger.warning(f"No unit failure possible during trial {trial}; abandoning trial")
            return False

        # 3. Age all healthy units to the event time so that they stay synchronized to the trial clock
        for unit in healthy:
            unit.update_reliability(delay)
        elapsed += delay

        # 4. Fail the unit and record any components that failed as a consequence
        next_fail.failure()
        if next_fail.failed():
            healthy.remove(next_fail)
        _record_failures(chip.root, recorded, elapsed)

        # 5. Units within failed groups are effectively dead, but did not fail themselves
        for unit in _retire_orphans(chip.root, healthy):
            healthy.remove(unit)
            recorded.add(id(unit))
        _record_failures(chip.root, recorded, elapsed)

    return True


def simulate(chip: ChipMdl, mechs: list[FailMech], num_iters: int = 1000, seed: int = None) -> SimReport:
    """
    Estimate the lifetime distribution of a chip through Monte-Carlo simulation of its failure sequence

    Parameters
    ----------
    chip: ChipMdl
        The chip model, including unit workload traces and the component tree defining chip failure
    mechs: list of FailMech
        The aging mechanisms that the units are subject to
    num_iters: int, optional
        Number of Monte-Carlo trials to run (default 1000)
    seed: int, optional
        Seed for the random number generator, provide to obtain reproducible results

    Returns
    -------
    SimReport
        The report object containing the simulated times to failure and derived statistics for every component
    """
    if num_iters < 1:
        raise UserConfigError(f"At least one Monte-Carlo iteration is required, got {num_iters}.")
    # Warnings are reported once per run
    _reset_warnings()
    ctx = SimContext(chip, mechs, seed)

    logger.debug('Computing aging rates...')
    chip.compute_reliability(ctx.mechs)
    chip.clear_ttfs()

    for i in range(num_iters):
        logger.debug(f"Beginning Monte Carlo iteration {i}")
        if _sim_trial(ctx, i):
            ctx.completed += 1
        else:
            ctx.abandoned += 1

    if ctx.abandoned:
        logger.warning(f"{ctx.abandoned} of {num_iters} trials could not reach chip failure")
    return SimReport(chip, ctx.mechs, ctx.completed, ctx.abandoned)
