# Copyright (c) 2024 Ian Hill
# SPDX-License-Identifier: Apache-2.0

"""Custom classes for reporting results of wearsim simulations"""

from __future__ import annotations

import pandas as pd
from pathlib import Path

from wearsim.models.chip import ChipMdl
from wearsim.models.mechanisms import FailMech
from wearsim.models.units import Unit
from wearsim.helpers import _convert_time, logger

__all__ = ['SimReport']


class SimReport:
    """
    Class for structuring the results of a lifetime simulation, the sampled times to failure and statistics derived
    from them. All times are stored in seconds and converted to the requested unit when reported.

    Attributes
    ----------
    chip: ChipMdl
        The simulated chip, whose components hold the sampled times to failure
    mechs: list of FailMech
        The aging mechanisms that were simulated
    completed: int
        The number of Monte-Carlo trials that ran until the chip failed
    abandoned: int
        The number of Monte-Carlo trials that could not reach chip failure
    time_unit: str
        The default unit to report times in
    """

    def __init__(self, chip: ChipMdl, mechs: list[FailMech], completed: int = 0, abandoned: int = 0,
                 time_unit: str = 'hours'):
        self.chip = chip
        self.mechs = list(mechs)
        self.completed = completed
        self.abandoned = abandoned
        # Validate the unit up front
        _convert_time(0, time_unit)
        self.time_unit = time_unit

    def _units(self, time_unit: str = None) -> str:
        return time_unit if time_unit else self.time_unit

    def summary(self, time_unit: str = None) -> pd.Series:
        """
        Lifetime statistics of the chip as a whole

        Parameters
        ----------
        time_unit: str, optional
            Unit to report times in, defaults to the report's time unit

        Returns
        -------
        pandas.Series
            The mean, standard deviation, 95% confidence interval bounds, and the number of samples
        """
        units = self._units(time_unit)
        root = self.chip.root
        low, high = root.mttf_interval(0.95)
        return pd.Series({
            'mean': _convert_time(root.mttf(), units),
            'std': _convert_time(root.std_ttf(), units),
            'ci_low': _convert_time(low, units),
            'ci_high': _convert_time(high, units),
            'samples': len(root.ttfs),
        }, name=root.name)

    def component_stats(self, time_unit: str = None) -> pd.DataFrame:
        """Lifetime statistics and aging rate (units only, fresh configuration) for every component in the chip."""
        units = self._units(time_unit)
        rows = {}
        for comp in self.chip.components:
            low, high = comp.mttf_interval(0.95)
            rows[comp.name] = {
                'mttf': _convert_time(comp.mttf(), units),
                'std': _convert_time(comp.std_ttf(), units),
                'ci_low': _convert_time(low, units),
                'ci_high': _convert_time(high, units),
                'failures': len(comp.ttfs),
                'alpha': _convert_time(comp.aging_rate(), units),
            }
        return pd.DataFrame.from_dict(rows, orient='index')

    def unit_aging_rates(self, time_unit: str = None) -> pd.DataFrame:
        """Per-unit MTTF, failure count, and fresh configuration aging rate."""
        units = self._units(time_unit)
        rows = {unit.name: {'mttf': _convert_time(unit.mttf(), units),
                            'failures': len(unit.ttfs),
                            'alpha': _convert_time(unit.aging_rate(), units)} for unit in self.chip.units}
        return pd.DataFrame.from_dict(rows, orient='index', columns=['mttf', 'failures', 'alpha'])

    def mech_aging_rates(self, time_unit: str = None) -> pd.DataFrame:
        """Per-unit aging rate for each individual mechanism in the fresh configuration."""
        units = self._units(time_unit)
        rows = {unit.name: {mech.name: _convert_time(unit.mech_aging_rate(mech.mech_type), units)
                            for mech in self.mechs} for unit in self.chip.units}
        return pd.DataFrame.from_dict(rows, orient='index', columns=[mech.name for mech in self.mechs])

    def dump_ttfs(self, file: str = None, time_unit: str = None) -> str:
        """
        Format the raw sampled times to failure, one line for the chip and then one for each unit, each as the
        component name followed by its comma-separated times to failure.

        Parameters
        ----------
        file: str, optional
            Path to write the dump to, if not provided the dump is only returned
        time_unit: str, optional
            Unit to report times in, defaults to the report's time unit

        Returns
        -------
        str
            The formatted dump
        """
        units = self._units(time_unit)
        lines = []
        for comp in [self.chip.root, *self.chip.units]:
            lines.append(','.join([comp.name] + [str(_convert_time(ttf, units)) for ttf in comp.ttfs]))
        dump = '\n'.join(lines) + '\n'
        if file:
            Path(file).parent.mkdir(parents=True, exist_ok=True)
            with open(file, 'w') as f:
                f.write(dump)
            logger.info(f"Wrote times to failure for {self.chip.name} to {file}")
        return dump

    def unit(self, name: str) -> Unit:
        return self.chip.unit(name)
