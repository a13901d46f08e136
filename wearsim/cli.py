# Copyright (c) 2024 Ian Hill
# SPDX-License-Identifier: Apache-2.0

"""Command-line interface for running a lifetime simulation of a chip described by an XML configuration file"""

import logging

from wearsim.chip_config import load_chip
from wearsim.cookbook.mech_mdls import build_mechs
from wearsim.sim import simulate
from wearsim.exceptions import IncompatibleShapeError, InvalidTypeError, MissingParamError, UserConfigError
from wearsim.helpers import _on_demand_import, set_log_level, logger, TIME_UNIT_MAP

click = _on_demand_import('click')

PACKAGE_ERRORS = (UserConfigError, MissingParamError, InvalidTypeError, IncompatibleShapeError)


def _write_table(frame, file: str):
    frame.to_csv(file, index_label='unit')
    logger.info(f"Wrote {file}")


def run(chip_config: str, iterations: int = 1000, aging_mechanisms: str = 'all', technology_file: str = None,
        param_files: dict = None, trace_delimiter: str = ',', time_units: str = 'hours', unit_aging_rates: str = None,
        mechanism_aging_rates: str = None, dump_ttfs: str = None, seed: int = None):
    """Load the chip and mechanisms, simulate, write any requested output files, and return the report."""
    mechs = build_mechs(aging_mechanisms, technology_file, param_files)
    chip = load_chip(chip_config, trace_delimiter)
    report = simulate(chip, mechs, iterations, seed)
    report.time_unit = time_units

    if unit_aging_rates:
        _write_table(report.unit_aging_rates(), unit_aging_rates)
    if mechanism_aging_rates:
        _write_table(report.mech_aging_rates(), mechanism_aging_rates)
    if dump_ttfs:
        report.dump_ttfs(dump_ttfs)
    return report


@click.command
@click.argument('chip_config', type=click.Path(exists=True, dir_okay=False))
@click.option('-n', '--iterations', default=1000, show_default=True, help='Number of Monte-Carlo iterations to run.')
@click.option('--aging-mechanisms', default='all', show_default=True,
              help='Comma-separated list of aging mechanisms to include, or "all".')
@click.option('--technology-file', default=None, help='File containing technology parameters for all mechanisms.')
@click.option('--nbti-parameters', default=None, help='File containing NBTI model parameters.')
@click.option('--em-parameters', default=None, help='File containing EM model parameters.')
@click.option('--hci-parameters', default=None, help='File containing HCI model parameters.')
@click.option('--tddb-parameters', default=None, help='File containing TDDB model parameters.')
@click.option('--trace-delimiter', default=',', show_default=True, help='Delimiter used in the trace files.')
@click.option('--time-units', default='hours', show_default=True, type=click.Choice(sorted(TIME_UNIT_MAP)),
              help='Units to report times in.')
@click.option('--unit-aging-rates', default=None, help='File to write per-unit MTTFs and aging rates to.')
@click.option('--mechanism-aging-rates', default=None, help='File to write per-unit, per-mechanism aging rates to.')
@click.option('--dump-ttfs', default=None, help='File to write the raw simulated times to failure to.')
@click.option('--seed', default=None, type=int, help='Seed for the random number generator.')
@click.option('-v', '--verbose', is_flag=True, default=False, help='Report simulation progress.')
def entry(chip_config, iterations, aging_mechanisms, technology_file, nbti_parameters, em_parameters, hci_parameters,
          tddb_parameters, trace_delimiter, time_units, unit_aging_rates, mechanism_aging_rates, dump_ttfs, seed,
          verbose):
    """Estimate the lifetime distribution of the chip described by CHIP_CONFIG."""
    if verbose:
        set_log_level(logging.DEBUG)
    param_files = {'nbti': nbti_parameters, 'em': em_parameters, 'hci': hci_parameters, 'tddb': tddb_parameters}
    try:
        report = run(chip_config, iterations, aging_mechanisms, technology_file, param_files, trace_delimiter,
                     time_units, unit_aging_rates, mechanism_aging_rates, dump_ttfs, seed)
    except PACKAGE_ERRORS as e:
        raise click.ClickException(str(e)) from e

    stats = report.summary()
    units = TIME_UNIT_MAP[time_units]
    click.echo(f"{report.chip.name} MTTF: {stats['mean']:g} {units}")
    click.echo(f"Standard deviation: {stats['std']:g} {units}")
    click.echo(f"95% confidence interval: [{stats['ci_low']:g}, {stats['ci_high']:g}] {units}")
    click.echo(f"Completed trials: {report.completed}, abandoned trials: {report.abandoned}")


if __name__ == '__main__':
    entry()
