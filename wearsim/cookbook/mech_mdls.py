# Copyright (c) 2023 Ian Hill
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from wearsim.models.mechanisms import FailMech, MECH_TYPES, load_params
from wearsim.exceptions import UserConfigError
from wearsim.helpers import logger

__all__ = ['build_mechs', 'all_mechs']


def build_mechs(names: str | list[str] = 'all', tech_file: str = None, param_files: dict = None) -> list[FailMech]:
    """
    Construct a set of aging mechanisms with their parameters optionally overridden from parameter files.

    Parameters
    ----------
    names: str or list of str, optional
        Comma-separated list (or list) of mechanism names to build, or 'all' for every mechanism (default 'all')
    tech_file: str, optional
        Path to a parameter file with technology parameters shared by all the mechanisms
    param_files: dict of str, optional
        Mapping from mechanism names to parameter files specific to that mechanism, these take precedence over the
        technology file

    Returns
    -------
    list of FailMech
        The constructed mechanisms, in the order requested
    """
    if isinstance(names, str):
        names = [name.strip() for name in names.split(',') if name.strip()]
    if any(name.lower() == 'all' for name in names):
        names = list(MECH_TYPES)
    param_files = {key.lower(): val for key, val in param_files.items()} if param_files else {}
    tech_prms = load_params(tech_file) if tech_file else None

    mechs, chosen = [], set()
    for name in names:
        key = name.lower()
        if key not in MECH_TYPES:
            logger.warning(f"Ignoring unknown aging mechanism {name}")
            continue
        if key in chosen:
            continue
        chosen.add(key)
        mech_prms = load_params(param_files[key]) if param_files.get(key) else None
        mechs.append(MECH_TYPES[key](tech_prms, mech_prms))

    if not mechs:
        raise UserConfigError('No valid aging mechanisms selected.')
    return mechs


def all_mechs() -> list[FailMech]:
    """
    All the supported aging mechanisms with their default parameters.

    Returns
    -------
    list of FailMech
        NBTI, EM, HCI, and TDDB mechanism models
    """
    return [mech_cls() for mech_cls in MECH_TYPES.values()]
