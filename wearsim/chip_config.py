# Copyright (c) 2024 Ian Hill
# SPDX-License-Identifier: Apache-2.0

"""Loading of chip models from XML chip configuration files"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

from wearsim.models import ChipMdl, Group, Unit, parse_trace, unit_class
from wearsim.exceptions import InvalidTypeError, UserConfigError
from wearsim.helpers import logger

__all__ = ['load_chip', 'parse_chip']


def _parse_unit(node: ET.Element, uid: int, base_dir: Path, delimiter: str) -> Unit:
    name = node.get('name')
    if not name:
        raise UserConfigError(f"Unit {uid} in the chip configuration has no name.")
    try:
        cls = unit_class(node.get('type', 'unit'))
    except InvalidTypeError as e:
        raise UserConfigError(f"Unknown unit type \"{node.get('type')}\" for unit {name}") from e

    defaults = {}
    for default in node.findall('default'):
        for quantity, value in default.attrib.items():
            try:
                defaults[quantity] = float(value)
            except ValueError as e:
                raise UserConfigError(f"Default {quantity}={value} for unit {name} is not a number") from e

    redundancy, copies = None, 1
    redund = node.find('redundancy')
    if redund is not None:
        redundancy = redund.get('type', 'serial')
        try:
            copies = int(redund.get('count', 1))
        except ValueError as e:
            raise UserConfigError(f"Redundancy count for unit {name} must be an integer") from e

    traces = {}
    for trace in node.findall('trace'):
        file = trace.get('file')
        if not file:
            raise UserConfigError(f"Trace for unit {name} does not specify a file")
        failed = frozenset(comp.strip() for comp in trace.get('failed', '').split(',') if comp.strip())
        traces[failed] = parse_trace(str(base_dir / file), delimiter)

    return cls(name, uid, traces, defaults, redundancy, copies)


def _parse_group(node: ET.Element, units: dict) -> Group:
    name = node.get('name', '')
    try:
        failures = int(node.get('failures', 0))
    except ValueError as e:
        raise UserConfigError(f"Failure tolerance of group {name} must be an integer") from e

    group = Group(name, failures=failures)
    for child in node:
        if child.tag == 'group':
            group.add_child(_parse_group(child, units))
        elif child.tag == 'unit':
            unit_name = child.get('name')
            if unit_name not in units:
                raise UserConfigError(f"Group {name} refers to undeclared unit {unit_name}")
            group.add_child(units[unit_name])
        else:
            raise UserConfigError(f"Unknown component type {child.tag}")
    return group


def parse_chip(root: ET.Element, base_dir: str | Path = '.', delimiter: str = ',') -> ChipMdl:
    """
    Build a chip model from a parsed chip configuration element tree.

    The configuration's top-level element holds one 'unit' element per unit, with optional 'default', 'redundancy',
    and 'trace' children, and a single top-level 'group' element defining the failure dependency tree.

    Parameters
    ----------
    root: xml.etree.ElementTree.Element
        The top-level element of the configuration
    base_dir: str or Path, optional
        Directory that trace file paths are relative to (default current working directory)
    delimiter: str, optional
        Delimiter used within the trace files (default ',')

    Returns
    -------
    ChipMdl
        The chip model, with traces bound to the units but reliabilities not yet computed
    """
    base_dir = Path(base_dir)
    logger.debug('Creating units...')
    units = {}
    for node in root.findall('unit'):
        unit = _parse_unit(node, len(units), base_dir, delimiter)
        if unit.name in units:
            raise UserConfigError(f"Unit name {unit.name} is declared more than once")
        units[unit.name] = unit

    logger.debug('Creating failure dependency graph...')
    groups = root.findall('group')
    if len(groups) != 1:
        raise UserConfigError(f"Chip configuration must have exactly one top-level group, found {len(groups)}")
    tree = _parse_group(groups[0], units)
    for child in root:
        if child.tag not in ('unit', 'group'):
            raise UserConfigError(f"Unknown component type {child.tag}")
    return ChipMdl(tree, list(units.values()), root.get('name'))


def load_chip(file: str, delimiter: str = ',') -> ChipMdl:
    """
    Load a chip model from an XML chip configuration file. Trace files are resolved relative to the configuration
    file's directory.

    Parameters
    ----------
    file: str
        Path to the chip configuration
    delimiter: str, optional
        Delimiter used within the trace files (default ',')

    Returns
    -------
    ChipMdl
        The loaded chip model
    """
    try:
        tree = ET.parse(file)
    except FileNotFoundError as e:
        raise UserConfigError(f"Could not find the chip configuration file {file}") from e
    except ET.ParseError as e:
        raise UserConfigError(f"{file}: {e}") from e
    return parse_chip(tree.getroot(), Path(file).parent, delimiter)
