# Copyright (c) 2023 Ian Hill
# SPDX-License-Identifier: Apache-2.0

"""
Wearsim Chip Lifetime Simulator (module wearsim)

Description
-----------
The wearsim module estimates the lifetime distribution of a chip made up of many units, such as cores, logic blocks,
and memories, that wear out through physical aging mechanisms. Each unit ages according to the workload traces it runs
(supply voltage, temperature, frequency, and activity), and the chip as a whole fails according to a hierarchy of
fault-tolerant groups over those units.

Since the failure of one unit changes the workload of its neighbours, each unit can be given a different trace for each
set of already failed components. The lifetime of the chip is found through Monte-Carlo simulation of the order in which
the units fail, with units switching traces as the set of failures grows while keeping the damage they have accumulated.

The aging mechanisms available are negative bias temperature instability (NBTI), electromigration (EM), hot carrier
injection (HCI), and time-dependent dielectric breakdown (TDDB), all using peer-reviewed physical models with default
parameters for a generic 65nm process that can be overridden using parameter files.

To get started, the 'cookbook' provides prebuilt aging mechanism sets and simple chips. Full chips are usually described
using an XML configuration file and delimited workload trace files, see 'load_chip'. The package also installs a
command-line interface 'wearsim' that runs a simulation for a configuration file and reports the results.

Core Interface
---------
ChipMdl - Class that holds the units of a chip and the component tree defining when the chip fails
FailMech - Base class for the aging mechanism models, NBTI, EM, HCI, and TDDB
load_chip - Procedure that builds a chip model from an XML chip configuration file
simulate - The main procedure for the module, runs the Monte-Carlo simulation and returns a report of the results
"""

# This value determines the project version for PyPi as well
__version__ = '0.1.0'

from . import models
from . import cookbook
from .sim import simulate
from .chip_config import load_chip, parse_chip

__all__ = ['simulate', 'load_chip', 'parse_chip', 'models', 'cookbook']
__all__.extend(models.__all__)
__all__.extend(cookbook.__all__)
