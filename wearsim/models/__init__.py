# Copyright (c) 2024 Ian Hill
# SPDX-License-Identifier: Apache-2.0

"""Custom data types/classes used to model an aging chip and report on its simulated lifetime."""

from . import reliability, traces, mechanisms, components, units, chip, reports
from .reliability import *
from .traces import *
from .mechanisms import *
from .components import *
from .units import *
from .chip import *
from .reports import *

__all__ = list(reliability.__all__)
__all__ += traces.__all__
__all__ += mechanisms.__all__
__all__ += components.__all__
__all__ += units.__all__
__all__ += chip.__all__
__all__ += reports.__all__
