# Copyright (c) 2023 Ian Hill
# SPDX-License-Identifier: Apache-2.0

"""
This submodule provides common use cases as prebuilt models to aid users in quickly getting wearsim simulations
working without having to custom specify all the little things.
"""

from . import mech_mdls, chips
from .mech_mdls import *
from .chips import *

__all__ = list(mech_mdls.__all__)
__all__.extend(chips.__all__)
