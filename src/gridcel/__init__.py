# -*- coding: UTF-8 -*-
#
# Copyright 2011-2019 by Dirk Gorissen, Stephen Rauch and Contributors
# All rights reserved.
# This file is part of the Gridcel Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html

from .gridcompiler import build_grid, evaluate, Grid, GridEvaluator  # noqa: F401
from .gridutil import (  # noqa: F401
    AddressCell,
    AddressRange,
    CellError,
    GridCelException,
    GridConstructionError,
)
from .version import __version__  # noqa: F401
