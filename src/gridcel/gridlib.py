# -*- coding: UTF-8 -*-
#
# Copyright 2011-2019 by Dirk Gorissen, Stephen Rauch and Contributors
# All rights reserved.
# This file is part of the Gridcel Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html

"""
Reducers backing the grid functions

Each takes the flattened argument values, in argument order, as one tuple of
`decimal.Decimal`.  The Python name without a trailing '_' is the function
name, so ``sum_`` is ``SUM``.
"""
import decimal
import functools

from gridcel.gridutil import add, divide, multiply, ONE, ZERO
from gridcel.lib.function_helpers import grid_helper, grid_reducer


@grid_reducer
def sum_(values):
    # the empty sum is zero
    return functools.reduce(add, values, ZERO)


@grid_reducer
def product(values):
    return functools.reduce(multiply, values, ONE)


@grid_reducer
def count(values):
    return decimal.Decimal(len(values))


@grid_helper(empty_error=True)
def min_(values):
    return min(values)


@grid_helper(empty_error=True)
def max_(values):
    return max(values)


@grid_helper(empty_error=True)
def average(values):
    return divide(sum_(values), decimal.Decimal(len(values)))
