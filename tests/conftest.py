# -*- coding: UTF-8 -*-
#
# Copyright 2011-2019 by Dirk Gorissen, Stephen Rauch and Contributors
# All rights reserved.
# This file is part of the Gridcel Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html


import sys
import types

import pytest

from gridcel.gridcompiler import build_grid, GridEvaluator
from gridcel.gridutil import ONE
from gridcel.gridwrapper import read_text_grid
from gridcel.lib.function_helpers import grid_helper, grid_reducer


@pytest.fixture(scope='session')
def text_grid():
    """Build a grid from '|' delimited text"""
    def wrapped(text, **kwargs):
        return build_grid(read_text_grid(text), **kwargs)
    return wrapped


@pytest.fixture
def grid_evaluator(text_grid):
    def wrapped(text, **kwargs):
        return GridEvaluator(text_grid(text), **kwargs)
    return wrapped


@pytest.fixture
def plugin_module(monkeypatch):
    """Importable module of reducers, replacing sum and adding one"""
    module = types.ModuleType('gridcel_test_plugin')

    @grid_reducer
    def sum_(values):
        return ONE * 42

    @grid_helper(name='first', empty_error=True)
    def first_value(values):
        return values[0]

    module.sum_ = sum_
    module.first_value = first_value
    monkeypatch.setitem(
        sys.modules, module.__name__, module)
    return module.__name__
