# -*- coding: UTF-8 -*-
#
# Copyright 2011-2019 by Dirk Gorissen, Stephen Rauch and Contributors
# All rights reserved.
# This file is part of the Gridcel Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html


from decimal import Decimal

import pytest

from gridcel.gridlib import average, count, max_, min_, product, sum_
from gridcel.gridutil import add, DIV0, EmptyRange
from gridcel.lib.function_helpers import FunctionRegistry


def decimals(*values):
    return tuple(Decimal(v) for v in values)


@pytest.fixture(scope='module')
def registry():
    return FunctionRegistry()


@pytest.mark.parametrize(
    'values, result', (
        ((), '0'),
        (('5', ), '5'),
        (('1', '2', '3', '4'), '10'),
        (('0.1', '0.2'), '0.3'),
        (('-1.5', '1.5'), '0.0'),
    )
)
def test_sum(values, result):
    assert sum_(decimals(*values)) == Decimal(result)


def test_sum_reassociation():
    a, b, c = decimals('1.1', '-2.25', '1E+30')
    assert sum_((a, b, c)) == add(add(a, b), c) == add(a, add(b, c))
    assert sum_((a, b, c)) == sum_((sum_((a, b)), c))


@pytest.mark.parametrize(
    'function, values, result', (
        (product, (), '1'),
        (product, ('2', '3.5'), '7'),
        (count, (), '0'),
        (count, ('2', '2', '9'), '3'),
        (min_, ('2', '-3', '1'), '-3'),
        (max_, ('2', '-3', '1'), '2'),
        (average, ('1', '2'), '1.5'),
        (average, ('1', '1', '2'), '1.' + '3' * 28),
    )
)
def test_reducers(function, values, result):
    assert function(decimals(*values)) == Decimal(result)


@pytest.mark.parametrize('name', ('min', 'max', 'average'))
def test_empty_range(registry, name):
    with pytest.raises(EmptyRange) as exc:
        registry.lookup(name)(())
    assert exc.value.name == name.upper()
    assert exc.value.code == DIV0


@pytest.mark.parametrize('name', ('sum', 'product', 'count'))
def test_empty_allowed(registry, name):
    assert isinstance(registry.lookup(name)(()), Decimal)


def test_registered_names(registry):
    assert registry.names == (
        'average', 'count', 'max', 'min', 'product', 'sum')
