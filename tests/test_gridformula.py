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

from gridcel.gridformula import (
    BinaryOp,
    CellRef,
    FunctionCall,
    GridFormula,
    NumberLiteral,
    RangeRef,
    UnaryMinus,
    walk,
)
from gridcel.gridutil import (
    AddressCell,
    AddressRange,
    LexError,
    ParseError,
    RangeInScalarContext,
    VALUE_ERROR,
)


def num(value):
    return NumberLiteral(Decimal(value))


def ref(address):
    return CellRef(AddressCell(address))


def rng(address):
    return RangeRef(AddressRange(address))


@pytest.mark.parametrize(
    'formula, ast', (
        ('=1', num(1)),
        ('=(1)', num(1)),
        ('=A1', ref('A1')),
        ('=1+2*3', BinaryOp('+', num(1), BinaryOp('*', num(2), num(3)))),
        ('=(1+2)*3', BinaryOp('*', BinaryOp('+', num(1), num(2)), num(3))),
        ('=1-2-3', BinaryOp('-', BinaryOp('-', num(1), num(2)), num(3))),
        ('=8/4/2', BinaryOp('/', BinaryOp('/', num(8), num(4)), num(2))),
        ('=-A1', UnaryMinus(ref('A1'))),
        ('=--1', UnaryMinus(UnaryMinus(num(1)))),
        ('=-2*3', BinaryOp('*', UnaryMinus(num(2)), num(3))),
        ('=2*-3', BinaryOp('*', num(2), UnaryMinus(num(3)))),
        ('=sum()', FunctionCall('sum', ())),
        ('=SUM(A1:B2, 3)', FunctionCall('sum', (rng('A1:B2'), num(3)))),
        ('=Sum(b2:a1)', FunctionCall('sum', (rng('B2:A1'), ))),
        ('=sum(A1, sum(B1:B3)) / 2', BinaryOp(
            '/',
            FunctionCall('sum', (ref('A1'), FunctionCall(
                'sum', (rng('B1:B3'), )))),
            num(2))),
        ('=log10(1)', FunctionCall('log10', (num(1), ))),
    )
)
def test_parse(formula, ast):
    assert GridFormula(formula).ast == ast


def test_nodes_compare_by_variant():
    assert CellRef(Decimal(1)) != NumberLiteral(Decimal(1))
    assert num(1) == NumberLiteral(Decimal('1'))
    assert len({num(1), CellRef(Decimal(1))}) == 2


@pytest.mark.parametrize(
    'formula, error', (
        ('=', ParseError),
        ('=1+', ParseError),
        ('=(1', ParseError),
        ('=1)', ParseError),
        ('=1 2', ParseError),
        ('=+1', ParseError),
        ('=A0', ParseError),
        ('=sum(1,)', ParseError),
        ('=sum(,1)', ParseError),
        ('=sum(A1:)', ParseError),
        ('=sum(1', ParseError),
        ('=foo', ParseError),
        ('=1 & 2', LexError),
        ('=A1:B2', RangeInScalarContext),
        ('=1+A1:B2', RangeInScalarContext),
        ('=sum(A1:B2+1)', RangeInScalarContext),
        ('=sum(-A1:B2)', RangeInScalarContext),
        ('=sum(A1:B2:C3)', RangeInScalarContext),
    )
)
def test_parse_errors(formula, error):
    with pytest.raises(error):
        GridFormula(formula).ast


def test_parse_error_details():
    with pytest.raises(ParseError) as exc:
        GridFormula('=1+').ast
    assert exc.value.found == 'end of formula'
    assert exc.value.position == 2

    with pytest.raises(ParseError) as exc:
        GridFormula('=1 2').ast
    assert exc.value.found == "'2'"
    assert exc.value.position == 2


def test_range_in_scalar_context_details():
    with pytest.raises(RangeInScalarContext) as exc:
        GridFormula('=A1:B2').ast
    assert exc.value.reference == 'A1:B2'
    assert exc.value.code == VALUE_ERROR


def test_walk():
    ast = GridFormula('=-A1+sum(B1:C2, 3)').ast
    assert tuple(type(node).__name__ for node in walk(ast)) == (
        'BinaryOp', 'UnaryMinus', 'CellRef', 'FunctionCall', 'RangeRef',
        'NumberLiteral')


def test_needed_addresses():
    formula = GridFormula('=A1+sum(B1:C2, A1) * c3')
    assert formula.needed_addresses == (
        AddressCell('A1'), AddressRange('B1:C2'), AddressCell('C3'))
    assert GridFormula('=1').needed_addresses == ()


def test_formula_text():
    formula = GridFormula('= 1 + 2')
    assert formula.text == ' 1 + 2'
    assert str(formula) == '= 1 + 2'
    assert repr(formula) == 'GridFormula(= 1 + 2)'
    assert formula.tokens[0].value == Decimal(1)

    formula = GridFormula('+A1', marker='+')
    assert formula.ast == ref('A1')


@pytest.mark.parametrize(
    'formula, canonical', (
        ('=1+2*3', '=1 + 2 * 3'),
        ('=(1+2)*3', '=(1 + 2) * 3'),
        ('=1-(2-3)', '=1 - (2 - 3)'),
        ('=(1-2)-3', '=1 - 2 - 3'),
        ('=2*(3/4)', '=2 * (3 / 4)'),
        ('=-(1+2)', '=-(1 + 2)'),
        ('=--a1', '=--A1'),
        ('=sum(a1:b2,1.50)', '=SUM(A1:B2, 1.50)'),
        ('=sum()', '=SUM()'),
    )
)
def test_canonical(formula, canonical):
    parsed = GridFormula(formula)
    assert parsed.canonical == canonical
    assert GridFormula(canonical).ast == parsed.ast
