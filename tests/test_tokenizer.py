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

from gridcel.gridutil import FORMULA_ERROR, InvalidNumber, LexError
from gridcel.tokenizer import Token, Tokenizer


def token_types(formula):
    return tuple(token.type for token in Tokenizer(formula).items)


@pytest.mark.parametrize(
    'formula, types', (
        ('', (Token.END, )),
        ('   ', (Token.END, )),
        ('1 + A1', (Token.NUMBER, Token.PLUS, Token.ADDRESS, Token.END)),
        ('-2*3/4', (Token.MINUS, Token.NUMBER, Token.STAR, Token.NUMBER,
                    Token.SLASH, Token.NUMBER, Token.END)),
        ('sum(A1:B2, 3)', (Token.IDENTIFIER, Token.LPAREN, Token.ADDRESS,
                           Token.COLON, Token.ADDRESS, Token.COMMA,
                           Token.NUMBER, Token.RPAREN, Token.END)),
        ('(aa10)', (Token.LPAREN, Token.ADDRESS, Token.RPAREN, Token.END)),
        ('A1B', (Token.IDENTIFIER, Token.END)),
        ('my_func.x', (Token.IDENTIFIER, Token.END)),
        ('log10(1)', (Token.ADDRESS, Token.LPAREN, Token.NUMBER,
                      Token.RPAREN, Token.END)),
    )
)
def test_token_types(formula, types):
    assert token_types(formula) == types


def test_token_positions():
    tokens = Tokenizer(' 12 +  B3').items
    assert [token.position for token in tokens] == [1, 4, 7, 9]
    assert [token.value for token in tokens] == [
        Decimal('12'), '+', 'B3', '']


@pytest.mark.parametrize(
    'formula, value', (
        ('1.5', Decimal('1.5')),
        ('.25', Decimal('0.25')),
        ('007', Decimal('7')),
    )
)
def test_number_value(formula, value):
    token = Tokenizer(formula).items[0]
    assert token.type == Token.NUMBER
    assert token.value == value


@pytest.mark.parametrize(
    'formula, position, character', (
        ('1 & 2', 2, '&'),
        ('A1 + $B$1', 5, '$'),
        ('"text"', 0, '"'),
        ('1 ^ 2', 2, '^'),
    )
)
def test_lex_error(formula, position, character):
    with pytest.raises(LexError) as exc:
        Tokenizer(formula)
    assert exc.value.position == position
    assert exc.value.character == character
    assert exc.value.code == FORMULA_ERROR


@pytest.mark.parametrize('formula', ('1.2.3', '1..', '.'))
def test_invalid_number(formula):
    with pytest.raises(InvalidNumber):
        Tokenizer(formula)


def test_token_helpers():
    plus, address, end = Tokenizer('+A1').items

    assert address.is_reference
    assert not plus.is_reference

    assert plus.description == "'+'"
    assert end.description == 'end of formula'
    assert str(address) == 'A1'
