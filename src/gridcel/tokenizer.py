# -*- coding: UTF-8 -*-
#
# Copyright 2011-2019 by Dirk Gorissen, Stephen Rauch and Contributors
# All rights reserved.
# This file is part of the Gridcel Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html

"""
Split the text of a formula into a stream of tokens.

The formula marker is not part of the text handed to the tokenizer.  An
identifier which looks like ``letters+digits`` is typed ``ADDRESS``; whether
it is really a cell reference or a function name is left to the parser.
"""
import collections
import re

from gridcel.gridutil import ADDRESS_RE, LexError, to_decimal

IDENTIFIER_RE = re.compile(r'[A-Za-z][A-Za-z0-9_.]*')
NUMBER_RE = re.compile(r'[0-9.]+')


class Token(collections.namedtuple('Token', 'type value position')):
    """A lexical token, ``position`` is the 0 based offset in the formula"""

    NUMBER = 'NUMBER'
    IDENTIFIER = 'IDENTIFIER'
    ADDRESS = 'ADDRESS'
    PLUS = 'PLUS'
    MINUS = 'MINUS'
    STAR = 'STAR'
    SLASH = 'SLASH'
    COLON = 'COLON'
    COMMA = 'COMMA'
    LPAREN = 'LPAREN'
    RPAREN = 'RPAREN'
    END = 'END'

    OPERATORS = {
        '+': PLUS,
        '-': MINUS,
        '*': STAR,
        '/': SLASH,
        ':': COLON,
        ',': COMMA,
        '(': LPAREN,
        ')': RPAREN,
    }

    def __str__(self):
        return str(self.value)

    @property
    def is_reference(self):
        return self.type == Token.ADDRESS

    @property
    def description(self):
        """How the token reads in an error message"""
        if self.type == Token.END:
            return 'end of formula'
        return f"'{self.value}'"


class Tokenizer:
    """Tokenize a formula, the resulting tokens are in ``items``"""

    def __init__(self, formula):
        self.formula = formula
        self.items = self._items()

    def __repr__(self):
        return f'Tokenizer({self.formula!r})'

    def _items(self):
        formula = self.formula
        tokens = []
        offset = 0

        while offset < len(formula):
            char = formula[offset]

            if char.isspace():
                offset += 1
                continue

            type_ = Token.OPERATORS.get(char)
            if type_ is not None:
                tokens.append(Token(type_, char, offset))
                offset += 1
                continue

            match = NUMBER_RE.match(formula, offset)
            if match is None:
                match = IDENTIFIER_RE.match(formula, offset)
                if match is None:
                    raise LexError(offset, char)

                text = match.group()
                type_ = Token.ADDRESS if ADDRESS_RE.match(text) else \
                    Token.IDENTIFIER
                tokens.append(Token(type_, text, offset))
            else:
                # 1.2.3 is consumed whole and rejected as a number
                tokens.append(Token(
                    Token.NUMBER, to_decimal(match.group()), offset))

            offset = match.end()

        tokens.append(Token(Token.END, '', len(formula)))
        return tokens
