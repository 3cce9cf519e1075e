# -*- coding: UTF-8 -*-
#
# Copyright 2011-2019 by Dirk Gorissen, Stephen Rauch and Contributors
# All rights reserved.
# This file is part of the Gridcel Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html

import collections

from gridcel.gridutil import (
    AddressCell,
    AddressRange,
    format_decimal,
    FORMULA_MARKER,
    ParseError,
    RangeInScalarContext,
    uniqueify,
)
from gridcel.tokenizer import Token, Tokenizer


class _Node:
    """Expression nodes only compare equal to nodes of the same variant"""

    __slots__ = ()

    def __eq__(self, other):
        return type(self) is type(other) and tuple.__eq__(self, other)

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((type(self).__name__, tuple(self)))


class NumberLiteral(_Node, collections.namedtuple('NumberLiteral', 'value')):
    __slots__ = ()


class CellRef(_Node, collections.namedtuple('CellRef', 'address')):
    __slots__ = ()


class RangeRef(_Node, collections.namedtuple('RangeRef', 'address')):
    """Only legal as a function argument"""
    __slots__ = ()


class BinaryOp(_Node, collections.namedtuple('BinaryOp', 'op left right')):
    __slots__ = ()


class UnaryMinus(_Node, collections.namedtuple('UnaryMinus', 'operand')):
    __slots__ = ()


class FunctionCall(_Node, collections.namedtuple('FunctionCall', 'name args')):
    __slots__ = ()


BINARY_OPERATORS = {
    Token.PLUS: '+',
    Token.MINUS: '-',
    Token.STAR: '*',
    Token.SLASH: '/',
}

# used when emitting, to avoid needless parentheses
PRECEDENCE = {
    '+': 1,
    '-': 1,
    '*': 2,
    '/': 2,
    'u': 3,  # unary minus
}


class Parser:
    """ Recursive descent parser, one method per grammar rule

        expr    := term (('+' | '-') term)*
        term    := factor (('*' | '/') factor)*
        factor  := '-' factor | atom
        atom    := Number | CellRef | '(' expr ')' | FunctionCall
        FunctionCall := Identifier '(' [arg (',' arg)*] ')'
        arg     := Range | expr
        Range   := CellRef ':' CellRef
    """

    def __init__(self, tokens):
        self.tokens = tokens
        self.index = 0

    @property
    def token(self):
        return self.tokens[self.index]

    def peek(self, ahead=1):
        return self.tokens[min(self.index + ahead, len(self.tokens) - 1)]

    def advance(self):
        token = self.token
        if token.type != Token.END:
            self.index += 1
        return token

    def error(self, expected):
        token = self.token
        if token.type == Token.COLON:
            raise RangeInScalarContext(
                self._range_text(self.index - 1), token.position)
        raise ParseError(expected, token.description, token.position)

    def expect(self, type_, expected):
        if self.token.type != type_:
            self.error(expected)
        return self.advance()

    def parse(self):
        """Parse the whole token stream to a single expression"""
        node = self.expr()
        if self.token.type != Token.END:
            self.error('an operator or end of formula')
        return node

    def expr(self):
        node = self.term()
        while self.token.type in (Token.PLUS, Token.MINUS):
            op = BINARY_OPERATORS[self.advance().type]
            node = BinaryOp(op, node, self.term())
        return node

    def term(self):
        node = self.factor()
        while self.token.type in (Token.STAR, Token.SLASH):
            op = BINARY_OPERATORS[self.advance().type]
            node = BinaryOp(op, node, self.factor())
        return node

    def factor(self):
        if self.token.type == Token.MINUS:
            self.advance()
            return UnaryMinus(self.factor())
        return self.atom()

    def atom(self):
        token = self.token

        if token.type == Token.NUMBER:
            self.advance()
            return NumberLiteral(token.value)

        elif token.type == Token.LPAREN:
            self.advance()
            node = self.expr()
            self.expect(Token.RPAREN, "')'")
            return node

        elif token.type in (Token.IDENTIFIER, Token.ADDRESS) and \
                self.peek().type == Token.LPAREN:
            return self.function_call()

        elif token.is_reference:
            if self.peek().type == Token.COLON:
                raise RangeInScalarContext(
                    self._range_text(self.index), token.position)
            self.advance()
            return CellRef(self.address(token))

        self.error('a number, cell reference, function or (')

    def function_call(self):
        name = self.advance().value
        self.advance()

        args = []
        if self.token.type != Token.RPAREN:
            args.append(self.arg())
            while self.token.type == Token.COMMA:
                self.advance()
                args.append(self.arg())

        self.expect(Token.RPAREN, "',' or ')'")
        return FunctionCall(name.lower(), tuple(args))

    def arg(self):
        token = self.token
        if not (token.is_reference and
                self.peek().type == Token.COLON):
            return self.expr()

        start = self.address(self.advance())
        self.advance()
        if not self.token.is_reference:
            self.error('a cell reference')
        end = self.address(self.advance())

        if self.token.type in (Token.PLUS, Token.MINUS, Token.STAR,
                               Token.SLASH, Token.COLON):
            # a range as an operand of an operator
            raise RangeInScalarContext(f'{start}:{end}', token.position)
        elif self.token.type not in (Token.COMMA, Token.RPAREN):
            self.error("',' or ')'")

        return RangeRef(AddressRange((start, end)))

    def address(self, token):
        try:
            return AddressCell.create(token.value)
        except ValueError:
            raise ParseError(
                'a cell reference', token.description, token.position)

    def _range_text(self, index):
        """Source text of the range around a ':' for error messages"""
        text = [str(token) for token in self.tokens[max(index, 0):index + 3]
                if token.type in (Token.ADDRESS, Token.COLON)]
        return ''.join(text)


def nesting_too_deep():
    """The formula nests deeper than the interpreter stack allows"""
    return ParseError('a less deeply nested formula', 'nesting too deep', 0)


def walk(node):
    """Yield every node of the tree, parents first, in source order"""
    yield node
    if isinstance(node, BinaryOp):
        yield from walk(node.left)
        yield from walk(node.right)
    elif isinstance(node, UnaryMinus):
        yield from walk(node.operand)
    elif isinstance(node, FunctionCall):
        for arg in node.args:
            yield from walk(arg)


class GridFormula:
    """Take a formula and parse it to an expression tree, on first use"""

    def __init__(self, formula, marker=FORMULA_MARKER):
        self.base_formula = formula
        self.marker = marker
        if marker and formula.startswith(marker):
            formula = formula[len(marker):]
        self.text = formula

        self._tokens = None
        self._ast = None
        self._needed_addresses = None

    def __str__(self):
        return self.base_formula

    def __repr__(self):
        return f'GridFormula({self.base_formula})'

    @property
    def tokens(self):
        if self._tokens is None:
            self._tokens = Tokenizer(self.text).items
        return self._tokens

    @property
    def ast(self):
        if self._ast is None:
            try:
                self._ast = Parser(self.tokens).parse()
            except RecursionError:
                raise nesting_too_deep() from None
        return self._ast

    @property
    def needed_addresses(self):
        """Return the addresses and address ranges this formula needs"""
        if self._needed_addresses is None:
            try:
                self._needed_addresses = uniqueify(
                    node.address for node in walk(self.ast)
                    if isinstance(node, (CellRef, RangeRef)))
            except RecursionError:
                raise nesting_too_deep() from None
        return self._needed_addresses

    @property
    def canonical(self):
        """The formula re-rendered from the tree, with the marker"""
        return f'{self.marker}{self.emit(self.ast)}'

    @classmethod
    def emit(cls, node, parent_precedence=0):
        """ Render a tree as formula text

        :param node: expression node
        :param parent_precedence: precedence of the enclosing operator
        :return: formula text, without the formula marker
        """
        if isinstance(node, NumberLiteral):
            return format_decimal(node.value)

        elif isinstance(node, (CellRef, RangeRef)):
            return str(node.address)

        elif isinstance(node, UnaryMinus):
            return '-' + cls.emit(node.operand, PRECEDENCE['u'])

        elif isinstance(node, BinaryOp):
            precedence = PRECEDENCE[node.op]
            text = '{} {} {}'.format(
                cls.emit(node.left, precedence),
                node.op,
                cls.emit(node.right, precedence + 1),
            )
            if precedence < parent_precedence:
                text = f'({text})'
            return text

        elif isinstance(node, FunctionCall):
            args = ', '.join(cls.emit(arg) for arg in node.args)
            return f'{node.name.upper()}({args})'

        raise TypeError(f'Unknown expression node: {node!r}')
