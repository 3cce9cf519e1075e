# -*- coding: UTF-8 -*-
#
# Copyright 2011-2019 by Dirk Gorissen, Stephen Rauch and Contributors
# All rights reserved.
# This file is part of the Gridcel Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html

import collections.abc
import decimal
import fractions
import re


DIV0 = '#DIV/0!'
VALUE_ERROR = '#VALUE!'
NAME_ERROR = '#NAME?'
REF_ERROR = '#REF!'
CIRC_ERROR = '#CIRC!'
FORMULA_ERROR = '#ERROR!'

ERROR_CODES = frozenset(
    (DIV0, VALUE_ERROR, NAME_ERROR, REF_ERROR, CIRC_ERROR, FORMULA_ERROR))

FORMULA_MARKER = '='

# digits after the decimal point kept by a division, ROUND_HALF_EVEN
DIVISION_SCALE = 28

# add, subtract and multiply are exact in this context
EXACT_CONTEXT = decimal.Context(
    prec=decimal.MAX_PREC,
    Emax=decimal.MAX_EMAX,
    Emin=decimal.MIN_EMIN,
    rounding=decimal.ROUND_HALF_EVEN,
    traps=[decimal.InvalidOperation, decimal.DivisionByZero, decimal.Overflow],
)

DECIMAL_RE = re.compile(r'^\s*[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)\s*$')
ADDRESS_RE = re.compile(r'^(?P<column>[A-Za-z]+)(?P<row>[0-9]+)$')

ZERO = decimal.Decimal(0)
ONE = decimal.Decimal(1)


AddressSize = collections.namedtuple('AddressSize', 'height width')


class GridCelException(Exception):
    """Base class for Gridcel errors"""


class GridConstructionError(GridCelException):
    """The raw rows can not be built into a rectangular grid"""


class CellError(GridCelException):
    """Failure of a single cell, kept in place of the cell's value

    ``address`` is the cell the failure originated in.  Cells which depend
    on a failed cell fail with the very same error object.
    """

    code = FORMULA_ERROR

    def __init__(self, message, address=None):
        super().__init__(message)
        self.message = message
        self.address = address

    def __str__(self):
        if self.address is None:
            return self.message
        return f'{self.address}: {self.message}'

    def __repr__(self):
        return f'{self.kind}<{self.address}>'

    @property
    def kind(self):
        return type(self).__name__

    def tag(self, address):
        """Record the originating cell, unless one is already recorded"""
        if self.address is None:
            self.address = address
        return self


class InvalidNumber(CellError):
    """Literal cell or numeric token is not a decimal number"""

    code = VALUE_ERROR

    def __init__(self, text, address=None):
        self.text = text
        super().__init__(f"Invalid number: '{text}'", address=address)


class LexError(CellError):
    """Character which does not start any token"""

    def __init__(self, position, character, address=None):
        self.position = position
        self.character = character
        super().__init__(
            f"Unexpected character '{character}' at position {position}",
            address=address)


class ParseError(CellError):
    """Token stream does not match the formula grammar"""

    def __init__(self, expected, found, position, address=None):
        self.expected = expected
        self.found = found
        self.position = position
        super().__init__(
            f"Expected {expected}, found {found} at position {position}",
            address=address)


class RangeInScalarContext(CellError):
    """A range used anywhere but as a function argument"""

    code = VALUE_ERROR

    def __init__(self, reference, position, address=None):
        self.reference = reference
        self.position = position
        super().__init__(
            f"Range {reference} used as a value at position {position}",
            address=address)


class ReferenceOutOfBounds(CellError):
    """Reference to a cell outside of the grid"""

    code = REF_ERROR

    def __init__(self, reference, address=None):
        self.reference = reference
        super().__init__(
            f"Reference {reference} is outside of the grid", address=address)


class UnknownFunction(CellError):
    """Function name not in the registry"""

    code = NAME_ERROR

    def __init__(self, name, address=None):
        self.name = name
        super().__init__(f"Unknown function: {name}", address=address)


class DivisionByZero(CellError):
    code = DIV0

    def __init__(self, address=None):
        super().__init__('Division by zero', address=address)


class CircularReference(CellError):
    """A cell needs its own value, directly or through other cells

    :param address: the cell found already being evaluated
    :param cycle: addresses around the loop, when known
    """

    code = CIRC_ERROR

    def __init__(self, address, cycle=()):
        self.cycle = tuple(cycle)
        super().__init__(f'Circular reference to {address}', address=address)


class EmptyRange(CellError):
    """Reducer which is undefined for zero values"""

    code = DIV0

    def __init__(self, name, address=None):
        self.name = name
        super().__init__(f"{name} of no values", address=address)


def is_error(value):
    return isinstance(value, CellError)


def to_decimal(text):
    """ Parse a literal: optional sign, digits, at most one decimal point

    :param text: literal source text, surrounding whitespace is ignored
    :return: `decimal.Decimal`
    """
    if isinstance(text, decimal.Decimal):
        return text
    if not isinstance(text, str) or not DECIMAL_RE.match(text):
        raise InvalidNumber(text)
    return decimal.Decimal(text.strip())


def add(left, right):
    return EXACT_CONTEXT.add(left, right)


def subtract(left, right):
    return EXACT_CONTEXT.subtract(left, right)


def multiply(left, right):
    return EXACT_CONTEXT.multiply(left, right)


def negate(value):
    return EXACT_CONTEXT.minus(value)


def divide(dividend, divisor, scale=DIVISION_SCALE):
    """ Divide, rounding half to even at ``scale`` fractional digits

    The quotient is first computed exactly as a fraction, so a result
    which fits in ``scale`` digits is exact.  Trailing fractional zeros
    are dropped: ``divide(10, 4) == Decimal('2.5')``

    :param dividend: `decimal.Decimal`
    :param divisor: `decimal.Decimal`
    :param scale: maximum digits after the decimal point
    :return: `decimal.Decimal`
    """
    if divisor.is_zero():
        raise DivisionByZero()

    dividend_num, dividend_den = dividend.as_integer_ratio()
    divisor_num, divisor_den = divisor.as_integer_ratio()
    quotient = fractions.Fraction(
        dividend_num * divisor_den, dividend_den * divisor_num)

    # round() of a Fraction rounds half to even
    scaled = decimal.Decimal(round(quotient * 10 ** scale))
    return _drop_trailing_zeros(scaled.scaleb(-scale, EXACT_CONTEXT))


def _drop_trailing_zeros(value):
    value = value.normalize(EXACT_CONTEXT)
    if value.as_tuple().exponent > 0:
        value = value.quantize(ONE, context=EXACT_CONTEXT)
    return value


def format_decimal(value):
    """Plain notation, never scientific"""
    return '{:f}'.format(value)


def column_index(letters):
    """ Convert column letters to a zero based index: A -> 0, AA -> 26

    :param letters: one or more letters, case insensitive
    :return: int
    """
    if not letters or not letters.isalpha() or not letters.isascii():
        raise ValueError(f"'{letters}' is not a column")

    index = 0
    for letter in letters.upper():
        index = index * 26 + ord(letter) - ord('A') + 1
    return index - 1


def column_letters(index):
    """ Convert a zero based column index to letters: 0 -> A, 26 -> AA

    :param index: int >= 0
    :return: str
    """
    if index < 0:
        raise ValueError(f"Column index must not be negative: {index}")

    letters = []
    index += 1
    while index:
        index, remainder = divmod(index - 1, 26)
        letters.append(chr(ord('A') + remainder))
    return ''.join(reversed(letters))


class AddressCell(collections.namedtuple('AddressCell', 'address row col')):
    """ Helper class for constructing, validating and accessing Cell Addresses

    **Tuple Attributes:**

    .. py:attribute:: address

        Canonical coordinate, upper case letters then 1 based row: ``B3``

    .. py:attribute:: row

        Row number as a 0 based index

    .. py:attribute:: col

        Column number as a 0 based index
    """

    def __new__(cls, address, *args):
        if args:
            return super(AddressCell, cls).__new__(cls, address, *args)

        if isinstance(address, AddressCell):
            return address

        elif isinstance(address, str):
            return cls.create(address)

        row, col = address
        if row < 0 or col < 0:
            raise ValueError(f"Negative index in address: {address}")
        return super(AddressCell, cls).__new__(
            cls, f'{column_letters(col)}{row + 1}', row, col)

    def __str__(self):
        return self.address

    # Is this address a range?
    is_range = False

    size = AddressSize(1, 1)

    @property
    def column(self):
        """column letters"""
        return column_letters(self.col)

    @property
    def sort_key(self):
        return self.row, self.col

    @property
    def resolve_range(self):
        """Return nested tuples with an AddressCell for each element"""
        return (self, ),

    @classmethod
    def create(cls, address):
        """ Factory method.

        :param address: str such as ``a1`` or ``AB12``, or an AddressCell
        :return: `AddressCell`
        """
        if isinstance(address, AddressCell):
            return address

        match = ADDRESS_RE.match(address.strip())
        if match is None or int(match.group('row')) < 1:
            raise ValueError(f"{address} is not a valid coordinate")

        return cls((int(match.group('row')) - 1,
                    column_index(match.group('column'))))


class AddressRange(collections.namedtuple(
        'AddressRange', 'address start end')):
    """ Helper class for constructing, validating and accessing Range Addresses

    The corners are kept as written.  Iteration always runs row major from
    the top left to the bottom right, whichever corner was given first.

    **Tuple Attributes:**

    .. py:attribute:: address

        `AddressRange` as a string, corners as written

    .. py:attribute:: start

        `AddressCell` for the first corner

    .. py:attribute:: end

        `AddressCell` for the second corner
    """

    def __new__(cls, address, *args):
        if args:
            return super(AddressRange, cls).__new__(cls, address, *args)

        if isinstance(address, AddressRange):
            return address

        elif isinstance(address, str):
            address = cls.create(address)
            if not isinstance(address, AddressRange):
                raise ValueError(f"{address} is not a range")
            return address

        start, end = (AddressCell(corner) for corner in address)
        return super(AddressRange, cls).__new__(
            cls, f'{start}:{end}', start, end)

    def __str__(self):
        return self.address

    # Is this address a range?
    is_range = True

    @property
    def min_row(self):
        return min(self.start.row, self.end.row)

    @property
    def max_row(self):
        return max(self.start.row, self.end.row)

    @property
    def min_col(self):
        return min(self.start.col, self.end.col)

    @property
    def max_col(self):
        return max(self.start.col, self.end.col)

    @property
    def size(self):
        """Range dimensions"""
        return AddressSize(self.max_row - self.min_row + 1,
                           self.max_col - self.min_col + 1)

    @property
    def rows(self):
        """Get each address for every cell, yields one row at a time."""
        col_range = self.min_col, self.max_col + 1
        for row in range(self.min_row, self.max_row + 1):
            yield (AddressCell((row, col)) for col in range(*col_range))

    @property
    def resolve_range(self):
        """Return nested tuples with an AddressCell for each element"""
        return tuple(tuple(row) for row in self.rows)

    @classmethod
    def create(cls, address):
        """ Factory method.

        :param address: str, AddressRange, AddressCell
        :return: `AddressRange` for ``A1:B2``, `AddressCell` for ``A1``
        """
        if isinstance(address, (AddressRange, AddressCell)):
            return address

        corners = address.split(':')
        if len(corners) == 1:
            return AddressCell.create(address)
        elif len(corners) == 2:
            return cls(tuple(AddressCell.create(c) for c in corners))

        raise ValueError(f"{address} is not a valid coordinate or range")


def list_like(data):
    return (not isinstance(data, (str, AddressRange, AddressCell)) and
            isinstance(data, collections.abc.Iterable))


def flatten(data, coerce=lambda x: x):
    """ flatten items, converting top level items as needed

    :param data: data to flatten
    :param coerce: apply coercion to top level, but not to sub ranges
    :return: flattened (coerced) items
    """
    if list_like(data):
        for item in data:
            yield from flatten(item, coerce=coerce)
    else:
        yield coerce(data)


def uniqueify(seq):
    seen = set()
    return tuple(x for x in seq if x not in seen and not seen.add(x))
