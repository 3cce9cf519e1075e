# -*- coding: UTF-8 -*-
#
# Copyright 2011-2019 by Dirk Gorissen, Stephen Rauch and Contributors
# All rights reserved.
# This file is part of the Gridcel Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html

import enum
import logging

import networkx as nx

from gridcel.gridformula import (
    BinaryOp,
    CellRef,
    FunctionCall,
    GridFormula,
    nesting_too_deep,
    NumberLiteral,
    RangeRef,
    UnaryMinus,
)
from gridcel.gridutil import (
    add,
    AddressCell,
    AddressRange,
    CellError,
    CircularReference,
    divide,
    DIVISION_SCALE,
    flatten,
    format_decimal,
    FORMULA_MARKER,
    GridConstructionError,
    is_error,
    list_like,
    multiply,
    negate,
    RangeInScalarContext,
    ReferenceOutOfBounds,
    subtract,
    to_decimal,
)
from gridcel.lib.function_helpers import FunctionRegistry

gridcel_logger = logging.getLogger('gridcel')

OPERATORS = {
    '+': add,
    '-': subtract,
    '*': multiply,
}


class CellState(enum.Enum):
    NOT_STARTED = 'not started'
    IN_PROGRESS = 'in progress'
    DONE = 'done'
    FAILED = 'failed'


class Cell:
    """One grid position: a literal, a formula, or a cell that failed to build

    Construction errors (a literal which is not a number, a formula which
    does not tokenize or parse) are kept in ``error`` and become the cell's
    value when evaluated.
    """

    def __init__(self, address, source, formula_marker=FORMULA_MARKER):
        self.address = AddressCell(address)
        self.source = source
        self.value = None
        self.formula = None
        self.error = None

        try:
            if isinstance(source, str) and formula_marker and \
                    source.startswith(formula_marker):
                self.formula = GridFormula(source, marker=formula_marker)
                self.formula.ast
            else:
                self.value = to_decimal(source)
        except CellError as exc:
            self.error = exc.tag(self.address)

    def __repr__(self):
        return "{} -> {}".format(
            self.address, self.error or self.formula or self.value)

    __str__ = __repr__

    @property
    def is_formula(self):
        return self.formula is not None and self.error is None

    @property
    def needed_addresses(self):
        return self.is_formula and self.formula.needed_addresses or ()


class Grid:
    """Rectangular, immutable array of `Cell`s"""

    def __init__(self, rows):
        self.rows = tuple(tuple(row) for row in rows)
        self.height = len(self.rows)
        self.width = len(self.rows[0]) if self.rows else 0

    def __repr__(self):
        return f'Grid<{self.height}x{self.width}>'

    def __iter__(self):
        return flatten(self.rows)

    def __len__(self):
        return self.height * self.width

    def __getitem__(self, address):
        return self.resolve(address)

    @classmethod
    def from_raw(cls, raw_rows, formula_marker=FORMULA_MARKER):
        """ Build a grid from rows of raw cell strings

        :param raw_rows: iterable of rows, each an iterable of strings
        :param formula_marker: leading text which marks a formula
        :return: `Grid`
        :raises GridConstructionError: if there is no cell or the rows are
            not all the same length
        """
        if not list_like(raw_rows):
            raise GridConstructionError(f'Expected rows of cells: {raw_rows}')

        raw_rows = tuple(tuple(row) if list_like(row) else (row, )
                         for row in raw_rows)
        if not raw_rows:
            raise GridConstructionError('Grid has no rows')

        width = len(raw_rows[0])
        if not width:
            raise GridConstructionError('Grid has no columns')

        for row_num, raw_row in enumerate(raw_rows, start=1):
            if len(raw_row) != width:
                raise GridConstructionError(
                    f'Row {row_num} has {len(raw_row)} cells, '
                    f'expected {width}')

        grid = cls(
            tuple(Cell((row, col), source, formula_marker=formula_marker)
                  for col, source in enumerate(raw_row))
            for row, raw_row in enumerate(raw_rows)
        )

        for cell in grid:
            if cell.error is not None:
                gridcel_logger.warning(
                    f'Cell {cell.address} failed to build: {cell.error}')

        gridcel_logger.info(
            f'Grid built, {grid.height} rows, {grid.width} columns')
        return grid

    @property
    def raw_rows(self):
        return tuple(tuple(cell.source for cell in row) for row in self.rows)

    @property
    def addresses(self):
        return tuple(cell.address for cell in self)

    def in_bounds(self, address):
        address = AddressCell(address)
        return address.row < self.height and address.col < self.width

    def resolve(self, address):
        """ Get the cell at an address

        :param address: str or `AddressCell`
        :return: `Cell`
        :raises ReferenceOutOfBounds: if the address is outside the grid
        """
        address = AddressCell(address)
        if not self.in_bounds(address):
            raise ReferenceOutOfBounds(address)
        return self.rows[address.row][address.col]

    def iter_range(self, address):
        """Addresses of a range in row major order, not bounds checked"""
        address = AddressRange.create(address)
        if not address.is_range:
            return iter((address, ))
        return flatten(address.rows)

    def resolve_range(self, address):
        """ Expand a range to its addresses

        :param address: str, `AddressRange` with corners in either order,
            or `AddressCell`
        :return: tuple of `AddressCell`, row major from the top left
        """
        return tuple(self.iter_range(address))


def build_grid(raw_rows, formula_marker=FORMULA_MARKER):
    """ Build a `Grid` from rows of raw strings

    :param raw_rows: rectangular array of strings
    :param formula_marker: leading text which marks a formula
    :return: `Grid`
    """
    return Grid.from_raw(raw_rows, formula_marker=formula_marker)


class GridEvaluator:
    """ Evaluate the cells of one grid, each at most once

    Results are memoized per address.  A cell moves from ``NOT_STARTED`` to
    ``IN_PROGRESS`` and then to ``DONE`` or ``FAILED``, never back.  Asking
    for a cell which is ``IN_PROGRESS`` is a circular reference.

    References between cells are followed with an explicit stack of
    suspended formula evaluations, not with Python recursion, so long
    chains of references do not exhaust the interpreter stack.  The order
    of evaluation is depth first, left to right.
    """

    def __init__(self, grid, plugins=None, division_scale=None,
                 functions=None):
        """
        :param grid: `Grid` to evaluate
        :param plugins: module paths for plugin reducers
        :param division_scale: digits kept after the decimal point by '/'
        :param functions: `FunctionRegistry`, built from ``plugins`` if None
        """
        self.grid = grid
        if functions is None:
            functions = FunctionRegistry(plugins=plugins)
        self.functions = functions
        self.division_scale = (
            DIVISION_SCALE if division_scale is None else division_scale)
        self.log = gridcel_logger

        # directed graph for cell dependencies, precedent -> dependant
        self.dep_graph = nx.DiGraph()

        # address to CellState and address to value or error
        self._state = {}
        self._results = {}

    def cell_state(self, address):
        return self._state.get(AddressCell(address), CellState.NOT_STARTED)

    def evaluate(self, address):
        """ Evaluate a cell and every cell it depends on

        :param address: str or `AddressCell`
        :return: `decimal.Decimal`, or the `CellError` the cell failed with
        :raises ReferenceOutOfBounds: if the address is outside the grid
        """
        address = AddressCell(address)
        self.grid.resolve(address)
        return self._evaluate(address)

    def evaluate_all(self):
        """ Evaluate every cell, row major

        :return: tuple of rows of `decimal.Decimal` or `CellError`
        """
        values = tuple(tuple(self._evaluate(cell.address) for cell in row)
                       for row in self.grid.rows)

        failed = sum(1 for value in flatten(values) if is_error(value))
        self.log.info(
            "Grid evaluation done, %s cells, %s failed, %s edges" % (
                len(self.grid), failed, len(self.dep_graph.edges())))
        return values

    def precedents(self, address):
        """Addresses the cell used directly, sorted row major"""
        address = AddressCell(address)
        if address not in self.dep_graph:
            return ()
        return tuple(sorted(self.dep_graph.predecessors(address),
                            key=lambda a: a.sort_key))

    def value_tree_str(self, address, indent=0):
        """Generator which returns a formatted dependency tree"""
        address = AddressCell(address)
        self.evaluate(address)
        yield from self._value_tree_str(address, indent, set())

    def _value_tree_str(self, address, indent, path):
        if address in path:
            yield "{}{} <- cycle".format(" " * indent, address)
            return

        path.add(address)
        yield "{}{} = {}".format(
            " " * indent, address, self._format(self._results.get(address)))
        for precedent in self.precedents(address):
            yield from self._value_tree_str(precedent, indent + 1, path)
        path.remove(address)

    @staticmethod
    def _format(value):
        if value is None:
            return ''
        elif is_error(value):
            return value.code
        return format_decimal(value)

    def _evaluate(self, address):
        """Drive the stack of suspended formula evaluations to completion"""
        stack = []
        outcome = self._begin(address, stack)

        while stack:
            cell_address, frame = stack[-1]
            try:
                if is_error(outcome):
                    request = frame.throw(outcome.with_traceback(None))
                else:
                    request = frame.send(outcome)

            except StopIteration as done:
                stack.pop()
                outcome = self._finish(cell_address, done.value)

            except CellError as exc:
                stack.pop()
                outcome = self._finish(cell_address, exc.tag(cell_address))

            except RecursionError:
                stack.pop()
                outcome = self._finish(
                    cell_address, nesting_too_deep().tag(cell_address))

            else:
                # the frame needs the value of another cell
                self.log.debug(f'{cell_address} needs {request}')
                self.dep_graph.add_edge(request, cell_address)
                outcome = self._begin(request, stack)

        return outcome

    def _begin(self, address, stack):
        """ Start on a cell

        :return: the cell's value or error if it is known without evaluating
            a formula, else None after pushing a frame for the formula
        """
        state = self._state.get(address, CellState.NOT_STARTED)
        if state in (CellState.DONE, CellState.FAILED):
            return self._results[address]

        elif state == CellState.IN_PROGRESS:
            cycle = self._find_cycle(address)
            self.log.warning('Circular reference: {}'.format(
                ' -> '.join(str(a) for a in cycle + cycle[:1])))
            return CircularReference(address, cycle=cycle)

        cell = self.grid.resolve(address)
        self._state[address] = CellState.IN_PROGRESS

        if cell.error is not None:
            return self._finish(address, cell.error)

        elif not cell.is_formula:
            return self._finish(address, cell.value)

        self.log.debug(f'Evaluating: {address}, {cell.formula}')
        stack.append((address, self._eval_node(cell.formula.ast)))
        return None

    def _finish(self, address, outcome):
        if is_error(outcome):
            self._state[address] = CellState.FAILED
            self.log.info(f"Cell {address} failed with {outcome.kind} "
                          f"from {outcome.address}")
        else:
            self._state[address] = CellState.DONE
            self.log.info(f"Cell {address} evaluated to '{outcome}'")

        self._results[address] = outcome
        return outcome

    def _find_cycle(self, address):
        try:
            edges = nx.find_cycle(self.dep_graph, source=address)
        except nx.NetworkXNoCycle:
            return ()
        return tuple(edge[0] for edge in edges)

    def _eval_node(self, node):
        """ Post order evaluation of an expression tree

        A generator: it yields each `AddressCell` whose value it needs and
        is sent back the value, or has the cell's error thrown in.  Returns
        the value of the tree.
        """
        if isinstance(node, NumberLiteral):
            return node.value

        elif isinstance(node, CellRef):
            self.grid.resolve(node.address)
            return (yield node.address)

        elif isinstance(node, UnaryMinus):
            return negate((yield from self._eval_node(node.operand)))

        elif isinstance(node, BinaryOp):
            left = yield from self._eval_node(node.left)
            right = yield from self._eval_node(node.right)
            if node.op == '/':
                return divide(left, right, scale=self.division_scale)
            return OPERATORS[node.op](left, right)

        elif isinstance(node, FunctionCall):
            reducer = self.functions.lookup(node.name)
            values = []
            for arg in node.args:
                if isinstance(arg, RangeRef):
                    for address in self.grid.iter_range(arg.address):
                        self.grid.resolve(address)
                        values.append((yield address))
                else:
                    values.append((yield from self._eval_node(arg)))
            return reducer(tuple(values))

        elif isinstance(node, RangeRef):
            raise RangeInScalarContext(node.address, position=None)

        raise TypeError(f'Unknown expression node: {node!r}')


def evaluate(grid, plugins=None, division_scale=None):
    """ Evaluate every cell of a grid

    Never raises for a failing cell, the cell's `CellError` is its value.

    :param grid: `Grid` from `build_grid`
    :param plugins: module paths for plugin reducers
    :param division_scale: digits kept after the decimal point by '/'
    :return: tuple of rows of `decimal.Decimal` or `CellError`
    """
    return GridEvaluator(
        grid, plugins=plugins, division_scale=division_scale).evaluate_all()
