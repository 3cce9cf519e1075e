# -*- coding: UTF-8 -*-
#
# Copyright 2011-2019 by Dirk Gorissen, Stephen Rauch and Contributors
# All rights reserved.
# This file is part of the Gridcel Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html

"""
    read_text_grid : raw rows from delimited text, one row per line
    GridOpxWrapper : raw rows from the used range of an xlsx worksheet
    render_text : value grid to delimited text
    to_file / from_file : value grid to and from yaml or json
"""

import json
import os

from openpyxl import load_workbook
from ruamel.yaml import YAML

from gridcel.gridutil import (
    AddressCell,
    ERROR_CODES,
    format_decimal,
    is_error,
    to_decimal,
)

TEXT_DELIMITER = '|'
RENDER_DELIMITER = ' | '


def read_text_grid(text, delimiter=TEXT_DELIMITER):
    """ Split delimited text into raw rows

    :param text: one grid row per line, blank lines are skipped
    :param delimiter: cell separator
    :return: tuple of rows, each a tuple of stripped cell strings
    """
    return tuple(
        tuple(cell.strip() for cell in line.split(delimiter))
        for line in text.splitlines() if line.strip()
    )


def render_value(value):
    """Decimal in plain notation, or the error code"""
    if is_error(value):
        return value.code
    return format_decimal(value)


def render_text(value_grid, delimiter=RENDER_DELIMITER):
    """ Render an evaluated grid as text, one line per row

    :param value_grid: rows of `decimal.Decimal` or `CellError`
    :param delimiter: cell separator
    :return: str
    """
    return '\n'.join(delimiter.join(render_value(value) for value in row)
                     for row in value_grid)


class GridOpxWrapper:
    """ OpenPyXl reader producing the raw rows of a worksheet

    The grid always starts at ``A1`` and spans the worksheet's used range.
    """

    def __init__(self, filename):
        self.filename = os.path.abspath(filename)
        self.workbook = None

    def load(self):
        # formulas are wanted as text, not as the cached values
        self.workbook = load_workbook(self.filename)
        return self

    @property
    def sheet_names(self):
        if self.workbook is None:
            self.load()
        return tuple(self.workbook.sheetnames)

    @staticmethod
    def cell_to_raw(value):
        if value is None:
            return ''
        elif isinstance(value, bool):
            # bool is an int, but not a number for a grid
            return str(value).upper()
        return str(value)

    def get_raw_rows(self, sheet=None):
        """ Raw rows of a worksheet's used range

        :param sheet: worksheet name, the active sheet if None
        :return: tuple of rows, each a tuple of str
        """
        if self.workbook is None:
            self.load()
        worksheet = self.workbook[sheet] if sheet else self.workbook.active

        return tuple(
            tuple(self.cell_to_raw(value) for value in row)
            for row in worksheet.iter_rows(
                min_row=1, max_row=worksheet.max_row,
                min_col=1, max_col=worksheet.max_column,
                values_only=True)
        )


def _is_json(filename):
    return filename.lower().endswith('.json')


def to_file(value_grid, filename):
    """ Serialize an evaluated grid, as json if ``filename`` ends in .json
    else as yaml

    :param value_grid: rows of `decimal.Decimal` or `CellError`
    :param filename: file to write
    """
    value_grid = tuple(tuple(row) for row in value_grid)
    data = dict(
        height=len(value_grid),
        width=len(value_grid[0]) if value_grid else 0,
        cells={
            AddressCell((row_num, col_num)).address: render_value(value)
            for row_num, row in enumerate(value_grid)
            for col_num, value in enumerate(row)
        },
    )

    with open(filename, 'w') as f:
        if _is_json(filename):
            json.dump(data, f, indent=4)
        else:
            ymlo = YAML()
            ymlo.width = 120
            ymlo.dump(data, f)


def from_file(filename):
    """ Deserialize a grid written by `to_file`

    :param filename: file to read
    :return: tuple of rows of `decimal.Decimal`, or the error code string
        for cells which had failed
    """
    with open(filename, 'r') as f:
        if _is_json(filename):
            data = json.load(f)
        else:
            data = YAML().load(f)

    cells = data['cells']

    def value(address):
        text = cells[address.address]
        return text if text in ERROR_CODES else to_decimal(text)

    return tuple(
        tuple(value(AddressCell((row, col))) for col in range(data['width']))
        for row in range(data['height'])
    )
