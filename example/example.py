# -*- coding: UTF-8 -*-
#
# Copyright 2011-2019 by Dirk Gorissen, Stephen Rauch and Contributors
# All rights reserved.
# This file is part of the Gridcel Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html


"""
Simple example file showing how a grid of numbers and formulas is read
from text, evaluated and written out
"""
import logging
import os
import sys

from gridcel import build_grid, GridEvaluator
from gridcel.gridutil import is_error
from gridcel.gridwrapper import read_text_grid, render_text, to_file


def gridcel_logging_to_console(enable=True):
    if enable:
        logger = logging.getLogger('gridcel')
        logger.setLevel('INFO')

        console = logging.StreamHandler(sys.stdout)
        console.setLevel(logging.INFO)
        logger.addHandler(console)


if __name__ == '__main__':
    gridcel_logging_to_console()

    path = os.path.dirname(__file__)
    fname = os.path.join(path, "example.grid")

    print("Loading %s..." % fname)
    with open(fname) as f:
        grid = build_grid(read_text_grid(f.read()))

    evaluator = GridEvaluator(grid)

    # evaluate one cell and everything it needs
    print("B2 is %s" % evaluator.evaluate('B2'))
    print('\n'.join(evaluator.value_tree_str('C2')))

    # and then the rest of the grid, each cell is only evaluated once
    values = evaluator.evaluate_all()
    print(render_text(values))

    # failed cells hold the error, including the cell it started in
    for cell in grid:
        result = evaluator.evaluate(cell.address)
        if is_error(result):
            print("%s: %r %s" % (cell.address, result, result))

    print("Serializing to disk...")
    to_file(values, fname + ".yml")

    print("Done")
