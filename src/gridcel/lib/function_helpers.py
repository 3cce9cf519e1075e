# -*- coding: UTF-8 -*-
#
# Copyright 2011-2019 by Dirk Gorissen, Stephen Rauch and Contributors
# All rights reserved.
# This file is part of the Gridcel Library, Licensed under GPLv3 (the 'License')
# You may not use this work except in compliance with the License.
# You may obtain a copy of the Licence at:
#   https://www.gnu.org/licenses/gpl-3.0.en.html

import functools
import importlib

from gridcel.gridutil import EmptyRange, UnknownFunction


FUNC_META = 'grid_func_meta'


def grid_helper(name=None, empty_error=False):
    """ Decorator to annotate a reducer with info on how to register it

    A reducer takes one tuple of `decimal.Decimal` and returns one
    `decimal.Decimal`, or raises a `gridutil.CellError`.

    :param name: name to register under, defaults to the function name
        without a trailing '_', so ``sum_`` registers as ``sum``
    :param empty_error: raise `EmptyRange` when called with no values
    :return: decorator
    """
    def mark(f):
        setattr(f, FUNC_META, dict(
            name=(name or f.__name__.rstrip('_')).lower(),
            empty_error=empty_error,
        ))
        return f
    return mark


# Decorator for a reducer defined over any number of values, including none
grid_reducer = grid_helper()


def apply_meta(f, meta=None):
    """Take the metadata applied by grid_helper and wrap accordingly"""
    meta = meta or getattr(f, FUNC_META, None)
    if meta and meta['empty_error']:
        f = empty_range_wrapper(f, meta['name'])
    return f, meta


def empty_range_wrapper(f, name):
    """ wrapper for reducers which are undefined on no values

    :param f: function to wrap
    :param name: function name used in the error
    :return: wrapped function
    """
    @functools.wraps(f)
    def wrapper(values):
        if not values:
            raise EmptyRange(name.upper())
        return f(values)

    return wrapper


def load_functions(modules):
    """ Collect the reducers marked with grid_helper

    :param modules: modules to search, the first module defining a name wins
    :return: dict of lower case name to (wrapped) reducer
    """
    functions = {}
    for module in modules:
        for attr in dir(module):
            obj = getattr(module, attr)
            if callable(obj) and hasattr(obj, FUNC_META):
                f, meta = apply_meta(obj)
                functions.setdefault(meta['name'], f)
    return functions


class FunctionRegistry:
    """Case insensitive mapping of function name to reducer"""

    default_modules = (
        'gridcel.gridlib',
    )

    def __init__(self, plugins=None):
        """
        :param plugins: module path or iterable of module paths with more
            reducers. Plugins are searched before the default modules, so
            they may replace a default reducer.
        """
        if plugins is None:
            modules = ()
        elif isinstance(plugins, str):
            modules = (plugins, )
        else:
            modules = tuple(plugins)
        self.modules = tuple(importlib.import_module(m)
                             for m in modules + self.default_modules)
        self._functions = load_functions(self.modules)

    def __contains__(self, name):
        return name.lower() in self._functions

    def __len__(self):
        return len(self._functions)

    @property
    def names(self):
        return tuple(sorted(self._functions))

    def lookup(self, name):
        """ Find the reducer for a function name

        :param name: function name, any case
        :return: reducer
        :raises UnknownFunction: if no reducer is registered as ``name``
        """
        try:
            return self._functions[name.lower()]
        except KeyError:
            raise UnknownFunction(name.upper())

    def register(self, name, f, empty_error=None):
        """ Add or replace a reducer

        :param name: function name, any case
        :param f: reducer
        :param empty_error: raise `EmptyRange` on no values, defaults to the
            grid_helper metadata of ``f`` if any
        """
        name = name.lower()
        meta = dict(getattr(f, FUNC_META, None) or dict(empty_error=False))
        meta['name'] = name
        if empty_error is not None:
            meta['empty_error'] = empty_error
        self._functions[name] = apply_meta(f, meta)[0]
