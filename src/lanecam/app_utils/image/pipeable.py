# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

"""
Composable frame transformations.

A ``PipeableFunction`` wraps a function with partially applied arguments so that
preprocessing steps can be chained left-to-right with ``|``:

    preprocess = center_cropped(0.8) | resized((227, 227)) | greyscaled()
    out = preprocess(frame)

``frame | preprocess`` is not supported for numpy arrays because numpy claims the
``|`` operator element-wise; call the pipeline instead.
"""

from functools import partial
from typing import Callable


class PipeableFunction:
    """Callable with partially applied arguments and ``|`` composition."""

    def __init__(self, func: Callable, *args, **kwargs):
        self.func = func
        self.args = args
        self.kwargs = kwargs

    def __call__(self, *args, **kwargs):
        return self.func(*self.args, *args, **{**self.kwargs, **kwargs})

    def __ror__(self, other):
        return self(other)

    def __or__(self, other):
        if not callable(other):
            raise TypeError(f"unsupported operand type(s) for |: '{type(self).__name__}' and '{type(other).__name__}'")

        def composed(value):
            return other(self(value))

        composed.__name__ = f"{self!r} | {other!r}"
        return PipeableFunction(composed)

    def __repr__(self):
        func = self.func
        if isinstance(func, partial):
            func = func.func
        name = getattr(func, "__name__", type(func).__name__)
        if not self.args and not self.kwargs:
            return name if " | " in name else f"{name}()"
        params = [repr(a) for a in self.args] + [f"{k}={v!r}" for k, v in self.kwargs.items()]
        return f"{name}({', '.join(params)})"
