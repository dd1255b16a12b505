# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import functools

from . import app


def brick(cls):
    """Class decorator registering every new instance with the ``App`` lifecycle.

    The decorated class must provide ``start()`` and ``stop()``. Instances are registered
    once their ``__init__`` completes, so a constructor that raises leaves nothing behind.

    Examples:
        ```python
        @brick
        class LaneCounter:
            def start(self): ...
            def stop(self): ...
        ```
    """
    init = cls.__init__

    @functools.wraps(init)
    def __init__(self, *args, **kwargs):
        init(self, *args, **kwargs)
        app.App.register(self)

    cls.__init__ = __init__
    return cls
