# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import pytest

from lanecam.app_utils import AppController, brick


@pytest.fixture
def app(monkeypatch):
    controller = AppController()
    monkeypatch.setattr("lanecam.app_utils.app.App", controller)
    return controller


@brick
class Counter:
    """Counts vehicles."""

    def __init__(self, lane, fail=False):
        if fail:
            raise ValueError("bad lane")
        self.lane = lane

    def start(self):
        pass

    def stop(self):
        pass


class CounterWithSpeed(Counter):
    def __init__(self, lane):
        super().__init__(lane)
        self.speed = 0


def test_instances_are_registered(app):
    first = Counter("north")
    second = Counter("south")

    assert app.bricks == [first, second]
    assert first.lane == "north"


def test_failed_init_registers_nothing(app):
    with pytest.raises(ValueError):
        Counter("north", fail=True)

    assert app.bricks == []


def test_subclass_instance_registered_once(app):
    counter = CounterWithSpeed("east")

    assert app.bricks == [counter]
    assert counter.speed == 0


def test_decorator_keeps_class_metadata():
    assert Counter.__doc__ == "Counts vehicles."
    assert Counter.__init__.__name__ == "__init__"
