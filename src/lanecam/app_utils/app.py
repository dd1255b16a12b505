# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import signal
import threading

from .logger import Logger

logger = Logger("App")


class AppController:
    """Owns the lifecycle of the registered bricks.

    Bricks are any object exposing ``start()`` and ``stop()``. They are started in
    registration order and stopped in reverse order.
    """

    def __init__(self):
        self._bricks = []
        self._stop_event = threading.Event()

    def register(self, brick) -> None:
        if not callable(getattr(brick, "start", None)) or not callable(getattr(brick, "stop", None)):
            raise TypeError(f"{type(brick).__name__} must provide start() and stop() methods.")
        if brick not in self._bricks:
            self._bricks.append(brick)

    def unregister(self, brick) -> None:
        if brick in self._bricks:
            self._bricks.remove(brick)

    @property
    def bricks(self) -> list:
        return list(self._bricks)

    def start_bricks(self) -> None:
        for brick in self._bricks:
            logger.info(f"Starting {type(brick).__name__}")
            brick.start()

    def stop_bricks(self) -> None:
        for brick in reversed(self._bricks):
            try:
                brick.stop()
            except Exception as e:
                logger.error(f"Failed to stop {type(brick).__name__}: {e}")

    def run(self) -> None:
        """Start all bricks and block until interrupted or ``stop()`` is called."""
        self._stop_event.clear()
        if threading.current_thread() is threading.main_thread():
            signal.signal(signal.SIGTERM, lambda *_: self._stop_event.set())

        self.start_bricks()
        logger.info("App running. Press Ctrl+C to exit.")
        try:
            while not self._stop_event.wait(0.5):
                pass
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down...")
        finally:
            self.stop_bricks()

    def stop(self) -> None:
        self._stop_event.set()


App = AppController()
