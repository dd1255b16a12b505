# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import threading
from concurrent.futures import Future, ThreadPoolExecutor

import requests

from lanecam.app_utils import Logger

from .types import OutboundEvent

logger = Logger("WebhookNotifier")


class WebhookNotifier:
    """Fire-and-forget delivery of outbound events as JSON POST requests.

    Requests run on a background thread pool so the frame loop never waits on the network.
    Delivery failures are logged and dropped, never retried.
    """

    def __init__(self, timeout: float = 5.0, max_workers: int = 2, session: requests.Session | None = None):
        """
        Args:
            timeout (float): Per-request timeout in seconds. Default: 5.
            max_workers (int): Concurrent deliveries. Default: 2.
            session (requests.Session, optional): Session to send requests with.
        """
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="Webhook")
        self._lock = threading.Lock()
        self._closed = False

    def send(self, event: OutboundEvent) -> Future | None:
        """Schedule delivery of an event and return immediately.

        Returns:
            Future | None: Completes with True on a 2xx response and False on failure, or None
                if the notifier is shut down.
        """
        with self._lock:
            if self._closed:
                logger.warning(f"Notifier is shut down, dropping event for class {event.class_index}")
                return None
            return self._executor.submit(self._deliver, event)

    def _deliver(self, event: OutboundEvent) -> bool:
        try:
            response = self._session.post(event.url, json=event.payload, timeout=self.timeout)
            response.raise_for_status()
            logger.debug(f"Delivered event for class {event.class_index} to {event.url} ({response.status_code})")
            return True
        except requests.RequestException as e:
            logger.warning(f"Failed to deliver event for class {event.class_index} to {event.url}: {e}")
            return False

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=wait)
        self._session.close()
