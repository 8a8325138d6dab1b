"""
Discussion countdown for Blend In.

A single cancellable countdown run as a background task. The scheduler is
injected: anything with ``start_background_task(target, *args)`` and
``sleep(seconds)``, which is exactly what a Flask-SocketIO server offers.
"""

import logging
from typing import Callable, Optional

from utils.helpers import format_time_duration

logger = logging.getLogger(__name__)

class DiscussionTimer:
    """
    Counts down one unit per second, calling ``on_tick(timer, time_left)``
    at each boundary and ``on_expire(timer)`` once time runs out.

    Callbacks receive the timer so the owner can check it is still the
    live countdown before touching any state. Once ``cancel()`` is called
    no further callback fires.
    """

    def __init__(self, scheduler, duration: int,
                 on_tick: Callable[['DiscussionTimer', int], None],
                 on_expire: Callable[['DiscussionTimer'], None],
                 label: str = '',
                 round_number: Optional[int] = None):
        self.scheduler = scheduler
        self.duration = max(0, int(duration))
        self.on_tick = on_tick
        self.on_expire = on_expire
        self.label = label
        self.round_number = round_number
        self.cancelled = False
        self.started = False
        self.finished = False

    def start(self) -> 'DiscussionTimer':
        """Schedule the countdown. Calling twice is a no-op."""
        if self.started:
            return self
        self.started = True
        logger.info(f"[timer-set] {self.label} duration={format_time_duration(self.duration)}")
        self.scheduler.start_background_task(self._run)
        return self

    def cancel(self):
        """Stop the countdown; any pending tick or expiry is discarded."""
        if not self.cancelled and not self.finished:
            logger.info(f"[timer-cancel] {self.label}")
        self.cancelled = True

    @property
    def is_live(self) -> bool:
        return self.started and not self.cancelled and not self.finished

    def _run(self):
        time_left = self.duration
        while time_left > 0:
            self.scheduler.sleep(1)
            if self.cancelled:
                logger.info(f"[timer-abort] {self.label} cancelled with {time_left - 1}s left")
                return
            time_left -= 1
            if time_left > 0:
                self.on_tick(self, time_left)
        if self.cancelled:
            return
        logger.info(f"[timer-fire] {self.label}")
        try:
            self.on_expire(self)
        finally:
            self.finished = True
