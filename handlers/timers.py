"""
Socket.IO background timers.

Phase, interlude and grace timers run as Socket.IO background tasks so they
cooperate with the server's async mode. The handle only exposes cancel();
a cancelled task wakes up and returns without calling back.
"""

import logging
from typing import Callable

logger = logging.getLogger(__name__)

class BackgroundTimer:
    """Cancellable delayed call started with socketio.start_background_task."""

    def __init__(self, socketio, delay: float, callback: Callable, args: tuple):
        self.socketio = socketio
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False

    def start(self) -> 'BackgroundTimer':
        self.socketio.start_background_task(self._run)
        return self

    def cancel(self) -> None:
        self.cancelled = True

    def _run(self) -> None:
        self.socketio.sleep(self.delay)
        if self.cancelled:
            return
        try:
            self.callback(*self.args)
        except Exception as e:
            logger.error(f"Error in delayed task {getattr(self.callback, '__name__', self.callback)}: {e}")

def make_timer_factory(socketio) -> Callable:
    """Build a timer_factory(delay, callback, *args) for the core managers."""
    def timer_factory(delay: float, callback: Callable, *args) -> BackgroundTimer:
        return BackgroundTimer(socketio, delay, callback, args).start()
    return timer_factory
