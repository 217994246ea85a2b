"""Pain-threshold notifications.

The encounter engine emits a PainThresholdEvent when a single hurt
adjustment meets a combatant's pain threshold. Any callable accepting the
event can act as the notifier; PainFlashScheduler is the asyncio-based one
used by interactive front ends. Each event raises a toast right away and
shows a flash one loop tick after the state change. Both clear themselves
after their own duration, and ``close()`` cancels everything pending.

Without a running event loop there is nothing to schedule on, so the
scheduler logs the event and drops it.
"""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass
from typing import Callable

from combat_tracker.core.constants import FLASH_DURATION_SECONDS, TOAST_DURATION_SECONDS
from combat_tracker.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PainThresholdEvent:
    """A combatant took at least its pain threshold in one hit.

    Attributes:
        subject_name: Name of the combatant.
        amount: Raw adjustment amount that triggered the rule.
    """

    subject_name: str
    amount: int

    @property
    def message(self) -> str:
        return f"{self.subject_name} takes {self.amount} damage and exceeds Pain Threshold"


Notifier = Callable[[PainThresholdEvent], None]


@dataclass(frozen=True)
class PainFlash:
    """The flash currently on screen."""

    id: int
    name: str
    amount: int


@dataclass(frozen=True)
class PainToast:
    """A toast message waiting to auto-close."""

    id: int
    message: str


class PainFlashScheduler:
    """Deferred, self-clearing flash and toasts for pain-threshold events.

    Attributes:
        flash_duration: Seconds a flash stays visible.
        toast_duration: Seconds a toast stays open.
        current: The visible flash, if any.
        toasts: Open toasts, oldest first.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        *,
        flash_duration: float = FLASH_DURATION_SECONDS,
        toast_duration: float = TOAST_DURATION_SECONDS,
        on_show: Callable[[PainFlash], None] | None = None,
        on_clear: Callable[[], None] | None = None,
        on_toast: Callable[[PainToast], None] | None = None,
        on_toast_closed: Callable[[PainToast], None] | None = None,
    ) -> None:
        self._loop = loop
        self.flash_duration = flash_duration
        self.toast_duration = toast_duration
        self._on_show = on_show
        self._on_clear = on_clear
        self._on_toast = on_toast
        self._on_toast_closed = on_toast_closed
        self._ids = itertools.count(1)
        self._pending: list[asyncio.Handle] = []
        self._clear_handle: asyncio.TimerHandle | None = None
        self._toast_handles: dict[int, asyncio.TimerHandle] = {}
        self.current: PainFlash | None = None
        self.toasts: list[PainToast] = []

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        """The loop flashes are scheduled on.

        Raises:
            RuntimeError: If no loop was given and none is running.
        """
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def __call__(self, event: PainThresholdEvent) -> None:
        """Raise a toast for ``event`` and schedule its flash on the next tick."""
        try:
            loop = self.loop
        except RuntimeError:
            logger.warning(
                "No running event loop, pain notification dropped",
                name=event.subject_name,
                amount=event.amount,
            )
            return

        toast = PainToast(id=next(self._ids), message=event.message)
        self.toasts.append(toast)
        self._toast_handles[toast.id] = loop.call_later(
            self.toast_duration, self._close_toast, toast
        )
        if self._on_toast is not None:
            self._on_toast(toast)

        self._pending.append(loop.call_soon(self._show, event))

    def _show(self, event: PainThresholdEvent) -> None:
        # call_soon callbacks run in FIFO order
        if self._pending:
            self._pending.pop(0)
        if self._clear_handle is not None:
            self._clear_handle.cancel()

        self.current = PainFlash(id=next(self._ids), name=event.subject_name, amount=event.amount)
        logger.debug("Pain flash shown", name=event.subject_name, amount=event.amount)
        if self._on_show is not None:
            self._on_show(self.current)
        self._clear_handle = self.loop.call_later(self.flash_duration, self._clear)

    def _clear(self) -> None:
        self._clear_handle = None
        self.current = None
        if self._on_clear is not None:
            self._on_clear()

    def _close_toast(self, toast: PainToast) -> None:
        self._toast_handles.pop(toast.id, None)
        if toast in self.toasts:
            self.toasts.remove(toast)
        if self._on_toast_closed is not None:
            self._on_toast_closed(toast)

    def close(self) -> None:
        """Cancel any pending or visible flash and open toasts without firing callbacks."""
        for handle in self._pending:
            handle.cancel()
        self._pending.clear()
        if self._clear_handle is not None:
            self._clear_handle.cancel()
            self._clear_handle = None
        for handle in self._toast_handles.values():
            handle.cancel()
        self._toast_handles.clear()
        self.toasts.clear()
        self.current = None


__all__ = [
    "PainThresholdEvent",
    "Notifier",
    "PainFlash",
    "PainToast",
    "PainFlashScheduler",
]
