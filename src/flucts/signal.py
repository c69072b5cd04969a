"""Synchronous single-channel signal.

fire() calls every connected subscriber in subscription order before it
returns. There is no queue and no coalescing. broadcast() is the variant
used for teardown: every subscriber is reached even if one of them raises.
"""

from __future__ import annotations

from typing import Any, Callable


class Subscription:
    """Handle for one subscriber. Call unsubscribe() (or the handle itself) to disconnect."""

    __slots__ = ("_signal", "_callback", "_connected")

    def __init__(self, signal: Signal, callback: Callable[..., Any]) -> None:
        self._signal = signal
        self._callback = callback
        self._connected = True

    @property
    def connected(self) -> bool:
        return self._connected

    def unsubscribe(self) -> None:
        if not self._connected:
            return
        self._connected = False
        self._signal._subscriptions.remove(self)

    __call__ = unsubscribe

    def __repr__(self) -> str:
        state = "connected" if self._connected else "disconnected"
        name = getattr(self._callback, "__name__", type(self._callback).__name__)
        return f"Subscription({name}, {state})"


class Signal:
    """Push-based signal carrying a variadic payload."""

    __slots__ = ("_subscriptions",)

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []

    def subscribe(self, callback: Callable[..., Any]) -> Subscription:
        """Register a callback. The same callback may be registered more than once."""
        sub = Subscription(self, callback)
        self._subscriptions.append(sub)
        return sub

    def fire(self, *payload: Any) -> None:
        """Call every connected subscriber with payload. The first error stops the fire."""
        # Snapshot: subscribers may unsubscribe themselves or others mid-fire.
        for sub in list(self._subscriptions):
            if sub._connected:
                sub._callback(*payload)

    def broadcast(self, *payload: Any) -> None:
        """Like fire(), but every subscriber is called even if an earlier one raises.

        The first error is re-raised once all subscribers have run.
        """
        error: Exception | None = None
        for sub in list(self._subscriptions):
            if not sub._connected:
                continue
            try:
                sub._callback(*payload)
            except Exception as exc:
                if error is None:
                    error = exc
        if error is not None:
            raise error

    def __len__(self) -> int:
        return len(self._subscriptions)

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Signal({len(self._subscriptions)} subscribers)"
