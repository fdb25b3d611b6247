import asyncio
from collections.abc import Awaitable, Callable, Hashable

PersistCallback = Callable[[], Awaitable[None]]


class DebounceRegistry:
    """Trailing debounce keyed by an arbitrary hashable, e.g. (prompt_id, field).

    At most one timer is pending per key. Scheduling again for the same key
    cancels the pending timer first, so only the last callback runs, once,
    after `delay` seconds without a newer schedule.
    """

    def __init__(self) -> None:
        self._pending: dict[Hashable, tuple[asyncio.TimerHandle, PersistCallback]] = {}
        self._in_flight: set[asyncio.Task] = set()

    @property
    def pending(self) -> tuple[Hashable, ...]:
        return tuple(self._pending)

    def schedule(self, key: Hashable, delay: float, callback: PersistCallback) -> None:
        self.cancel(key)
        loop = asyncio.get_running_loop()
        handle = loop.call_later(delay, self._fire, key)
        self._pending[key] = (handle, callback)

    def cancel(self, key: Hashable) -> bool:
        entry = self._pending.pop(key, None)
        if entry is None:
            return False
        entry[0].cancel()
        return True

    def cancel_all(self) -> None:
        for key in list(self._pending):
            self.cancel(key)

    def _fire(self, key: Hashable) -> None:
        entry = self._pending.pop(key, None)
        if entry is None:
            return
        task = asyncio.ensure_future(entry[1]())
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def flush(self) -> None:
        """Run every pending callback now and wait for all of them."""
        entries = list(self._pending.values())
        self._pending.clear()
        for handle, _ in entries:
            handle.cancel()
        await asyncio.gather(*(callback() for _, callback in entries))
        await self.wait_idle()

    async def wait_idle(self) -> None:
        if self._in_flight:
            await asyncio.gather(*self._in_flight)
