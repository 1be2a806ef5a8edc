import time
import asyncio
import collections
import async_timeout
from typing import Callable, Optional
from . import utils
from .lease import Lease, with_resource
from .exceptions import (
    PoolClosed,
    PoolExhausted,
    ResourceCreationFailed,
    ResourceInvalid,
    ResourceNotLeased,
)

# Granted to a waiter instead of a resource: "create one, the slot is yours".
_SLOT = object()


class _Entry:
    __slots__ = ("resource", "created_at", "last_used", "uses", "valid", "in_use")

    def __init__(self, resource):
        self.resource = resource
        self.created_at = time.monotonic()
        self.last_used = self.created_at
        self.uses = 0
        self.valid = True
        self.in_use = False

    def __repr__(self):
        return (
            f"<Resource {self.resource!r}: uses={self.uses}, "
            f"valid={self.valid}, in_use={self.in_use}>"
        )


class Pool:
    """
    Pool lends out at most ``maxsize`` resources made by ``factory``.

    Resources are created lazily, validated when they come back (and again
    when they are taken from the idle set), handed straight to the oldest
    blocked caller when there is one, and disposed of on ``close``.
    """

    def __init__(
        self,
        factory: Callable,
        *,
        minsize: int = 0,
        maxsize: int = 10,
        validator: Optional[Callable] = None,
        disposer: Optional[Callable] = None,
        timeout: Optional[float] = None,
        create_attempts: int = 1,
        max_idle_time: Optional[float] = None,
        max_lifetime: Optional[float] = None,
        max_uses: Optional[int] = None,
        name: str = "Pool",
    ):
        if maxsize < 1:
            raise ValueError(f"maxsize must be at least 1, got {maxsize}")
        if not 0 <= minsize <= maxsize:
            raise ValueError(f"minsize must be between 0 and {maxsize}, got {minsize}")
        if create_attempts < 1:
            raise ValueError(f"create_attempts must be positive, got {create_attempts}")
        self.factory = factory
        self.validator = validator
        self.disposer = disposer
        self.minsize = minsize
        self.maxsize = maxsize
        self.timeout = timeout
        self.create_attempts = create_attempts
        self.max_idle_time = max_idle_time
        self.max_lifetime = max_lifetime
        self.max_uses = max_uses
        self.name = name
        self._pool = collections.deque()
        self._using = {}
        self._creating = 0
        self._waiters = collections.deque()
        self._close_state = asyncio.Event()
        self.futures = set()

    def __repr__(self):
        return (
            f"<{self.name}: size={self.size}, free={self.freesize}, "
            f"maxsize={self.maxsize}, waiting={self.waiting}>"
        )

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_value, tb):
        await self.close()

    @property
    def size(self) -> int:
        return self.freesize + self.in_use + self._creating

    @property
    def freesize(self) -> int:
        return len(self._pool)

    @property
    def in_use(self) -> int:
        return len(self._using)

    @property
    def waiting(self) -> int:
        return sum(1 for fut in self._waiters if not fut.done())

    @property
    def closed(self) -> bool:
        return self._close_state.is_set()

    async def wait_closed(self) -> None:
        await self._close_state.wait()

    async def start(self) -> None:
        await self.fill()
        await utils.info(f"Started {self!r}")

    async def fill(self) -> None:
        """Create idle resources until the pool holds ``minsize``."""
        if self.closed:
            raise PoolClosed(f"{self!r} is closed")
        while self.size < self.minsize:
            entry = await self._create()
            if self.closed:
                await self._dispose(entry)
                raise PoolClosed(f"{self!r} is closed")
            self._put_free(entry)

    async def acquire(self, timeout=utils.UNSET):
        if timeout is utils.UNSET:
            timeout = self.timeout
        try:
            async with async_timeout.timeout(timeout):
                entry = await self._acquire()
        except asyncio.TimeoutError:
            raise PoolExhausted(
                f"no resource available within {timeout}s from {self!r}"
            ) from None
        return entry.resource

    async def _acquire(self) -> _Entry:
        while True:
            if self.closed:
                raise PoolClosed(f"{self!r} is closed")
            await self.fill()
            if self._pool:
                entry = self._pool.pop()
                self._lend(entry)
                try:
                    entry.valid = await self._check(entry, idle=True)
                except BaseException:
                    self._unlend(entry)
                    self._put_free(entry)
                    raise
                if entry.valid and self.closed:
                    self._unlend(entry)
                    await self._dispose(entry)
                    raise PoolClosed(f"{self!r} is closed")
                if entry.valid:
                    return entry
                self._unlend(entry)
                await self._drop(entry)
                continue
            if self.size < self.maxsize:
                return await self._take_new(reserved=False)
            got = await self._wait()
            if got is _SLOT:
                if self.closed:
                    self._creating -= 1
                    raise PoolClosed(f"{self!r} is closed")
                return await self._take_new(reserved=True)
            return got

    async def _take_new(self, *, reserved: bool) -> _Entry:
        entry = await self._create(reserved=reserved)
        if self.closed:
            await self._dispose(entry)
            raise PoolClosed(f"{self!r} is closed")
        self._lend(entry)
        return entry

    async def _wait(self):
        fut = asyncio.get_running_loop().create_future()
        self._waiters.append(fut)
        try:
            return await fut
        except asyncio.CancelledError:
            if fut.cancelled():
                try:
                    self._waiters.remove(fut)
                except ValueError:
                    pass
            elif fut.exception() is None:
                # handed over at the same moment we were cancelled
                self._give_back(fut.result())
            raise

    def _give_back(self, got) -> None:
        if got is _SLOT:
            self._creating -= 1
            self._slot_freed()
            return
        self._unlend(got)
        self._put_free(got)

    async def release(self, resource) -> None:
        entry = self._claim(resource)
        entry.uses += 1
        if self.closed:
            self._unlend(entry)
            await self._dispose(entry)
            return
        try:
            entry.valid = await self._check(entry, idle=False)
        except BaseException:
            self._unlend(entry)
            self._slot_freed()
            self._dispose_later(entry)
            raise
        self._unlend(entry)
        if entry.valid and not self.closed:
            entry.last_used = time.monotonic()
            self._put_free(entry)
        else:
            await self._drop(entry)

    async def discard(self, resource) -> None:
        entry = self._claim(resource)
        self._unlend(entry)
        await self._drop(entry)

    async def clear(self) -> None:
        while self._pool:
            entry = self._pool.popleft()
            await self._drop(entry)

    async def evict(self) -> int:
        """Dispose idle resources that outlived ``max_idle_time``,
        ``max_lifetime`` or ``max_uses``.

        Idle-time eviction never shrinks the pool below ``minsize``.
        """
        now = time.monotonic()
        surplus = self.size - self.minsize
        doomed = []
        for entry in self._pool:
            if self._expired(entry, now, idle=False):
                doomed.append(entry)
                surplus -= 1
            elif (
                self.max_idle_time is not None
                and now - entry.last_used > self.max_idle_time
                and surplus > 0
            ):
                doomed.append(entry)
                surplus -= 1
        for entry in doomed:
            self._pool.remove(entry)
        for entry in doomed:
            await self._drop(entry)
        return len(doomed)

    async def close(self) -> None:
        if self.closed:
            return
        self._close_state.set()
        while self._waiters:
            fut = self._waiters.popleft()
            if not fut.done():
                fut.set_exception(PoolClosed(f"{self!r} is closed"))
        while self._pool:
            entry = self._pool.popleft()
            await self._dispose(entry)
        if self.futures:
            await asyncio.wait(self.futures)
        await utils.info(f"Closed {self!r}")

    def get(self, timeout=utils.UNSET) -> Lease:
        return Lease(self, timeout)

    async def run(self, work: Callable, *args, timeout=utils.UNSET, **kw):
        return await with_resource(self, work, *args, timeout=timeout, **kw)

    def _lend(self, entry: _Entry) -> None:
        assert not entry.in_use, entry
        entry.in_use = True
        self._using[id(entry.resource)] = entry

    def _unlend(self, entry: _Entry) -> None:
        entry.in_use = False
        self._using.pop(id(entry.resource), None)

    def _claim(self, resource) -> _Entry:
        entry = self._using.get(id(resource))
        if entry is None or entry.resource is not resource or not entry.in_use:
            raise ResourceNotLeased(resource)
        entry.in_use = False
        return entry

    def _put_free(self, entry: _Entry) -> None:
        if self.closed:
            self._dispose_later(entry)
            return
        while self._waiters:
            fut = self._waiters.popleft()
            if not fut.done():
                self._lend(entry)
                fut.set_result(entry)
                return
        self._pool.append(entry)

    def _slot_freed(self) -> None:
        while self._waiters:
            fut = self._waiters.popleft()
            if not fut.done():
                self._creating += 1
                fut.set_result(_SLOT)
                return

    async def _create(self, *, reserved: bool = False) -> _Entry:
        if not reserved:
            self._creating += 1
        try:
            resource = await self._call_factory()
        except BaseException:
            self._creating -= 1
            self._slot_freed()
            raise
        self._creating -= 1
        return _Entry(resource)

    async def _call_factory(self):
        attempt = 0
        while True:
            attempt += 1
            try:
                return await utils.maybe_await(self.factory())
            except Exception as e:
                if attempt >= self.create_attempts:
                    raise ResourceCreationFailed(
                        f"{self.name} factory failed after {attempt} attempt(s)"
                    ) from e
                await utils.handle_exc(e)

    async def _check(self, entry: _Entry, *, idle: bool) -> bool:
        try:
            if self._expired(entry, time.monotonic(), idle=idle):
                raise ResourceInvalid(f"{entry!r} expired")
            if self.validator is not None:
                if not await utils.maybe_await(self.validator(entry.resource)):
                    raise ResourceInvalid(f"{entry!r} failed validation")
        except ResourceInvalid as e:
            await utils.info(str(e))
            return False
        except Exception as e:
            await utils.handle_exc(e)
            return False
        return True

    def _expired(self, entry: _Entry, now: float, *, idle: bool) -> bool:
        if self.max_uses is not None and entry.uses >= self.max_uses:
            return True
        if self.max_lifetime is not None and now - entry.created_at > self.max_lifetime:
            return True
        if idle and self.max_idle_time is not None:
            return now - entry.last_used > self.max_idle_time
        return False

    async def _drop(self, entry: _Entry) -> None:
        self._slot_freed()
        await self._dispose(entry)

    async def _dispose(self, entry: _Entry) -> None:
        entry.valid = False
        try:
            if self.disposer is not None:
                await utils.maybe_await(self.disposer(entry.resource))
            else:
                close = getattr(entry.resource, "close", None)
                if close is not None:
                    await utils.maybe_await(close())
        except Exception as e:
            await utils.handle_exc(e)

    def _dispose_later(self, entry: _Entry) -> None:
        fut = asyncio.ensure_future(self._dispose(entry))
        self.futures.add(fut)
        fut.add_done_callback(self.futures.discard)
