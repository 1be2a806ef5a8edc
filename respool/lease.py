from typing import Callable
from . import utils


class Lease:
    """
    Async context manager holding one resource checked out of ``pool``.

    The resource goes back to the pool exactly once when the block exits,
    however it exits. Call :meth:`discard` inside the block to have it
    destroyed instead.
    """

    __slots__ = ("_pool", "_timeout", "_resource", "_entered", "_discard")

    def __init__(self, pool, timeout=utils.UNSET):
        self._pool = pool
        self._timeout = timeout
        self._resource = None
        self._entered = False
        self._discard = False

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self._resource!r}, pool={self._pool!r}>"

    @property
    def resource(self):
        return self._resource

    def discard(self) -> None:
        self._discard = True

    async def __aenter__(self):
        if self._entered:
            raise RuntimeError(f"{self!r} can only be entered once")
        self._entered = True
        self._resource = await self._pool.acquire(self._timeout)
        return self._resource

    async def __aexit__(self, exc_type, exc_value, tb):
        pool, resource = self._pool, self._resource
        self._pool = None
        self._resource = None
        if pool is None:
            return
        if self._discard:
            await pool.discard(resource)
        else:
            await pool.release(resource)


async def with_resource(
    pool, work: Callable, *args, timeout=utils.UNSET, **kw
):
    async with Lease(pool, timeout) as resource:
        return await utils.maybe_await(work(resource, *args, **kw))
