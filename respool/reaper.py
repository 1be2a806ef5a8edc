import asyncio
from . import utils


class Reaper:
    """
    Reaper wakes up every ``interval`` seconds and evicts stale idle
    resources from a pool, until it is stopped or the pool is closed.
    """

    def __init__(self, pool, *, interval: float = 30.0, name: str = "Reaper"):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.pool = pool
        self.interval = interval
        self.name = name
        self.quit = asyncio.Event()
        self.evicted = 0
        self.fut = None
        self.start()

    def __repr__(self):
        return "<{}: interval={}, evicted={}, pool={!r}>".format(
            self.name, self.interval, self.evicted, self.pool
        )

    @property
    def running(self) -> bool:
        return self.fut is not None and not self.fut.done()

    def start(self) -> None:
        self.fut = asyncio.ensure_future(self.run())

    async def stop(self) -> None:
        await utils.info(f"Stopping {self!r}")
        self.quit.set()
        if self.fut:
            await self.fut

    async def _sleep(self) -> None:
        waiters = [
            asyncio.ensure_future(self.quit.wait()),
            asyncio.ensure_future(self.pool.wait_closed()),
        ]
        try:
            await asyncio.wait(
                waiters, timeout=self.interval, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for fut in waiters:
                fut.cancel()

    async def run(self) -> None:
        await utils.info(f"Starting {self!r}")
        while True:
            await self._sleep()
            if self.quit.is_set() or self.pool.closed:
                break
            try:
                self.evicted += await self.pool.evict()
                if not self.pool.closed:
                    await self.pool.fill()
            except Exception as e:
                await utils.handle_exc(e)
