import sys
import time
import random
import asyncio
import logging
from respool import Pool, Reaper

logging.basicConfig(stream=sys.stdout, level=logging.INFO)


class Connection:
    async def query(self):
        await asyncio.sleep(random.random() / 100)

    async def close(self):
        pass


async def open_connection():
    await asyncio.sleep(0.01)
    return Connection()


async def worker(pool, deadline):
    n = 0
    while time.time() < deadline:
        async with pool.get() as conn:
            await conn.query()
        n += 1
    return n


async def show(pool):
    while True:
        await asyncio.sleep(1)
        print(repr(pool))


async def go(seconds=10, concurrency=50):
    pool = Pool(open_connection, minsize=2, maxsize=10, max_idle_time=2)
    reaper = Reaper(pool, interval=1)
    fut = asyncio.ensure_future(show(pool))
    deadline = time.time() + seconds
    counts = await asyncio.gather(*[worker(pool, deadline) for _ in range(concurrency)])
    await reaper.stop()
    await pool.close()
    fut.cancel()
    print(f"{sum(counts)} checkouts from {concurrency} workers in {seconds}s")


if __name__ == "__main__":
    asyncio.run(go())
