import inspect
import logging
logger = logging.getLogger(__package__)

# "use the pool default"; None already means "wait forever"
UNSET = object()


async def maybe_await(result):
    if inspect.isawaitable(result):
        return await result
    return result


def format_params(params: dict) -> str:
    return ", ".join(f"{k}={v}" for k, v in params.items())


class ClientMethodProxy:
    """Borrow a client from ``pool`` for a single method call."""

    def __init__(self, pool, name: str):
        self._pool = pool
        self.name = name

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self.name}>"

    async def __call__(self, *args, **kw):
        async with self._pool.get() as client:
            return await getattr(client, self.name)(*args, **kw)


async def handle_exc(e):
    logger.exception(str(e))


async def info(s):
    logger.info(s)
