from typing import Optional
from aiobotocore.session import get_session
from . import utils
from .pool import Pool


class PooledClient:
    """
    PooledClient shares a bounded set of aiobotocore clients between tasks.

    Any client method is reachable as an attribute; each call borrows a
    client for its own duration::

        sqs = PooledClient("sqs", "us-east-1", pool_params={"maxsize": 4})
        resp = await sqs.get_queue_url(QueueName="jobs")
    """

    def __init__(
        self,
        service_name: str,
        region_name: Optional[str] = None,
        *,
        pool_params: Optional[dict] = None,
        client_params: Optional[dict] = None,
    ):
        self.service_name = service_name
        self.session = get_session()
        self.client_params = client_params or {}
        self.client_params["region_name"] = region_name
        pool_params = dict(pool_params or {})
        pool_params.setdefault("name", f"{service_name}Pool")
        self.pool = Pool(self.create_client, **pool_params)

    def __repr__(self):
        return "<{}: {}, {}, pool={!r}>".format(
            self.__class__.__name__,
            self.service_name,
            utils.format_params(self.client_params),
            self.pool,
        )

    async def __aenter__(self):
        await self.pool.start()
        return self

    async def __aexit__(self, exc_type, exc_value, tb):
        await self.close()

    async def create_client(self):
        context = self.session.create_client(self.service_name, **self.client_params)
        return await context.__aenter__()

    def get(self, timeout=utils.UNSET):
        return self.pool.get(timeout)

    async def close(self) -> None:
        await self.pool.close()

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return utils.ClientMethodProxy(self.pool, name)
