import pytest
from respool import Pool, utils


def test_format_params():
    assert utils.format_params({"a": 1, "b": "x"}) == "a=1, b=x"


@pytest.mark.asyncio
async def test_maybe_await():
    async def coro():
        return 2

    assert await utils.maybe_await(1) == 1
    assert await utils.maybe_await(coro()) == 2


@pytest.mark.asyncio
async def test_client_method_proxy(factory):
    pool = Pool(factory, maxsize=1)
    proxy = utils.ClientMethodProxy(pool, "echo")
    assert "echo" in repr(proxy)
    assert await proxy("x") == (0, "x")
    assert await proxy(value="y") == (0, "y")
    assert pool.in_use == 0
    assert factory.calls == 1
