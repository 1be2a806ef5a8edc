import pytest
from respool import utils
from respool.aws import PooledClient

client_params = {
    "endpoint_url": "http://127.0.0.1:9",
    "aws_access_key_id": "xxx",
    "aws_secret_access_key": "xxx",
}


@pytest.mark.asyncio
async def test_pooled_client():
    pool_params = {"maxsize": 2}
    sqs = PooledClient(
        "sqs", "us-east-1", pool_params=pool_params, client_params=dict(client_params)
    )
    assert pool_params == {"maxsize": 2}
    assert "sqs" in repr(sqs)
    assert sqs.pool.name == "sqsPool"
    assert isinstance(sqs.send_message, utils.ClientMethodProxy)
    async with sqs.get() as client:
        assert hasattr(client, "send_message")
        assert sqs.pool.in_use == 1
    assert sqs.pool.freesize == 1
    await sqs.close()
    assert sqs.pool.closed
    assert sqs.pool.size == 0


@pytest.mark.asyncio
async def test_pooled_client_context():
    async with PooledClient(
        "kinesis",
        "us-east-1",
        pool_params={"minsize": 1},
        client_params=dict(client_params),
    ) as kinesis:
        assert kinesis.pool.freesize == 1
    assert kinesis.pool.closed
    with pytest.raises(AttributeError):
        kinesis._missing
