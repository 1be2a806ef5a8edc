import asyncio
import pytest


class Client:
    def __init__(self, n):
        self.n = n
        self.ok = True
        self.closed = 0

    def __repr__(self):
        return f"<Client {self.n}>"

    async def close(self):
        self.closed += 1

    async def echo(self, value):
        return (self.n, value)


class Factory:
    def __init__(self):
        self.clients = []
        self.failures = 0

    def __call__(self):
        if self.failures:
            self.failures -= 1
            raise ConnectionError("refused")
        client = Client(len(self.clients))
        self.clients.append(client)
        return client

    @property
    def calls(self):
        return len(self.clients)


@pytest.fixture
def factory():
    return Factory()


async def settle(rounds: int = 5):
    for _ in range(rounds):
        await asyncio.sleep(0)
