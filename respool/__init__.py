from .exceptions import (
    PoolError,
    PoolExhausted,
    PoolClosed,
    ResourceCreationFailed,
    ResourceInvalid,
    ResourceNotLeased,
)
from .pool import Pool
from .lease import Lease, with_resource
from .reaper import Reaper

__version__ = "0.1.0"

__all__ = [
    "Pool",
    "Lease",
    "Reaper",
    "with_resource",
    "PoolError",
    "PoolExhausted",
    "PoolClosed",
    "ResourceCreationFailed",
    "ResourceInvalid",
    "ResourceNotLeased",
]
