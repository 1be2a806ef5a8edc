class PoolError(Exception):
    pass


class PoolExhausted(PoolError):
    """No resource became available before the checkout timeout."""


class PoolClosed(PoolError):
    pass


class ResourceCreationFailed(PoolError):
    """The factory raised; the original error is kept as ``__cause__``."""


class ResourceInvalid(PoolError):
    """A resource failed validation or outlived its limits.

    Only used inside the pool to trigger discard and re-creation.
    """


class ResourceNotLeased(PoolError):
    def __init__(self, resource):
        super().__init__(f"{resource!r} is not checked out from this pool")
        self.resource = resource
