import pytest


@pytest.fixture(scope="session")
def anyio_backend():
    # Cycle and poller code schedules work with asyncio directly.
    return "asyncio"
