import pytest


@pytest.fixture
def anyio_backend():
    # The code under test is asyncio-only (asyncio.Lock, aiofiles).
    return "asyncio"
