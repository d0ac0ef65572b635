import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from fakes import FakeExtractor, FakeFallback
from mediagrab.config.settings import Config
from mediagrab.main import create_app


@pytest.fixture
def config(tmp_path) -> Config:
    config = Config()
    config.logging.enable_rich = False
    config.download.temp_dir = str(tmp_path)
    return config


@pytest.fixture
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def fallback() -> FakeFallback:
    return FakeFallback()


@pytest.fixture
def app(config, extractor, fallback):
    app = create_app(config)
    app.state.extractor = extractor
    app.state.fallback = fallback
    return app


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
