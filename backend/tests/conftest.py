import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.deps import get_notice_repository
from main import create_app


class StorageTouched(AssertionError):
    pass


class ForbiddenRepository:
    """任何存储调用都会失败，用来证明校验失败时不会访问数据库"""

    def __getattr__(self, name):
        async def _call(*args, **kwargs):
            raise StorageTouched(f"storage call: {name}")
        return _call


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'notice.db'}",
        UPLOAD_FOLDER=str(tmp_path / "uploads"),
        AUTO_CREATE_TABLES=True,
        DEBUG=True,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def guarded_client(app):
    app.dependency_overrides[get_notice_repository] = lambda: ForbiddenRepository()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
