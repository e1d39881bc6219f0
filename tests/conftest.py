"""Pytest configuration and fixtures."""

import os

import pytest

# アプリのモジュールを import する前にテスト用の環境変数を設定する
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:5173")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from partyregistry.api import create_app
from partyregistry.create_tables import init_db
from partyregistry.db.base import make_session_factory
from partyregistry.registry import LogoStore, PartyGateway, PartyService


@pytest.fixture
def engine():
    """テストごとに空のインメモリ SQLite を用意する"""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def gateway(session_factory):
    return PartyGateway(session_factory)


@pytest.fixture
def uploads_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def logos(uploads_dir):
    return LogoStore(uploads_dir, max_bytes=1024)


@pytest.fixture
def service(gateway, logos):
    return PartyService(gateway, logos)


@pytest.fixture
def broken_gateway(tmp_path):
    """接続できない DB を指すゲートウェイ（StorageFailure の検証用）"""
    eng = create_engine(f"sqlite:///{tmp_path / 'missing' / 'party.db'}", future=True)
    yield PartyGateway(make_session_factory(eng))
    eng.dispose()


@pytest.fixture
def allowed_origin():
    return "http://localhost:5173"


@pytest.fixture
def client(service, allowed_origin):
    app = create_app(service=service, allowed_origins=[allowed_origin])
    return TestClient(app)


@pytest.fixture
def cusco_unido():
    return {
        "name": "Cusco Unido",
        "abbreviation": "CU",
        "foundingDate": "2024-01-15",
        "headquarters": "Plaza de Armas, Cusco",
        "representativeColor": "#DC2626",
    }


@pytest.fixture
def png_bytes():
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
