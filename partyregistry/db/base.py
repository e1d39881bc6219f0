from __future__ import annotations
from typing import Generator, Optional
from sqlalchemy import create_engine, MetaData
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from partyregistry import config

# Alembic と相性の良い命名規約
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s__%(column_0_name)s",
    "ck": "ck_%(table_name)s__%(constraint_name)s",
    "fk": "fk_%(table_name)s__%(column_0_name)s__%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata_obj = MetaData(naming_convention=NAMING_CONVENTION)


class Base(DeclarativeBase):
    metadata = metadata_obj


def make_engine(url: str, **kwargs) -> Engine:
    """
    DB エンジンを生成する。
    サーバ型 DB（MySQL/MariaDB, PostgreSQL）ではプールサイズを固定し、
    空きがない場合は pool_timeout 秒まで待ってから例外にする（無制限の待ち行列を作らない）。
    SQLite はプール設定を受け付けないため kwargs のみ渡す。
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        return create_engine(url, future=True, **kwargs)

    return create_engine(
        url,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_timeout=config.DB_POOL_TIMEOUT,
        pool_pre_ping=True,         # 切断検知を有効化
        pool_recycle=3600,          # MySQL の wait_timeout 対策
        echo=False,
        future=True,
        **kwargs,
    )


def make_session_factory(bind: Engine) -> sessionmaker[Session]:
    # expire_on_commit=False: commit 後、セッションを閉じても属性を読めるようにする
    return sessionmaker(bind=bind, autoflush=False, autocommit=False, expire_on_commit=False)


engine = make_engine(config.DATABASE_URL)
SessionLocal = make_session_factory(engine)


# get_session: セッションを生成し、処理が終わったら finally で必ず閉じるジェネレータ
# session_factory を省略すると SessionLocal を使う
def get_session(session_factory: Optional[sessionmaker[Session]] = None) -> Generator[Session, None, None]:
    db = (session_factory or SessionLocal)()
    try:
        yield db
    finally:
        db.close()
