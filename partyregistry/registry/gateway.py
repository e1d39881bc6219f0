from __future__ import annotations
import random
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

import structlog
from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from partyregistry.db.base import get_session
from partyregistry.db.models import Party
from partyregistry.registry.fields import MUTABLE_FIELDS
from partyregistry.registry.results import NotFound, StorageFailure

logger = structlog.get_logger()

# ==============================================================
# ID 生成ユーティリティ（CHAR(18)）
# ==============================================================

# Crockford Base32（0-9 A-Z ただし I L O U を除く）
_B32 = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_rng = random.SystemRandom()

def _to_base32(n: int) -> str:
    if n == 0:
        return "0"
    s = []
    while n > 0:
        n, r = divmod(n, 32)
        s.append(_B32[r])
    return "".join(reversed(s))

def make_char18_id() -> str:
    """
    時刻(ミリ秒)をBase32化した先頭に、残りをランダムBase32でパディングして18文字。
    先頭が時刻なので、同じ長さの間は文字列順 ≒ 生成順になる。
    """
    millis = int(datetime.now(timezone.utc).timestamp() * 1000)
    head = _to_base32(millis)[:18]
    pad = "".join(_rng.choice(_B32) for _ in range(18 - len(head)))
    return head + pad


def _as_utc(value: datetime) -> datetime:
    # SQLite / MySQL はタイムゾーンを保存しない。保存値は常に UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _row_to_dict(obj: Party) -> Dict[str, Any]:
    """モデルインスタンス -> 辞書（テーブル列のみ、内部名）"""
    row = {c: getattr(obj, c) for c in obj.__table__.columns.keys()}
    if row.get("registered_at") is not None:
        row["registered_at"] = _as_utc(row["registered_at"])
    return row


class PartyGateway:
    """
    M_PARTY への読み書き。操作ごとにセッションを1つ取り、必ず閉じる。
    削除は論理削除（active=False）で、無効な行は存在しないものとして扱う。
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str, party_id: Optional[str] = None) -> Iterator[Session]:
        with contextmanager(get_session)(self._session_factory) as db:
            try:
                yield db
            except SQLAlchemyError as exc:
                db.rollback()
                logger.error("party_store_failed", operation=operation, party_id=party_id, error=str(exc))
                raise StorageFailure(operation, party_id) from exc

    @staticmethod
    def _active(db: Session, party_id: str) -> Party:
        obj = db.get(Party, party_id)
        if obj is None or not obj.active:
            raise NotFound(party_id)
        return obj

    def list(
        self,
        ideology: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """有効な政党を登録日時の新しい順で返す。引数なしなら全件"""
        stmt = select(Party).where(Party.active.is_(True))
        if ideology:
            stmt = stmt.where(Party.ideology == ideology)
        stmt = stmt.order_by(desc(Party.registered_at), desc(Party.id))
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        with self._session("list") as db:
            rows = db.execute(stmt).scalars().all()
            return [_row_to_dict(r) for r in rows]

    def get(self, party_id: str) -> Dict[str, Any]:
        with self._session("fetch", party_id) as db:
            return _row_to_dict(self._active(db, party_id))

    def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        values = {k: v for k, v in record.items() if k in MUTABLE_FIELDS}
        obj = Party(
            id=record.get("id") or make_char18_id(),
            registered_at=datetime.now(timezone.utc),
            active=True,
            **values,
        )
        with self._session("create", obj.id) as db:
            db.add(obj)
            db.commit()
            logger.info("party_created", party_id=obj.id, name=obj.name)
            return _row_to_dict(obj)

    def update(self, party_id: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """id と registered_at 以外の可変項目を上書きする。該当行がなければ NotFound"""
        with self._session("update", party_id) as db:
            obj = self._active(db, party_id)
            for key in MUTABLE_FIELDS:
                if key in record:
                    setattr(obj, key, record[key])
            db.commit()
            logger.info("party_updated", party_id=party_id)
            return _row_to_dict(obj)

    def delete(self, party_id: str) -> None:
        with self._session("delete", party_id) as db:
            obj = self._active(db, party_id)
            obj.active = False
            db.commit()
            logger.info("party_deleted", party_id=party_id)

    def count(self) -> int:
        stmt = select(func.count(Party.id)).where(Party.active.is_(True))
        with self._session("count") as db:
            return db.execute(stmt).scalar_one()

    def ideology_stats(self) -> Dict[str, int]:
        """有効な政党のイデオロギー別件数（未設定は数えない）"""
        stmt = (
            select(Party.ideology, func.count(Party.id))
            .where(Party.active.is_(True), Party.ideology.is_not(None), Party.ideology != "")
            .group_by(Party.ideology)
            .order_by(Party.ideology)
        )
        with self._session("count") as db:
            return {ideology: count for ideology, count in db.execute(stmt).all()}
