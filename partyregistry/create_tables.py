from sqlalchemy.engine import Engine

from partyregistry.db.base import Base, engine
import partyregistry.db.models  # noqa: F401  モデルを metadata に登録する

def init_db(bind: Engine = engine) -> None:
    """M_PARTY などのスキーマを作成（既存テーブルはそのまま）"""
    Base.metadata.create_all(bind=bind)

if __name__ == "__main__":
    init_db()
    print("✅ Database schema created")
