from sqlalchemy import String, Date, DateTime, Boolean, CHAR, Index, true
from sqlalchemy.orm import Mapped, mapped_column
from partyregistry.db.base import Base
from datetime import date, datetime

class Party(Base):
    __tablename__ = "M_PARTY"
    __table_args__ = (
        Index("ix_party_registered_at", "registered_at"),
        Index("ix_party_active", "active"),
    )

    id: Mapped[str] = mapped_column(CHAR(18), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, doc="政党名")
    abbreviation: Mapped[str] = mapped_column(String(10), nullable=False, doc="略称")
    # Ideology の値を想定するが、任意の文字列をそのまま保存する（Enum 制約なし）
    ideology: Mapped[str | None] = mapped_column(String(50))
    founding_date: Mapped[date] = mapped_column(Date, nullable=False)
    headquarters: Mapped[str] = mapped_column(String(255), nullable=False)
    representative_color: Mapped[str | None] = mapped_column(String(50))
    logo_url: Mapped[str | None] = mapped_column(String(255))
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())
    registered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
