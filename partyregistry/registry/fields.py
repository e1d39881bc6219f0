"""
外部表現（HTTP/CSV: camelCase）と内部表現（DB カラム: snake_case）の相互変換。
対応表は全単射で、未知のキーは捨てる。
"""
from __future__ import annotations
from datetime import date, datetime
from typing import Any, Dict, Mapping

EXTERNAL_TO_INTERNAL: Dict[str, str] = {
    "id": "id",
    "name": "name",
    "abbreviation": "abbreviation",
    "ideology": "ideology",
    "foundingDate": "founding_date",
    "headquarters": "headquarters",
    "representativeColor": "representative_color",
    "logoUrl": "logo_url",
    "active": "active",
    "registeredAt": "registered_at",
}

INTERNAL_TO_EXTERNAL: Dict[str, str] = {v: k for k, v in EXTERNAL_TO_INTERNAL.items()}

# クライアントが書き換えられるフィールド（内部名）
MUTABLE_FIELDS = (
    "name",
    "abbreviation",
    "ideology",
    "founding_date",
    "headquarters",
    "representative_color",
    "logo_url",
)


def to_internal(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """外部名 → 内部名。内部名で渡されたキーはそのまま通す。"""
    out: Dict[str, Any] = {}
    for key, value in payload.items():
        if key in EXTERNAL_TO_INTERNAL:
            out[EXTERNAL_TO_INTERNAL[key]] = value
        elif key in INTERNAL_TO_EXTERNAL:
            out[key] = value
    return out


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return value


def to_external(row: Mapping[str, Any]) -> Dict[str, Any]:
    """内部名 → 外部名（日付は YYYY-MM-DD、日時は ISO 8601 に整形）"""
    return {
        INTERNAL_TO_EXTERNAL[key]: _serialize(value)
        for key, value in row.items()
        if key in INTERNAL_TO_EXTERNAL
    }
