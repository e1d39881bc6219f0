from __future__ import annotations
import re
from datetime import date, datetime
from typing import Any, Dict, Mapping

from dateutil import parser as date_parser

from partyregistry.registry.fields import to_internal
from partyregistry.registry.results import Failure, Result, Success, ValidationError

ABBREVIATION_MAX_LENGTH = 10

# 年が先頭の文字列（ISO 日付・ISO 日時・オフセット付き日時、2024-3-5 や 2024/03/05 も含む）
_YEAR_FIRST_DATE = re.compile(r"^(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})(?:$|[T ])")

# dateutil が欠けた年・月・日を補う既定値。2つで結果が変われば要素が欠けている
_SENTINELS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def normalize_date(value: Any) -> date | None:
    """
    入力された日付表現をカレンダー日付に変換する。解釈できなければ None。

    タイムゾーン変換は一切行わない。"2024-03-05T00:00:00-05:00" は
    書かれている年・月・日から date(2024, 3, 5) を組み立てる。
    年が先頭なら常に 年-月-日 として読む。それ以外（"05/03/2024", "March 5, 2024"）は
    dateutil で日付優先に解釈し、年・月・日のどれかが欠けていれば None。
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return date(value.year, value.month, value.day)
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    s = value.strip()
    if not s:
        return None

    m = _YEAR_FIRST_DATE.match(s)
    if m:
        try:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        except ValueError:
            return None

    try:
        first, second = (date_parser.parse(s, dayfirst=True, default=d).date() for d in _SENTINELS)
    except (ValueError, OverflowError):
        return None
    if first != second:
        return None
    return first


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def validate_party(payload: Mapping[str, Any]) -> Result[Dict[str, Any]]:
    """
    外部表現のレコードを検証し、内部表現に変換する。
    エラーは途中で打ち切らず全て集めて ValidationError にまとめる（キーは外部名）。
    """
    raw = to_internal(payload)
    errors: Dict[str, str] = {}

    name = _clean_text(raw.get("name"))
    if name is None:
        errors["name"] = "name is required."

    abbreviation = _clean_text(raw.get("abbreviation"))
    if abbreviation is None:
        errors["abbreviation"] = "abbreviation is required."
    elif len(abbreviation) > ABBREVIATION_MAX_LENGTH:
        errors["abbreviation"] = f"abbreviation must be at most {ABBREVIATION_MAX_LENGTH} characters."

    founding_date = normalize_date(raw.get("founding_date"))
    if founding_date is None:
        errors["foundingDate"] = "founding date is required."

    headquarters = _clean_text(raw.get("headquarters"))
    if headquarters is None:
        errors["headquarters"] = "headquarters is required."

    if errors:
        return Failure(ValidationError(errors))

    record: Dict[str, Any] = {
        "name": name,
        "abbreviation": abbreviation,
        "founding_date": founding_date,
        "headquarters": headquarters,
        "ideology": _clean_text(raw.get("ideology")),
        "representative_color": _clean_text(raw.get("representative_color")),
    }
    # logo_url は送られた場合のみ持たせる（更新時、未指定なら既存の参照を残す）
    if "logo_url" in raw:
        record["logo_url"] = _clean_text(raw["logo_url"])
    return Success(record)
