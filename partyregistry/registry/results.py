from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class RegistryError(Exception):
    status_code = 500
    message = "internal error"

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message}


class ValidationError(RegistryError):
    """フィールド名（外部表現）→ エラーメッセージ の辞書を持つ入力エラー"""
    status_code = 400
    message = "validation failed"

    def __init__(self, errors: dict[str, str]):
        super().__init__(errors)
        self.errors = dict(errors)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class NotFound(RegistryError):
    status_code = 404
    message = "party not found"

    def __init__(self, party_id: str):
        super().__init__(party_id)
        self.party_id = party_id


class StorageFailure(RegistryError):
    """DB またはファイル保存の失敗。詳細はログにのみ出し、呼び出し元には返さない"""
    status_code = 500

    def __init__(self, operation: str, party_id: str | None = None):
        super().__init__(operation, party_id)
        self.operation = operation
        self.party_id = party_id

    @property
    def message(self) -> str:
        return f"could not {self.operation} party"


class CrossOriginRejected(RegistryError):
    status_code = 403
    message = "origin not allowed"

    def __init__(self, origin: str):
        super().__init__(origin)
        self.origin = origin


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    ok = True


@dataclass(frozen=True)
class Failure:
    error: RegistryError
    ok = False


Result = Union[Success[T], Failure]
