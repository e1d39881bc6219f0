"""
政党レコードの登録・更新パイプライン。

    検証・名前変換 (validation) → ロゴ保存 (attachments) → DB 書き込み (gateway)

想定内の失敗（入力エラー・未登録 ID・保存失敗）は例外ではなく Failure として返す。
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

import structlog

from partyregistry.registry.attachments import LogoStore
from partyregistry.registry.fields import to_external
from partyregistry.registry.gateway import PartyGateway
from partyregistry.registry.results import Failure, RegistryError, Result, Success, ValidationError
from partyregistry.registry.validation import validate_party

logger = structlog.get_logger()


@dataclass(frozen=True)
class Upload:
    filename: Optional[str]
    content: bytes


class PartyService:
    def __init__(self, gateway: PartyGateway, logos: LogoStore):
        self.gateway = gateway
        self.logos = logos

    def _run(self, operation: str, fn: Callable[[], Any]) -> Result[Any]:
        try:
            return Success(fn())
        except RegistryError as exc:
            logger.debug("party_operation_failed", operation=operation, error=type(exc).__name__)
            return Failure(exc)

    def _validate(self, payload: Mapping[str, Any], upload: Optional[Upload]) -> Result[Dict[str, Any]]:
        """項目の検証とロゴの検査をまとめて行い、エラーを全て1つの ValidationError に集める"""
        validated = validate_party(payload)
        errors = {} if validated.ok else dict(validated.error.errors)
        if upload is not None:
            try:
                self.logos.check(upload.filename, len(upload.content))
            except ValidationError as exc:
                errors.update(exc.errors)
        if errors:
            return Failure(ValidationError(errors))
        return validated

    def _write(self, record: Dict[str, Any], upload: Optional[Upload], persist: Callable[[Dict[str, Any]], Dict[str, Any]]) -> Dict[str, Any]:
        """ロゴがあれば先に保存し、その参照を付けて DB に書く。DB 側が失敗したらロゴを消す"""
        reference = None
        if upload is not None:
            reference = self.logos.save(upload.filename, upload.content)
            record = {**record, "logo_url": reference}
        try:
            return persist(record)
        except RegistryError:
            if reference is not None:
                self.logos.discard(reference)
            raise

    def register(self, payload: Mapping[str, Any], upload: Optional[Upload] = None) -> Result[Dict[str, Any]]:
        """新規登録。ロゴ未指定なら logoUrl は null"""
        validated = self._validate(payload, upload)
        if not validated.ok:
            return validated

        record = {**validated.value, "logo_url": None}
        return self._run(
            "create",
            lambda: to_external(self._write(record, upload, self.gateway.create)),
        )

    def revise(self, party_id: str, payload: Mapping[str, Any], upload: Optional[Upload] = None) -> Result[Dict[str, Any]]:
        """
        更新。新しいロゴがなければクライアントの送った logoUrl を使い、
        それも送られていなければ保存済みの参照をそのまま残す。
        """
        validated = self._validate(payload, upload)
        if not validated.ok:
            return validated

        record = dict(validated.value)
        return self._run(
            "update",
            lambda: to_external(
                self._write(record, upload, lambda r: self.gateway.update(party_id, r))
            ),
        )

    def retire(self, party_id: str) -> Result[None]:
        return self._run("delete", lambda: self.gateway.delete(party_id))

    def get(self, party_id: str) -> Result[Dict[str, Any]]:
        return self._run("fetch", lambda: to_external(self.gateway.get(party_id)))

    def list(
        self,
        ideology: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Result[List[Dict[str, Any]]]:
        return self._run(
            "list",
            lambda: [to_external(r) for r in self.gateway.list(ideology=ideology, limit=limit, offset=offset)],
        )

    def ideology_stats(self) -> Result[Dict[str, Any]]:
        """ダッシュボード用: 有効件数とイデオロギー別件数"""
        return self._run(
            "count",
            lambda: {"total": self.gateway.count(), "by_ideology": self.gateway.ideology_stats()},
        )
