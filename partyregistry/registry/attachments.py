"""ロゴ画像の保存と参照解決（/uploads/<name> 形式の相対パスを発行する）"""
from __future__ import annotations
import os
import tempfile
import uuid
from pathlib import Path

import structlog

from partyregistry.registry.results import NotFound, StorageFailure, ValidationError

logger = structlog.get_logger()

DEFAULT_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png"})


class LogoStore:
    def __init__(
        self,
        directory: str | Path,
        url_prefix: str = "/uploads",
        max_bytes: int = 2 * 1024 * 1024,
        allowed_extensions: frozenset[str] = DEFAULT_EXTENSIONS,
    ):
        self.directory = Path(directory).resolve()
        self.url_prefix = url_prefix.rstrip("/")
        self.max_bytes = max_bytes
        self.allowed_extensions = allowed_extensions

    def extension_of(self, filename: str | None) -> str:
        return Path(filename or "").suffix.lower()

    def check(self, filename: str | None, size: int) -> None:
        """保存前の検査。拡張子とサイズのみ（内容の判定はしない）"""
        ext = self.extension_of(filename)
        if ext not in self.allowed_extensions:
            allowed = ", ".join(sorted(self.allowed_extensions))
            raise ValidationError({"logo": f"logo must be one of: {allowed}."})
        if size > self.max_bytes:
            raise ValidationError({"logo": f"logo must be at most {self.max_bytes} bytes."})

    def save(self, filename: str | None, content: bytes) -> str:
        """
        ランダムな名前（uuid4 + 元の拡張子）で保存し、参照パスを返す。
        一時ファイルに書いてから rename するので、途中で失敗しても中途半端なファイルは残らない。
        """
        self.check(filename, len(content))
        stored_name = f"{uuid.uuid4().hex}{self.extension_of(filename)}"
        target = self.directory / stored_name

        tmp_name = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".upload-")
            with os.fdopen(fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, target)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error("logo_write_failed", filename=filename, error=str(exc))
            raise StorageFailure("store logo for") from exc

        logger.info("logo_stored", original=filename, stored=stored_name, size=len(content))
        return f"{self.url_prefix}/{stored_name}"

    def open_path(self, name: str) -> Path:
        """保存済みファイル名から実パスを得る。ディレクトリ外を指す名前は拒否する"""
        try:
            path = (self.directory / name).resolve()
            path.relative_to(self.directory)
        except (ValueError, OSError):
            # ディレクトリ外、または NUL 文字などパスとして不正な名前
            raise NotFound(name)
        if not path.is_file():
            raise NotFound(name)
        return path

    def path_for_reference(self, reference: str) -> Path:
        prefix = self.url_prefix + "/"
        if not reference.startswith(prefix):
            raise NotFound(reference)
        return self.open_path(reference[len(prefix):])

    def discard(self, reference: str) -> None:
        """DB 書き込みに失敗したリクエストで保存したファイルを消す"""
        try:
            self.path_for_reference(reference).unlink()
        except (NotFound, OSError):
            logger.warning("logo_discard_failed", reference=reference)
        else:
            logger.info("logo_discarded", reference=reference)
