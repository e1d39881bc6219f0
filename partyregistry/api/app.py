"""政党登録 REST API（FastAPI）"""
from __future__ import annotations
from typing import Any, Dict, Iterable, Optional, Tuple

import structlog
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.middleware.base import BaseHTTPMiddleware

from partyregistry import __version__, config
from partyregistry.api.schemas import FormOptions, IdeologyStats, Message, PartyList, PartyOut
from partyregistry.db.models import Ideology, REPRESENTATIVE_COLORS
from partyregistry.registry.attachments import LogoStore
from partyregistry.registry.gateway import PartyGateway
from partyregistry.registry.results import CrossOriginRejected, Failure, NotFound, ValidationError
from partyregistry.registry.service import PartyService, Upload

logger = structlog.get_logger()


class OriginAllowListMiddleware(BaseHTTPMiddleware):
    """許可リスト外の Origin ヘッダ付きリクエストをハンドラに届く前に 403 で返す"""

    def __init__(self, app, allowed_origins: Iterable[str]):
        super().__init__(app)
        self.allowed_origins = frozenset(allowed_origins)

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin")
        if origin is not None and origin not in self.allowed_origins:
            error = CrossOriginRejected(origin)
            logger.warning("cross_origin_rejected", origin=origin, path=request.url.path)
            return JSONResponse(error.to_dict(), status_code=error.status_code)
        return await call_next(request)


def _error_response(failure: Failure) -> JSONResponse:
    error = failure.error
    return JSONResponse(error.to_dict(), status_code=error.status_code)


async def _read_submission(request: Request, max_bytes: int) -> Tuple[Dict[str, Any], Optional[Upload]]:
    """JSON または multipart/form-data（logo パート付き）を受け取る"""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data") or content_type.startswith(
        "application/x-www-form-urlencoded"
    ):
        form = await request.form()
        payload: Dict[str, Any] = {}
        upload = None
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == "logo" and value.filename:
                    # 上限 +1 バイトまで読めば超過は判定できる
                    upload = Upload(value.filename, await value.read(max_bytes + 1))
                continue
            payload[key] = value
        return payload, upload

    try:
        body = await request.json()
    except ValueError:
        raise ValidationError({"body": "request body must be a JSON object."})
    if not isinstance(body, dict):
        raise ValidationError({"body": "request body must be a JSON object."})
    return body, None


def build_default_service() -> PartyService:
    from partyregistry.db.base import SessionLocal

    return PartyService(
        PartyGateway(SessionLocal),
        LogoStore(config.UPLOADS_DIR, max_bytes=config.MAX_LOGO_BYTES),
    )


def create_app(
    service: Optional[PartyService] = None,
    allowed_origins: Optional[Iterable[str]] = None,
) -> FastAPI:
    service = service or build_default_service()
    origins = list(config.ALLOWED_ORIGINS if allowed_origins is None else allowed_origins)

    app = FastAPI(title="Party Registry", version=__version__)
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )
    # 後から追加したミドルウェアが外側になる: Origin 検査 → CORS → ルーティング
    app.add_middleware(OriginAllowListMiddleware, allowed_origins=origins)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/api/options", response_model=FormOptions)
    async def form_options():
        """フォーム用の選択肢（イデオロギーと推奨カラー）"""
        return {
            "ideologies": [{"value": i.value, "label": i.label} for i in Ideology],
            "colors": [{"value": v, "label": label} for v, label in REPRESENTATIVE_COLORS],
        }

    @app.get("/api/parties", response_model=PartyList)
    async def list_parties(
        ideology: Optional[str] = Query(None),
        limit: Optional[int] = Query(None, ge=1),
        offset: int = Query(0, ge=0),
    ):
        result = await run_in_threadpool(service.list, ideology, limit, offset)
        if not result.ok:
            return _error_response(result)
        return {"data": result.value, "count": len(result.value)}

    @app.get("/api/parties/stats", response_model=IdeologyStats)
    async def party_stats():
        result = await run_in_threadpool(service.ideology_stats)
        if not result.ok:
            return _error_response(result)
        return result.value

    @app.get("/api/parties/{party_id}", response_model=PartyOut)
    async def get_party(party_id: str):
        result = await run_in_threadpool(service.get, party_id)
        if not result.ok:
            return _error_response(result)
        return result.value

    @app.post("/api/parties", response_model=PartyOut, status_code=201)
    async def create_party(request: Request):
        try:
            payload, upload = await _read_submission(request, service.logos.max_bytes)
        except ValidationError as exc:
            return _error_response(Failure(exc))
        result = await run_in_threadpool(service.register, payload, upload)
        if not result.ok:
            return _error_response(result)
        return result.value

    @app.put("/api/parties/{party_id}", response_model=PartyOut)
    async def update_party(party_id: str, request: Request):
        try:
            payload, upload = await _read_submission(request, service.logos.max_bytes)
        except ValidationError as exc:
            return _error_response(Failure(exc))
        result = await run_in_threadpool(service.revise, party_id, payload, upload)
        if not result.ok:
            return _error_response(result)
        return result.value

    @app.delete("/api/parties/{party_id}", response_model=Message)
    async def delete_party(party_id: str):
        result = await run_in_threadpool(service.retire, party_id)
        if not result.ok:
            return _error_response(result)
        return {"message": "party deleted"}

    @app.get("/uploads/{filename}")
    async def get_upload(filename: str):
        try:
            path = service.logos.open_path(filename)
        except NotFound as exc:
            return JSONResponse({"message": "file not found"}, status_code=exc.status_code)
        return FileResponse(path)

    return app
