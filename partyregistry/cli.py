# partyregistry/cli.py
import csv
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from sqlalchemy import text

from partyregistry import config
from partyregistry.create_tables import init_db as create_schema
from partyregistry.db.base import Base, SessionLocal, engine
from partyregistry.db.models import Ideology
from partyregistry.registry.attachments import LogoStore
from partyregistry.registry.gateway import PartyGateway
from partyregistry.registry.service import PartyService
from partyregistry.registry.validation import validate_party

cli = typer.Typer()


def _service() -> PartyService:
    return PartyService(
        PartyGateway(SessionLocal),
        LogoStore(config.UPLOADS_DIR, max_bytes=config.MAX_LOGO_BYTES),
    )


@cli.command()
def init_db():
    """DBスキーマを作成（初回のみ使用）"""
    create_schema(engine)
    typer.echo("✅ Database schema created")

@cli.command()
def drop_db():
    """DBスキーマを全削除（開発用）"""
    Base.metadata.drop_all(bind=engine)
    typer.echo("🗑️ Database schema dropped")

@cli.command()
def connect_db():
    """DBへの接続可否テスト"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            version = ".".join(str(v) for v in (conn.dialect.server_version_info or ()))
            typer.echo(f"✅ 接続成功！ {conn.dialect.name} {version}".rstrip())
    except Exception as e:
        typer.echo(f"❌ 接続失敗: {e}")
        raise typer.Exit(code=1)

@cli.command()
def serve(
    host: str = typer.Option(config.HOST, help="待ち受けホスト"),
    port: int = typer.Option(config.PORT, help="待ち受けポート"),
):
    """REST API サーバを起動（テーブルが無ければ作成してから）"""
    import uvicorn
    from partyregistry.log import configure_logging

    configure_logging(config.LOG_LEVEL, config.LOG_FORMAT)
    create_schema(engine)
    uvicorn.run("partyregistry.api.app:create_app", factory=True, host=host, port=port)


#################################################################
# 以下は、CSV から政党を一括登録するツール
#################################################################

def read_csv(path: Path) -> List[Dict[str, Any]]:
    if not path.exists():
        typer.echo(f"⚠ {path} が見つかりません。")
        raise typer.Exit(code=1)
    with path.open("r", encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f))

# 例：partyregistry import-csv seeds/parties.csv --dry-run
@cli.command("import-csv")
def import_csv(
    path: Path = typer.Argument(..., help="CSVのパス（ヘッダは name,abbreviation,foundingDate,... の外部名）"),
    dry_run: bool = typer.Option(False, help="検証のみ行い、登録しない"),
):
    """
    CSV の各行を API と同じ検証・登録処理に通す。
    不正な行はエラー内容を表示してスキップする（他の行は登録を続ける）。
    """
    rows = read_csv(path)
    service = None if dry_run else _service()
    created = skipped = 0

    for lineno, row in enumerate(rows, start=2):
        if dry_run:
            result = validate_party(row)
        else:
            result = service.register(row)

        if not result.ok:
            skipped += 1
            error = result.error
            detail = getattr(error, "errors", None) or error.message
            typer.echo(f"⚠ {lineno}行目をスキップ: {detail}")
            continue

        created += 1
        typer.echo(f"→ {'OK' if dry_run else 'REGISTERED'} {(row.get('name') or '').strip()}")

    typer.echo(f"✅ 完了: {created}件 / スキップ {skipped}件")
    if skipped:
        raise typer.Exit(code=1)


#################################################################
# 以下は、登録済みの政党を表示するユーティリティ
#################################################################

SHOW_COLUMNS = ["id", "name", "abbreviation", "ideology", "foundingDate", "headquarters", "registeredAt"]

@cli.command("show")
def show_records(
    limit: int = typer.Option(20, "--limit", "-n", help="最大取得件数"),
    ideology: Optional[str] = typer.Option(None, "--ideology", "-i", help="イデオロギーで絞り込み"),
    output: str = typer.Option("table", "--output", "-f", help="出力形式: table | json", case_sensitive=False),
):
    """
    有効な政党を新しい順に表示する。
    例:
      partyregistry show -n 10
      partyregistry show -i regionalist -f json
    """
    result = _service().list(ideology=ideology, limit=limit)
    if not result.ok:
        typer.echo(f"❌ {result.error.message}")
        raise typer.Exit(code=1)
    rows = result.value

    if output.lower() == "json":
        typer.echo(json.dumps(rows, ensure_ascii=False, indent=2))
        return

    if not rows:
        typer.echo("(登録なし)")
        return

    # table 出力（簡易）
    widths = {c: max(len(c), *(len(str(d.get(c) or "")) for d in rows)) for c in SHOW_COLUMNS}
    typer.echo(" | ".join(c.ljust(widths[c]) for c in SHOW_COLUMNS))
    typer.echo("-+-".join("-" * widths[c] for c in SHOW_COLUMNS))
    for d in rows:
        typer.echo(" | ".join(str(d.get(c) or "").ljust(widths[c]) for c in SHOW_COLUMNS))

@cli.command()
def stats():
    """イデオロギー別の登録件数"""
    result = _service().ideology_stats()
    if not result.ok:
        typer.echo(f"❌ {result.error.message}")
        raise typer.Exit(code=1)

    typer.echo(f"📋 登録政党数: {result.value['total']}")
    for value, count in result.value["by_ideology"].items():
        try:
            label = Ideology(value).label
        except ValueError:
            label = value
        typer.echo(f"- {label}: {count}")


if __name__ == "__main__":
    cli()
