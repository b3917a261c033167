"""Typer-based CLI wiring."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import List, Optional

import typer

from pathacl.core.config import ConfigManager, PathAclSettings
from pathacl.core.ui import RichUI
from pathacl.documents.subobject import at_path, is_safe_fragment, is_safe_key
from pathacl.security.access_control import AccessControl
from pathacl.security.audit import AuditSystem
from pathacl.utils.errors import DocumentError
from pathacl.utils.logging import get_logger

logger = get_logger(__name__)

app = typer.Typer(help="Path-scoped permissions and safe JSON sub-documents")
config_app = typer.Typer(help="Inspect and reload configuration")
app.add_typer(config_app, name="config")


@dataclass
class RuntimeContext:
    settings: PathAclSettings
    config_manager: ConfigManager
    access_control: AccessControl
    audit: Optional[AuditSystem]
    ui: RichUI


runtime: Optional[RuntimeContext] = None


def set_runtime(value: RuntimeContext) -> None:
    global runtime
    runtime = value


def _require_runtime() -> RuntimeContext:
    if runtime is None:  # pragma: no cover - runtime is always set during CLI usage
        raise RuntimeError("Runtime not initialised")
    return runtime


def _ui() -> RichUI:
    return runtime.ui if runtime is not None else RichUI()


@app.command()
def embed(
    fragment: str = typer.Argument(..., help="JSON object to embed"),
    path: List[str] = typer.Option([], "--path", "-p", help="Path segment, repeat for nesting"),
) -> None:
    """Print FRAGMENT wrapped so that it sits at the given path."""

    ui = _ui()
    try:
        document = at_path(path, fragment)
    except DocumentError as exc:
        ui.error(str(exc))
        raise typer.Exit(code=1) from exc
    typer.echo(document)


@app.command()
def validate(
    fragment: str = typer.Argument(..., help="JSON object to check"),
    key: List[str] = typer.Option([], "--key", "-k", help="Path key to check as well"),
) -> None:
    """Check whether a fragment and path keys can be embedded safely."""

    ui = _ui()
    checks = [("fragment", fragment, is_safe_fragment(fragment))]
    checks.extend(("key", item, is_safe_key(item)) for item in key)
    if not ui.safety_report(checks):
        raise typer.Exit(code=1)


@app.command()
def events(limit: int = typer.Option(20, "--limit", "-n", help="Number of events to show")) -> None:
    """Show the most recent permission events from the audit trail."""

    ctx = _require_runtime()
    if ctx.audit is None:
        ctx.ui.warn("Audit trail is disabled")
        return

    async def _run() -> None:
        records = await ctx.audit.recent_events(limit)
        rows = [
            [
                record.timestamp.isoformat(timespec="seconds"),
                record.action,
                record.caller,
                str(record.metadata.get("resource_id", "")),
                "/".join(record.metadata.get("path", [])),
            ]
            for record in records
        ]
        ctx.ui.console.print(
            ctx.ui.table("Permission Events", ["Time", "Action", "Caller", "Resource", "Path"], rows)
        )

    asyncio.run(_run())


@config_app.command("show")
def config_show() -> None:
    ctx = _require_runtime()
    ctx.ui.print_header(str(ctx.config_manager.config_path))
    ctx.ui.console.print_json(ctx.settings.model_dump_json())


@config_app.command("reload")
def config_reload() -> None:
    ctx = _require_runtime()
    ctx.settings = asyncio.run(ctx.config_manager.reload())
    ctx.ui.info("Configuration reloaded")


__all__ = ["app", "RuntimeContext", "set_runtime"]
