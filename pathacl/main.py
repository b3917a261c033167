"""Main entrypoint initialising the pathacl runtime."""
from __future__ import annotations

import asyncio
from typing import Optional

from pathacl.cli.app import RuntimeContext, app, set_runtime
from pathacl.core.config import ConfigManager, PathAclSettings
from pathacl.core.ui import RichUI
from pathacl.security.access_control import AccessControl
from pathacl.security.audit import AuditSystem
from pathacl.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def build_runtime(settings: PathAclSettings, config_manager: ConfigManager) -> RuntimeContext:
    """Wire the facade, audit trail and UI from ``settings``."""

    audit: Optional[AuditSystem] = None
    access_control = AccessControl(limits=settings.limits)
    if settings.audit.enabled:
        audit = AuditSystem(settings.audit.path)
        access_control.subscribe(audit.trail)

    async def _apply_limits(reloaded: PathAclSettings) -> None:
        access_control.limits = reloaded.limits
        logger.info("path limits updated", extra={"event": "config_reload"})

    config_manager.register_callback(_apply_limits)
    return RuntimeContext(
        settings=settings,
        config_manager=config_manager,
        access_control=access_control,
        audit=audit,
        ui=RichUI(),
    )


async def _initialise_runtime() -> None:
    config_manager = ConfigManager()
    settings = await config_manager.load()
    configure_logging(
        level=settings.logging.level,
        log_dir=settings.logging.directory,
        enable_rich=settings.logging.rich,
    )
    set_runtime(build_runtime(settings, config_manager))
    logger.info("Runtime initialised")


def main() -> None:
    asyncio.run(_initialise_runtime())
    app()


if __name__ == "__main__":  # pragma: no cover - CLI entry
    main()
