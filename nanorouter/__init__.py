"""
nanorouter - prompt tier routing engine.

Scores each prompt across weighted dimensions, maps the calibrated
confidence onto one of four capability tiers and picks a target, keeping
conversations pinned to their target between messages.
"""

from pathlib import Path
from typing import Optional

from nanorouter.config.loader import load_config
from nanorouter.config.schema import RouterConfig
from nanorouter.router.sticky import StickyRouter
from nanorouter.utils.logging import AuditLogger, configure_logging

__version__ = "0.1.0"
__logo__ = "🧭"


def create_router_from_config(config: RouterConfig, configure: bool = True) -> StickyRouter:
    """
    Build a router from an in-memory configuration.

    Args:
        config: Validated configuration
        configure: Install logging sinks from ``log_level`` / ``log_format``
    """
    if configure:
        configure_logging(config.log_level, config.log_format)
    audit = AuditLogger("nanorouter")
    audit.banner(__version__)
    return StickyRouter(config, audit=audit)


def create_router(config_path: Optional[Path] = None) -> StickyRouter:
    """Load configuration (see ``load_config``) and build a router."""
    return create_router_from_config(load_config(config_path))


__all__ = [
    "RouterConfig",
    "StickyRouter",
    "__logo__",
    "__version__",
    "create_router",
    "create_router_from_config",
]
