"""Logging configuration and the audit logger used by router components."""

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from loguru import logger

if TYPE_CHECKING:
    from nanorouter.router.models import RoutingDecision

PRETTY_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def configure_logging(
    level: str = "INFO",
    log_format: str = "pretty",
    log_file: Optional[Path] = None,
) -> None:
    """
    Configure global logging sinks.

    Args:
        level: Minimum level for console output
        log_format: "pretty" for colorized lines, "json" for one JSON record per line
        log_file: Optional path for a rotating log file (always DEBUG)
    """
    logger.remove()

    if log_format == "json":
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(
            sys.stderr,
            level=level,
            format=PRETTY_FORMAT,
            backtrace=True,
            diagnose=False,
        )

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level="DEBUG",
            format=FILE_FORMAT,
            rotation="10 MB",
            retention="1 week",
            compression="zip",
            enqueue=True,  # writers never block on disk
        )

    logger.debug(f"Logging initialized. Console level: {level}, format: {log_format}")


def _render(data: dict[str, Any]) -> str:
    return " ".join(f"{key}={value}" for key, value in data.items())


class AuditLogger:
    """
    Logging collaborator handed to every router component.

    Free-text diagnostics go through loguru with the structured fields bound
    as ``extra``; routing decisions are emitted as one record carrying
    ``event="routing_decision"``.
    """

    def __init__(self, component: str = "nanorouter"):
        self._log = logger.bind(component=component)

    def _emit(self, level: str, message: str, data: dict[str, Any]) -> None:
        text = f"{message} {_render(data)}" if data else message
        self._log.opt(depth=2).bind(**data).log(level, text)

    def debug(self, message: str, **data: Any) -> None:
        self._emit("DEBUG", message, data)

    def info(self, message: str, **data: Any) -> None:
        self._emit("INFO", message, data)

    def warning(self, message: str, **data: Any) -> None:
        self._emit("WARNING", message, data)

    def error(self, message: str, **data: Any) -> None:
        self._emit("ERROR", message, data)

    def decision(self, decision: "RoutingDecision") -> None:
        """Log a routing decision with its top signals."""
        signals = decision.analysis.top_signals(limit=5)
        fields: dict[str, Any] = {
            "event": "routing_decision",
            "tier": decision.tier.value,
            "target": decision.target,
            "confidence": round(decision.confidence, 4),
            "profile": decision.profile.value,
            "override": decision.analysis.override,
            "signals": {d.name: round(d.activation, 3) for d in signals},
        }
        if decision.cost is not None:
            fields["savings"] = round(decision.cost.estimated_savings, 4)
            fields["baseline"] = decision.cost.baseline_target

        lines = [
            f"Routing decision: {decision.tier.value} -> {decision.target}",
            f"  profile={decision.profile.value} confidence={decision.confidence * 100:.1f}% "
            f"latency={decision.analysis.duration_ms:.2f}ms",
            f"  reason: {decision.reason}",
        ]
        if decision.cost is not None:
            savings = decision.cost.estimated_savings
            sign = "+" if savings >= 0 else ""
            lines.append(f"  cost delta: {sign}${savings:.4f} (vs {decision.cost.baseline_target})")
        for dim in signals:
            filled = round(dim.activation * 10)
            lines.append(f"  {dim.name:<22} {'#' * filled}{'.' * (10 - filled)} {dim.activation * 100:.0f}%")

        self._log.opt(depth=1).bind(**fields).info("\n".join(lines))

    def banner(self, version: str) -> None:
        """Startup banner."""
        self._log.opt(depth=1).info(f"nanorouter {version} - prompt tier routing engine ready")


class NullAuditLogger(AuditLogger):
    """Audit logger that discards everything."""

    def __init__(self, component: str = "nanorouter"):
        pass

    def _emit(self, level: str, message: str, data: dict[str, Any]) -> None:
        return None

    def decision(self, decision: "RoutingDecision") -> None:
        return None

    def banner(self, version: str) -> None:
        return None
