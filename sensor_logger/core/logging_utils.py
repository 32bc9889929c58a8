"""Component-tagged loggers under the ``sensor_logger`` namespace.

Every message is prefixed with ``[component]`` so interleaved output from
the provider manager, the session and the sinks stays readable in one log::

    logger = get_module_logger(__name__)   # component "session"
    logger.info("Session %s -> %s", "idle", "listening")
    # ... | sensor_logger.modules.GPS.gps_core.recording.session | [session] Session idle -> listening
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

NAMESPACE = "sensor_logger"
DEFAULT_COMPONENT = "Core"


def _qualified_name(name: Optional[str]) -> str:
    if not name:
        return NAMESPACE
    if name == NAMESPACE or name.startswith(NAMESPACE + "."):
        return name
    return f"{NAMESPACE}.{name}"


def _component_for(qualified: str) -> str:
    tail = qualified[len(NAMESPACE):].lstrip(".")
    return tail.rsplit(".", 1)[-1] if tail else DEFAULT_COMPONENT


class StructuredLogger(logging.LoggerAdapter):
    """Logger adapter that tags messages with their component.

    Arguments are merged into the message before it is emitted, so a
    mismatched format string degrades to an ``| args=...`` suffix instead of
    a logging error at handler time.
    """

    def __init__(self, logger: logging.Logger, component: Optional[str] = None) -> None:
        super().__init__(logger, {})
        self.component = component or _component_for(logger.name)

    def _compose(self, msg: Any, args: Tuple[Any, ...]) -> str:
        text = str(msg)
        if args:
            try:
                text = text % args
            except (TypeError, ValueError):
                text = f"{text} | args={' '.join(str(arg) for arg in args)}"
        tag = f"[{self.component}]"
        return text if text.startswith(tag) else f"{tag} {text}"

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None:
        if not self.isEnabledFor(level):
            return
        self.logger.log(level, self._compose(msg, args), **kwargs)

    def getChild(self, suffix: str) -> "StructuredLogger":
        return StructuredLogger(self.logger.getChild(suffix), f"{self.component}.{suffix}")

    def __repr__(self) -> str:
        return f"StructuredLogger({self.logger.name!r}, component={self.component!r})"


def get_module_logger(name: Optional[str] = None) -> StructuredLogger:
    """Return the component logger for ``name`` (usually ``__name__``)."""
    return StructuredLogger(logging.getLogger(_qualified_name(name)))


__all__ = ["DEFAULT_COMPONENT", "NAMESPACE", "StructuredLogger", "get_module_logger"]
