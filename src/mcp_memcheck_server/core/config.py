"""Host configuration and environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace

WORKSPACE_ENV = "MEMCHECK_WORKSPACE"
LOG_LEVEL_ENV = "MEMCHECK_LOG_LEVEL"
INCLUDE_STACK_ENV = "MEMCHECK_INCLUDE_STACK"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True, slots=True)
class ServerConfig:
    workspace_roots: tuple[str, ...] = field(default_factory=lambda: (os.getcwd(),))
    log_level: str = "INFO"
    # Publish the non-anchor stack frames with each diagnostic.
    include_related: bool = True


def _parse_bool(name: str, value: str) -> bool:
    v = value.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ValueError(f"{name} must be one of: 1, 0, true, false, yes, no")


def resolve_server_config(cfg: ServerConfig | None = None) -> ServerConfig:
    """Return config with optional env overrides applied."""
    if cfg is None:
        cfg = ServerConfig()

    env = os.getenv(WORKSPACE_ENV)
    if env:
        roots = tuple(os.path.abspath(p) for p in env.split(os.pathsep) if p.strip())
        if not roots:
            raise ValueError(f"{WORKSPACE_ENV} must name at least one directory")
        cfg = replace(cfg, workspace_roots=roots)

    env = os.getenv(LOG_LEVEL_ENV)
    if env:
        level = env.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"{LOG_LEVEL_ENV} must be one of: {', '.join(_LOG_LEVELS)}")
        cfg = replace(cfg, log_level=level)

    env = os.getenv(INCLUDE_STACK_ENV)
    if env:
        cfg = replace(cfg, include_related=_parse_bool(INCLUDE_STACK_ENV, env))

    return cfg
