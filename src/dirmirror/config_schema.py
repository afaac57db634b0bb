"""Unified configuration schema for dirmirror.

Defines Pydantic models for the YAML config structure with dedicated
sections for the mirror roots and for logging.

Usage:
    from dirmirror.config_loader import load_hierarchical_config
    from dirmirror.config_schema import build_config

    unified = build_config(load_hierarchical_config())
    fallbacks = unified.mirror.model_dump(exclude_none=True)
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class MirrorConfig(BaseModel):
    """Mirror roots and behaviour.

    All path fields are optional so env vars and CLI args can supply
    them at runtime instead.
    """

    source: str | None = Field(
        default=None, description="Source directory to mirror from"
    )
    destination: str | None = Field(
        default=None, description="Destination directory to mirror into"
    )
    log_dir: str | None = Field(
        default=None, description="Directory for run log files"
    )
    console: bool | None = Field(
        default=None,
        description="Echo per-item outcomes to the console",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns skipped in both trees",
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        format: "text" or "json" line format.
    """

    level: str = Field(default="INFO", description="Log level")
    format: Literal["text", "json"] = Field(
        default="text", description="Log line format"
    )

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has defaults, so ``UnifiedConfig()`` (zero-config) is
    always valid.
    """

    mirror: MirrorConfig = Field(default_factory=MirrorConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Factory function
# ---------------------------------------------------------------------------


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Missing sections get defaults; ``None`` sections (an empty YAML key)
    are treated as missing.

    Args:
        raw_data: Merged configuration dictionary.

    Returns:
        Validated ``UnifiedConfig`` instance.

    Raises:
        pydantic.ValidationError: If a section has invalid values.
    """
    if not raw_data:
        return UnifiedConfig()

    sections = {k: v for k, v in raw_data.items() if v is not None}
    return UnifiedConfig(**sections)
