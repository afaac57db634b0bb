"""
Hierarchical YAML configuration loader for dirmirror.

Provides convention-based config file discovery, ``!include`` support,
env var interpolation, and a shallow merge where the project-level file
wins over global ones.

Usage:
    from dirmirror.config_loader import load_hierarchical_config

    raw = load_hierarchical_config()
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "DIRMIRROR_CONFIG"

# ---------------------------------------------------------------------------
# 1. Env var interpolation
# ---------------------------------------------------------------------------

# ${VAR} or ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+?)(?::-(.*?))?\}")


def interpolate_env_vars(value: str) -> str:
    """Replace ``${VAR}`` and ``${VAR:-default}`` with environment values.

    An unset or empty variable yields its default, or ``""`` without one.
    A ``${`` with no closing brace is left as is.
    """

    def _replace(match: re.Match) -> str:
        env_val = os.environ.get(match.group(1))
        if env_val:
            return env_val
        return match.group(2) or ""

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _interpolate_recursive(obj: Any) -> Any:
    """Interpolate env vars in every string of a nested dict/list."""
    if isinstance(obj, str):
        return interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _interpolate_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_interpolate_recursive(item) for item in obj]
    return obj


# ---------------------------------------------------------------------------
# 2. YAML !include support
# ---------------------------------------------------------------------------


class IncludeLoader(yaml.SafeLoader):
    """``yaml.SafeLoader`` subclass that understands ``!include``.

    A subclass keeps the global ``SafeLoader`` untouched.  Each load
    carries the chain of files being included so cycles can be reported.
    """


def _include_constructor(loader: IncludeLoader, node: yaml.ScalarNode) -> Any:
    """Load the file named by an ``!include path`` node."""
    target = Path(loader.construct_scalar(node))
    if not target.is_absolute():
        # relative to the including file
        target = Path(loader.name).resolve().parent / target
    target = target.resolve()

    chain: list[Path] = getattr(loader, "_include_chain", [])
    if target in chain:
        cycle = " -> ".join(str(p) for p in [*chain, target])
        raise ValueError(f"Circular include detected: {cycle}")

    if not target.exists():
        raise FileNotFoundError(
            f"Include file not found: {target} "
            f"(referenced from {Path(loader.name).resolve()})"
        )

    return _load_yaml_with_includes(target, _include_chain=[*chain, target])


IncludeLoader.add_constructor("!include", _include_constructor)


def _load_yaml_with_includes(
    path: Path,
    *,
    _include_chain: list[Path] | None = None,
) -> Any:
    """Parse one YAML file with ``IncludeLoader``."""
    path = path.resolve()
    with open(path, "r", encoding="utf-8") as fh:
        loader = IncludeLoader(fh)
        loader._include_chain = _include_chain or [path]  # type: ignore[attr-defined]
        try:
            return loader.get_single_data()
        finally:
            loader.dispose()


# ---------------------------------------------------------------------------
# 3. Convention-based file discovery
# ---------------------------------------------------------------------------


def discover_config_files() -> list[Path]:
    """Return existing config files, highest precedence first.

    Search order:
        1. ``DIRMIRROR_CONFIG`` env var (explicit single path)
        2. ``.dirmirror/config.yml`` in CWD (project-level)
        3. ``.dirmirror/config.yaml`` in CWD
        4. ``~/.config/dirmirror/config.yml`` (XDG global)

    Only paths that exist on disk are returned.
    """
    candidates: list[Path] = []

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        explicit = Path(env_path).expanduser().resolve()
        if not explicit.exists():
            logger.warning(
                "%s points to a missing file: %s", CONFIG_ENV_VAR, explicit
            )
        candidates.append(explicit)

    cwd = Path.cwd()
    candidates.append(cwd / ".dirmirror" / "config.yml")
    candidates.append(cwd / ".dirmirror" / "config.yaml")
    candidates.append(Path.home() / ".config" / "dirmirror" / "config.yml")

    return [p for p in candidates if p.exists()]


# ---------------------------------------------------------------------------
# 4. Hierarchical merge
# ---------------------------------------------------------------------------


def load_hierarchical_config() -> dict[str, Any]:
    """Load and merge every discovered config file.

    Files are applied from lowest to highest precedence; top-level keys
    of a later file **replace** those of earlier ones (no deep merge).
    Env var interpolation runs on the merged result.

    Returns an empty dict when no config file exists (zero-config).
    """
    paths = discover_config_files()

    if not paths:
        logger.debug("No config files found, using defaults")
        return {}

    merged: dict[str, Any] = {}
    for path in reversed(paths):
        logger.debug("Loading config: %s", path)
        try:
            data = _load_yaml_with_includes(path)
        except Exception:
            logger.exception("Failed to load config file %s", path)
            raise

        if isinstance(data, dict):
            merged.update(data)
        elif data is not None:
            logger.warning(
                "Config file %s has non-dict root (%s), skipping",
                path,
                type(data).__name__,
            )

    return _interpolate_recursive(merged)
