"""Run configuration for dirmirror.

Reads the three mirror roots and the console flag from CLI args,
environment variables, .env files, and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    DIRMIRROR_SOURCE: Source directory (required)
    DIRMIRROR_DESTINATION: Destination directory (required)
    DIRMIRROR_LOG_DIR: Directory for run logs (required)
    DIRMIRROR_CONSOLE: Echo per-item outcomes to the console (optional, default: false)
    DIRMIRROR_DEBUG: Enable debug logging (optional, default: false)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .validators import validate_disjoint_roots, validate_root_path

logger = logging.getLogger(__name__)


@dataclass
class Config:
    source: Path
    destination: Path
    log_dir: Path
    console: bool = False
    debug: bool = False
    exclude: list[str] = field(default_factory=list)


def validate_config(config: Config) -> None:
    """Validate the roots of *config*, creating missing output directories.

    Paths are expanded and resolved in place.  The source must already
    exist; the destination and log directories are created when missing.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If a root is not a directory, the source is missing,
            the trees overlap, or the log directory lies inside the
            destination (it would be deleted as stale).
    """
    config.source = Path(config.source).expanduser().resolve()
    config.destination = Path(config.destination).expanduser().resolve()
    config.log_dir = Path(config.log_dir).expanduser().resolve()

    checks = [
        validate_root_path(config.source, "Source directory"),
        validate_root_path(
            config.destination, "Destination directory", must_exist=False
        ),
        validate_root_path(config.log_dir, "Log directory", must_exist=False),
        validate_disjoint_roots(
            config.destination,
            config.source,
            "Destination directory",
            "Source directory",
        ),
        validate_disjoint_roots(
            config.source,
            config.destination,
            "Source directory",
            "Destination directory",
        ),
        validate_disjoint_roots(
            config.log_dir,
            config.destination,
            "Log directory",
            "Destination directory",
        ),
    ]
    for ok, message in checks:
        if not ok:
            raise ValueError(message)

    if config.log_dir.is_relative_to(config.source):
        logger.warning(
            "Log directory %s is inside the source; log files will be mirrored",
            config.log_dir,
        )

    for directory in (config.destination, config.log_dir):
        if not directory.exists():
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise ValueError(
                    f"Cannot create directory {directory}: {exc}"
                ) from exc
            logger.info("Created directory: %s", directory)


def _get_bool_env(key: str) -> bool | None:
    """Return True/False from env var, or None if unset."""
    val = os.getenv(key)
    if val is None:
        return None
    return val.lower() in ("true", "1", "yes", "on")


def load_config(
    source: str | None = None,
    destination: str | None = None,
    log_dir: str | None = None,
    console: bool | None = None,
    debug: bool = False,
    exclude: list[str] | None = None,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        source: Override source directory.
        destination: Override destination directory.
        log_dir: Override log directory.
        console: Console echo flag from the CLI; ``None`` when not given.
        debug: Enable debug logging (CLI flag).
        exclude: Extra exclude globs, appended to the YAML list.
        yaml_fallbacks: Dict of values from the YAML ``mirror`` section.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If a required path is missing after checking all
            sources, or fails validation.
    """
    fb = yaml_fallbacks or {}

    # --- Path fields: CLI > env > YAML > error ---

    def resolve_required(value: str | None, env_key: str, name: str, flag: str) -> str:
        final = value or os.getenv(env_key) or fb.get(name)
        if not final:
            raise ValueError(
                f"{name.replace('_', ' ').capitalize()} not set. "
                f"Set {env_key} environment variable, pass {flag}, "
                f"or add '{name}' to the 'mirror' section of config.yml."
            )
        return str(final).strip()

    final_source = resolve_required(
        source, "DIRMIRROR_SOURCE", "source", "--source"
    )
    final_destination = resolve_required(
        destination, "DIRMIRROR_DESTINATION", "destination", "--destination"
    )
    final_log_dir = resolve_required(
        log_dir, "DIRMIRROR_LOG_DIR", "log_dir", "--log-dir"
    )

    # --- Boolean fields: CLI > env > YAML > default ---

    if console is not None:
        final_console = console
    else:
        env_console = _get_bool_env("DIRMIRROR_CONSOLE")
        if env_console is not None:
            final_console = env_console
        else:
            final_console = bool(fb.get("console") or False)

    if debug:
        final_debug = True
    else:
        env_debug = _get_bool_env("DIRMIRROR_DEBUG")
        final_debug = bool(env_debug)

    final_exclude = list(fb.get("exclude") or []) + list(exclude or [])

    config = Config(
        source=Path(final_source),
        destination=Path(final_destination),
        log_dir=Path(final_log_dir),
        console=final_console,
        debug=final_debug,
        exclude=final_exclude,
    )

    validate_config(config)

    return config
