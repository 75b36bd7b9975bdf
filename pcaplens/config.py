from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Any, Iterator, Mapping

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for 3.9/3.10
    import tomli as tomllib  # type: ignore[import-not-found]


logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("txt", "json")
CONFIG_ENV = "PCAPLENS_CONFIG"
CONFIG_NAME = "pcaplens.toml"


@dataclass(frozen=True)
class ConfigLoadResult:
    path: Path | None
    data: dict[str, Any]


@dataclass(frozen=True)
class Settings:
    use_mmap: bool = False
    output_format: str = "txt"
    limit: int = 12
    color: bool | None = None
    direction: str = "any"
    log_level: str = "WARNING"


def config_candidates(env: Mapping[str, str] | None = None) -> Iterator[Path]:
    """Search order after an explicit ``--config``.

    ``$PCAPLENS_CONFIG`` comes first, then the working directory, the home
    dotfile and the XDG config directory.
    """
    env = os.environ if env is None else env
    if env.get(CONFIG_ENV):
        yield Path(env[CONFIG_ENV]).expanduser()
    yield Path(CONFIG_NAME)
    home = Path(env.get("HOME") or Path.home())
    yield home / f".{CONFIG_NAME}"
    xdg = env.get("XDG_CONFIG_HOME")
    yield (Path(xdg) if xdg else home / ".config") / "pcaplens" / "config.toml"


def find_config(explicit: str | Path | None, env: Mapping[str, str] | None = None) -> Path | None:
    if explicit:
        return Path(explicit).expanduser()
    return next((path for path in config_candidates(env) if path.is_file()), None)


def load_config(path: Path | None) -> ConfigLoadResult:
    """Parse ``path`` as TOML. Problems are logged and give an empty config."""
    if path is None:
        return ConfigLoadResult(path=None, data={})
    if not path.is_file():
        logger.warning("config %s not found; using defaults", path)
        return ConfigLoadResult(path=None, data={})
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        logger.warning("ignoring config %s: %s", path, exc)
        return ConfigLoadResult(path=path, data={})
    return ConfigLoadResult(path=path, data=data)


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def _as_bool(value: object, default: bool | None) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("1", "true", "yes", "on"):
            return True
        if text in ("0", "false", "no", "off"):
            return False
    return default


def _as_int(value: object, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def build_settings(data: Mapping[str, Any], env: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if env is None else env
    capture = _section(data, "capture")
    output = _section(data, "output")
    filters = _section(data, "filter")
    logging_cfg = _section(data, "logging")

    use_mmap = bool(_as_bool(capture.get("mmap"), False))
    if "PCAPLENS_MMAP" in env:
        use_mmap = env["PCAPLENS_MMAP"] != "0"

    output_format = str(output.get("format", "txt")).lower()
    if output_format not in OUTPUT_FORMATS:
        logger.warning("unknown output format %r in config; using txt", output_format)
        output_format = "txt"

    color = _as_bool(output.get("color"), None)
    if env.get("NO_COLOR") is not None:
        color = False

    return Settings(
        use_mmap=use_mmap,
        output_format=output_format,
        limit=max(0, _as_int(output.get("limit"), 12)),
        color=color,
        direction=str(filters.get("direction", "any")),
        log_level=str(logging_cfg.get("level", "WARNING")).upper(),
    )


def load_settings(explicit: str | Path | None = None, env: Mapping[str, str] | None = None) -> Settings:
    result = load_config(find_config(explicit, env))
    if result.path is not None:
        logger.debug("loaded config from %s", result.path)
    return build_settings(result.data, env)
