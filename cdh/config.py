"""Config loading from ~/.cdh/config.json with CDH_* env var overrides."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, ClassVar

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cdh.models import PathMatcher, RecommendOpt

CONFIG_DIR = Path.home() / ".cdh"
CONFIG_PATH = CONFIG_DIR / "config.json"

logger = logging.getLogger("cdh")


class PickerConfig(BaseModel):
    shortcuts: bool = True  # number/letter hotkeys for short lists


class CdhConfig(BaseSettings):
    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="CDH_",
        env_nested_delimiter="__",
        extra="ignore",
    )
    # History sources
    raw_path: str = Field(default_factory=lambda: str(Path.home() / ".cd_history_raw"))
    uniq_path: str = Field(default_factory=lambda: str(Path.home() / ".cd_history"))
    # Ranking
    limit: int = 20
    half_life: float = 7 * 24 * 3600.0
    threshold: float = 0.0
    ignore_re: str | None = None
    check_dir: bool = True
    uniq_decay: float = 0.85
    w_frecency: float = 0.7
    w_uniq: float = 0.3
    # Sub-configs
    picker: PickerConfig = Field(default_factory=PickerConfig)


def readConfigFile() -> dict[str, Any]:
    """Raw JSON object stored at ~/.cdh/config.json; {} when missing or unusable."""
    if not CONFIG_PATH.exists():
        return {}
    try:
        raw = json.loads(CONFIG_PATH.read_text())
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable config %s: %s", CONFIG_PATH, e)
        return {}
    if not isinstance(raw, dict):
        logger.warning("Ignoring config %s: top level is not an object", CONFIG_PATH)
        return {}
    return raw


def writeConfigFile(raw: dict[str, Any]) -> None:
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text(json.dumps(raw, indent=2) + "\n")


def loadConfig() -> CdhConfig:
    """Load config from ~/.cdh/config.json (if present) with env var overrides.

    Raises pydantic ValidationError when a file or CDH_* value has the wrong type.
    """
    return CdhConfig(**readConfigFile())


def compileIgnore(pattern: str | None) -> PathMatcher | None:
    """Compile an ignore regex into a path predicate; invalid patterns mean no filter."""
    if not pattern:
        return None
    try:
        rx = re.compile(pattern)
    except re.error as e:
        logger.warning("Invalid ignore pattern %r (%s); ignoring it", pattern, e)
        return None
    return lambda path: rx.search(path) is not None


def buildOpt(config: CdhConfig, **overrides: Any) -> RecommendOpt:
    """Snapshot config into a RecommendOpt; non-None overrides win."""
    values: dict[str, Any] = {
        "raw": config.raw_path,
        "uniq": config.uniq_path,
        "limit": config.limit,
        "half_life": config.half_life,
        "threshold": config.threshold,
        "ignore_re": config.ignore_re,
        "tokens": (),
        "check_dir": config.check_dir,
        "uniq_decay": config.uniq_decay,
        "w_frecency": config.w_frecency,
        "w_uniq": config.w_uniq,
    }
    for key, value in overrides.items():
        if key not in values:
            raise TypeError(f"Unknown option: {key}")
        if value is not None:
            values[key] = value

    ignore_re = values.pop("ignore_re")
    values["raw"] = str(Path(values["raw"]).expanduser())
    values["uniq"] = str(Path(values["uniq"]).expanduser())
    return RecommendOpt(ignore=compileIgnore(ignore_re), **values)
