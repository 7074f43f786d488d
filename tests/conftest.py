"""Shared test fixtures."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from pathlib import Path
from unittest.mock import patch

import pytest

from cdh.models import RecommendOpt


@pytest.fixture(autouse=True)
def _isolate_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point ~/.cdh/config.json at tmp_path and drop any CDH_* env vars."""
    cfg_dir = tmp_path / ".cdh"
    cfg_dir.mkdir()
    cfg_path = cfg_dir / "config.json"
    for key in [k for k in os.environ if k.startswith("CDH_")]:
        monkeypatch.delenv(key)
    with (
        patch("cdh.config.CONFIG_DIR", cfg_dir),
        patch("cdh.config.CONFIG_PATH", cfg_path),
    ):
        yield


@pytest.fixture
def make_dirs(tmp_path: Path) -> Callable[..., list[str]]:
    """Create real directories under tmp_path/dirs and return their paths."""

    def _make(*names: str) -> list[str]:
        out = []
        for name in names:
            d = tmp_path / "dirs" / name
            d.mkdir(parents=True, exist_ok=True)
            out.append(str(d))
        return out

    return _make


@pytest.fixture
def write_raw(tmp_path: Path) -> Callable[[Iterable[tuple[int, str]]], str]:
    """Write a ts<TAB>path raw log and return its path."""

    def _write(events: Iterable[tuple[int, str]], name: str = "cd_history_raw") -> str:
        p = tmp_path / name
        p.write_text("".join(f"{ts}\t{path}\n" for ts, path in events))
        return str(p)

    return _write


@pytest.fixture
def write_uniq(tmp_path: Path) -> Callable[[Iterable[str]], str]:
    """Write an oldest-first unique path list and return its path."""

    def _write(paths: Iterable[str], name: str = "cd_history") -> str:
        p = tmp_path / name
        p.write_text("".join(f"{path}\n" for path in paths))
        return str(p)

    return _write


def makeOpt(raw: str, uniq: str, **kwargs) -> RecommendOpt:
    params = {
        "limit": 10,
        "half_life": 3600.0,
        "threshold": 0.0,
        "check_dir": True,
        "uniq_decay": 0.85,
        "w_frecency": 0.7,
        "w_uniq": 0.3,
    }
    params.update(kwargs)
    return RecommendOpt(raw=raw, uniq=uniq, **params)
