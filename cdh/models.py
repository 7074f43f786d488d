"""Pydantic models for history events, engine options, and recommendations."""

from __future__ import annotations

import math
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Predicate "does this path match"; loaders never see a compiled regex.
PathMatcher = Callable[[str], bool]


class RawEvent(BaseModel):
    ts: int
    path: str


class Recommendation(BaseModel):
    path: str
    score: float  # fused score in [0, 1] when weights sum to 1


class RecommendOpt(BaseModel):
    """Immutable configuration snapshot for one recommendation run."""

    model_config = ConfigDict(frozen=True)

    raw: str  # ts<TAB>path log
    uniq: str  # most-recent-unique path list, oldest first
    limit: int = Field(default=20, ge=0)
    half_life: float = 7 * 24 * 3600.0
    threshold: float = 0.0  # <= 0 disables filtering
    ignore: PathMatcher | None = None
    tokens: tuple[str, ...] = ()
    check_dir: bool = True
    uniq_decay: float = Field(default=0.85, gt=0.0, le=1.0)
    w_frecency: float = 0.7
    w_uniq: float = 0.3

    @field_validator("w_frecency", "w_uniq", "threshold")
    @classmethod
    def _finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("must be a finite number")
        return v
