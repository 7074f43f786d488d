"""cdh: rank the directories you are likely to cd into next."""

from __future__ import annotations

from cdh.models import Recommendation, RecommendOpt
from cdh.search.frecency import DecayModel, ScoreIndex, VisitState
from cdh.search.fusion import recommend, recommendPaths, recommendWithNow
from cdh.version import __version__

__all__ = [
    "DecayModel",
    "Recommendation",
    "RecommendOpt",
    "ScoreIndex",
    "VisitState",
    "__version__",
    "recommend",
    "recommendPaths",
    "recommendWithNow",
]
