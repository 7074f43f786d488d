"""Min-max normalisation and weighted fusion of raw frecency + unique recency."""

from __future__ import annotations

import logging
import math
import sys
import time

from cdh.models import Recommendation, RecommendOpt
from cdh.search.loaders import PathFilter, buildFrecencyFromRaw, loadUniqScores

logger = logging.getLogger("cdh")


def nowSecs() -> int:
    return int(time.time())


def normalize01(scores: dict[str, float]) -> dict[str, float]:
    """Scale values linearly into [0, 1].

    Degenerate maps (single entry, all values equal) map every key to 1.0.
    """
    if not scores:
        return {}
    vmin = min(scores.values())
    vmax = max(scores.values())
    degenerate = not (math.isfinite(vmin) and math.isfinite(vmax))
    if degenerate or abs(vmax - vmin) < sys.float_info.epsilon:
        return dict.fromkeys(scores, 1.0)
    span = vmax - vmin
    return {k: (v - vmin) / span for k, v in scores.items()}


def fuseScores(
    frecency: dict[str, float],
    uniq: dict[str, float],
    candidates: set[str],
    opt: RecommendOpt,
) -> list[Recommendation]:
    """Normalise both lanes, combine linearly, filter, sort, truncate.

    Ordering: fused desc, normalised frecency desc, path asc.
    """
    fre_norm = normalize01(frecency)
    uniq_norm = normalize01(uniq)

    items: list[tuple[str, float, float]] = []
    for path in candidates:
        fz = fre_norm.get(path, 0.0)
        uz = uniq_norm.get(path, 0.0)
        fused = opt.w_frecency * fz + opt.w_uniq * uz
        if opt.threshold > 0 and fused < opt.threshold:
            continue
        items.append((path, fused, fz))

    items.sort(key=lambda it: (-it[1], -it[2], it[0]))
    return [Recommendation(path=p, score=s) for p, s, _ in items[: opt.limit]]


def recommendWithNow(opt: RecommendOpt, now: int) -> list[Recommendation]:
    """Rank candidate directories at an explicit ``now`` (epoch seconds)."""
    path_filter = PathFilter(ignore=opt.ignore, tokens=opt.tokens, check_dir=opt.check_dir)

    uniq_scores = loadUniqScores(opt.uniq, path_filter, opt.uniq_decay)
    index, seen_raw = buildFrecencyFromRaw(opt.raw, path_filter, opt.half_life)

    candidates = seen_raw | uniq_scores.keys()

    # Paths never visited in the raw log stay out of the frecency lane entirely.
    fre_scores: dict[str, float] = {}
    for path in candidates:
        s = index.scoreAt(path, now)
        if s > 0.0:
            fre_scores[path] = s

    results = fuseScores(fre_scores, uniq_scores, candidates, opt)
    logger.info(
        "Ranked %d candidates (%d raw, %d unique) -> %d results",
        len(candidates),
        len(seen_raw),
        len(uniq_scores),
        len(results),
    )
    return results


def recommend(opt: RecommendOpt) -> list[Recommendation]:
    """Rank candidate directories at the current wall-clock time."""
    return recommendWithNow(opt, nowSecs())


def recommendPaths(opt: RecommendOpt, now: int | None = None) -> list[str]:
    """Same ranking as ``recommend``, paths only."""
    results = recommend(opt) if now is None else recommendWithNow(opt, now)
    return [r.path for r in results]
