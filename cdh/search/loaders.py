"""Streaming loaders for the raw visit log and the most-recent-unique list."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable, Iterator

from cdh.models import PathMatcher, RawEvent
from cdh.search.frecency import DecayModel, ScoreIndex

logger = logging.getLogger("cdh")

_TIMESTAMP = re.compile(r"[+-]?[0-9]+")
_TS_MIN, _TS_MAX = -(2**63), 2**63 - 1  # int64 seconds


class PathFilter:
    """Ignore-pattern, keyword and directory-existence checks, in that order."""

    __slots__ = ("ignore", "tokens", "check_dir")

    def __init__(
        self,
        ignore: PathMatcher | None = None,
        tokens: Iterable[str] = (),
        check_dir: bool = True,
    ):
        self.ignore = ignore
        self.tokens = tuple(t.lower() for t in tokens)
        self.check_dir = check_dir

    def accepts(self, path: str) -> bool:
        if self.ignore is not None and self.ignore(path):
            return False
        if self.tokens:
            lp = path.lower()
            if not any(tk in lp for tk in self.tokens):
                return False
        if self.check_dir and not os.path.isdir(path):
            return False
        return True


def _iterLines(file_path: str) -> Iterator[str]:
    """Yield decoded lines of a UTF-8 file, skipping undecodable ones.

    A missing or unreadable file yields nothing.
    """
    try:
        with open(os.path.expanduser(file_path), "rb") as f:
            for raw in f:
                try:
                    yield raw.decode("utf-8").rstrip("\r\n")
                except UnicodeDecodeError:
                    continue
    except OSError as e:
        logger.debug("History source %s unavailable: %s", file_path, e)


def _parseRawLine(line: str) -> RawEvent | None:
    ts, sep, path = line.partition("\t")
    if not sep:
        return None
    if not _TIMESTAMP.fullmatch(ts):
        return None
    # int() refuses very long digit strings, so bound the length first
    if len(ts.lstrip("+-").lstrip("0")) > 19:
        return None
    t = int(ts)
    if not _TS_MIN <= t <= _TS_MAX:
        return None
    path = path.strip()
    if not path:
        return None
    return RawEvent(ts=t, path=path)


def iterRawEvents(raw_file: str) -> Iterator[RawEvent]:
    """Parse ``ts<TAB>path`` lines; malformed lines are skipped silently."""
    for line in _iterLines(raw_file):
        event = _parseRawLine(line)
        if event is not None:
            yield event


def buildFrecencyFromRaw(
    raw_file: str,
    path_filter: PathFilter,
    half_life: float,
) -> tuple[ScoreIndex, set[str]]:
    """Stream the raw log into a fresh ScoreIndex.

    Returns (index, seen) where ``seen`` holds every accepted path. A record
    identical to the previously accepted (ts, path) is dropped as a duplicate
    write.
    """
    index = ScoreIndex(DecayModel(half_life))
    seen: set[str] = set()
    last: tuple[int, str] | None = None
    skipped = 0

    for event in iterRawEvents(raw_file):
        if not path_filter.accepts(event.path):
            skipped += 1
            continue
        key = (event.ts, event.path)
        if key == last:
            continue
        last = key
        index.recordVisit(event.path, event.ts)
        seen.add(event.path)

    logger.debug("Raw log %s: %d paths, %d filtered lines", raw_file, len(seen), skipped)
    return index, seen


def loadUniqScores(
    uniq_file: str,
    path_filter: PathFilter,
    decay: float,
) -> dict[str, float]:
    """Geometric rank scores for the unique list: newest = 1.0, next = decay, ...

    The file is oldest-first. Rank only advances on accepted lines; a repeated
    path keeps its most recent (highest) score.
    """
    lines = [s for s in (line.strip() for line in _iterLines(uniq_file)) if s]
    scores: dict[str, float] = {}
    k = 0
    for path in reversed(lines):
        if not path_filter.accepts(path):
            continue
        s = decay**k
        if s > scores.get(path, -1.0):
            scores[path] = s
        k += 1
    logger.debug("Unique list %s: %d of %d lines scored", uniq_file, len(scores), len(lines))
    return scores
