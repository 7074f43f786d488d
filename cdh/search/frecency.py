"""Frecency scoring: exponential half-life decay with O(1) online updates.

Timestamps are integer seconds. A visit at ``t`` contributes
``0.5 ** ((now - t) / half_life)`` to the score at ``now``; visits in the
future contribute 1.0 and are never amplified.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass


class DecayModel:
    """Half-life decay. The only parameter is ``half_life_secs``."""

    __slots__ = ("_half_life",)

    def __init__(self, half_life_secs: float):
        if not (math.isfinite(half_life_secs) and half_life_secs > 0):
            raise ValueError(f"half_life_secs must be finite and > 0, got {half_life_secs!r}")
        self._half_life = float(half_life_secs)

    @property
    def half_life_secs(self) -> float:
        return self._half_life

    def weight(self, dt_secs: float) -> float:
        """Decay weight 0.5^(dt / half_life); 1.0 for dt <= 0."""
        if dt_secs <= 0:
            return 1.0
        return 0.5 ** (dt_secs / self._half_life)

    def batchScore(self, events: Iterable[int], now: int) -> float:
        """Sum of decay weights of all event timestamps at ``now``."""
        return sum(self.weight(now - t) for t in sorted(events))

    def __repr__(self) -> str:
        return f"DecayModel(half_life_secs={self._half_life!r})"


@dataclass
class VisitState:
    """Running decayed visit total anchored at ``last_ts``.

    In-order visit:  score = score * weight(ts - last_ts) + 1, last_ts = ts.
    Late visit (ts < last_ts): counted as simultaneous with the anchor, so only
    +1 is applied and ``last_ts`` stays put.
    """

    score: float = 0.0
    last_ts: int = 0
    initialized: bool = False

    def observe(self, ts: int, model: DecayModel) -> None:
        if not self.initialized:
            self.score = 1.0
            self.last_ts = ts
            self.initialized = True
            return

        dt = ts - self.last_ts
        if dt >= 0:
            self.score = self.score * model.weight(dt) + 1.0
            self.last_ts = ts
        else:
            self.score += 1.0

    def scoreAt(self, now: int, model: DecayModel) -> float:
        if not self.initialized:
            return 0.0
        return self.score * model.weight(max(0, now - self.last_ts))


def _rankKey(item: tuple[str, float]) -> tuple[float, str]:
    """Score descending, then key ascending."""
    return (-item[1], item[0])


class ScoreIndex:
    """Per-directory VisitState map bound to a single DecayModel."""

    def __init__(self, model: DecayModel):
        self.model = model
        self._states: dict[str, VisitState] = {}

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, key: object) -> bool:
        return key in self._states

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def keys(self) -> list[str]:
        return list(self._states)

    def recordVisit(self, key: str, ts: int) -> None:
        state = self._states.get(key)
        if state is None:
            state = self._states[key] = VisitState()
        state.observe(ts, self.model)

    def scoreAt(self, key: str, now: int) -> float:
        state = self._states.get(key)
        return state.scoreAt(now, self.model) if state else 0.0

    def _scored(self, now: int) -> list[tuple[str, float]]:
        scored = [(k, st.scoreAt(now, self.model)) for k, st in self._states.items()]
        scored.sort(key=_rankKey)
        return scored

    def topN(self, now: int, n: int) -> list[tuple[str, float]]:
        """Highest-scoring (key, score) pairs at ``now``, ties broken by key."""
        return self._scored(now)[: max(0, n)]

    def pruneBelow(self, now: int, threshold: float) -> int:
        """Drop entries scoring < threshold at ``now``. Returns the number removed."""
        doomed = [k for k, st in self._states.items() if st.scoreAt(now, self.model) < threshold]
        for k in doomed:
            del self._states[k]
        return len(doomed)

    def capLen(self, now: int, max_entries: int) -> int:
        """Keep only the ``max_entries`` best keys, same ordering as topN."""
        if len(self._states) <= max_entries:
            return 0
        keep = {k for k, _ in self._scored(now)[: max(0, max_entries)]}
        removed = len(self._states) - len(keep)
        self._states = {k: st for k, st in self._states.items() if k in keep}
        return removed
