import collections
import dataclasses
from collections.abc import Sequence
from typing import Optional

import numpy as np

from .bindiff import BinDiff
from .models import FunctionMatch


@dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class ScoreStats:
    mean: float
    median: float
    min: float
    max: float


@dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class MatchSummary:
    function_matches: int
    basic_block_matches: int
    instruction_matches: int
    similarity: Optional[ScoreStats] = None
    confidence: Optional[ScoreStats] = None
    algorithms: dict[str, int] = dataclasses.field(default_factory=dict)


def score_stats(scores: Sequence[float]) -> Optional[ScoreStats]:
    if not scores:
        return None
    values = np.asarray(scores, dtype=np.float64)
    return ScoreStats(
        mean=float(values.mean()),
        median=float(np.median(values)),
        min=float(values.min()),
        max=float(values.max()),
    )


def summarize_function_matches(
    matches: Sequence[FunctionMatch], *, basic_block_matches: int = 0, instruction_matches: int = 0
) -> MatchSummary:
    # keep the order in which algorithms first show up in the store
    algorithms: dict[str, int] = collections.Counter(m.algorithm.label for m in matches)
    return MatchSummary(
        function_matches=len(matches),
        basic_block_matches=basic_block_matches,
        instruction_matches=instruction_matches,
        similarity=score_stats([m.similarity for m in matches]),
        confidence=score_stats([m.confidence for m in matches]),
        algorithms=dict(algorithms),
    )


def summarize(bindiff: BinDiff) -> MatchSummary:
    return summarize_function_matches(
        bindiff.read_function_matches(),
        basic_block_matches=bindiff.count_basic_block_matches(),
        instruction_matches=bindiff.count_instruction_matches(),
    )
