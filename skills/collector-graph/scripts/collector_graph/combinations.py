from __future__ import annotations

from itertools import combinations
from typing import Iterable, List, Sequence

from .flags import Combination, Flag, parse_vocabulary


MAX_ARITY = 2


def generate_combinations(vocabulary: Sequence[Flag]) -> List[Combination]:
    """Every combination of one or two vocabulary flags, singletons first."""
    vocab = parse_vocabulary(flag.token for flag in vocabulary)
    result: List[Combination] = []
    for size in range(1, MAX_ARITY + 1):
        for group in combinations(vocab, size):
            result.append(Combination(tuple(group)))
    return result


def is_all_negative(combo: Combination) -> bool:
    return all(flag.negative for flag in combo)


def is_self_contradiction(combo: Combination) -> bool:
    if len(combo) != 2:
        return False
    first, second = combo.flags
    return first.switch == second.switch and first.negative != second.negative


def static_filter(combos: Iterable[Combination]) -> List[Combination]:
    kept: List[Combination] = []
    for combo in combos:
        if is_all_negative(combo):
            continue
        if is_self_contradiction(combo):
            continue
        kept.append(combo)
    return kept
