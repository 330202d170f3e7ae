from __future__ import annotations

from typing import Dict, Mapping, Optional, Sequence

from .flags import Combination


def reduced_form(combo: Combination) -> Optional[Combination]:
    """The positive-only singleton for a pair, or ``None`` when there is none."""
    if len(combo) != 2:
        return None
    reduced = combo.positives()
    if len(reduced) != 1:
        return None
    return reduced


def is_redundant(combo: Combination, results: Mapping[Combination, Sequence[str]]) -> bool:
    reduced = reduced_form(combo)
    if reduced is None or reduced not in results:
        return False
    return tuple(results[reduced]) == tuple(results[combo])


def drop_redundant_negatives(
    results: Mapping[Combination, Sequence[str]],
) -> Dict[Combination, Sequence[str]]:
    # e.g. "-XX:+UseG1GC -XX:-UseSerialGC" selects the same collectors as "-XX:+UseG1GC"
    return {
        combo: names
        for combo, names in results.items()
        if not is_redundant(combo, results)
    }
