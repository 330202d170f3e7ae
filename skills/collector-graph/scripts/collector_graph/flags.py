from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Sequence, Tuple


OPTION_PREFIX = "-XX:"
POSITIVE = "+"
NEGATIVE = "-"

DEFAULT_TITLE = "HotSpot JVM Collector Options"

# Collector selection switches known to HotSpot, positives then negatives.
HOTSPOT_GC_SWITCHES = (
    "UseConcMarkSweepGC",
    "UseG1GC",
    "UseParNewGC",
    "UseParallelGC",
    "UseParallelOldGC",
    "UseSerialGC",
)


@dataclass(frozen=True)
class Flag:
    token: str

    def __post_init__(self) -> None:
        body = self._body()
        if len(body) < 2 or body[0] not in (POSITIVE, NEGATIVE):
            raise ValueError(f"flag has no polarity sign: {self.token!r}")

    def _body(self) -> str:
        if self.token.startswith(OPTION_PREFIX):
            return self.token[len(OPTION_PREFIX) :]
        return self.token

    @property
    def negative(self) -> bool:
        return self._body()[0] == NEGATIVE

    @property
    def switch(self) -> str:
        return self._body()[1:]

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True)
class Combination:
    """One to two flags probed together.

    Equality and hashing use set membership, so ``{a, b}`` and ``{b, a}`` are
    the same combination. ``flags`` keeps vocabulary order for rendering.
    """

    flags: Tuple[Flag, ...] = field(compare=False)
    members: FrozenSet[Flag] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "members", frozenset(self.flags))

    def __len__(self) -> int:
        return len(self.flags)

    def __iter__(self):
        return iter(self.flags)

    @property
    def tokens(self) -> List[str]:
        return [flag.token for flag in self.flags]

    @property
    def label(self) -> str:
        return " ".join(self.tokens)

    def positives(self) -> "Combination":
        return Combination(tuple(flag for flag in self.flags if not flag.negative))


def parse_vocabulary(tokens: Iterable[str]) -> List[Flag]:
    vocabulary = [Flag(token) for token in tokens]
    seen = set()
    for flag in vocabulary:
        if flag in seen:
            raise ValueError(f"duplicate flag in vocabulary: {flag.token}")
        seen.add(flag)
    return vocabulary


def hotspot_vocabulary(switches: Sequence[str] = HOTSPOT_GC_SWITCHES) -> List[Flag]:
    tokens = [f"{OPTION_PREFIX}{POSITIVE}{name}" for name in switches]
    tokens.extend(f"{OPTION_PREFIX}{NEGATIVE}{name}" for name in switches)
    return parse_vocabulary(tokens)
