"""Fuzzy ranking of indexed file paths."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from .models import Entry

SCORE_MATCH = 16
BONUS_CONSECUTIVE = 24
BONUS_BOUNDARY = 10
BONUS_CAMEL = 8
PENALTY_GAP_START = 3
PENALTY_GAP_EXTENSION = 1
# candidate length is folded into the score below every other component
LENGTH_SCALE = 1024

_SEPARATORS = frozenset("/\\_-. ")


@dataclass(frozen=True, slots=True)
class FuzzyMatch:
    score: int
    positions: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class SearchResult:
    """Container describing a single fuzzy search hit."""

    entry: Entry
    score: int
    positions: tuple[int, ...] = ()

    @property
    def path(self) -> str:
        return self.entry.rel_path

    @property
    def name(self) -> str:
        return self.entry.name

    def to_dict(self) -> dict[str, str]:
        return {"path": self.entry.rel_path, "name": self.entry.name}


def _boundary_bonus(text: str, index: int) -> int:
    if index == 0:
        return BONUS_BOUNDARY
    previous = text[index - 1]
    current = text[index]
    if previous in _SEPARATORS:
        return BONUS_BOUNDARY
    if previous.islower() and current.isupper():
        return BONUS_CAMEL
    if previous.isalpha() and current.isdigit():
        return BONUS_CAMEL
    return 0


def _match_window(needle: Sequence[str], haystack: Sequence[str]) -> tuple[int, int] | None:
    """Return the column range any alignment must fall in, or None if unmatched."""

    position = 0
    first = -1
    for char in needle:
        while position < len(haystack) and haystack[position] != char:
            position += 1
        if position == len(haystack):
            return None
        if first < 0:
            first = position
        position += 1
    last = len(haystack) - 1
    while haystack[last] != needle[-1]:
        last -= 1
    return first, last


def fuzzy_match(query: str, candidate: str) -> FuzzyMatch | None:
    """Score *candidate* against *query*, or return None when it does not match.

    A candidate matches when every query character appears in it, in order and
    ignoring case. Among all such alignments the best scoring one is chosen by
    dynamic programming: each matched character earns ``SCORE_MATCH`` plus a
    boundary bonus (start of text, after a separator, camel-case hump), a
    character directly following the previous match earns
    ``BONUS_CONSECUTIVE`` and a skipped run costs ``PENALTY_GAP_START`` plus
    ``PENALTY_GAP_EXTENSION`` per extra skipped character. Shorter candidates
    win ties.
    """

    if not query:
        return FuzzyMatch(score=0)
    needle = [char.lower() for char in query]
    haystack = [char.lower() for char in candidate]
    window = _match_window(needle, haystack)
    if window is None:
        return None
    low, high = window
    width = len(haystack)

    bonus = [0] * width
    for column in range(low, high + 1):
        bonus[column] = _boundary_bonus(candidate, column)

    previous: list[int | None] = [None] * width
    for column in range(low, high + 1):
        if haystack[column] == needle[0]:
            previous[column] = SCORE_MATCH + bonus[column]
    pointers: list[list[int]] = [[-1] * width]

    for row in range(1, len(needle)):
        current: list[int | None] = [None] * width
        sources = [-1] * width
        gap_best: int | None = None
        gap_from = -1
        for column in range(low + row, high + 1):
            if gap_best is not None:
                gap_best -= PENALTY_GAP_EXTENSION
            skipped_from = column - 2
            if skipped_from >= low:
                prior = previous[skipped_from]
                if prior is not None:
                    opened = prior - PENALTY_GAP_START
                    if gap_best is None or opened > gap_best:
                        gap_best = opened
                        gap_from = skipped_from
            if haystack[column] != needle[row]:
                continue
            best: int | None = None
            source = -1
            adjacent = previous[column - 1]
            if adjacent is not None:
                best = adjacent + BONUS_CONSECUTIVE
                source = column - 1
            if gap_best is not None and (best is None or gap_best > best):
                best = gap_best
                source = gap_from
            if best is None:
                continue
            current[column] = best + SCORE_MATCH + bonus[column]
            sources[column] = source
        previous = current
        pointers.append(sources)

    end = -1
    raw: int | None = None
    for column in range(low, high + 1):
        value = previous[column]
        if value is not None and (raw is None or value > raw):
            raw = value
            end = column
    if raw is None:
        return None

    positions = [end]
    for row in range(len(needle) - 1, 0, -1):
        positions.append(pointers[row][positions[-1]])
    positions.reverse()

    score = raw * LENGTH_SCALE - min(len(candidate), LENGTH_SCALE - 1)
    return FuzzyMatch(score=score, positions=tuple(positions))


def fuzzy_search(
    query: str,
    entries: Sequence[Entry],
    *,
    limit: int | None = None,
) -> List[SearchResult]:
    """Return the entries whose path fuzzy-matches *query*, best first.

    Equal scores keep the index order. A blank query matches every entry with
    score 0. ``limit`` of None or 0 returns every match.
    """

    needle = query.strip()
    if not needle:
        results = [SearchResult(entry=entry, score=0) for entry in entries]
    else:
        results = []
        for entry in entries:
            match = fuzzy_match(needle, entry.rel_path)
            if match is None:
                continue
            results.append(
                SearchResult(entry=entry, score=match.score, positions=match.positions)
            )
        results.sort(key=lambda item: item.score, reverse=True)
    if limit:
        return results[:limit]
    return results
