"""Fuzzy matching of completion candidates.

Matches if all pattern characters appear in the candidate in order (not
necessarily consecutive), ignoring case. Higher score = better match.

The alignment with the best score is found by dynamic programming, rewarding
matches at word boundaries and camel case humps, consecutive runs, and
penalizing gaps between the matched characters.
"""

from __future__ import annotations

import logging
from typing import Protocol

log = logging.getLogger(__name__)

SCORE_MATCH = 16
SCORE_GAP_START = -3
SCORE_GAP_EXTENSION = -1
BONUS_BOUNDARY = SCORE_MATCH // 2
BONUS_NON_WORD = SCORE_MATCH // 2
BONUS_CAMEL = BONUS_BOUNDARY + SCORE_GAP_EXTENSION
BONUS_CONSECUTIVE = -(SCORE_GAP_START + SCORE_GAP_EXTENSION)
BONUS_FIRST_CHAR_MULTIPLIER = 2

FuzzyResult = tuple[int, list[int]]


class FuzzyScorer(Protocol):
    def fuzzy_indices(self, choice: str, pattern: str) -> FuzzyResult | None:
        """Score `pattern` against `choice`, `None` means no match."""
        ...


def char_bonus(choice: str, i: int) -> int:
    """Bonus for matching the character at index `i` of `choice`."""
    c = choice[i]
    if not c.isalnum():
        return BONUS_NON_WORD
    if i == 0:
        return BONUS_BOUNDARY

    prev = choice[i - 1]
    if not prev.isalnum():
        return BONUS_BOUNDARY
    if prev.islower() and c.isupper():
        return BONUS_CAMEL
    if prev.isalpha() and c.isdigit():
        return BONUS_CAMEL
    return 0


def is_subsequence(choice: str, pattern: str) -> bool:
    it = iter(choice)
    return all(any(c == p for c in it) for p in pattern)


class FuzzyMatcher:
    """Default scorer, see module documentation."""

    def fuzzy_match(self, choice: str, pattern: str) -> int | None:
        res = self.fuzzy_indices(choice, pattern)
        return res[0] if res else None

    def fuzzy_indices(self, choice: str, pattern: str) -> FuzzyResult | None:
        if not pattern:
            return 0, []

        choice_lower = [c.lower() for c in choice]
        pattern_lower = [p.lower() for p in pattern]
        if len(pattern_lower) > len(choice_lower) or not is_subsequence(
            choice_lower, pattern_lower
        ):
            return None

        n = len(choice_lower)
        bonuses = [char_bonus(choice, i) for i in range(n)]

        # scores[i][j] is the best score of pattern[:i + 1] with pattern[i]
        # matched at choice[j], origins[i][j] is where pattern[i - 1] matched
        scores: list[list[int | None]] = []
        origins: list[list[int]] = []

        for i, p in enumerate(pattern_lower):
            row: list[int | None] = [None] * n
            origin = [-1] * n
            prev = scores[i - 1] if i else None

            # Best score of the previous row ending at least two characters
            # before the current one, together with the gap penalty
            gap_score: int | None = None
            gap_origin = -1

            for j in range(n):
                if prev is not None and j >= 2 and prev[j - 2] is not None:
                    opened = prev[j - 2] + SCORE_GAP_START
                    extended = gap_score + SCORE_GAP_EXTENSION if gap_score is not None else None
                    if extended is None or opened >= extended:
                        gap_score, gap_origin = opened, j - 2
                    else:
                        gap_score = extended
                elif gap_score is not None:
                    gap_score += SCORE_GAP_EXTENSION

                if choice_lower[j] != p:
                    continue

                if prev is None:
                    row[j] = SCORE_MATCH + bonuses[j] * BONUS_FIRST_CHAR_MULTIPLIER
                    continue

                best: int | None = None
                if j >= 1 and prev[j - 1] is not None:
                    best = prev[j - 1] + max(BONUS_CONSECUTIVE, bonuses[j])
                    origin[j] = j - 1
                if gap_score is not None and (best is None or gap_score > best):
                    best = gap_score
                    origin[j] = gap_origin
                if best is not None:
                    row[j] = best + SCORE_MATCH + bonuses[j]

            scores.append(row)
            origins.append(origin)

        last = scores[-1]
        end = -1
        for j, score in enumerate(last):
            if score is not None and (end == -1 or score > last[end]):
                end = j
        if end == -1:
            return None

        indices = [end]
        for i in range(len(pattern_lower) - 1, 0, -1):
            indices.append(origins[i][indices[-1]])
        indices.reverse()

        score = last[end]
        log.debug(f"[FUZZY] {pattern!r} matched {choice!r} with {score} at {indices}")
        return score, indices
