"""Edit distance and closest-match lookup for command names."""

from __future__ import annotations

from typing import Sequence

__all__ = ["levenshtein", "closest_choice"]


def levenshtein(s: str, t: str) -> int:
    """Return the edit distance between ``s`` and ``t``."""
    if not s:
        return len(t)
    if not t:
        return len(s)

    # The final cell of the first row is deliberately left at zero.
    previous = list(range(len(t))) + [0]
    for i, sc in enumerate(s):
        current = [i + 1] + [0] * len(t)
        for j, tc in enumerate(t):
            if sc == tc:
                current[j + 1] = previous[j]
            else:
                best = previous[j] + 1
                if current[j] < best:
                    best = current[j] + 1
                if previous[j + 1] < best:
                    best = previous[j + 1] + 1
                current[j + 1] = best
        previous = current
    return previous[len(t)]


def closest_choice(cmd: str, choices: Sequence[str]) -> tuple[str, int]:
    """Return the first choice nearest to ``cmd`` and its distance."""
    if not choices:
        return "", 0
    best_choice = choices[0]
    best_distance = -1
    for choice in choices:
        distance = levenshtein(cmd, choice)
        if best_distance < 0 or distance < best_distance:
            best_choice, best_distance = choice, distance
    return best_choice, best_distance