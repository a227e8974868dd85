"""Mapping abstract symbol ids to the labels a consumer will render."""

import re
from typing import List, Optional, Sequence


class InsufficientSymbols(ValueError):
    """Raised when fewer labels are available than a deck needs."""

    def __init__(self, required: int, available: int):
        super().__init__(f"need {required} symbols, only {available} available")
        self.required = required
        self.available = available


def parse_custom_symbols(text: Optional[str]) -> List[str]:
    """Split free text on newlines/commas into unique, non-empty labels."""
    if not text:
        return []
    seen = set()
    result: List[str] = []
    for raw in re.split(r"[\n,]", text):
        label = raw.strip()
        if label and label not in seen:
            seen.add(label)
            result.append(label)
    return result


def fallback_labels(count: int) -> List[str]:
    return [str(i + 1) for i in range(count)]


def assign_labels(symbol_count: int, labels: Optional[Sequence[str]] = None, pad: bool = True) -> List[str]:
    """Return exactly ``symbol_count`` unique labels, one per symbol id.

    Missing slots are padded with numbers, starting from the first missing
    slot's 1-based position and skipping any number already used as a label.
    Extra labels are dropped.
    """
    given = list(labels or [])
    if len(given) < symbol_count and not pad:
        raise InsufficientSymbols(symbol_count, len(given))
    if not given:
        return fallback_labels(symbol_count)
    if len(set(given)) != len(given):
        raise ValueError("labels must be unique")
    out = given[:symbol_count]
    used = set(out)
    number = len(out) + 1
    while len(out) < symbol_count:
        label = str(number)
        number += 1
        if label not in used:
            used.add(label)
            out.append(label)
    return out


def label_cards(cards: Sequence[Sequence[int]], labels: Sequence[str]) -> List[List[str]]:
    return [[labels[symbol] for symbol in card] for card in cards]
