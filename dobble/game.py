import datetime
import os
from typing import Any, Dict, List, Optional, Sequence, Tuple

from . import design, rng


DEFAULT_ORDER = int(os.getenv("DOBBLE_DEFAULT_ORDER", "7"))


def deal(order: int, seed: rng.SeedValue = None, count: Optional[int] = None) -> Dict[str, Any]:
    d = design.generate_design(order)
    cards = rng.sample_cards(d.cards, seed, count)
    return {
        "order": d.order,
        "seed": seed,
        "symbol_count": d.symbol_count,
        "symbols_per_card": d.symbols_per_card,
        "cards": [list(card) for card in cards],
    }


def today_str():
    return datetime.date.today().isoformat()


def daily_seed(date: str) -> str:
    return f"daily:{date}"


def daily_deck(date: str = "", order: int = DEFAULT_ORDER):
    date = date or today_str()
    deck = deal(order, daily_seed(date))
    deck["date"] = date
    return deck


def draw_pair(cards: Sequence[Any], seed: rng.SeedValue) -> Tuple[int, int]:
    """Pick two distinct card indices for a spot-the-match round."""
    if len(cards) < 2:
        raise ValueError("need at least two cards to draw a pair")
    stream = rng.SeededRandom(seed)
    first = stream.randint(0, len(cards) - 1)
    # draw from the remaining n-1 slots and skip over the first pick
    second = stream.randint(0, len(cards) - 2)
    if second >= first:
        second += 1
    return first, second


def round_for_deck(deck: Dict[str, Any]) -> Dict[str, Any]:
    """Pick the day's two cards from a daily deck."""
    i, j = draw_pair(deck["cards"], daily_seed(deck["date"]) + ":pair")
    return {
        "date": deck["date"],
        "order": deck["order"],
        "cards": [i, j],
        "card_a": deck["cards"][i],
        "card_b": deck["cards"][j],
    }


def check_match(card_a: Sequence[int], card_b: Sequence[int], symbol: int) -> bool:
    try:
        return design.common_symbol(card_a, card_b) == symbol
    except ValueError:
        return False


def match_cards(cards: List[List[int]], indices: Sequence[int]) -> Tuple[List[int], List[int]]:
    if len(indices) != 2:
        raise ValueError("must pick exactly two cards")
    i, j = indices
    if i == j:
        raise ValueError("cards must be different")
    if not (0 <= i < len(cards) and 0 <= j < len(cards)):
        raise ValueError("index out of range")
    return cards[i], cards[j]
