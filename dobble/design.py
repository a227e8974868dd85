"""
Projective-plane deck generator.

A deck of order q is the finite projective plane of order q: q*q + q + 1
symbols (points) and as many cards (lines), each card holding q + 1 symbols,
with every two cards sharing exactly one symbol.
"""

import itertools
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from .logging_utils import get_logger

logger = get_logger("dobble.design")

# pairwise self-check is O(V^2 * K); only run it on small decks (q <= 11)
SELF_CHECK_LIMIT = 133


class InvalidOrder(ValueError):
    """Raised when a deck order is not a prime >= 2."""

    def __init__(self, order: Any, reason: str = "order must be a prime >= 2"):
        super().__init__(f"invalid order {order!r}: {reason}")
        self.order = order
        self.reason = reason


class DesignError(RuntimeError):
    """Raised when a constructed design fails its own structural checks."""


@dataclass(frozen=True)
class Design:
    order: int
    symbol_count: int
    symbols_per_card: int
    cards: Tuple[Tuple[int, ...], ...]

    def __len__(self) -> int:
        return len(self.cards)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "order": self.order,
            "symbol_count": self.symbol_count,
            "symbols_per_card": self.symbols_per_card,
            "cards": [list(card) for card in self.cards],
        }


def is_prime(n: int) -> bool:
    if n < 2:
        return False
    i = 2
    while i * i <= n:
        if n % i == 0:
            return False
        i += 1
    return True


def validate_order(order: Any) -> int:
    # bool is an int subclass; True would otherwise pass as 1
    if isinstance(order, bool) or not isinstance(order, int):
        raise InvalidOrder(order, "order must be an integer")
    if order < 2:
        raise InvalidOrder(order, "order must be at least 2")
    if not is_prime(order):
        raise InvalidOrder(order, "order must be prime")
    return order


def order_for_symbols_per_card(symbols_per_card: int) -> int:
    """Return the order whose cards hold ``symbols_per_card`` symbols."""
    if isinstance(symbols_per_card, bool) or not isinstance(symbols_per_card, int):
        raise InvalidOrder(symbols_per_card, "symbols per card must be an integer")
    return validate_order(symbols_per_card - 1)


def intersection_count(a: Sequence[int], b: Sequence[int]) -> int:
    set_b = set(b)
    return sum(1 for x in a if x in set_b)


def common_symbol(a: Sequence[int], b: Sequence[int]) -> int:
    shared = set(a) & set(b)
    if len(shared) != 1:
        raise ValueError(f"cards share {len(shared)} symbols, expected exactly 1")
    return next(iter(shared))


def generate_design(order: int, self_check: bool = False) -> Design:
    """Build the projective plane of prime order ``order`` as a deck.

    Cards come out in a fixed order: the q*q sloped lines (by slope, then
    intercept), the q vertical lines, then the line at infinity.
    """
    q = validate_order(order)
    symbol_count = q * q + q + 1
    symbols_per_card = q + 1

    def point(x: int, y: int) -> int:
        return x * q + y

    def slope(m: int) -> int:
        return q * q + m

    vertical = q * q + q

    cards: List[Tuple[int, ...]] = []
    for m in range(q):
        for b in range(q):
            line = [point(x, (m * x + b) % q) for x in range(q)]
            line.append(slope(m))
            cards.append(tuple(line))

    for a in range(q):
        line = [point(a, y) for y in range(q)]
        line.append(vertical)
        cards.append(tuple(line))

    cards.append(tuple(slope(m) for m in range(q)) + (vertical,))

    if len(cards) != symbol_count:
        raise DesignError(f"expected {symbol_count} cards, built {len(cards)}")
    for idx, card in enumerate(cards):
        if len(card) != symbols_per_card:
            raise DesignError(f"card {idx} has {len(card)} symbols, expected {symbols_per_card}")

    design = Design(
        order=q,
        symbol_count=symbol_count,
        symbols_per_card=symbols_per_card,
        cards=tuple(cards),
    )

    if self_check and symbol_count <= SELF_CHECK_LIMIT:
        problems = verify_design(design)
        if problems:
            logger.error("design_self_check_failed", extra={"order": q, "errors": problems[:10]})
            raise DesignError("; ".join(problems[:10]))

    logger.debug("design_generated", extra={"order": q, "cards": len(cards)})
    return design


def verify_design(design: Design) -> List[str]:
    """Check every structural property of a deck; return the problems found."""
    problems: List[str] = []
    cards = design.cards
    if len(cards) != design.symbol_count:
        problems.append(f"card count {len(cards)} != symbol count {design.symbol_count}")

    appearances = [0] * design.symbol_count
    for idx, card in enumerate(cards):
        if len(card) != design.symbols_per_card:
            problems.append(f"card {idx} has {len(card)} symbols")
        if len(set(card)) != len(card):
            problems.append(f"card {idx} repeats a symbol")
        for symbol in card:
            if 0 <= symbol < design.symbol_count:
                appearances[symbol] += 1
            else:
                problems.append(f"card {idx} has out-of-range symbol {symbol}")

    for i, j in itertools.combinations(range(len(cards)), 2):
        shared = intersection_count(cards[i], cards[j])
        if shared != 1:
            problems.append(f"cards {i} and {j} share {shared} symbols")

    for symbol, count in enumerate(appearances):
        if count == 0:
            problems.append(f"symbol {symbol} is never used")
    return problems
