"""
Seeded, reproducible shuffling for deck presentation order.

Seeds are hashed with xmur3 into a 32-bit state that drives a mulberry32
generator. This is not a cryptographic RNG; it only guarantees that the same
seed always produces the same sequence.
"""

from typing import Any, List, MutableSequence, Optional, Sequence, TypeVar, Union

T = TypeVar("T")
SeedValue = Union[str, int, None]

DEFAULT_SEED = "dobble"
_MASK32 = 0xFFFFFFFF


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


def _utf16_units(text: str) -> List[int]:
    data = text.encode("utf-16-le")
    return [int.from_bytes(data[i:i + 2], "little") for i in range(0, len(data), 2)]


def seed_to_state(seed: SeedValue) -> int:
    """Hash a seed (string or int) into an unsigned 32-bit PRNG state."""
    text = DEFAULT_SEED if seed is None or seed == "" else str(seed)
    units = _utf16_units(text)
    h = (1779033703 ^ len(units)) & _MASK32
    for unit in units:
        h = _imul(h ^ unit, 3432918353)
        h = ((h << 13) | (h >> 19)) & _MASK32
    h = _imul(h ^ (h >> 16), 2246822507)
    h = _imul(h ^ (h >> 13), 3266489909)
    h ^= h >> 16
    return h & _MASK32


class SeededRandom:
    """mulberry32 stream seeded from an arbitrary string or integer."""

    def __init__(self, seed: SeedValue = None):
        self.seed = seed
        self._state = seed_to_state(seed)

    def next_uint32(self) -> int:
        self._state = (self._state + 0x6D2B79F5) & _MASK32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t = (t ^ ((t + _imul(t ^ (t >> 7), t | 61)) & _MASK32)) & _MASK32
        return (t ^ (t >> 14)) & _MASK32

    def random(self) -> float:
        """Float in [0, 1)."""
        return self.next_uint32() / 4294967296

    def randint(self, low: int, high: int) -> int:
        """Integer in [low, high] inclusive."""
        if high < low:
            raise ValueError(f"empty range [{low}, {high}]")
        return low + int(self.random() * (high - low + 1))


def shuffle_in_place(items: MutableSequence[Any], rng: SeededRandom) -> MutableSequence[Any]:
    # Fisher-Yates, last index down to 1
    for i in range(len(items) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        items[i], items[j] = items[j], items[i]
    return items


def shuffle(items: Sequence[T], seed: SeedValue) -> List[T]:
    """Return a new list holding ``items`` in a seed-determined order."""
    out = list(items)
    shuffle_in_place(out, SeededRandom(seed))
    return out


def sample_cards(cards: Sequence[T], seed: SeedValue, count: Optional[int] = None) -> List[T]:
    """Shuffle card order with ``seed`` and keep the first ``count`` cards.

    ``count`` is clamped to [1, len(cards)]; None keeps every card.
    """
    if not cards:
        return []
    order = shuffle(range(len(cards)), seed)
    if count is not None:
        order = order[:max(1, min(count, len(cards)))]
    return [cards[i] for i in order]
