from collections import Counter

import pytest

from dobble import rng


def test_shuffle_is_a_permutation():
    items = list(range(50))
    out = rng.shuffle(items, "abc")
    assert sorted(out) == items
    assert len(out) == len(items)
    # input untouched
    assert items == list(range(50))


def test_shuffle_is_deterministic():
    items = ["a", "b", "c", "d", "e", "f", "g"]
    assert rng.shuffle(items, "seed-1") == rng.shuffle(items, "seed-1")
    assert rng.shuffle(items, 42) == rng.shuffle(items, 42)


def test_int_and_string_seed_are_equivalent():
    items = list(range(10))
    assert rng.shuffle(items, 42) == rng.shuffle(items, "42")


def test_different_seeds_differ():
    items = list(range(20))
    results = {tuple(rng.shuffle(items, f"s{i}")) for i in range(10)}
    assert len(results) > 1
    assert rng.shuffle(items, "alpha") != rng.shuffle(items, "beta")


def test_empty_and_single():
    assert rng.shuffle([], "x") == []
    assert rng.shuffle([7], "x") == [7]


def test_default_seed_used_for_empty_values():
    assert rng.seed_to_state(None) == rng.seed_to_state("") == rng.seed_to_state("dobble")


def test_state_is_32_bit():
    for seed in ("", "a", "hello world", 123456789, "測試", "\U0001F600"):
        state = rng.seed_to_state(seed)
        assert 0 <= state < 2 ** 32


def test_stream_reproducible_and_in_range():
    a = rng.SeededRandom("stream")
    b = rng.SeededRandom("stream")
    va = [a.random() for _ in range(100)]
    vb = [b.random() for _ in range(100)]
    assert va == vb
    assert all(0.0 <= v < 1.0 for v in va)


def test_randint_bounds():
    r = rng.SeededRandom(1)
    vals = [r.randint(3, 5) for _ in range(300)]
    assert set(vals) == {3, 4, 5}
    with pytest.raises(ValueError):
        r.randint(5, 3)


def test_first_position_roughly_uniform():
    counts = Counter(rng.shuffle([0, 1, 2, 3], f"seed-{i}")[0] for i in range(4000))
    for k in range(4):
        assert 800 < counts[k] < 1200


def test_sample_cards_truncates_and_clamps():
    cards = [[i] for i in range(13)]
    assert len(rng.sample_cards(cards, "x")) == 13
    five = rng.sample_cards(cards, "x", 5)
    assert len(five) == 5
    assert five == rng.sample_cards(cards, "x")[:5]
    assert len(rng.sample_cards(cards, "x", 0)) == 1
    assert len(rng.sample_cards(cards, "x", 99)) == 13
    assert rng.sample_cards([], "x", 3) == []


def test_shuffle_in_place_continues_stream():
    stream = rng.SeededRandom("s")
    items = list(range(8))
    rng.shuffle_in_place(items, stream)
    assert items == rng.shuffle(list(range(8)), "s")
    # stream keeps going after the shuffle
    assert 0.0 <= stream.random() < 1.0
