import pytest

from seeded_rng import LCGRandom


def test_same_seed_same_stream():
    a = LCGRandom(42)
    b = LCGRandom(42)
    assert [a.next_u32() for _ in range(20)] == [b.next_u32() for _ in range(20)]


def test_first_value_follows_recurrence():
    rng = LCGRandom(1)
    assert rng.next_u32() == (1664525 * 1 + 1013904223) % 2 ** 32


def test_state_round_trip():
    rng = LCGRandom(7)
    rng.random()
    state = rng.getstate()
    first = [rng.random() for _ in range(5)]
    rng.setstate(state)
    assert [rng.random() for _ in range(5)] == first


def test_ranges():
    rng = LCGRandom(3)
    for _ in range(500):
        assert 0.0 <= rng.random() < 1.0
        assert 0 <= rng.randrange(5) < 5
        assert 2 <= rng.randint(2, 4) <= 4
        assert -1.0 <= rng.uniform(-1.0, 1.0) <= 1.0


def test_empty_choices_raise():
    rng = LCGRandom(3)
    with pytest.raises(ValueError):
        rng.randrange(0)
    with pytest.raises(IndexError):
        rng.choice([])


def test_gauss_is_centred():
    rng = LCGRandom(11)
    draws = [rng.gauss(0.0, 1.0) for _ in range(5000)]
    mean = sum(draws) / len(draws)
    var = sum((d - mean) ** 2 for d in draws) / len(draws)
    assert abs(mean) < 0.15
    assert 0.7 < var < 1.3
