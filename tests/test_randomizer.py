import pytest

from towerpath.procedural.randomizer import SampleCache, SeededSampler, derive_seed


def test_cache_evicts_oldest_key() -> None:
    cache = SampleCache(capacity=2)
    cache.put(("a",), 0.1)
    cache.put(("b",), 0.2)
    cache.put(("c",), 0.3)
    assert len(cache) == 2
    assert cache.get(("a",)) is None
    assert cache.get(("c",)) == pytest.approx(0.3)
    assert cache.stats()["hit_rate"] == pytest.approx(0.5)

    cache.clear()
    assert cache.stats() == {"size": 0, "capacity": 2, "hits": 0, "misses": 0, "hit_rate": 0.0}


def test_cached_values_do_not_depend_on_cache_state() -> None:
    warm = SampleCache()
    first = SeededSampler(7, warm)
    first.random()
    value = first.cached("angle", 3, -0.5, 0.5)

    cold = SeededSampler(7, SampleCache())
    assert cold.cached("angle", 3, -0.5, 0.5) == value
    assert -0.5 <= value < 0.5

    assert SeededSampler(7, warm).cached("angle", 3, -0.5, 0.5) == value
    assert warm.hits == 1


def test_same_seed_same_stream() -> None:
    a, b = SeededSampler(99), SeededSampler(99)
    assert [a.random() for _ in range(5)] == [b.random() for _ in range(5)]
    assert SeededSampler(99).choice(["x", "y", "z"]) == SeededSampler(99).choice(["x", "y", "z"])


@pytest.mark.parametrize("seed", ["abc", 1.5, None, True])
def test_invalid_seed_falls_back_to_random_source(seed) -> None:
    sampler = SeededSampler(seed)
    assert sampler.seed_error is not None
    assert sampler.deterministic is False
    assert isinstance(sampler.seed, int)
    assert 0.0 <= sampler.random() < 1.0


def test_derive_seed_is_level_scoped() -> None:
    seed = derive_seed(4)
    assert 4000 <= seed < 5000
