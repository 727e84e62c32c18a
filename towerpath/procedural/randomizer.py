from __future__ import annotations

import random
import time
from collections import OrderedDict
from typing import Any, Dict, Hashable, Optional, Sequence, Tuple


def derive_seed(level_id: int = 0) -> int:
    """Fresh seed for requests that did not pin one. Not reproducible by intent."""
    return level_id * 1000 + int(time.time() * 1000) % 1000


class SampleCache:
    """
    Bounded memo of derived random values shared by all samplers of an engine.

    When full, the oldest inserted key is evicted.
    """

    def __init__(self, capacity: int = 1000):
        self.capacity = capacity
        self._values: "OrderedDict[Tuple[Hashable, ...], float]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._values)

    def get(self, key: Tuple[Hashable, ...]) -> Optional[float]:
        value = self._values.get(key)
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def put(self, key: Tuple[Hashable, ...], value: float):
        if key not in self._values and len(self._values) >= self.capacity:
            self._values.popitem(last=False)
        self._values[key] = value

    def clear(self):
        self._values.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> Dict[str, Any]:
        lookups = self.hits + self.misses
        return {
            "size": len(self._values),
            "capacity": self.capacity,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hits / lookups if lookups else 0.0,
        }


class SeededSampler:
    """
    Seeded random source for one generation attempt. Use to ensure
    reproducible paths across runs when a seed is provided.

    ``cached()`` values depend only on ``(seed, site, key)``, never on how
    many stream draws happened before, so a warm or cold cache yields the
    same path.
    """

    def __init__(self, seed: Any, cache: Optional[SampleCache] = None):
        self.seed_error: Optional[str] = None
        if isinstance(seed, bool) or not isinstance(seed, int):
            self.seed_error = f"Invalid seed {seed!r} ({type(seed).__name__}); using a non-deterministic source"
            seed = random.SystemRandom().randrange(2 ** 31)
            self.deterministic = False
        else:
            self.deterministic = True
        self.seed: int = seed
        self.rng = random.Random(seed)
        self.cache = cache if cache is not None else SampleCache()

    def random(self) -> float:
        return self.rng.random()

    def uniform(self, low: float, high: float) -> float:
        return self.rng.uniform(low, high)

    def choice(self, options: Sequence[Any]) -> Any:
        return self.rng.choice(options)

    def cached(self, site: str, key: Hashable, low: float = 0.0, high: float = 1.0) -> float:
        """Memoized uniform draw in ``[low, high)`` for a call site and key."""
        cache_key = (site, self.seed, key, low, high)
        value = self.cache.get(cache_key)
        if value is None:
            unit = random.Random(f"{self.seed}:{site}:{key}").random()
            value = low + (high - low) * unit
            self.cache.put(cache_key, value)
        return value
