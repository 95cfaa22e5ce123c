"""Identity-keyed memoization for derived tree state.

Derived values (node index, flattened rows) depend on a handful of
immutable inputs. They are recomputed only when one of those inputs is
replaced by a different object; deep equality is never consulted.
"""

from typing import Any, Callable, Dict, Tuple

from cachetools import LRUCache


class IdentityCache:
    """Cache results keyed by the identity of their inputs.

    Keys are tuples of ``id()`` values. Since ids can be reused once an
    object is garbage collected, each entry keeps its inputs alive and a
    hit is only accepted if every stored input ``is`` the queried one.

    Example:
        flat_cache = IdentityCache(maxsize=4)
        rows = flat_cache.get_or_compute(
            (tree, open_ids, loading_ids),
            lambda: flatten_tree(tree, open_ids, loading_ids),
        )
    """

    def __init__(self, maxsize: int = 8):
        """
        Initialize the cache.

        Args:
            maxsize: Maximum number of remembered input tuples
        """
        self._cache = LRUCache(maxsize=maxsize)

        # Statistics
        self.cache_hits = 0
        self.cache_misses = 0

    def get_or_compute(self, inputs: Tuple[Any, ...], compute: Callable[[], Any]) -> Any:
        """
        Return the cached result for ``inputs`` or compute and store it.
        """
        key = tuple(id(value) for value in inputs)
        entry = self._cache.get(key)
        if entry is not None:
            stored_inputs, result = entry
            if all(a is b for a, b in zip(stored_inputs, inputs)):
                self.cache_hits += 1
                return result

        self.cache_misses += 1
        result = compute()
        self._cache[key] = (inputs, result)
        return result

    def get_cache_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics for monitoring and debugging.
        """
        total_requests = self.cache_hits + self.cache_misses
        hit_rate = self.cache_hits / total_requests if total_requests > 0 else 0

        return {
            'cache_hits': self.cache_hits,
            'cache_misses': self.cache_misses,
            'hit_rate': hit_rate,
            'cache_size': len(self._cache),
            'max_size': self._cache.maxsize,
        }

    def clear_cache(self) -> None:
        """
        Clear all cached entries.
        """
        self._cache.clear()
        self.cache_hits = 0
        self.cache_misses = 0
