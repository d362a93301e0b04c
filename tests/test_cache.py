"""Tests for the derived-artifact cache."""

from dynaform.cache import ArtifactCache, config_fingerprint
from dynaform.parser import parse_configuration


def _config(name="a"):
    return parse_configuration({
        "elements": [
            {"type": "text", "name": name},
            {"type": "text", "name": "child", "dependsOn": name},
        ]
    })


class TestArtifactCache:
    """Tests for ArtifactCache."""

    def test_equal_configurations_share_artifacts(self):
        """Test that equal content hits the same entry."""
        cache = ArtifactCache(maxsize=4)
        first = cache.get(_config())
        second = cache.get(_config())
        assert first is second
        assert len(cache) == 1
        assert _config() in cache

    def test_artifacts_content(self):
        """Test the cached schema and dependency map."""
        artifacts = ArtifactCache(maxsize=4).get(_config())
        assert artifacts.schema.field_paths() == ["a", "child"]
        assert artifacts.dependency_map == {"a": frozenset({"child"})}
        assert artifacts.fingerprint == config_fingerprint(_config())

    def test_lru_eviction(self):
        """Test that the least recently used entry is evicted."""
        cache = ArtifactCache(maxsize=2)
        cache.get(_config("a"))
        cache.get(_config("b"))
        cache.get(_config("a"))
        cache.get(_config("c"))
        assert _config("a") in cache
        assert _config("b") not in cache
        assert len(cache) == 2

    def test_zero_size_disables_caching(self):
        """Test that maxsize 0 builds fresh artifacts every time."""
        cache = ArtifactCache(maxsize=0)
        assert cache.get(_config()) is not cache.get(_config())
        assert len(cache) == 0

    def test_clear(self):
        """Test clearing the cache."""
        cache = ArtifactCache(maxsize=2)
        cache.get(_config())
        cache.clear()
        assert len(cache) == 0

    def test_different_content_different_fingerprint(self):
        """Test that fingerprints track content."""
        assert config_fingerprint(_config("a")) != config_fingerprint(_config("b"))
