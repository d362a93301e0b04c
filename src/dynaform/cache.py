"""
Cache of artifacts derived from a configuration.

The schema and dependency map are pure functions of the configuration, so
they are built once per distinct configuration and shared. Entries are
keyed by a content fingerprint, which means two equal configurations share
artifacts even when they are different objects.
"""

import hashlib
import json
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Mapping

from dynaform.config import get_config
from dynaform.engine.dependencies import build_dependency_map
from dynaform.models.elements import FormConfiguration
from dynaform.schema.generate import GeneratedSchema, generate_schema

logger = logging.getLogger("dynaform.cache")


@dataclass(frozen=True)
class DerivedArtifacts:
    """Everything built once per configuration."""

    fingerprint: str
    schema: GeneratedSchema
    dependency_map: Mapping[str, frozenset[str]]


def config_fingerprint(config: FormConfiguration) -> str:
    """Stable content hash of a parsed configuration."""
    payload = json.dumps(config.to_json(), sort_keys=True, default=repr)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ArtifactCache:
    """Small LRU cache of DerivedArtifacts keyed by configuration fingerprint."""

    def __init__(self, maxsize: int | None = None):
        self.maxsize = maxsize if maxsize is not None else get_config().schema_cache_size
        self._entries: OrderedDict[str, DerivedArtifacts] = OrderedDict()

    def get(self, config: FormConfiguration) -> DerivedArtifacts:
        fingerprint = config_fingerprint(config)
        cached = self._entries.get(fingerprint)
        if cached is not None:
            self._entries.move_to_end(fingerprint)
            logger.debug(f"Schema cache hit for {fingerprint[:8]}")
            return cached

        logger.debug(f"Schema cache miss for {fingerprint[:8]}")
        artifacts = DerivedArtifacts(
            fingerprint=fingerprint,
            schema=generate_schema(config),
            dependency_map={
                path: frozenset(dependents)
                for path, dependents in build_dependency_map(config.elements).items()
            },
        )
        if self.maxsize > 0:
            self._entries[fingerprint] = artifacts
            while len(self._entries) > self.maxsize:
                self._entries.popitem(last=False)
        return artifacts

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, config: object) -> bool:
        if not isinstance(config, FormConfiguration):
            return False
        return config_fingerprint(config) in self._entries


default_cache = ArtifactCache()
