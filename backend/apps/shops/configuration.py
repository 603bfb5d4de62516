from __future__ import annotations

from typing import Any, Mapping, Optional

from apps.common import get_logger
from .protocols import CacheBackendProtocol, ConfigurationRepositoryProtocol

logger = get_logger(__name__).bind(component="shops", layer="configuration")

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigurationStore:
    """Key/value shop configuration.

    Stored rows win over the defaults declared in settings. Reads go through the
    cache backend; writes invalidate the cached key.
    """

    def __init__(
        self,
        values: ConfigurationRepositoryProtocol,
        cache_backend: CacheBackendProtocol,
        defaults: Optional[Mapping[str, Any]] = None,
        disable_cache: bool = False,
    ):
        self.values = values
        self.cache = cache_backend
        self.defaults = dict(defaults or {})
        self.disable_cache = disable_cache
        self.logger = logger.bind(service="ConfigurationStore")
        self._cache_prefix = "configuration"

    def _cache_key(self, key: str) -> str:
        return f"{self._cache_prefix}:{key}"

    def get(self, key: str, default: Any = None) -> Any:
        if not self.disable_cache:
            cached = self.cache.get(self._cache_key(key))
            if cached is not None:
                return cached
        row = self.values.get(key=key)
        value = row.value if row is not None else self.defaults.get(key)
        if value is None:
            self.logger.debug("Configuration key not set", key=key)
            return default
        if not self.disable_cache:
            self.cache.set(self._cache_key(key), value)
        return value

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key)
        try:
            return int(value)
        except (TypeError, ValueError):
            if value is not None:
                self.logger.warning(
                    "Configuration value is not an integer", key=key, value=value
                )
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUTHY

    def set(self, key: str, value: Any) -> None:
        self.values.set_value(key, "" if value is None else str(value))
        if not self.disable_cache:
            self.cache.delete(self._cache_key(key))
        self.logger.info("Configuration value updated", key=key)
