from __future__ import annotations

from typing import Any, Optional, Protocol

from .models import ConfigurationValue, Language


class CacheBackendProtocol(Protocol):
    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any, timeout: Optional[int] = None) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class ConfigurationRepositoryProtocol(Protocol):
    def get(self, **filters) -> Optional[ConfigurationValue]:
        ...

    def set_value(self, key: str, value: str) -> ConfigurationValue:
        ...


class ShopRepositoryProtocol(Protocol):
    def exists(self, **filters) -> bool:
        ...

    def count_active(self) -> int:
        ...


class LanguageRepositoryProtocol(Protocol):
    def get(self, **filters) -> Optional[Language]:
        ...

    def get_one_by_locale_or_iso_code(self, code: Optional[str]) -> Optional[Language]:
        ...
