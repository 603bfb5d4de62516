from typing import Optional

from apps.common.repository import GenericRepository
from .models import ConfigurationValue, Language, Shop


class ShopRepository(GenericRepository[Shop]):
    def __init__(self):
        super().__init__(Shop)

    def count_active(self) -> int:
        return self.model.objects.filter(active=True).count()


class LanguageRepository(GenericRepository[Language]):
    def __init__(self):
        super().__init__(Language)

    def get_one_by_locale_or_iso_code(self, code: Optional[str]) -> Optional[Language]:
        """Match ``code`` against locales first (``fr-FR``), then ISO codes (``fr``)."""
        if not code:
            return None
        language = self.model.objects.filter(locale__iexact=code).first()
        if language is not None:
            return language
        return self.model.objects.filter(iso_code__iexact=code).first()


class ConfigurationRepository(GenericRepository[ConfigurationValue]):
    def __init__(self):
        super().__init__(ConfigurationValue)

    def set_value(self, key: str, value: str) -> ConfigurationValue:
        row, _ = self.model.objects.update_or_create(key=key, defaults={"value": value})
        return row
