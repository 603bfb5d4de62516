from __future__ import annotations

from django.conf import settings
from django.core.cache import cache

from .configuration import ConfigurationStore
from .context import ShopContext
from .repositories import ConfigurationRepository, LanguageRepository, ShopRepository


def build_configuration_store(*, disable_cache: bool = False) -> ConfigurationStore:
    return ConfigurationStore(
        values=ConfigurationRepository(),
        cache_backend=cache,
        defaults=getattr(settings, "STOREADMIN_CONFIGURATION", {}),
        disable_cache=disable_cache,
    )


def build_shop_context(request, configuration: ConfigurationStore = None) -> ShopContext:
    return ShopContext(
        request,
        configuration=configuration or build_configuration_store(),
        shops=ShopRepository(),
        languages=LanguageRepository(),
    )
