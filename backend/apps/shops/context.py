from __future__ import annotations

from typing import Optional

from apps.common import get_logger
from apps.common.i18n import resolve_language
from .configuration import ConfigurationStore
from .protocols import LanguageRepositoryProtocol, ShopRepositoryProtocol

logger = get_logger(__name__).bind(component="shops", layer="context")

# Session key holding the multistore header selection: "s-<shop id>" for a
# single shop, "g-<group id>" for a group, empty for all shops.
SHOP_CONTEXT_SESSION_KEY = "shop_context"


class ShopContext:
    """Shop and language context of a back-office request."""

    def __init__(
        self,
        request,
        configuration: ConfigurationStore,
        shops: ShopRepositoryProtocol,
        languages: LanguageRepositoryProtocol,
    ):
        self.request = request
        self.configuration = configuration
        self.shops = shops
        self.languages = languages
        self.logger = logger.bind(service="ShopContext")

    def is_multishop_feature_active(self) -> bool:
        if not self.configuration.get_bool("MULTISHOP_FEATURE_ACTIVE"):
            return False
        return self.shops.count_active() > 1

    def is_single_shop_context(self) -> bool:
        if not self.is_multishop_feature_active():
            return True
        return self._selected_shop_id() is not None

    def get_context_shop_id(self) -> Optional[int]:
        if not self.is_multishop_feature_active():
            return self.configuration.get_int("SHOP_DEFAULT") or None
        return self._selected_shop_id()

    def get_context_lang_id(self) -> int:
        iso_code = resolve_language(self.request)
        language = self.languages.get(iso_code=iso_code, active=True)
        if language is not None:
            return language.id
        return self.configuration.get_int("LANG_DEFAULT", 1)

    def _selected_shop_id(self) -> Optional[int]:
        session = getattr(self.request, "session", None)
        raw = session.get(SHOP_CONTEXT_SESSION_KEY) if session is not None else None
        if not raw or not str(raw).startswith("s-"):
            return None
        try:
            shop_id = int(str(raw)[2:])
        except ValueError:
            self.logger.warning("Malformed shop context in session", value=raw)
            return None
        if not self.shops.exists(id=shop_id, active=True):
            self.logger.info("Selected shop is unknown or inactive", shop_id=shop_id)
            return None
        return shop_id
