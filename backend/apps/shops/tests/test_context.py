import types
import unittest

from django.test import RequestFactory

from apps.shops.context import SHOP_CONTEXT_SESSION_KEY, ShopContext


class StubConfiguration:
    def __init__(self, multishop=False, shop_default=1, lang_default=1):
        self.values = {
            "MULTISHOP_FEATURE_ACTIVE": multishop,
            "SHOP_DEFAULT": shop_default,
            "LANG_DEFAULT": lang_default,
        }

    def get_bool(self, key, default=False):
        return bool(self.values.get(key, default))

    def get_int(self, key, default=0):
        value = self.values.get(key)
        return default if value is None else int(value)


class FakeShops:
    def __init__(self, active_ids=(1,)):
        self.active_ids = set(active_ids)

    def count_active(self):
        return len(self.active_ids)

    def exists(self, **filters):
        return filters.get("id") in self.active_ids


class FakeLanguages:
    def __init__(self, languages=None):
        self.languages = dict(languages or {})

    def get(self, **filters):
        language_id = self.languages.get(filters.get("iso_code"))
        return types.SimpleNamespace(id=language_id) if language_id else None


class ShopContextTests(unittest.TestCase):
    def setUp(self):
        self.factory = RequestFactory()

    def make_context(self, session=None, configuration=None, shops=None, languages=None, **headers):
        request = self.factory.get("/", **headers)
        request.session = dict(session or {})
        return ShopContext(
            request,
            configuration or StubConfiguration(),
            shops or FakeShops(),
            languages or FakeLanguages(),
        )

    def test_single_shop_install(self):
        context = self.make_context(configuration=StubConfiguration(shop_default=4))
        self.assertFalse(context.is_multishop_feature_active())
        self.assertTrue(context.is_single_shop_context())
        self.assertEqual(context.get_context_shop_id(), 4)

    def test_feature_needs_more_than_one_active_shop(self):
        context = self.make_context(configuration=StubConfiguration(multishop=True))
        self.assertFalse(context.is_multishop_feature_active())

    def test_all_shops_selected(self):
        context = self.make_context(
            configuration=StubConfiguration(multishop=True), shops=FakeShops((1, 2))
        )
        self.assertTrue(context.is_multishop_feature_active())
        self.assertFalse(context.is_single_shop_context())
        self.assertIsNone(context.get_context_shop_id())

    def test_selected_shop(self):
        context = self.make_context(
            session={SHOP_CONTEXT_SESSION_KEY: "s-2"},
            configuration=StubConfiguration(multishop=True),
            shops=FakeShops((1, 2)),
        )
        self.assertTrue(context.is_single_shop_context())
        self.assertEqual(context.get_context_shop_id(), 2)

    def test_group_or_unknown_selection_is_not_a_single_shop(self):
        for raw in ("g-1", "s-9", "s-x"):
            context = self.make_context(
                session={SHOP_CONTEXT_SESSION_KEY: raw},
                configuration=StubConfiguration(multishop=True),
                shops=FakeShops((1, 2)),
            )
            self.assertFalse(context.is_single_shop_context(), raw)

    def test_language_from_request(self):
        context = self.make_context(
            languages=FakeLanguages({"fr": 3}), HTTP_ACCEPT_LANGUAGE="fr-FR"
        )
        self.assertEqual(context.get_context_lang_id(), 3)

    def test_language_falls_back_to_default(self):
        context = self.make_context(configuration=StubConfiguration(lang_default=6))
        self.assertEqual(context.get_context_lang_id(), 6)
