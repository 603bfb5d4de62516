import unittest
from decimal import Decimal

from apps.catalog.commands import (
    AddProductCommand,
    BulkDeleteProductCommand,
    BulkToggleProductCommand,
    DeleteProductCommand,
    UpdateProductCommand,
    UpdateProductPositionCommand,
)
from apps.catalog.exceptions import ProductConstraintError
from apps.catalog.queries import GetProductForEditing, SearchProductsForAssociation


class ProductCommandTests(unittest.TestCase):
    def test_product_id_must_be_positive_integer(self):
        for bad in (0, -3, "4", True, None):
            with self.assertRaises(ProductConstraintError) as ctx:
                DeleteProductCommand(bad)
            self.assertEqual(ctx.exception.code, ProductConstraintError.INVALID_ID)

    def test_add_command_normalizes_price_and_categories(self):
        cmd = AddProductCommand(name="Phone", price="10.50", category_ids=[1, 2])
        self.assertEqual(cmd.price, Decimal("10.50"))
        self.assertEqual(cmd.category_ids, (1, 2))

    def test_add_command_rejects_blank_name_and_unknown_type(self):
        with self.assertRaises(ProductConstraintError) as ctx:
            AddProductCommand(name="  ")
        self.assertEqual(ctx.exception.code, ProductConstraintError.INVALID_NAME)
        with self.assertRaises(ProductConstraintError) as ctx:
            AddProductCommand(name="Phone", product_type="bundle")
        self.assertEqual(ctx.exception.code, ProductConstraintError.INVALID_TYPE)

    def test_update_command_rejects_negative_price(self):
        with self.assertRaises(ProductConstraintError) as ctx:
            UpdateProductCommand(product_id=1, name="Phone", price="-1")
        self.assertEqual(ctx.exception.code, ProductConstraintError.INVALID_PRICE)

    def test_bulk_commands_validate_every_id(self):
        self.assertEqual(BulkDeleteProductCommand([3, 4]).product_ids, (3, 4))
        self.assertEqual(BulkDeleteProductCommand([]).product_ids, ())
        with self.assertRaises(ProductConstraintError):
            BulkToggleProductCommand([1, 0], True)


class PositionCommandTests(unittest.TestCase):
    def test_from_raw_parses_json_rows(self):
        cmd = UpdateProductPositionCommand.from_raw(
            '[{"rowId": 4, "oldPosition": 0, "newPosition": 2}]', "7"
        )
        self.assertEqual(cmd.category_id, 7)
        self.assertEqual(cmd.positions, ({"rowId": 4, "oldPosition": 0, "newPosition": 2},))

    def test_from_raw_tolerates_garbage(self):
        cmd = UpdateProductPositionCommand.from_raw("{not json", "abc")
        self.assertEqual(cmd.positions, ())
        self.assertEqual(cmd.category_id, 0)
        self.assertEqual(UpdateProductPositionCommand.from_raw(12, None).positions, ())

    def test_from_raw_accepts_indexed_mapping(self):
        cmd = UpdateProductPositionCommand.from_raw(
            {"0": {"rowId": 1, "newPosition": 1}, "1": "bad"}, 2
        )
        self.assertEqual(cmd.positions, ({"rowId": 1, "newPosition": 1}, {"raw": "bad"}))


class QueryTests(unittest.TestCase):
    def test_search_requires_phrase_and_positive_limit(self):
        with self.assertRaises(ProductConstraintError) as ctx:
            SearchProductsForAssociation(" ", language_id=1, shop_id=1)
        self.assertEqual(ctx.exception.code, ProductConstraintError.INVALID_SEARCH_PHRASE)
        with self.assertRaises(ProductConstraintError) as ctx:
            SearchProductsForAssociation("shoe", language_id=1, shop_id=1, limit=0)
        self.assertEqual(ctx.exception.code, ProductConstraintError.INVALID_SEARCH_LIMIT)

    def test_search_defaults_limit(self):
        self.assertEqual(SearchProductsForAssociation("shoe", 1, 1).limit, 20)

    def test_get_product_for_editing_validates_id(self):
        with self.assertRaises(ProductConstraintError):
            GetProductForEditing(-1)
