import unittest

from apps.catalog.errors import (
    ERROR_MESSAGES,
    message_for_exception,
    position_error_messages,
)
from apps.catalog.exceptions import (
    CannotBulkDeleteProductError,
    CannotDeleteProductError,
    ProductConstraintError,
    ProductError,
)


class CustomProductError(ProductError):
    pass


class ErrorMessageLookupTests(unittest.TestCase):
    def test_class_entry(self):
        self.assertEqual(
            message_for_exception(CannotDeleteProductError("db said no")),
            "An error occurred while deleting the object.",
        )
        self.assertEqual(
            message_for_exception(CannotBulkDeleteProductError([1, 2])),
            "An error occurred while deleting this selection.",
        )

    def test_code_entry(self):
        exc = ProductConstraintError("bad", ProductConstraintError.INVALID_ONLINE_DATA)
        self.assertEqual(
            message_for_exception(exc), "To put this product online, please enter a name."
        )

    def test_unmapped_code_falls_back(self):
        exc = ProductConstraintError("bad phrase", ProductConstraintError.INVALID_SEARCH_PHRASE)
        self.assertEqual(
            message_for_exception(exc),
            "An unexpected error occurred. [ProductConstraintError code 6]",
        )

    def test_lookup_is_exact_class(self):
        # subclasses do not inherit their parent's entry
        table = {ProductError: "parent"}
        self.assertEqual(message_for_exception(ProductError("x"), table), "parent")
        self.assertEqual(
            message_for_exception(CustomProductError("x"), table),
            "An unexpected error occurred. [CustomProductError code 0]",
        )

    def test_debug_appends_raw_message(self):
        self.assertEqual(
            message_for_exception(RuntimeError("boom"), debug=True),
            "An unexpected error occurred. [RuntimeError code 0]: boom",
        )
        self.assertEqual(
            message_for_exception(RuntimeError("boom")),
            "An unexpected error occurred. [RuntimeError code 0]",
        )

    def test_table_is_not_mutated_by_lookups(self):
        before = dict(ERROR_MESSAGES)
        message_for_exception(RuntimeError("boom"))
        self.assertEqual(ERROR_MESSAGES, before)


class PositionErrorTests(unittest.TestCase):
    def test_structured_and_plain_errors(self):
        errors = [
            {"key": "Category %(category_id)s does not exist.", "parameters": {"category_id": 4}},
            "Already rendered",
            {"key": "No product positions were submitted."},
        ]
        self.assertEqual(
            position_error_messages(errors),
            [
                "Category 4 does not exist.",
                "Already rendered",
                "No product positions were submitted.",
            ],
        )
