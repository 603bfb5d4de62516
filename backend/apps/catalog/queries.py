from dataclasses import dataclass
from typing import Optional

from .commands import assert_product_id
from .exceptions import ProductConstraintError

DEFAULT_SEARCH_LIMIT = 20


@dataclass(frozen=True)
class GetCategoryForEditing:
    category_id: int


@dataclass(frozen=True)
class GetProductForEditing:
    """Load a product for the edit form.

    When ``shop_id`` is set the product must be associated with that shop.
    """

    product_id: int
    shop_id: Optional[int] = None

    def __post_init__(self):
        assert_product_id(self.product_id)


@dataclass(frozen=True)
class SearchProductsForAssociation:
    phrase: str
    language_id: int
    shop_id: int
    limit: int = DEFAULT_SEARCH_LIMIT

    def __post_init__(self):
        if not (self.phrase or "").strip():
            raise ProductConstraintError(
                "Search phrase must not be empty",
                ProductConstraintError.INVALID_SEARCH_PHRASE,
            )
        if self.limit <= 0:
            raise ProductConstraintError(
                f"Search limit must be a positive integer, got {self.limit}",
                ProductConstraintError.INVALID_SEARCH_LIMIT,
            )
