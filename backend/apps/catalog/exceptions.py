from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union


class CatalogError(Exception):
    """Base class for errors raised by catalog command and query handlers.

    ``code`` refines the error kind inside one exception class; the error
    message table may map each code to its own user-facing text.
    """

    def __init__(self, message: str = "", code: int = 0):
        super().__init__(message)
        self.code = code


class HandlerNotFoundError(CatalogError):
    pass


class CategoryNotFoundError(CatalogError):
    pass


class ShopAssociationNotFoundError(CatalogError):
    pass


class ProductError(CatalogError):
    pass


class ProductNotFoundError(ProductError):
    pass


class ProductConstraintError(ProductError):
    INVALID_ID = 1
    INVALID_NAME = 2
    INVALID_PRICE = 3
    INVALID_TYPE = 4
    INVALID_ONLINE_DATA = 5
    INVALID_SEARCH_PHRASE = 6
    INVALID_SEARCH_LIMIT = 7


class CannotDeleteProductError(ProductError):
    pass


class CannotBulkDeleteProductError(ProductError):
    def __init__(self, failed_ids: Iterable[int], message: str = ""):
        self.failed_ids = list(failed_ids)
        super().__init__(
            message
            or "Failed to delete products: " + ", ".join(str(i) for i in self.failed_ids)
        )


class CannotDuplicateProductError(ProductError):
    pass


# One entry per failed row: either a ready message or a translatable msgid
# with its interpolation parameters.
PositionError = Union[str, Mapping[str, Any]]


class CannotUpdateProductPositionError(ProductError):
    def __init__(self, errors: Sequence[PositionError], message: Optional[str] = None):
        self.errors: List[PositionError] = list(errors)
        super().__init__(message or "Cannot update product positions")
