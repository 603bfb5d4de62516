import json
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional, Tuple

from .exceptions import ProductConstraintError
from .models import Product

PRODUCT_TYPES = tuple(value for value, _label in Product.TYPE_CHOICES)


def assert_product_id(value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ProductConstraintError(
            f"Product id must be a positive integer, got {value!r}",
            ProductConstraintError.INVALID_ID,
        )


def _product_ids(values: Iterable[Any]) -> Tuple[int, ...]:
    ids = tuple(values)
    for product_id in ids:
        assert_product_id(product_id)
    return ids


def _price(value: Any) -> Decimal:
    try:
        price = Decimal(str(value if value not in (None, "") else "0"))
    except (InvalidOperation, ValueError):
        raise ProductConstraintError(
            f"Invalid product price {value!r}", ProductConstraintError.INVALID_PRICE
        )
    if not price.is_finite() or price < 0:
        raise ProductConstraintError(
            f"Invalid product price {value!r}", ProductConstraintError.INVALID_PRICE
        )
    return price


# Single product commands
@dataclass(frozen=True)
class DeleteProductCommand:
    product_id: int

    def __post_init__(self):
        assert_product_id(self.product_id)


@dataclass(frozen=True)
class DuplicateProductCommand:
    product_id: int

    def __post_init__(self):
        assert_product_id(self.product_id)


@dataclass(frozen=True)
class UpdateProductStatusCommand:
    product_id: int
    enable: bool

    def __post_init__(self):
        assert_product_id(self.product_id)


@dataclass(frozen=True)
class AddProductCommand:
    name: str
    product_type: str = Product.TYPE_STANDARD
    shop_id: Optional[int] = None
    reference: str = ""
    price: Decimal = Decimal("0")
    category_ids: Tuple[int, ...] = ()

    def __post_init__(self):
        if not self.name.strip():
            raise ProductConstraintError(
                "Product name must not be empty", ProductConstraintError.INVALID_NAME
            )
        if self.product_type not in PRODUCT_TYPES:
            raise ProductConstraintError(
                f"Unknown product type {self.product_type!r}",
                ProductConstraintError.INVALID_TYPE,
            )
        object.__setattr__(self, "price", _price(self.price))
        object.__setattr__(self, "category_ids", tuple(self.category_ids))


@dataclass(frozen=True)
class UpdateProductCommand:
    product_id: int
    name: str
    reference: str = ""
    price: Decimal = Decimal("0")
    active: bool = False
    product_type: str = Product.TYPE_STANDARD
    category_ids: Tuple[int, ...] = ()

    def __post_init__(self):
        assert_product_id(self.product_id)
        if self.product_type not in PRODUCT_TYPES:
            raise ProductConstraintError(
                f"Unknown product type {self.product_type!r}",
                ProductConstraintError.INVALID_TYPE,
            )
        object.__setattr__(self, "price", _price(self.price))
        object.__setattr__(self, "category_ids", tuple(self.category_ids))


# Position command
@dataclass(frozen=True)
class UpdateProductPositionCommand:
    """Reorder products inside one category.

    ``positions`` keeps the raw grid rows (``rowId``, ``oldPosition``,
    ``newPosition``); the handler validates each of them so that every bad row
    is reported instead of only the first one.
    """

    positions: Tuple[Dict[str, Any], ...]
    category_id: int

    @staticmethod
    def _parse_positions(raw) -> Tuple[Dict[str, Any], ...]:
        if isinstance(raw, (bytes, str)):
            try:
                raw = json.loads(raw)
            except ValueError:
                return ()
        if isinstance(raw, dict):
            raw = list(raw.values())
        if not isinstance(raw, (list, tuple)):
            return ()
        return tuple(dict(row) if isinstance(row, dict) else {"raw": row} for row in raw)

    @staticmethod
    def from_raw(positions: Any, category_id: Any):
        try:
            cat_id = int(category_id or 0)
        except (TypeError, ValueError):
            cat_id = 0
        return UpdateProductPositionCommand(
            positions=UpdateProductPositionCommand._parse_positions(positions),
            category_id=cat_id,
        )


# Bulk commands
@dataclass(frozen=True)
class BulkDeleteProductCommand:
    product_ids: Tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "product_ids", _product_ids(self.product_ids))


@dataclass(frozen=True)
class BulkToggleProductCommand:
    product_ids: Tuple[int, ...]
    enable: bool

    def __post_init__(self):
        object.__setattr__(self, "product_ids", _product_ids(self.product_ids))


@dataclass(frozen=True)
class BulkDuplicateProductCommand:
    product_ids: Tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "product_ids", _product_ids(self.product_ids))
