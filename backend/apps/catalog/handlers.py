from __future__ import annotations

from typing import Any, Dict, List

from django.db import DatabaseError, transaction
from django.utils.translation import gettext_noop

from apps.common import get_logger
from .commands import (
    AddProductCommand,
    BulkDeleteProductCommand,
    BulkDuplicateProductCommand,
    BulkToggleProductCommand,
    DeleteProductCommand,
    DuplicateProductCommand,
    UpdateProductCommand,
    UpdateProductPositionCommand,
    UpdateProductStatusCommand,
)
from .dtos import CategoryForEditing, ProductForAssociation, ProductForEditing
from .exceptions import (
    CannotBulkDeleteProductError,
    CannotDeleteProductError,
    CannotDuplicateProductError,
    CannotUpdateProductPositionError,
    CategoryNotFoundError,
    PositionError,
    ProductConstraintError,
    ProductNotFoundError,
    ShopAssociationNotFoundError,
)
from .mappers import CategoryMapper, ProductMapper
from .models import Product
from .protocols import CategoryRepositoryProtocol, ProductRepositoryProtocol
from .queries import (
    GetCategoryForEditing,
    GetProductForEditing,
    SearchProductsForAssociation,
)

logger = get_logger(__name__).bind(component="catalog", layer="handler")


class _ProductHandler:
    def __init__(self, products: ProductRepositoryProtocol):
        self.products = products
        self.logger = logger.bind(handler=type(self).__name__)

    def _get_product(self, product_id: int) -> Product:
        product = self.products.get(id=product_id)
        if product is None:
            self.logger.info("Product not found", product_id=product_id)
            raise ProductNotFoundError(f"Product with id {product_id} was not found")
        return product


def _assert_can_be_online(product_id: int, name: str) -> None:
    if not (name or "").strip():
        raise ProductConstraintError(
            f"Product {product_id} has no name and cannot be put online",
            ProductConstraintError.INVALID_ONLINE_DATA,
        )


# Queries
class GetCategoryForEditingHandler:
    def __init__(self, categories: CategoryRepositoryProtocol):
        self.categories = categories

    def handle(self, query: GetCategoryForEditing) -> CategoryForEditing:
        category = self.categories.get_with_translations(query.category_id)
        if category is None:
            raise CategoryNotFoundError(
                f"Category with id {query.category_id} was not found"
            )
        return CategoryMapper.to_for_editing(category)


class GetProductForEditingHandler(_ProductHandler):
    def handle(self, query: GetProductForEditing) -> ProductForEditing:
        product = self.products.get_for_editing(query.product_id)
        if product is None:
            raise ProductNotFoundError(
                f"Product with id {query.product_id} was not found"
            )
        if query.shop_id is not None and not self.products.is_in_shop(
            product, query.shop_id
        ):
            raise ShopAssociationNotFoundError(
                f"Product {query.product_id} is not associated with shop {query.shop_id}"
            )
        return ProductMapper.to_for_editing(product)


class SearchProductsForAssociationHandler(_ProductHandler):
    def handle(self, query: SearchProductsForAssociation) -> List[ProductForAssociation]:
        products = self.products.search_for_association(
            query.phrase.strip(), query.language_id, query.shop_id, query.limit
        )
        self.logger.debug(
            "Association search", phrase=query.phrase, matches=len(products)
        )
        return [
            ProductMapper.to_for_association(p, query.language_id) for p in products
        ]


# Single product commands
class AddProductHandler(_ProductHandler):
    def handle(self, command: AddProductCommand) -> int:
        with transaction.atomic():
            product = self.products.create(
                name=command.name.strip(),
                reference=command.reference,
                price=command.price,
                product_type=command.product_type,
                active=False,
            )
            if command.category_ids:
                self.products.set_categories(product, command.category_ids)
            if command.shop_id:
                self.products.add_to_shop(product, command.shop_id)
        self.logger.info("Product created", product_id=product.id)
        return product.id


class UpdateProductHandler(_ProductHandler):
    def handle(self, command: UpdateProductCommand) -> int:
        product = self._get_product(command.product_id)
        if not command.name.strip():
            raise ProductConstraintError(
                "Product name must not be empty", ProductConstraintError.INVALID_NAME
            )
        with transaction.atomic():
            self.products.update(
                product,
                name=command.name.strip(),
                reference=command.reference,
                price=command.price,
                active=command.active,
                product_type=command.product_type,
            )
            self.products.set_categories(product, command.category_ids)
        self.logger.info("Product updated", product_id=product.id)
        return product.id


class DeleteProductHandler(_ProductHandler):
    def handle(self, command: DeleteProductCommand) -> None:
        product = self._get_product(command.product_id)
        try:
            self.products.delete(product)
        except DatabaseError as exc:
            self.logger.warning(
                "Product deletion failed", product_id=command.product_id, error=str(exc)
            )
            raise CannotDeleteProductError(
                f"Failed to delete product {command.product_id}"
            ) from exc
        self.logger.info("Product deleted", product_id=command.product_id)


class DuplicateProductHandler(_ProductHandler):
    def handle(self, command: DuplicateProductCommand) -> int:
        product = self._get_product(command.product_id)
        try:
            copy = self.products.duplicate(product)
        except DatabaseError as exc:
            raise CannotDuplicateProductError(
                f"Failed to duplicate product {command.product_id}"
            ) from exc
        self.logger.info(
            "Product duplicated", product_id=command.product_id, copy_id=copy.id
        )
        return copy.id


class UpdateProductStatusHandler(_ProductHandler):
    def handle(self, command: UpdateProductStatusCommand) -> None:
        product = self._get_product(command.product_id)
        if command.enable:
            _assert_can_be_online(product.id, product.name)
        self.products.update(product, active=command.enable)
        self.logger.info(
            "Product status updated", product_id=product.id, active=command.enable
        )


class UpdateProductPositionHandler(_ProductHandler):
    """Apply grid drag-and-drop positions inside one category.

    Every row is checked before anything is written; when any check fails
    nothing is saved and all failures are reported at once.
    """

    def __init__(
        self,
        products: ProductRepositoryProtocol,
        categories: CategoryRepositoryProtocol,
    ):
        super().__init__(products)
        self.categories = categories

    def handle(self, command: UpdateProductPositionCommand) -> None:
        errors: List[PositionError] = []
        if not command.positions:
            errors.append(
                {
                    "key": gettext_noop("No product positions were submitted."),
                    "parameters": {},
                }
            )
            raise CannotUpdateProductPositionError(errors)
        if not command.category_id or not self.categories.exists(id=command.category_id):
            errors.append(
                {
                    "key": gettext_noop("Category %(category_id)s does not exist."),
                    "parameters": {"category_id": command.category_id},
                }
            )
            raise CannotUpdateProductPositionError(errors)

        rows = self.products.category_rows(command.category_id)
        positions: Dict[int, int] = {}
        for index, row in enumerate(command.positions, start=1):
            parsed = self._parse_row(row)
            if parsed is None:
                errors.append(
                    {
                        "key": gettext_noop("Position row %(index)s is invalid."),
                        "parameters": {"index": index},
                    }
                )
                continue
            product_id, new_position = parsed
            if product_id not in rows:
                errors.append(
                    {
                        "key": gettext_noop(
                            "Product %(product_id)s is not in category %(category_id)s."
                        ),
                        "parameters": {
                            "product_id": product_id,
                            "category_id": command.category_id,
                        },
                    }
                )
                continue
            positions[product_id] = new_position
        if errors:
            self.logger.warning(
                "Position update rejected",
                category_id=command.category_id,
                errors=len(errors),
            )
            raise CannotUpdateProductPositionError(errors)
        self.products.update_positions(command.category_id, positions)
        self.logger.info(
            "Product positions updated",
            category_id=command.category_id,
            rows=len(positions),
        )

    @staticmethod
    def _parse_row(row: Dict[str, Any]):
        try:
            product_id = int(row["rowId"])
            new_position = int(row["newPosition"])
        except (KeyError, TypeError, ValueError):
            return None
        if product_id <= 0 or new_position < 0:
            return None
        return product_id, new_position


# Bulk commands
class BulkDeleteProductHandler(_ProductHandler):
    def handle(self, command: BulkDeleteProductCommand) -> None:
        found = {p.id: p for p in self.products.get_many(command.product_ids)}
        failed = [pid for pid in command.product_ids if pid not in found]
        for product_id, product in found.items():
            try:
                with transaction.atomic():
                    self.products.delete(product)
            except DatabaseError as exc:
                self.logger.warning(
                    "Bulk deletion failed for product",
                    product_id=product_id,
                    error=str(exc),
                )
                failed.append(product_id)
        if failed:
            raise CannotBulkDeleteProductError(sorted(failed))
        self.logger.info("Products deleted", product_ids=list(command.product_ids))


class BulkToggleProductHandler(_ProductHandler):
    def handle(self, command: BulkToggleProductCommand) -> None:
        products = self.products.get_many(command.product_ids)
        found = {p.id for p in products}
        missing = [pid for pid in command.product_ids if pid not in found]
        if missing:
            raise ProductNotFoundError(
                "Products not found: " + ", ".join(str(pid) for pid in missing)
            )
        if command.enable:
            for product in products:
                _assert_can_be_online(product.id, product.name)
        updated = self.products.set_status(command.product_ids, command.enable)
        self.logger.info(
            "Product statuses updated", active=command.enable, updated=updated
        )


class BulkDuplicateProductHandler(_ProductHandler):
    def handle(self, command: BulkDuplicateProductCommand) -> List[int]:
        products = self.products.get_many(command.product_ids)
        found = {p.id for p in products}
        missing = [pid for pid in command.product_ids if pid not in found]
        if missing:
            raise ProductNotFoundError(
                "Products not found: " + ", ".join(str(pid) for pid in missing)
            )
        try:
            with transaction.atomic():
                copies = [self.products.duplicate(p).id for p in products]
        except DatabaseError as exc:
            raise CannotDuplicateProductError(
                "Failed to duplicate the selected products"
            ) from exc
        self.logger.info("Products duplicated", copies=copies)
        return copies
