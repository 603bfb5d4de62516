from typing import Dict, Iterable, Mapping, Optional

from django.db import transaction
from django.db.models import Max, OuterRef, Q, Subquery

from apps.common.repository import GenericRepository
from .models import (
    Category,
    Product,
    ProductCategory,
    ProductDownload,
    ProductShop,
    ProductTranslation,
)


class CategoryRepository(GenericRepository[Category]):
    def __init__(self):
        super().__init__(Category)

    def get_with_translations(self, category_id: int) -> Optional[Category]:
        return (
            self.model.objects.filter(id=category_id)
            .prefetch_related("translations")
            .first()
        )


class ProductRepository(GenericRepository[Product]):
    def __init__(self):
        super().__init__(Product)

    def get_for_editing(self, product_id: int) -> Optional[Product]:
        return (
            self.model.objects.filter(id=product_id)
            .prefetch_related("categories", "shops")
            .first()
        )

    def is_in_shop(self, product: Product, shop_id: int) -> bool:
        return ProductShop.objects.filter(product=product, shop_id=shop_id).exists()

    def list_for_grid(self, filters: Mapping[str, object]):
        """Return the filtered product queryset backing the admin grid.

        With a category filter, rows carry ``category_position`` and are ordered
        by it; otherwise they are ordered by id.
        """
        qs = self.model.objects.all().prefetch_related("translations")
        category_id = filters.get("id_category")
        if filters.get("name"):
            qs = qs.filter(name__icontains=filters["name"])
        if filters.get("reference"):
            qs = qs.filter(reference__icontains=filters["reference"])
        if filters.get("active") is not None:
            qs = qs.filter(active=filters["active"])
        if category_id:
            position = ProductCategory.objects.filter(
                product=OuterRef("pk"), category_id=category_id
            ).values("position")[:1]
            return (
                qs.filter(categories__id=category_id)
                .annotate(category_position=Subquery(position))
                .order_by("category_position", "id")
            )
        return qs.order_by("id")

    def search_for_association(
        self, phrase: str, language_id: int, shop_id: int, limit: int
    ):
        match = (
            Q(name__icontains=phrase)
            | Q(reference__icontains=phrase)
            | Q(translations__language_id=language_id, translations__name__icontains=phrase)
        )
        return list(
            self.model.objects.filter(match, shops__id=shop_id)
            .distinct()
            .prefetch_related("translations")
            .order_by("name", "id")[:limit]
        )

    # --- Helper methods for handler orchestration ---
    def set_categories(self, product: Product, category_ids: Iterable[int]):
        wanted = set(category_ids)
        ProductCategory.objects.filter(product=product).exclude(
            category_id__in=wanted
        ).delete()
        existing = set(
            ProductCategory.objects.filter(product=product).values_list(
                "category_id", flat=True
            )
        )
        for category_id in Category.objects.filter(id__in=wanted - existing).values_list(
            "id", flat=True
        ):
            last = ProductCategory.objects.filter(category_id=category_id).aggregate(
                last=Max("position")
            )["last"]
            ProductCategory.objects.create(
                product=product,
                category_id=category_id,
                position=0 if last is None else last + 1,
            )

    def add_to_shop(self, product: Product, shop_id: int):
        ProductShop.objects.get_or_create(product=product, shop_id=shop_id)

    def set_status(self, product_ids: Iterable[int], active: bool) -> int:
        return self.model.objects.filter(id__in=list(product_ids)).update(active=active)

    def duplicate(self, product: Product) -> Product:
        """Copy a product with its categories, shops and translations.

        The copy is created offline so it never shows up in the storefront
        before being reviewed.
        """
        with transaction.atomic():
            copy = self.model.objects.create(
                name=product.name,
                reference=product.reference,
                price=product.price,
                image=product.image,
                active=False,
                product_type=product.product_type,
            )
            self.set_categories(
                copy,
                ProductCategory.objects.filter(product=product).values_list(
                    "category_id", flat=True
                ),
            )
            for shop_id in ProductShop.objects.filter(product=product).values_list(
                "shop_id", flat=True
            ):
                self.add_to_shop(copy, shop_id)
            ProductTranslation.objects.bulk_create(
                ProductTranslation(
                    product=copy, language_id=t.language_id, name=t.name
                )
                for t in ProductTranslation.objects.filter(product=product)
            )
        return copy

    def category_rows(self, category_id: int) -> Dict[int, ProductCategory]:
        return {
            row.product_id: row
            for row in ProductCategory.objects.filter(category_id=category_id)
        }

    def update_positions(self, category_id: int, positions: Mapping[int, int]):
        with transaction.atomic():
            for product_id, position in positions.items():
                ProductCategory.objects.filter(
                    category_id=category_id, product_id=product_id
                ).update(position=position)


class ProductDownloadRepository(GenericRepository[ProductDownload]):
    def __init__(self):
        super().__init__(ProductDownload)
