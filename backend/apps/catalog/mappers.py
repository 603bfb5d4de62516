from typing import Iterable, List, Optional

from .dtos import (
    CategoryForEditing,
    ProductForAssociation,
    ProductForEditing,
    ProductGridRow,
)
from .models import Category, Product


def _all(manager):
    return getattr(manager, "all", lambda: manager)()


def _select_translation(translations, language_id: Optional[int]):
    if not translations or language_id is None:
        return None
    for translation in translations:
        if getattr(translation, "language_id", None) == language_id:
            return translation
    return None


class CategoryMapper:
    @staticmethod
    def to_for_editing(category: Category) -> CategoryForEditing:
        translations = getattr(category, "translations", None)
        names = {}
        if translations is not None:
            names = {t.language_id: t.name for t in _all(translations)}
        return CategoryForEditing(
            category_id=category.id, default_name=category.name, names=names
        )


class ProductMapper:
    @staticmethod
    def localized_name(product: Product, language_id: Optional[int]) -> str:
        translations = getattr(product, "translations", None)
        if translations is not None:
            translation = _select_translation(_all(translations), language_id)
            if translation is not None:
                return translation.name
        return product.name

    @staticmethod
    def to_for_editing(product: Product) -> ProductForEditing:
        return ProductForEditing(
            product_id=product.id,
            name=product.name,
            reference=product.reference or "",
            price=product.price,
            active=bool(product.active),
            product_type=product.product_type,
            category_ids=tuple(c.id for c in _all(product.categories)),
            shop_ids=tuple(s.id for s in _all(product.shops)),
        )

    @staticmethod
    def to_for_association(
        product: Product, language_id: Optional[int]
    ) -> ProductForAssociation:
        return ProductForAssociation(
            product_id=product.id,
            name=ProductMapper.localized_name(product, language_id),
            reference=product.reference or "",
            image_url=product.image or "",
        )

    @staticmethod
    def to_grid_row(
        product: Product, *, language_id: Optional[int] = None
    ) -> ProductGridRow:
        return ProductGridRow(
            id=product.id,
            name=ProductMapper.localized_name(product, language_id),
            reference=product.reference or "",
            price=str(product.price),
            active=bool(product.active),
            position=getattr(product, "category_position", None),
        )

    @staticmethod
    def many_to_grid_rows(
        products: Iterable[Product], *, language_id: Optional[int] = None
    ) -> List[ProductGridRow]:
        return [ProductMapper.to_grid_row(p, language_id=language_id) for p in products]
