from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from .models import Category, Product, ProductCategory, ProductDownload


class CategoryRepositoryProtocol(Protocol):
    def exists(self, **filters) -> bool:
        ...

    def get_with_translations(self, category_id: int) -> Optional[Category]:
        ...


class ProductRepositoryProtocol(Protocol):
    def get(self, **filters) -> Optional[Product]:
        ...

    def get_many(self, ids: Iterable[int]) -> List[Product]:
        ...

    def get_for_editing(self, product_id: int) -> Optional[Product]:
        ...

    def is_in_shop(self, product: Product, shop_id: int) -> bool:
        ...

    def create(self, **data) -> Product:
        ...

    def update(self, obj: Product, **data) -> Product:
        ...

    def delete(self, obj: Product) -> None:
        ...

    def list_for_grid(self, filters: Mapping[str, object]) -> Any:
        ...

    def search_for_association(
        self, phrase: str, language_id: int, shop_id: int, limit: int
    ) -> List[Product]:
        ...

    def set_categories(self, product: Product, category_ids: Iterable[int]) -> None:
        ...

    def add_to_shop(self, product: Product, shop_id: int) -> None:
        ...

    def set_status(self, product_ids: Iterable[int], active: bool) -> int:
        ...

    def duplicate(self, product: Product) -> Product:
        ...

    def category_rows(self, category_id: int) -> Dict[int, ProductCategory]:
        ...

    def update_positions(self, category_id: int, positions: Mapping[int, int]) -> None:
        ...


class ProductDownloadRepositoryProtocol(Protocol):
    def get(self, **filters) -> Optional[ProductDownload]:
        ...


class CommandBusProtocol(Protocol):
    def handle(self, command: Any) -> Any:
        ...


class QueryBusProtocol(Protocol):
    def handle(self, query: Any) -> Any:
        ...
