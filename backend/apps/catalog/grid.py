from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from django.core.paginator import Paginator

from apps.common import get_logger
from .dtos import ProductGrid
from .mappers import ProductMapper
from .protocols import ProductRepositoryProtocol

logger = get_logger(__name__).bind(component="catalog", layer="grid")

DEFAULT_LIMIT = 50
MAX_LIMIT = 1000

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _positive_int(value: Any) -> Optional[int]:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _tristate(value: Any) -> Optional[bool]:
    text = str(value or "").strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    return None


@dataclass(frozen=True)
class ProductFilters:
    id_category: Optional[int] = None
    name: str = ""
    reference: str = ""
    active: Optional[bool] = None
    page: int = 1
    limit: int = DEFAULT_LIMIT

    @staticmethod
    def from_request(request) -> "ProductFilters":
        params = request.GET
        limit = _positive_int(params.get("limit")) or DEFAULT_LIMIT
        return ProductFilters(
            id_category=_positive_int(params.get("id_category")),
            name=(params.get("name") or "").strip(),
            reference=(params.get("reference") or "").strip(),
            active=_tristate(params.get("active")),
            page=_positive_int(params.get("page")) or 1,
            limit=min(limit, MAX_LIMIT),
        )

    def get_filters(self) -> Dict[str, Any]:
        """Return only the filters that are set, keyed by filter name."""
        filters = {
            "id_category": self.id_category,
            "name": self.name,
            "reference": self.reference,
            "active": self.active,
        }
        return {key: value for key, value in filters.items() if value not in (None, "")}


class ProductGridFactory:
    def __init__(self, products: ProductRepositoryProtocol, shop_context=None):
        self.products = products
        self.shop_context = shop_context

    def get_grid(self, filters: ProductFilters) -> ProductGrid:
        applied = filters.get_filters()
        queryset = self.products.list_for_grid(applied)
        paginator = Paginator(queryset, filters.limit)
        page = paginator.get_page(filters.page)
        language_id = (
            self.shop_context.get_context_lang_id() if self.shop_context else None
        )
        logger.debug(
            "Built product grid",
            filters=applied,
            page=page.number,
            total=paginator.count,
        )
        return ProductGrid(
            rows=ProductMapper.many_to_grid_rows(
                page.object_list, language_id=language_id
            ),
            total=paginator.count,
            page=page.number,
            limit=filters.limit,
            num_pages=paginator.num_pages,
            filters=applied,
        )


def present_grid(grid: ProductGrid) -> Dict[str, Any]:
    """Flatten a grid into template context."""
    return {
        "rows": [asdict(row) for row in grid.rows],
        "total": grid.total,
        "page": grid.page,
        "limit": grid.limit,
        "num_pages": grid.num_pages,
        "has_previous": grid.page > 1,
        "has_next": grid.page < grid.num_pages,
        "filters": dict(grid.filters),
        "sortable": "id_category" in grid.filters,
    }
