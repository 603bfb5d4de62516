from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class CategoryForEditing:
    category_id: int
    default_name: str
    # language id -> localized name
    names: Dict[int, str] = field(default_factory=dict)

    def name_for(self, language_id: int) -> str:
        return self.names.get(language_id, self.default_name)


@dataclass(frozen=True)
class ProductForEditing:
    product_id: int
    name: str
    reference: str
    price: Decimal
    active: bool
    product_type: str
    category_ids: Tuple[int, ...] = ()
    shop_ids: Tuple[int, ...] = ()


@dataclass(frozen=True)
class ProductForAssociation:
    product_id: int
    name: str
    reference: str
    image_url: str


@dataclass(frozen=True)
class ProductGridRow:
    id: int
    name: str
    reference: str
    price: str
    active: bool
    position: Optional[int] = None


@dataclass
class ProductGrid:
    rows: List[ProductGridRow]
    total: int
    page: int
    limit: int
    num_pages: int
    filters: Dict[str, object] = field(default_factory=dict)


"""DTO dataclasses only. Mapping logic lives in mappers.py."""
