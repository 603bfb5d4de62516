from __future__ import annotations

from django.utils.text import slugify

from apps.common import get_logger
from .exceptions import ProductNotFoundError
from .protocols import ProductRepositoryProtocol

logger = get_logger(__name__).bind(component="catalog", layer="service")

DEFAULT_PRODUCT_URL_TEMPLATE = "/{id}-{slug}.html"


class ProductUrlProvider:
    """Build storefront URLs for products.

    The template comes from the ``PRODUCT_URL_TEMPLATE`` configuration key and
    may use ``{id}``, ``{slug}`` and ``{reference}``.
    """

    def __init__(self, products: ProductRepositoryProtocol, configuration):
        self.products = products
        self.configuration = configuration
        self.logger = logger.bind(service="ProductUrlProvider")

    def get_url(self, product_id: int) -> str:
        product = self.products.get(id=product_id)
        if product is None:
            self.logger.info("Cannot preview missing product", product_id=product_id)
            raise ProductNotFoundError(f"Product with id {product_id} was not found")
        template = (
            self.configuration.get("PRODUCT_URL_TEMPLATE") or DEFAULT_PRODUCT_URL_TEMPLATE
        )
        return template.format(
            id=product.id,
            slug=slugify(product.name) or "product",
            reference=product.reference or "",
        )
