from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from apps.common import get_logger
from .commands import AddProductCommand, UpdateProductCommand
from .forms import ProductForm
from .protocols import CommandBusProtocol, QueryBusProtocol
from .queries import GetProductForEditing

logger = get_logger(__name__).bind(component="catalog", layer="form")


@dataclass(frozen=True)
class FormHandlerResult:
    submitted: bool
    valid: bool
    identifiable_object_id: Optional[int] = None


def _bound_data(request):
    if request is not None and request.method == "POST":
        return request.POST
    return None


def root_level_errors(form) -> List[Tuple[str, str]]:
    """Return ``(origin, message)`` pairs for errors no visible field displays.

    Non-field errors originate from the form itself; errors on hidden fields
    are reported under the field name.
    """
    origin = getattr(form, "form_name", type(form).__name__)
    errors = [(origin, str(message)) for message in form.non_field_errors()]
    for field in form.hidden_fields():
        errors.extend((field.name, str(message)) for message in field.errors)
    return errors


class ProductCreateFormBuilder:
    def get_form(self, request) -> ProductForm:
        return ProductForm(_bound_data(request))


class ProductEditFormBuilder:
    def __init__(self, query_bus: QueryBusProtocol, shop_context):
        self.query_bus = query_bus
        self.shop_context = shop_context

    def get_form_for(self, product_id: int, request) -> ProductForm:
        """Build the edit form for ``product_id``.

        Raises ``ShopAssociationNotFoundError`` when a shop is selected in the
        multistore header and the product is not associated with it.
        """
        shop_id = None
        if self.shop_context.is_multishop_feature_active():
            shop_id = self.shop_context.get_context_shop_id()
        product = self.query_bus.handle(GetProductForEditing(product_id, shop_id))
        initial = {
            "product_id": product.product_id,
            "name": product.name,
            "reference": product.reference,
            "price": product.price,
            "product_type": product.product_type,
            "categories": list(product.category_ids),
            "active": product.active,
        }
        return ProductForm(_bound_data(request), initial=initial, product_id=product_id)


class ProductFormHandler:
    def __init__(self, command_bus: CommandBusProtocol, shop_context):
        self.command_bus = command_bus
        self.shop_context = shop_context
        self.logger = logger.bind(handler="ProductFormHandler")

    def handle(self, form: ProductForm) -> FormHandlerResult:
        if not form.is_bound:
            return FormHandlerResult(submitted=False, valid=False)
        if not form.is_valid():
            self.logger.info("Invalid product create form", errors=form.errors.as_json())
            return FormHandlerResult(submitted=True, valid=False)
        data = form.cleaned_data
        product_id = self.command_bus.handle(
            AddProductCommand(
                name=data["name"],
                product_type=data["product_type"],
                shop_id=self.shop_context.get_context_shop_id(),
                reference=data.get("reference") or "",
                price=data.get("price") or 0,
                category_ids=form.category_ids(),
            )
        )
        return FormHandlerResult(True, True, product_id)

    def handle_for(self, product_id: int, form: ProductForm) -> FormHandlerResult:
        if not form.is_bound:
            return FormHandlerResult(False, False, product_id)
        if not form.is_valid():
            self.logger.info(
                "Invalid product edit form",
                product_id=product_id,
                errors=form.errors.as_json(),
            )
            return FormHandlerResult(True, False, product_id)
        data = form.cleaned_data
        self.command_bus.handle(
            UpdateProductCommand(
                product_id=product_id,
                name=data["name"],
                reference=data.get("reference") or "",
                price=data.get("price") or 0,
                active=bool(data.get("active")),
                product_type=data["product_type"],
                category_ids=form.category_ids(),
            )
        )
        return FormHandlerResult(True, True, product_id)
