from __future__ import annotations

import json
import os
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Type

from django.utils.translation import gettext

from apps.common import get_logger
from .commands import (
    BulkDeleteProductCommand,
    BulkDuplicateProductCommand,
    BulkToggleProductCommand,
    DeleteProductCommand,
    DuplicateProductCommand,
    UpdateProductPositionCommand,
    UpdateProductStatusCommand,
)
from .dtos import ProductForAssociation
from .errors import (
    ERROR_MESSAGES,
    MessageEntry,
    message_for_exception,
    position_error_messages,
)
from .exceptions import (
    CannotUpdateProductPositionError,
    CatalogError,
    ProductConstraintError,
    ProductError,
    ProductNotFoundError,
    ShopAssociationNotFoundError,
)
from .form_handling import root_level_errors
from .forms import CategoryTreeSelectorForm, ProductCategoriesForm
from .grid import ProductFilters, present_grid
from .outcomes import (
    ERROR,
    SUCCESS,
    FileOutcome,
    FlashMessage,
    JsonOutcome,
    NotFoundOutcome,
    RedirectOutcome,
    RenderOutcome,
)
from .queries import (
    DEFAULT_SEARCH_LIMIT,
    GetCategoryForEditing,
    GetProductForEditing,
    SearchProductsForAssociation,
)
from .security import UPDATE

logger = get_logger(__name__).bind(component="catalog", layer="orchestrator")

INDEX_ROUTE = "catalog:products-index"
CREATE_ROUTE = "catalog:products-create"
EDIT_ROUTE = "catalog:products-edit"

INDEX_TEMPLATE = "catalog/product/index.html"
CREATE_TEMPLATE = "catalog/product/create.html"
EDIT_TEMPLATE = "catalog/product/edit.html"
DISABLED_TEMPLATE = "catalog/product/disabled.html"

INVALID_LANGUAGE_MESSAGE = (
    "Invalid language code %s was used which matches no existing language in this shop."
)


def product_ids_from_request(request) -> List[int]:
    """Read the ids selected in the grid for a bulk action.

    Only a list of values counts as a selection: a JSON array, a
    ``product_bulk[]`` form field or a repeated ``product_bulk`` field. Values
    that are not integers are skipped.
    """
    raw: Any = None
    if "json" in (request.content_type or ""):
        try:
            payload = json.loads(request.body or b"{}")
        except ValueError:
            payload = {}
        raw = payload.get("product_bulk") if isinstance(payload, dict) else None
    else:
        values = request.POST.getlist("product_bulk[]")
        if not values:
            values = request.POST.getlist("product_bulk")
            values = values if len(values) > 1 else None
        raw = values
    if not isinstance(raw, list):
        return []
    ids = []
    for value in raw:
        try:
            ids.append(int(value))
        except (TypeError, ValueError):
            # 0 is never a valid id, so the bulk command rejects the selection
            ids.append(0)
    return ids


def format_products_for_association(
    products: Iterable[ProductForAssociation],
) -> List[Dict[str, Any]]:
    data = []
    for product in products:
        name = product.name
        if product.reference:
            name += f" (ref: {product.reference})"
        data.append(
            {"id": product.product_id, "name": name, "image": product.image_url}
        )
    return data


def _int_or_zero(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class ProductAdminOrchestrator:
    """Back-office product pages and actions.

    Every operation returns an outcome describing what to render, where to
    redirect or what to send back, together with the flash messages to show.
    Domain errors are turned into flash messages through the error message
    table; only a missing filter category on the listing escapes.
    """

    def __init__(
        self,
        *,
        command_bus,
        query_bus,
        create_form_builder,
        edit_form_builder,
        form_handler,
        grid_factory,
        shop_context,
        configuration,
        languages,
        downloads,
        url_provider,
        permissions,
        error_messages: Optional[Mapping[Type[Exception], MessageEntry]] = None,
        debug: bool = False,
    ):
        self.command_bus = command_bus
        self.query_bus = query_bus
        self.create_form_builder = create_form_builder
        self.edit_form_builder = edit_form_builder
        self.form_handler = form_handler
        self.grid_factory = grid_factory
        self.shop_context = shop_context
        self.configuration = configuration
        self.languages = languages
        self.downloads = downloads
        self.url_provider = url_provider
        self.permissions = permissions
        self.error_messages = ERROR_MESSAGES if error_messages is None else error_messages
        self.debug = debug
        self.logger = logger.bind(service="ProductAdminOrchestrator")

    # Pages
    def list(self, filters: ProductFilters) -> RenderOutcome:
        self.logger.debug("Listing products", filters=filters.get_filters())
        grid = self.grid_factory.get_grid(filters)
        category_name = None
        if filters.id_category:
            category = self.query_bus.handle(GetCategoryForEditing(filters.id_category))
            category_name = category.name_for(self.shop_context.get_context_lang_id())
        return RenderOutcome(
            INDEX_TEMPLATE,
            {
                "categories": ProductCategoriesForm(
                    initial={"id_category": filters.id_category}
                ),
                "selected_category_name": category_name,
                "product_grid": present_grid(grid),
                "enable_sidebar": True,
                "layout_header_toolbar_btn": self._toolbar_buttons(),
                "help_link": self._help_link(),
            },
        )

    def create(self, request) -> Any:
        if not self.shop_context.is_single_shop_context():
            return self._render_disabled_multistore_page()
        form = self.create_form_builder.get_form(request)
        flashes: List[FlashMessage] = []
        try:
            result = self.form_handler.handle(form)
            if result.submitted and result.valid:
                self.logger.info(
                    "Product created from form",
                    product_id=result.identifiable_object_id,
                )
                return RedirectOutcome(
                    EDIT_ROUTE,
                    {"product_id": result.identifiable_object_id},
                    [FlashMessage(SUCCESS, gettext("Successful update."))],
                )
            if result.submitted:
                flashes.extend(self._root_error_flashes(form))
                if not flashes:
                    flashes.append(
                        FlashMessage(
                            ERROR,
                            gettext(
                                "The product could not be saved. "
                                "Please check the form for errors."
                            ),
                        )
                    )
        except Exception as exc:
            flashes.append(self._error_flash(exc, action="create"))
        return self._render_create_form(
            form, "liteDisplaying" in request.GET, flashes
        )

    def edit(self, request, product_id: int) -> Any:
        if not self.shop_context.is_single_shop_context():
            return self._render_disabled_multistore_page(product_id)
        try:
            form = self.edit_form_builder.get_form_for(product_id, request)
        except ShopAssociationNotFoundError:
            self.logger.info("Product missing from context shop", product_id=product_id)
            return self._render_missing_association(product_id)
        except ProductNotFoundError as exc:
            return NotFoundOutcome(str(exc))

        flashes: List[FlashMessage] = []
        try:
            result = self.form_handler.handle_for(product_id, form)
            if result.submitted:
                if result.valid:
                    return RedirectOutcome(
                        EDIT_ROUTE,
                        {"product_id": product_id},
                        [FlashMessage(SUCCESS, gettext("Successful update."))],
                    )
                flashes.extend(self._root_error_flashes(form))
        except Exception as exc:
            flashes.append(self._error_flash(exc, action="edit", product_id=product_id))
        return self._render_edit_form(form, product_id, flashes)

    def preview(self, product_id: int) -> RedirectOutcome:
        try:
            url = self.url_provider.get_url(product_id)
        except ProductError as exc:
            return self._to_index(self._error_flash(exc, action="preview", product_id=product_id))
        return RedirectOutcome(url=url)

    # Single product actions
    def delete(self, product_id: int) -> RedirectOutcome:
        try:
            self.command_bus.handle(DeleteProductCommand(product_id))
        except ProductError as exc:
            return self._to_index(self._error_flash(exc, action="delete", product_id=product_id))
        return self._to_index(FlashMessage(SUCCESS, gettext("Successful deletion")))

    def duplicate(self, product_id: int) -> RedirectOutcome:
        try:
            self.command_bus.handle(DuplicateProductCommand(product_id))
        except ProductError as exc:
            return self._to_index(
                self._error_flash(exc, action="duplicate", product_id=product_id)
            )
        return self._to_index(FlashMessage(SUCCESS, gettext("Successful duplication")))

    def toggle_status(self, product_id: int) -> RedirectOutcome:
        try:
            product = self.query_bus.handle(GetProductForEditing(product_id))
            self.command_bus.handle(UpdateProductStatusCommand(product_id, not product.active))
        except ProductError as exc:
            return self._to_index(
                self._error_flash(exc, action="toggle_status", product_id=product_id)
            )
        return self._to_index(
            FlashMessage(SUCCESS, gettext("The status has been successfully updated."))
        )

    def update_position(self, request) -> RedirectOutcome:
        command = UpdateProductPositionCommand.from_raw(
            request.POST.get("positions"), request.GET.get("id_category")
        )
        try:
            self.command_bus.handle(command)
        except CannotUpdateProductPositionError as exc:
            self.logger.warning(
                "Position update failed",
                category_id=command.category_id,
                errors=len(exc.errors),
            )
            return self._to_index(
                *(FlashMessage(ERROR, message) for message in position_error_messages(exc.errors))
            )
        return self._to_index(FlashMessage(SUCCESS, gettext("Update successful")))

    # Bulk actions
    def bulk_delete(self, request) -> RedirectOutcome:
        return self._bulk(
            request,
            BulkDeleteProductCommand,
            gettext("Successful deletion"),
        )

    def bulk_enable(self, request) -> RedirectOutcome:
        return self._bulk(
            request,
            lambda ids: BulkToggleProductCommand(ids, True),
            gettext("Products successfully activated."),
        )

    def bulk_disable(self, request) -> RedirectOutcome:
        return self._bulk(
            request,
            lambda ids: BulkToggleProductCommand(ids, False),
            gettext("Products successfully deactivated."),
        )

    def bulk_duplicate(self, request) -> RedirectOutcome:
        return self._bulk(
            request,
            BulkDuplicateProductCommand,
            gettext("Product(s) successfully duplicated."),
        )

    # Files and JSON
    def download_virtual_file(self, file_id: int):
        download = self.downloads.get(id=file_id)
        if download is None:
            self.logger.info("Virtual product file not found", file_id=file_id)
            return NotFoundOutcome(f"Virtual product file {file_id} does not exist")
        path = os.path.join(self.configuration.get("DOWNLOAD_DIR", ""), download.filename)
        if not os.path.isfile(path):
            self.logger.warning(
                "Virtual product file missing on disk", file_id=file_id, path=path
            )
            return NotFoundOutcome(f"Virtual product file {file_id} is missing")
        return FileOutcome(path=path, filename=download.display_filename)

    def search_associations(self, request, language_code: str) -> JsonOutcome:
        language = self.languages.get_one_by_locale_or_iso_code(language_code)
        if language is None:
            self.logger.info("Unknown search language", language_code=language_code)
            return JsonOutcome({"message": INVALID_LANGUAGE_MESSAGE % language_code}, 400)

        shop_id = self.shop_context.get_context_shop_id()
        if not shop_id:
            shop_id = self.configuration.get_int("SHOP_DEFAULT")

        params = request.GET
        try:
            products = self.query_bus.handle(
                SearchProductsForAssociation(
                    params.get("query", ""),
                    language.id,
                    int(shop_id),
                    _int_or_zero(params.get("limit", DEFAULT_SEARCH_LIMIT)),
                )
            )
        except ProductConstraintError as exc:
            return JsonOutcome({"message": str(exc)}, 400)
        if not products:
            return JsonOutcome([], 404)
        return JsonOutcome(format_products_for_association(products))

    # Helpers
    def _bulk(
        self, request, build_command: Callable[[List[int]], Any], success_message: str
    ) -> RedirectOutcome:
        product_ids = product_ids_from_request(request)
        try:
            self.command_bus.handle(build_command(product_ids))
        except Exception as exc:
            return self._to_index(self._error_flash(exc, product_ids=product_ids))
        self.logger.info("Bulk action applied", product_ids=product_ids)
        return self._to_index(FlashMessage(SUCCESS, success_message))

    def _error_flash(self, exc: Exception, **context: Any) -> FlashMessage:
        if isinstance(exc, CatalogError):
            self.logger.warning(
                "Catalog action failed", error=type(exc).__name__, code=exc.code, **context
            )
        else:
            self.logger.exception("Unexpected error in catalog action", **context)
        return FlashMessage(
            ERROR, message_for_exception(exc, self.error_messages, debug=self.debug)
        )

    @staticmethod
    def _root_error_flashes(form) -> List[FlashMessage]:
        return [
            FlashMessage(ERROR, f"{origin}: {message}")
            for origin, message in root_level_errors(form)
        ]

    @staticmethod
    def _to_index(*flashes: FlashMessage) -> RedirectOutcome:
        return RedirectOutcome(INDEX_ROUTE, flashes=list(flashes))

    def _help_link(self) -> str:
        return self.configuration.get("HELP_URL", "")

    @staticmethod
    def _toolbar_buttons() -> Dict[str, Dict[str, str]]:
        return {
            "add": {
                "route": CREATE_ROUTE,
                "desc": gettext("Add new product"),
                "icon": "add_circle_outline",
                "class": "btn-primary new-product",
                "floating_class": "new-product",
            }
        }

    def _render_create_form(
        self, form, light_display: bool, flashes: List[FlashMessage]
    ) -> RenderOutcome:
        return RenderOutcome(
            CREATE_TEMPLATE,
            {
                "light_display": light_display,
                "show_content_header": False,
                "product_form": form,
                "help_link": self._help_link(),
                "editable": self.permissions.is_granted(UPDATE),
            },
            flashes,
        )

    def _render_edit_form(
        self, form, product_id: int, flashes: List[FlashMessage]
    ) -> RenderOutcome:
        return RenderOutcome(
            EDIT_TEMPLATE,
            {
                "product_id": product_id,
                "category_tree_selector_form": CategoryTreeSelectorForm(),
                "show_content_header": False,
                "product_form": form,
                "help_link": self._help_link(),
                "editable": self.permissions.is_granted(UPDATE),
                "tax_enabled": self.configuration.get_bool("TAX_ENABLED"),
                "stock_enabled": self.configuration.get_bool("STOCK_MANAGEMENT"),
            },
            flashes,
        )

    def _render_disabled_multistore_page(self, product_id: Optional[int] = None) -> RenderOutcome:
        return RenderOutcome(
            DISABLED_TEMPLATE,
            {
                "error_message": gettext(
                    "This page is only compatible in a single store context. To access the page, please select a store or disable the multistore feature."
                ),
                "product_id": product_id,
            },
        )

    def _render_missing_association(self, product_id: int) -> RenderOutcome:
        return RenderOutcome(
            DISABLED_TEMPLATE,
            {
                "error_message": gettext(
                    "This product is not associated with the store selected in the multistore header, please select another one."
                ),
                "product_id": product_id,
            },
        )
