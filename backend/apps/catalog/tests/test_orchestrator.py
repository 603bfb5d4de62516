import json
from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.test import RequestFactory
from django.utils.http import urlencode

from apps.catalog.commands import (
    BulkDeleteProductCommand,
    BulkDuplicateProductCommand,
    BulkToggleProductCommand,
    DeleteProductCommand,
    DuplicateProductCommand,
    UpdateProductPositionCommand,
    UpdateProductStatusCommand,
)
from apps.catalog.dtos import (
    CategoryForEditing,
    ProductForAssociation,
    ProductForEditing,
    ProductGrid,
)
from apps.catalog.exceptions import (
    CannotBulkDeleteProductError,
    CannotDeleteProductError,
    CannotUpdateProductPositionError,
    CategoryNotFoundError,
    ProductConstraintError,
    ProductNotFoundError,
    ShopAssociationNotFoundError,
)
from apps.catalog.form_handling import FormHandlerResult
from apps.catalog.grid import ProductFilters
from apps.catalog.orchestrator import (
    ProductAdminOrchestrator,
    format_products_for_association,
    product_ids_from_request,
)
from apps.catalog.outcomes import (
    ERROR,
    SUCCESS,
    FileOutcome,
    FlashMessage,
    JsonOutcome,
    NotFoundOutcome,
    RedirectOutcome,
    RenderOutcome,
)
from apps.catalog.queries import (
    GetCategoryForEditing,
    GetProductForEditing,
    SearchProductsForAssociation,
)

from .fakes import RecordingBus

rf = RequestFactory()


class FakeShopContext:
    def __init__(self, single=True, shop_id=1, lang_id=1):
        self.single = single
        self.shop_id = shop_id
        self.lang_id = lang_id

    def is_single_shop_context(self):
        return self.single

    def get_context_shop_id(self):
        return self.shop_id

    def get_context_lang_id(self):
        return self.lang_id


class FakeConfiguration:
    def __init__(self, **values):
        self.values = {"SHOP_DEFAULT": "1", "HELP_URL": "https://help.test/products"}
        self.values.update(values)

    def get(self, key, default=None):
        return self.values.get(key, default)

    def get_int(self, key, default=0):
        return int(self.values.get(key, default))

    def get_bool(self, key, default=False):
        return str(self.values.get(key, default)).lower() in ("1", "true")


class FakeLanguages:
    def __init__(self, codes):
        self.codes = codes

    def get_one_by_locale_or_iso_code(self, code):
        language_id = self.codes.get(code)
        return SimpleNamespace(id=language_id) if language_id else None


class FakeDownloads:
    def __init__(self, downloads=()):
        self.downloads = {d.id: d for d in downloads}

    def get(self, **filters):
        return self.downloads.get(filters.get("id"))


class FakeUrlProvider:
    def get_url(self, product_id):
        if product_id == 404:
            raise ProductNotFoundError("missing")
        return f"https://shop.test/{product_id}-shoe.html"


class FakePermissions:
    def __init__(self, granted=True):
        self.granted = granted

    def is_granted(self, action):
        return self.granted


class StubForm:
    form_name = "product"

    def __init__(self, non_field=(), hidden=None):
        self._non_field = list(non_field)
        self._hidden = hidden or {}

    def non_field_errors(self):
        return self._non_field

    def hidden_fields(self):
        return [SimpleNamespace(name=name, errors=errors) for name, errors in self._hidden.items()]


class FakeCreateFormBuilder:
    def __init__(self, form=None):
        self.form = form or StubForm()
        self.calls = 0

    def get_form(self, request):
        self.calls += 1
        return self.form


class FakeEditFormBuilder:
    def __init__(self, form=None, error=None):
        self.form = form or StubForm()
        self.error = error
        self.calls = []

    def get_form_for(self, product_id, request):
        self.calls.append(product_id)
        if self.error is not None:
            raise self.error
        return self.form


class FakeFormHandler:
    def __init__(self, result=None, error=None):
        self.result = result or FormHandlerResult(False, False)
        self.error = error
        self.calls = []

    def _run(self, *args):
        self.calls.append(args)
        if self.error is not None:
            raise self.error
        return self.result

    def handle(self, form):
        return self._run(form)

    def handle_for(self, product_id, form):
        return self._run(product_id, form)


class FakeGridFactory:
    def __init__(self):
        self.filters = []

    def get_grid(self, filters):
        self.filters.append(filters)
        return ProductGrid(rows=[], total=0, page=1, limit=filters.limit, num_pages=1)


def build(**overrides):
    collaborators = dict(
        command_bus=RecordingBus(),
        query_bus=RecordingBus(),
        create_form_builder=FakeCreateFormBuilder(),
        edit_form_builder=FakeEditFormBuilder(),
        form_handler=FakeFormHandler(),
        grid_factory=FakeGridFactory(),
        shop_context=FakeShopContext(),
        configuration=FakeConfiguration(),
        languages=FakeLanguages({"en": 1, "fr-FR": 2}),
        downloads=FakeDownloads(),
        url_provider=FakeUrlProvider(),
        permissions=FakePermissions(),
    )
    collaborators.update(overrides)
    return ProductAdminOrchestrator(**collaborators)


def editable_product(active):
    return ProductForEditing(
        product_id=3,
        name="Shoe",
        reference="",
        price=Decimal("1"),
        active=active,
        product_type="standard",
    )


def post(data=None, **params):
    path = f"/?{urlencode(params)}" if params else "/"
    return rf.post(path, data or {})


# list
def test_list_renders_grid_without_category():
    query_bus = RecordingBus()
    outcome = build(query_bus=query_bus).list(ProductFilters())
    assert isinstance(outcome, RenderOutcome)
    assert outcome.template == "catalog/product/index.html"
    assert outcome.context["selected_category_name"] is None
    assert outcome.context["enable_sidebar"] is True
    assert outcome.context["help_link"] == "https://help.test/products"
    assert outcome.context["layout_header_toolbar_btn"]["add"]["route"] == "catalog:products-create"
    assert query_bus.handled == []


def test_list_resolves_category_name_in_context_language():
    query_bus = RecordingBus(
        {GetCategoryForEditing: CategoryForEditing(4, "Shoes", {2: "Chaussures"})}
    )
    orchestrator = build(query_bus=query_bus, shop_context=FakeShopContext(lang_id=2))
    outcome = orchestrator.list(ProductFilters(id_category=4))
    assert outcome.context["selected_category_name"] == "Chaussures"
    assert query_bus.handled == [GetCategoryForEditing(4)]


def test_list_lets_missing_category_propagate():
    query_bus = RecordingBus({GetCategoryForEditing: CategoryNotFoundError("nope")})
    with pytest.raises(CategoryNotFoundError):
        build(query_bus=query_bus).list(ProductFilters(id_category=99))


# create
def test_create_in_multishop_context_renders_disabled_page():
    handler = FakeFormHandler()
    builder = FakeCreateFormBuilder()
    outcome = build(
        shop_context=FakeShopContext(single=False), form_handler=handler, create_form_builder=builder
    ).create(rf.get("/"))
    assert outcome.template == "catalog/product/disabled.html"
    assert "single store context" in outcome.context["error_message"]
    assert handler.calls == []
    assert builder.calls == 0


def test_create_success_redirects_to_edit_page():
    handler = FakeFormHandler(FormHandlerResult(True, True, 42))
    outcome = build(form_handler=handler).create(post({"name": "Boot"}))
    assert isinstance(outcome, RedirectOutcome)
    assert outcome.route == "catalog:products-edit"
    assert outcome.kwargs == {"product_id": 42}
    assert outcome.flashes == [FlashMessage(SUCCESS, "Successful update.")]


def test_create_get_renders_form_with_light_display():
    outcome = build().create(rf.get("/", {"liteDisplaying": "1"}))
    assert outcome.template == "catalog/product/create.html"
    assert outcome.context["light_display"] is True
    assert outcome.context["editable"] is True
    assert outcome.flashes == []


def test_create_invalid_without_root_errors_flashes_generic_notice():
    handler = FakeFormHandler(FormHandlerResult(True, False))
    outcome = build(form_handler=handler).create(post())
    assert outcome.template == "catalog/product/create.html"
    assert [f.level for f in outcome.flashes] == [ERROR]


def test_create_invalid_flashes_root_errors():
    form = StubForm(non_field=["Bad combination"])
    outcome = build(
        form_handler=FakeFormHandler(FormHandlerResult(True, False)),
        create_form_builder=FakeCreateFormBuilder(form),
    ).create(post())
    assert outcome.flashes == [FlashMessage(ERROR, "product: Bad combination")]


def test_create_handler_exception_is_flashed_and_form_rerendered():
    handler = FakeFormHandler(error=RuntimeError("db down"))
    outcome = build(form_handler=handler).create(post())
    assert outcome.template == "catalog/product/create.html"
    assert outcome.flashes == [
        FlashMessage(ERROR, "An unexpected error occurred. [RuntimeError code 0]")
    ]


# edit
def test_edit_in_multishop_context_renders_disabled_page():
    builder = FakeEditFormBuilder()
    outcome = build(shop_context=FakeShopContext(single=False), edit_form_builder=builder).edit(
        rf.get("/"), 3
    )
    assert outcome.template == "catalog/product/disabled.html"
    assert outcome.context["product_id"] == 3
    assert builder.calls == []


def test_edit_without_shop_association_renders_missing_association_page():
    handler = FakeFormHandler()
    outcome = build(
        edit_form_builder=FakeEditFormBuilder(error=ShopAssociationNotFoundError("x")),
        form_handler=handler,
    ).edit(rf.get("/"), 3)
    assert outcome.template == "catalog/product/disabled.html"
    assert "not associated with the store" in outcome.context["error_message"]
    assert handler.calls == []


def test_edit_unknown_product_is_not_found():
    outcome = build(edit_form_builder=FakeEditFormBuilder(error=ProductNotFoundError("x"))).edit(
        rf.get("/"), 3
    )
    assert isinstance(outcome, NotFoundOutcome)


def test_edit_success_redirects_to_same_page():
    outcome = build(form_handler=FakeFormHandler(FormHandlerResult(True, True, 3))).edit(post(), 3)
    assert outcome.route == "catalog:products-edit"
    assert outcome.kwargs == {"product_id": 3}
    assert outcome.flashes == [FlashMessage(SUCCESS, "Successful update.")]


def test_edit_invalid_flashes_each_root_error():
    form = StubForm(non_field=["Mismatch"], hidden={"product_id": ["Enter a whole number."]})
    outcome = build(
        edit_form_builder=FakeEditFormBuilder(form),
        form_handler=FakeFormHandler(FormHandlerResult(True, False, 3)),
    ).edit(post(), 3)
    assert outcome.template == "catalog/product/edit.html"
    assert [f.message for f in outcome.flashes] == [
        "product: Mismatch",
        "product_id: Enter a whole number.",
    ]


def test_edit_get_context():
    orchestrator = build(
        configuration=FakeConfiguration(TAX_ENABLED="1", STOCK_MANAGEMENT="0"),
        permissions=FakePermissions(False),
    )
    outcome = orchestrator.edit(rf.get("/"), 3)
    assert outcome.context["tax_enabled"] is True
    assert outcome.context["stock_enabled"] is False
    assert outcome.context["editable"] is False
    assert "category_tree_selector_form" in outcome.context


def test_edit_maps_domain_errors():
    error = ProductConstraintError("x", ProductConstraintError.INVALID_PRICE)
    outcome = build(form_handler=FakeFormHandler(error=error)).edit(post(), 3)
    assert outcome.flashes == [FlashMessage(ERROR, "Product price is invalid")]


# single product actions
def test_delete_success_and_failure_redirect_to_list():
    ok = build().delete(3)
    assert ok.route == "catalog:products-index"
    assert ok.flashes == [FlashMessage(SUCCESS, "Successful deletion")]

    bus = RecordingBus({DeleteProductCommand: CannotDeleteProductError("x")})
    failed = build(command_bus=bus).delete(3)
    assert failed.route == "catalog:products-index"
    assert failed.flashes == [
        FlashMessage(ERROR, "An error occurred while deleting the object.")
    ]


def test_delete_with_invalid_id_is_flashed():
    outcome = build().delete(0)
    assert outcome.route == "catalog:products-index"
    assert outcome.flashes == [FlashMessage(ERROR, "Invalid product identifier.")]


def test_duplicate():
    bus = RecordingBus()
    outcome = build(command_bus=bus).duplicate(3)
    assert bus.handled == [DuplicateProductCommand(3)]
    assert outcome.flashes == [FlashMessage(SUCCESS, "Successful duplication")]


def test_toggle_status_inverts_current_state():
    query_bus = RecordingBus({GetProductForEditing: editable_product(active=True)})
    command_bus = RecordingBus()
    outcome = build(query_bus=query_bus, command_bus=command_bus).toggle_status(3)
    assert command_bus.handled == [UpdateProductStatusCommand(3, False)]
    assert outcome.route == "catalog:products-index"
    assert outcome.flashes == [
        FlashMessage(SUCCESS, "The status has been successfully updated.")
    ]


def test_toggle_status_maps_product_errors():
    query_bus = RecordingBus({GetProductForEditing: ProductNotFoundError("x")})
    outcome = build(query_bus=query_bus).toggle_status(3)
    assert outcome.route == "catalog:products-index"
    assert outcome.flashes == [
        FlashMessage(ERROR, "The object cannot be loaded (or found).")
    ]


def test_preview_redirects_to_storefront():
    outcome = build().preview(3)
    assert outcome.url == "https://shop.test/3-shoe.html"
    failed = build().preview(404)
    assert failed.route == "catalog:products-index"
    assert failed.flashes[0].level == ERROR


# positions
def test_update_position_success():
    bus = RecordingBus()
    rows = [{"rowId": 3, "oldPosition": 0, "newPosition": 1}]
    outcome = build(command_bus=bus).update_position(
        post({"positions": json.dumps(rows)}, id_category=4)
    )
    assert bus.handled == [UpdateProductPositionCommand(tuple(rows), 4)]
    assert outcome.flashes == [FlashMessage(SUCCESS, "Update successful")]


def test_update_position_flattens_errors_without_success_flash():
    error = CannotUpdateProductPositionError(
        [
            {"key": "Category %(category_id)s does not exist.", "parameters": {"category_id": 4}},
            "Second problem",
        ]
    )
    bus = RecordingBus({UpdateProductPositionCommand: error})
    outcome = build(command_bus=bus).update_position(post({"positions": "[]"}, id_category=4))
    assert outcome.route == "catalog:products-index"
    assert outcome.flashes == [
        FlashMessage(ERROR, "Category 4 does not exist."),
        FlashMessage(ERROR, "Second problem"),
    ]


# bulk actions
def test_product_ids_from_request_requires_a_list():
    assert product_ids_from_request(rf.post("/", {"product_bulk": "5"})) == []
    assert product_ids_from_request(rf.post("/", {"product_bulk[]": ["1", "2"]})) == [1, 2]
    assert product_ids_from_request(rf.post("/", {"product_bulk": ["3", "x", "4"]})) == [3, 0, 4]
    json_request = rf.post(
        "/", json.dumps({"product_bulk": ["7", 8]}), content_type="application/json"
    )
    assert product_ids_from_request(json_request) == [7, 8]
    scalar = rf.post("/", json.dumps({"product_bulk": "7"}), content_type="application/json")
    assert product_ids_from_request(scalar) == []


@pytest.mark.parametrize(
    "action, expected_command, message",
    [
        ("bulk_delete", BulkDeleteProductCommand((1, 2)), "Successful deletion"),
        ("bulk_enable", BulkToggleProductCommand((1, 2), True), "Products successfully activated."),
        ("bulk_disable", BulkToggleProductCommand((1, 2), False), "Products successfully deactivated."),
        ("bulk_duplicate", BulkDuplicateProductCommand((1, 2)), "Product(s) successfully duplicated."),
    ],
)
def test_bulk_actions_dispatch_and_redirect(action, expected_command, message):
    bus = RecordingBus()
    outcome = getattr(build(command_bus=bus), action)(rf.post("/", {"product_bulk[]": ["1", "2"]}))
    assert bus.handled == [expected_command]
    assert outcome.route == "catalog:products-index"
    assert outcome.flashes == [FlashMessage(SUCCESS, message)]


def test_bulk_with_scalar_selection_dispatches_empty_ids():
    bus = RecordingBus()
    build(command_bus=bus).bulk_delete(rf.post("/", {"product_bulk": "5"}))
    assert bus.handled == [BulkDeleteProductCommand(())]


def test_bulk_failures_are_mapped():
    bus = RecordingBus({BulkDeleteProductCommand: CannotBulkDeleteProductError([2])})
    outcome = build(command_bus=bus).bulk_delete(rf.post("/", {"product_bulk[]": ["2"]}))
    assert outcome.flashes == [
        FlashMessage(ERROR, "An error occurred while deleting this selection.")
    ]


def test_bulk_with_invalid_ids_does_not_escape():
    outcome = build().bulk_enable(rf.post("/", {"product_bulk[]": ["-1"]}))
    assert outcome.route == "catalog:products-index"
    assert outcome.flashes == [FlashMessage(ERROR, "Invalid product identifier.")]


def test_bulk_with_a_non_numeric_id_rejects_the_whole_selection():
    bus = RecordingBus()
    outcome = build(command_bus=bus).bulk_delete(rf.post("/", {"product_bulk[]": ["3", "x"]}))
    assert bus.handled == []
    assert outcome.route == "catalog:products-index"
    assert outcome.flashes == [FlashMessage(ERROR, "Invalid product identifier.")]


# virtual files
def test_download_virtual_file(tmp_path):
    (tmp_path / "abc123").write_bytes(b"content")
    download = SimpleNamespace(id=5, filename="abc123", display_filename="manual.pdf")
    orchestrator = build(
        downloads=FakeDownloads([download]),
        configuration=FakeConfiguration(DOWNLOAD_DIR=str(tmp_path)),
    )
    outcome = orchestrator.download_virtual_file(5)
    assert outcome == FileOutcome(path=str(tmp_path / "abc123"), filename="manual.pdf")


def test_download_missing_record_or_file_is_not_found(tmp_path):
    download = SimpleNamespace(id=5, filename="gone", display_filename="manual.pdf")
    orchestrator = build(
        downloads=FakeDownloads([download]),
        configuration=FakeConfiguration(DOWNLOAD_DIR=str(tmp_path)),
    )
    assert isinstance(orchestrator.download_virtual_file(6), NotFoundOutcome)
    assert isinstance(orchestrator.download_virtual_file(5), NotFoundOutcome)


# association search
def test_search_with_unknown_language_returns_400():
    outcome = build().search_associations(rf.get("/", {"query": "shoe"}), "xx-INVALID")
    assert outcome == JsonOutcome(
        {
            "message": "Invalid language code xx-INVALID was used which matches no existing language in this shop."
        },
        400,
    )


def test_search_formats_results():
    results = [
        ProductForAssociation(1, "Shoe", "SKU1", "/img/1.jpg"),
        ProductForAssociation(2, "Hat", "", ""),
    ]
    query_bus = RecordingBus({SearchProductsForAssociation: results})
    outcome = build(query_bus=query_bus).search_associations(
        rf.get("/", {"query": "s", "limit": "5"}), "fr-FR"
    )
    assert outcome.status == 200
    assert outcome.payload == [
        {"id": 1, "name": "Shoe (ref: SKU1)", "image": "/img/1.jpg"},
        {"id": 2, "name": "Hat", "image": ""},
    ]
    assert query_bus.handled == [SearchProductsForAssociation("s", 2, 1, 5)]


def test_search_falls_back_to_default_shop():
    query_bus = RecordingBus({SearchProductsForAssociation: []})
    orchestrator = build(
        query_bus=query_bus,
        shop_context=FakeShopContext(shop_id=None),
        configuration=FakeConfiguration(SHOP_DEFAULT="3"),
    )
    outcome = orchestrator.search_associations(rf.get("/", {"query": "s"}), "en")
    assert outcome == JsonOutcome([], 404)
    assert query_bus.handled[0].shop_id == 3
    assert query_bus.handled[0].limit == 20


def test_search_constraint_errors_return_400():
    outcome = build().search_associations(rf.get("/", {"query": "  "}), "en")
    assert outcome.status == 400
    assert outcome.payload == {"message": "Search phrase must not be empty"}
    bad_limit = build().search_associations(rf.get("/", {"query": "a", "limit": "abc"}), "en")
    assert bad_limit.status == 400


def test_format_products_for_association():
    assert format_products_for_association(
        [ProductForAssociation(1, "Shoe", "SKU1", "")]
    ) == [{"id": 1, "name": "Shoe (ref: SKU1)", "image": ""}]
