from __future__ import annotations

from django.conf import settings

from apps.shops.container import build_configuration_store, build_shop_context
from apps.shops.repositories import LanguageRepository
from .bus import CommandBus, QueryBus
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
from .form_handling import (
    ProductCreateFormBuilder,
    ProductEditFormBuilder,
    ProductFormHandler,
)
from .grid import ProductGridFactory
from .handlers import (
    AddProductHandler,
    BulkDeleteProductHandler,
    BulkDuplicateProductHandler,
    BulkToggleProductHandler,
    DeleteProductHandler,
    DuplicateProductHandler,
    GetCategoryForEditingHandler,
    GetProductForEditingHandler,
    SearchProductsForAssociationHandler,
    UpdateProductHandler,
    UpdateProductPositionHandler,
    UpdateProductStatusHandler,
)
from .orchestrator import ProductAdminOrchestrator
from .queries import (
    GetCategoryForEditing,
    GetProductForEditing,
    SearchProductsForAssociation,
)
from .repositories import (
    CategoryRepository,
    ProductDownloadRepository,
    ProductRepository,
)
from .security import UserPermissions
from .services import ProductUrlProvider


def build_command_bus() -> CommandBus:
    products = ProductRepository()
    return CommandBus(
        {
            AddProductCommand: AddProductHandler(products),
            UpdateProductCommand: UpdateProductHandler(products),
            DeleteProductCommand: DeleteProductHandler(products),
            DuplicateProductCommand: DuplicateProductHandler(products),
            UpdateProductStatusCommand: UpdateProductStatusHandler(products),
            UpdateProductPositionCommand: UpdateProductPositionHandler(
                products, CategoryRepository()
            ),
            BulkDeleteProductCommand: BulkDeleteProductHandler(products),
            BulkToggleProductCommand: BulkToggleProductHandler(products),
            BulkDuplicateProductCommand: BulkDuplicateProductHandler(products),
        }
    )


def build_query_bus() -> QueryBus:
    products = ProductRepository()
    return QueryBus(
        {
            GetCategoryForEditing: GetCategoryForEditingHandler(CategoryRepository()),
            GetProductForEditing: GetProductForEditingHandler(products),
            SearchProductsForAssociation: SearchProductsForAssociationHandler(products),
        }
    )


def build_product_admin_orchestrator(request) -> ProductAdminOrchestrator:
    configuration = build_configuration_store()
    shop_context = build_shop_context(request, configuration)
    command_bus = build_command_bus()
    query_bus = build_query_bus()
    products = ProductRepository()
    return ProductAdminOrchestrator(
        command_bus=command_bus,
        query_bus=query_bus,
        create_form_builder=ProductCreateFormBuilder(),
        edit_form_builder=ProductEditFormBuilder(query_bus, shop_context),
        form_handler=ProductFormHandler(command_bus, shop_context),
        grid_factory=ProductGridFactory(products, shop_context),
        shop_context=shop_context,
        configuration=configuration,
        languages=LanguageRepository(),
        downloads=ProductDownloadRepository(),
        url_provider=ProductUrlProvider(products, configuration),
        permissions=UserPermissions(getattr(request, "user", None)),
        debug=settings.DEBUG,
    )
