from django.urls import path

from .views import (
    ProductBulkDeleteView,
    ProductBulkDisableView,
    ProductBulkDuplicateView,
    ProductBulkEnableView,
    ProductCreateView,
    ProductDeleteView,
    ProductDownloadVirtualFileView,
    ProductDuplicateView,
    ProductEditView,
    ProductIndexView,
    ProductPreviewView,
    ProductSearchAssociationsView,
    ProductToggleStatusView,
    ProductUpdatePositionView,
)

app_name = "catalog"

urlpatterns = [
    path("products/", ProductIndexView.as_view(), name="products-index"),
    path("products/new/", ProductCreateView.as_view(), name="products-create"),
    path("products/<int:product_id>/edit/", ProductEditView.as_view(), name="products-edit"),
    path("products/<int:product_id>/delete/", ProductDeleteView.as_view(), name="products-delete"),
    path(
        "products/<int:product_id>/duplicate/",
        ProductDuplicateView.as_view(),
        name="products-duplicate",
    ),
    path(
        "products/<int:product_id>/toggle-status/",
        ProductToggleStatusView.as_view(),
        name="products-toggle-status",
    ),
    path(
        "products/<int:product_id>/preview/",
        ProductPreviewView.as_view(),
        name="products-preview",
    ),
    path(
        "products/update-position/",
        ProductUpdatePositionView.as_view(),
        name="products-update-position",
    ),
    path("products/bulk-delete/", ProductBulkDeleteView.as_view(), name="products-bulk-delete"),
    path("products/bulk-enable/", ProductBulkEnableView.as_view(), name="products-bulk-enable"),
    path("products/bulk-disable/", ProductBulkDisableView.as_view(), name="products-bulk-disable"),
    path(
        "products/bulk-duplicate/",
        ProductBulkDuplicateView.as_view(),
        name="products-bulk-duplicate",
    ),
    path(
        "products/download/<int:file_id>/",
        ProductDownloadVirtualFileView.as_view(),
        name="products-download-virtual-file",
    ),
    path(
        "products/search-associations/<str:language_code>/",
        ProductSearchAssociationsView.as_view(),
        name="products-search-associations",
    ),
]
