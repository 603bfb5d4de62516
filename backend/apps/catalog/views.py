from typing import Sequence

from django.conf import settings
from django.contrib import messages
from django.contrib.auth.views import redirect_to_login
from django.core.exceptions import PermissionDenied
from django.http import FileResponse, Http404
from django.shortcuts import redirect, render
from django.urls import reverse
from django.utils.http import urlencode
from django.views import View
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api.schemas import ErrorResponseSerializer
from apps.common import get_logger
from .container import build_product_admin_orchestrator
from .grid import ProductFilters
from .orchestrator import INDEX_ROUTE
from .outcomes import (
    ERROR,
    SUCCESS,
    FileOutcome,
    NotFoundOutcome,
    RedirectOutcome,
    RenderOutcome,
)
from .security import (
    ACCESS_DENIED_MESSAGE,
    CANNOT_CREATE_MESSAGE,
    CANNOT_DELETE_MESSAGE,
    CANNOT_EDIT_MESSAGE,
    CANNOT_UPDATE_MESSAGE,
    CREATE,
    DELETE,
    DEMO_MODE_MESSAGE,
    READ,
    UPDATE,
    CanReadProducts,
    UserPermissions,
)
from .serializers import ProductAssociationSerializer, SearchErrorSerializer

logger = get_logger(__name__).bind(component="catalog", layer="view")

FLASH_LEVELS = {SUCCESS: messages.SUCCESS, ERROR: messages.ERROR}


def index_url(request, keep: Sequence[str] = ()) -> str:
    url = reverse(INDEX_ROUTE)
    query = {key: request.GET[key] for key in keep if request.GET.get(key)}
    return f"{url}?{urlencode(query)}" if query else url


class ProductAdminView(View):
    """Base back-office product view.

    Checks the staff permission required by the action, then hands the request
    to the orchestrator and turns its outcome into a response. Denied actions
    with ``redirect_on_denied`` go back to the listing with a flash message;
    the others answer 403.
    """

    orchestrator_factory = staticmethod(build_product_admin_orchestrator)
    permission = READ
    denied_message = ACCESS_DENIED_MESSAGE
    redirect_on_denied = False
    demo_restricted = False
    # Listing query parameters preserved when redirecting a denied request.
    keep_query_params: Sequence[str] = ()
    log = logger

    def dispatch(self, request, *args, **kwargs):
        if not request.user.is_authenticated:
            return redirect_to_login(request.get_full_path())
        denied = self.check_access(request)
        if denied is not None:
            return denied
        return super().dispatch(request, *args, **kwargs)

    def check_access(self, request):
        log = self.log.bind_request(request)
        if not UserPermissions(request.user).is_granted(self.permission):
            log.warning("Product admin access denied", permission=self.permission)
            if not self.redirect_on_denied:
                raise PermissionDenied(self.denied_message)
            messages.error(request, self.denied_message)
            return redirect(index_url(request, self.keep_query_params))
        if self.demo_restricted and getattr(settings, "STOREADMIN_DEMO_MODE", False):
            log.info("Action disabled in demo mode")
            messages.error(request, DEMO_MODE_MESSAGE)
            return redirect(index_url(request, self.keep_query_params))
        return None

    def get_orchestrator(self, request):
        return self.orchestrator_factory(request)

    def respond(self, request, outcome):
        for flash in getattr(outcome, "flashes", ()):
            messages.add_message(request, FLASH_LEVELS[flash.level], flash.message)
        if isinstance(outcome, RenderOutcome):
            return render(request, outcome.template, outcome.context, status=outcome.status)
        if isinstance(outcome, RedirectOutcome):
            if outcome.url:
                return redirect(outcome.url)
            url = reverse(outcome.route, kwargs=outcome.kwargs)
            if outcome.query:
                url = f"{url}?{urlencode(outcome.query)}"
            return redirect(url)
        if isinstance(outcome, FileOutcome):
            return FileResponse(
                open(outcome.path, "rb"), as_attachment=True, filename=outcome.filename
            )
        if isinstance(outcome, NotFoundOutcome):
            raise Http404(outcome.message)
        raise TypeError(f"Unsupported outcome {type(outcome).__name__}")


class ProductIndexView(ProductAdminView):
    def get(self, request):
        self.log.debug("Rendering product listing")
        outcome = self.get_orchestrator(request).list(ProductFilters.from_request(request))
        return self.respond(request, outcome)


class ProductCreateView(ProductAdminView):
    permission = CREATE
    denied_message = CANNOT_CREATE_MESSAGE

    def get(self, request):
        return self.respond(request, self.get_orchestrator(request).create(request))

    post = get


class ProductEditView(ProductAdminView):
    permission = UPDATE
    denied_message = CANNOT_UPDATE_MESSAGE

    def get(self, request, product_id: int):
        outcome = self.get_orchestrator(request).edit(request, product_id)
        return self.respond(request, outcome)

    post = get


class ProductPreviewView(ProductAdminView):
    def get(self, request, product_id: int):
        return self.respond(request, self.get_orchestrator(request).preview(product_id))


class ProductDeleteView(ProductAdminView):
    permission = DELETE
    denied_message = CANNOT_DELETE_MESSAGE
    redirect_on_denied = True

    def post(self, request, product_id: int):
        return self.respond(request, self.get_orchestrator(request).delete(product_id))


class ProductDuplicateView(ProductAdminView):
    permission = CREATE
    denied_message = CANNOT_CREATE_MESSAGE
    redirect_on_denied = True

    def post(self, request, product_id: int):
        outcome = self.get_orchestrator(request).duplicate(product_id)
        return self.respond(request, outcome)


class ProductToggleStatusView(ProductAdminView):
    permission = UPDATE
    redirect_on_denied = True
    demo_restricted = True

    def post(self, request, product_id: int):
        outcome = self.get_orchestrator(request).toggle_status(product_id)
        return self.respond(request, outcome)


class ProductUpdatePositionView(ProductAdminView):
    permission = UPDATE
    denied_message = CANNOT_EDIT_MESSAGE
    redirect_on_denied = True
    demo_restricted = True
    keep_query_params = ("id_category",)

    def post(self, request):
        outcome = self.get_orchestrator(request).update_position(request)
        return self.respond(request, outcome)


class ProductBulkActionView(ProductAdminView):
    permission = UPDATE
    denied_message = CANNOT_EDIT_MESSAGE
    redirect_on_denied = True
    action = ""

    def post(self, request):
        orchestrator = self.get_orchestrator(request)
        self.log.info("Bulk product action", action=self.action)
        return self.respond(request, getattr(orchestrator, self.action)(request))


class ProductBulkDeleteView(ProductBulkActionView):
    permission = DELETE
    denied_message = CANNOT_DELETE_MESSAGE
    action = "bulk_delete"


class ProductBulkEnableView(ProductBulkActionView):
    action = "bulk_enable"


class ProductBulkDisableView(ProductBulkActionView):
    action = "bulk_disable"


class ProductBulkDuplicateView(ProductBulkActionView):
    action = "bulk_duplicate"


class ProductDownloadVirtualFileView(ProductAdminView):
    def get(self, request, file_id: int):
        outcome = self.get_orchestrator(request).download_virtual_file(file_id)
        return self.respond(request, outcome)


@extend_schema(tags=["Catalog"])
class ProductSearchAssociationsView(APIView):
    permission_classes = [CanReadProducts]
    orchestrator_factory = staticmethod(build_product_admin_orchestrator)
    log = logger.bind(view="ProductSearchAssociationsView")

    @extend_schema(
        operation_id="products_search_associations",
        summary="Search products to associate",
        description="Case-insensitive match on name or reference in the context shop.",
        parameters=[
            OpenApiParameter("language_code", str, OpenApiParameter.PATH),
            OpenApiParameter("query", str, required=True),
            OpenApiParameter("limit", int, required=False),
        ],
        responses={
            200: ProductAssociationSerializer(many=True),
            400: OpenApiResponse(response=SearchErrorSerializer),
            401: OpenApiResponse(response=ErrorResponseSerializer),
            403: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(description="No product matches the query"),
        },
    )
    def get(self, request, language_code: str):
        self.log.debug(
            "Searching products for association",
            language_code=language_code,
            query=request.query_params.get("query"),
        )
        outcome = self.orchestrator_factory(request).search_associations(
            request, language_code
        )
        return Response(outcome.payload, status=outcome.status)
