"""User-facing text for catalog errors.

``ERROR_MESSAGES`` is the only place where flash texts for caught exceptions
are defined. An entry maps an exception class either to a message, or to a
``{code: message}`` mapping when the class carries several error kinds.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Type, Union

from django.utils.translation import gettext, gettext_lazy as _

from .exceptions import (
    CannotBulkDeleteProductError,
    CannotDeleteProductError,
    CannotDuplicateProductError,
    PositionError,
    ProductConstraintError,
    ProductNotFoundError,
    ShopAssociationNotFoundError,
)

MessageEntry = Union[str, Mapping[int, str]]

ERROR_MESSAGES: Dict[Type[Exception], MessageEntry] = {
    CannotDeleteProductError: _("An error occurred while deleting the object."),
    CannotBulkDeleteProductError: _(
        "An error occurred while deleting this selection."
    ),
    CannotDuplicateProductError: _(
        "An error occurred while duplicating the object."
    ),
    ProductNotFoundError: _("The object cannot be loaded (or found)."),
    ShopAssociationNotFoundError: _(
        "This product is not associated with the store selected in the multistore header, please select another one."
    ),
    ProductConstraintError: {
        ProductConstraintError.INVALID_ID: _("Invalid product identifier."),
        ProductConstraintError.INVALID_NAME: _("Product name is invalid"),
        ProductConstraintError.INVALID_PRICE: _("Product price is invalid"),
        ProductConstraintError.INVALID_TYPE: _("Product type is invalid"),
        ProductConstraintError.INVALID_ONLINE_DATA: _(
            "To put this product online, please enter a name."
        ),
    },
}


def fallback_message(exception_type: str, code: Any, message: str = "") -> str:
    params = {"type": exception_type, "code": code, "message": message}
    if message:
        return gettext(
            "An unexpected error occurred. [%(type)s code %(code)s]: %(message)s"
        ) % params
    return gettext("An unexpected error occurred. [%(type)s code %(code)s]") % params


def message_for_exception(
    exc: Exception,
    messages: Optional[Mapping[Type[Exception], MessageEntry]] = None,
    *,
    debug: bool = False,
) -> str:
    """Return the flash text for ``exc``.

    Lookup is on the exact exception class, then on ``exc.code`` when the entry
    is a mapping. Anything else gets the generic fallback, which only includes
    the raw exception message in debug mode.
    """
    table = ERROR_MESSAGES if messages is None else messages
    code = getattr(exc, "code", 0)
    entry = table.get(type(exc))
    if isinstance(entry, Mapping):
        entry = entry.get(code)
    if entry is not None:
        return str(entry)
    return fallback_message(type(exc).__name__, code, str(exc) if debug else "")


def position_error_messages(errors: List[PositionError]) -> List[str]:
    """Render structured position errors, one message per entry."""
    rendered = []
    for error in errors:
        if isinstance(error, Mapping):
            text = gettext(str(error.get("key", "")))
            parameters = error.get("parameters") or {}
            rendered.append(text % parameters if parameters else text)
        else:
            rendered.append(str(error))
    return rendered
