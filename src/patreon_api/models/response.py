"""
JSON:API response envelopes.

Every Patreon response is ``{"data": ..., "included": [...],
"links": {...}, "meta": {...}}``. Only ``data`` is required. The API
silently drops ``included`` when the token lacks the scope for the
requested relationships, so a missing or null ``included`` decodes to
an empty list.

``included`` entries are kept as raw JSON. Callers pick out the
resources they need with ``filter_included``; ``resolve_included``
is available when eager typing of the whole side-table is wanted.
"""

from typing import Annotated, Any, Generic, Optional, TypeVar, Union

from pydantic import BaseModel, Field, ValidationError

from ..utils.logger import get_logger
from .decoding import NullInt, NullJSON, NullStr, decode_json, null_default
from .enums import ResourceType
from .resources import ATTRIBUTES_BY_TYPE, Resource

logger = get_logger(__name__)

D = TypeVar("D")


class PaginationLinks(BaseModel):
    """Pagination links; an absent link is an empty string."""

    first: NullStr = ""
    prev: NullStr = ""
    next: NullStr = ""
    last: NullStr = ""
    self_link: NullStr = Field("", alias="self")

    class Config:
        """Pydantic configuration."""

        frozen = True
        populate_by_name = True
        extra = "allow"


class PaginationMeta(BaseModel):
    """Pagination metadata."""

    count: NullInt = 0

    class Config:
        """Pydantic configuration."""

        frozen = True
        extra = "allow"


class ApiResponse(BaseModel, Generic[D]):
    """
    Top-level JSON:API document.

    ``data`` is a single resource or a list of resources depending on
    the endpoint.
    """

    data: D = Field(..., description="Primary data")
    included: Annotated[list[Any], null_default(list)] = Field(
        default_factory=list, description="Raw related resources"
    )
    links: Annotated[PaginationLinks, null_default(PaginationLinks)] = Field(
        default_factory=PaginationLinks, description="Pagination links"
    )
    meta: NullJSON = Field(None, description="Response metadata")

    class Config:
        """Pydantic configuration."""

        frozen = True

    @property
    def has_next_page(self) -> bool:
        """Check if there is a ``links.next`` URL to follow."""
        return bool(self.links.next)

    @property
    def next_cursor(self) -> Optional[str]:
        """Cursor for the next page from ``meta.pagination.cursors.next``."""
        if not isinstance(self.meta, dict):
            return None
        cursors = (self.meta.get("pagination") or {}).get("cursors") or {}
        cursor = cursors.get("next") if isinstance(cursors, dict) else None
        return cursor if isinstance(cursor, str) and cursor else None

    def included_of(self, resource_type: ResourceType, attributes_cls: Optional[type[BaseModel]] = None) -> list[Resource]:
        """Shortcut for ``filter_included(self.included, ...)``."""
        return filter_included(self.included, resource_type, attributes_cls)


class ApiErrorDetail(BaseModel):
    """One entry of an upstream error response."""

    code: NullInt = 0
    status: NullStr = ""
    title: NullStr = ""
    detail: NullStr = ""
    code_name: NullStr = ""
    id: NullStr = ""

    class Config:
        """Pydantic configuration."""

        frozen = True
        extra = "allow"


class ApiErrorResponse(BaseModel):
    """Upstream error response body: ``{"errors": [...]}``."""

    errors: Annotated[list[ApiErrorDetail], null_default(list)] = Field(default_factory=list)

    class Config:
        """Pydantic configuration."""

        frozen = True
        extra = "allow"

    def summary(self) -> str:
        """Short human-readable description of the first error."""
        if not self.errors:
            return "unknown error"
        first = self.errors[0]
        return first.detail or first.title or first.code_name or "unknown error"


def _entry_type(entry: Any) -> Optional[ResourceType]:
    if not isinstance(entry, dict) or not isinstance(entry.get("type"), str):
        return None
    return ResourceType.from_wire(entry["type"])


def filter_included(
    included: list[Any],
    resource_type: ResourceType,
    attributes_cls: Optional[type[BaseModel]] = None,
) -> list[Resource]:
    """
    Pick the ``included`` entries of one resource type and decode them.

    Entries of other types are ignored. Entries of the requested type
    that fail to decode are skipped, not raised, matching how the
    side-table is used to look things up opportunistically.

    Args:
        included: Raw ``included`` list from a response
        resource_type: Type to keep
        attributes_cls: Attribute model; defaults to the registered model
            for ``resource_type``

    Returns:
        Decoded resources in their original order
    """
    attributes_cls = attributes_cls or ATTRIBUTES_BY_TYPE.get(resource_type)
    target = Resource[attributes_cls] if attributes_cls else Resource

    resources = []
    for index, entry in enumerate(included):
        if _entry_type(entry) != resource_type:
            continue
        try:
            resources.append(target.model_validate(entry))
        except ValidationError as e:
            logger.debug(
                "Skipping undecodable included entry",
                extra={"index": index, "resource_type": resource_type.value, "error_count": e.error_count()},
            )
    return resources


def resolve_included(included: list[Any]) -> list[Resource]:
    """
    Eagerly decode every ``included`` entry into its typed resource.

    Types without a registered attribute model, including unknown
    ones, decode as bare ``Resource`` with raw attributes. Entries that
    are not resource objects at all are skipped.
    """
    resources = []
    for index, entry in enumerate(included):
        resource_type = _entry_type(entry)
        if resource_type is None:
            logger.debug("Skipping included entry without a type", extra={"index": index})
            continue
        attributes_cls = ATTRIBUTES_BY_TYPE.get(resource_type)
        target = Resource[attributes_cls] if attributes_cls else Resource
        try:
            resources.append(target.model_validate(entry))
        except ValidationError as e:
            logger.debug(
                "Skipping undecodable included entry",
                extra={"index": index, "resource_type": entry["type"], "error_count": e.error_count()},
            )
    return resources


def document_type(attributes_cls: Optional[type[BaseModel]] = None, many: bool = False) -> type[ApiResponse]:
    """Build the ``ApiResponse`` type for a resource attribute model."""
    resource = Resource[attributes_cls] if attributes_cls else Resource
    return ApiResponse[list[resource]] if many else ApiResponse[resource]


def decode_document(
    raw: Union[bytes, str, dict],
    attributes_cls: Optional[type[BaseModel]] = None,
    many: bool = False,
) -> ApiResponse:
    """
    Decode a JSON:API document.

    Args:
        raw: Response body or parsed JSON
        attributes_cls: Attribute model of the primary data
        many: Whether ``data`` is a list

    Raises:
        DecodeError: If the body is not valid JSON or does not match
    """
    return decode_json(raw, document_type(attributes_cls, many))
