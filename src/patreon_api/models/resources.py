"""
JSON:API resource objects.

A resource is an ``id``, a ``type`` tag and optional ``attributes`` /
``relationships``. ``Resource[A]`` is generic over the attribute model;
the bare ``Resource`` leaves attributes as plain JSON.
"""

from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import BaseModel, Field, ValidationError

from .attributes import (
    AddressAttributes,
    BenefitAttributes,
    CampaignAttributes,
    GoalAttributes,
    MediaAttributes,
    MemberAttributes,
    PostAttributes,
    TierAttributes,
    UserAttributes,
    WebhookAttributes,
)
from .enums import ResourceType, ResourceTypeField

A = TypeVar("A")


class ResourceRef(BaseModel):
    """Resource identifier as used inside relationships."""

    id: str = Field(..., description="Resource ID")
    resource_type: ResourceTypeField = Field(..., alias="type", description="Resource type")

    class Config:
        """Pydantic configuration."""

        frozen = True
        populate_by_name = True


class RelationshipData(BaseModel):
    """One named relationship: a single reference, a list, or nothing."""

    data: Optional[Union[ResourceRef, list[ResourceRef]]] = Field(None, description="Linkage")
    links: Optional[Any] = Field(None, description="Relationship links")

    class Config:
        """Pydantic configuration."""

        frozen = True
        extra = "allow"

    @property
    def refs(self) -> list[ResourceRef]:
        """Linkage normalised to a list."""
        if self.data is None:
            return []
        if isinstance(self.data, list):
            return list(self.data)
        return [self.data]


class Resource(BaseModel, Generic[A]):
    """
    JSON:API resource object.

    ``resource_type`` always decodes: unrecognised tags become
    ResourceType.UNKNOWN so new upstream resource kinds never break
    a caller walking an ``included`` list.
    """

    id: str = Field(..., description="Resource ID")
    resource_type: ResourceTypeField = Field(..., alias="type", description="Resource type")
    attributes: Optional[A] = Field(None, description="Resource attributes")
    relationships: Optional[Any] = Field(None, description="Raw relationships object")

    class Config:
        """Pydantic configuration."""

        frozen = True
        populate_by_name = True

    def attributes_or_default(self) -> Any:
        """
        Get attributes, or an all-defaults instance when they were omitted.

        Only parametrised resources (``Resource[MemberAttributes]``) can
        build a default; the bare ``Resource`` returns None.
        """
        if self.attributes is not None:
            return self.attributes
        args = self.__pydantic_generic_metadata__["args"]
        if args and isinstance(args[0], type) and issubclass(args[0], BaseModel):
            return args[0]()
        return None

    def relationship(self, name: str) -> Optional[RelationshipData]:
        """Decode one named relationship, or None if absent or malformed."""
        if not isinstance(self.relationships, dict):
            return None
        raw = self.relationships.get(name)
        if not isinstance(raw, dict):
            return None
        try:
            return RelationshipData.model_validate(raw)
        except ValidationError:
            return None

    def related_id(self, name: str) -> Optional[str]:
        """ID of a to-one relationship, e.g. the campaign of a member."""
        rel = self.relationship(name)
        if rel is None or not isinstance(rel.data, ResourceRef):
            return None
        return rel.data.id

    def related_ids(self, name: str) -> list[str]:
        """IDs of a relationship, to-one or to-many."""
        rel = self.relationship(name)
        return [ref.id for ref in rel.refs] if rel else []


UserResource = Resource[UserAttributes]
CampaignResource = Resource[CampaignAttributes]
MemberResource = Resource[MemberAttributes]
TierResource = Resource[TierAttributes]
PostResource = Resource[PostAttributes]
BenefitResource = Resource[BenefitAttributes]
AddressResource = Resource[AddressAttributes]
GoalResource = Resource[GoalAttributes]
MediaResource = Resource[MediaAttributes]
WebhookResource = Resource[WebhookAttributes]

# Types without an entry (deliverable, pledge_event, unknown) stay untyped.
ATTRIBUTES_BY_TYPE: dict[ResourceType, type[BaseModel]] = {
    ResourceType.USER: UserAttributes,
    ResourceType.CAMPAIGN: CampaignAttributes,
    ResourceType.MEMBER: MemberAttributes,
    ResourceType.TIER: TierAttributes,
    ResourceType.POST: PostAttributes,
    ResourceType.BENEFIT: BenefitAttributes,
    ResourceType.ADDRESS: AddressAttributes,
    ResourceType.GOAL: GoalAttributes,
    ResourceType.MEDIA: MediaAttributes,
    ResourceType.WEBHOOK: WebhookAttributes,
}
