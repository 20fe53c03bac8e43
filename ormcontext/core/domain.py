"""Simplified object-domain description models."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ormcontext.core.field import AssociationType, FieldKind
from ormcontext.core.mapped_class import InheritanceType


class AttributeInfo(BaseModel):
    """Attribute of an entity as seen from the domain model."""

    model_config = ConfigDict(frozen=True)

    attr_name: str = Field(..., description="Attribute name")
    attr_category: Literal["singular", "plural"] = Field(..., description="Single value or collection")
    attr_type: str = Field(..., description="Simple type name (element type for collections)")
    kind: FieldKind = Field(default=FieldKind.SCALAR, description="Attribute classification")
    association: AssociationType | None = Field(default=None, description="Association category")
    collection_type: Literal["LIST", "SET", "MAP", "COLLECTION"] | None = Field(
        default=None, description="Collection flavour for plural attributes"
    )
    is_mapping_side_in_db: bool | None = Field(
        default=None, description="Whether this side owns the association (associations only)"
    )


class EntityInfo(BaseModel):
    """Domain description of one entity type."""

    model_config = ConfigDict(frozen=True)

    entity_type_name: str = Field(..., description="Entity name")
    superclass_entity: str | None = Field(default=None, description="Direct superclass entity")
    inheritance_type: InheritanceType | None = Field(
        default=None, description="Inheritance strategy (only with a superclass entity)"
    )
    simple_attributes: tuple[AttributeInfo, ...] = Field(default=(), description="Non-association attributes")
    relationship_attributes: tuple[AttributeInfo, ...] = Field(default=(), description="Association attributes")

    def get_attribute(self, name: str) -> AttributeInfo | None:
        """Get attribute by name from either list."""
        for attribute in self.simple_attributes + self.relationship_attributes:
            if attribute.attr_name == name:
                return attribute
        return None


class DomainModel(BaseModel):
    """Domain description of a set of requested entity types."""

    model_config = ConfigDict(frozen=True)

    entities: tuple[EntityInfo, ...] = Field(default=(), description="Entities in request order")

    def get_entity(self, name: str) -> EntityInfo | None:
        """Get entity by name."""
        for entity in self.entities:
            if entity.entity_type_name == name:
                return entity
        return None
