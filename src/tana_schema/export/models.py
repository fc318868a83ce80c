from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class NodeProps(BaseModel):
    """Property bag of an exported node.

    Export keys are underscore-prefixed (`_ownerId`, `_metaNodeId`, ...); both the
    export key and the field name are accepted. Unknown props are kept as extras.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    name: str | None = None
    created: float | None = None
    owner_id: str | None = Field(default=None, alias="_ownerId")
    meta_node_id: str | None = Field(default=None, alias="_metaNodeId")
    doc_type: str | None = Field(default=None, alias="_docType")
    color: str | None = Field(default=None, alias="_color")
    description: str | None = Field(
        default=None,
        validation_alias=AliasChoices("description", "_description"),
    )


class NodeRecord(BaseModel):
    """One entry of the export `docs` array. Immutable once read."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    props: NodeProps = Field(default_factory=NodeProps)
    children: tuple[str, ...] = ()
    color: str | None = None

    @field_validator("children", mode="before")
    @classmethod
    def _none_children(cls, v):
        return () if v is None else v

    @property
    def name(self) -> str | None:
        return self.props.name

    @property
    def doc_type(self) -> str | None:
        return self.props.doc_type

    def is_tuple(self) -> bool:
        return self.props.doc_type == "tuple"

    def is_tag_def(self) -> bool:
        return self.props.doc_type == "tagDef"


@dataclass(frozen=True, slots=True)
class Marker:
    """A children entry with no backing record (e.g. "SYS_A13")."""

    raw: str


@dataclass(frozen=True, slots=True)
class NodeRef:
    """A children entry that names a record in the export."""

    raw: str


ChildRef = Marker | NodeRef


class TupleKind(Enum):
    SUPERTAG_DEFINITION = "supertag_definition"
    FIELD_DEFINITION = "field_definition"
    TAG_APPLICATION = "tag_application"


@dataclass(frozen=True, slots=True)
class SupertagDefinition:
    tag_name: str
    tag_id: str
    definition_tuple_id: str
    superclasses: tuple[str, ...] = ()
    color: str | None = None


@dataclass(frozen=True, slots=True)
class FieldDefinition:
    field_name: str
    field_id: str
    definition_tuple_id: str


@dataclass(frozen=True, slots=True)
class TagApplication:
    tuple_node_id: str
    data_node_id: str
    tag_id: str
    tag_name: str


@dataclass(frozen=True, slots=True)
class InlineReference:
    source_node_id: str
    target_node_ids: tuple[str, ...]
    type: str = "inline_ref"


@dataclass(frozen=True, slots=True)
class SupertagFieldEntry:
    """A field as authored on one tagDef, in authored order.

    `field_label_id` is either a node id or a raw marker such as "SYS_A90".
    """

    field_name: str
    field_label_id: str
    field_order: int
    normalized_name: str
    inferred_data_type: str | None = None
    description: str | None = None
    default_value_id: str | None = None
    default_value_text: str | None = None


@dataclass(frozen=True, slots=True)
class ParentEdge:
    child_tag_id: str
    parent_tag_id: str


@dataclass(frozen=True, slots=True)
class SupertagMetadataEntry:
    tag_id: str
    tag_name: str
    normalized_name: str
    description: str | None = None
    color: str | None = None

