"""Field and inheritance extraction for a single tagDef node.

Field discovery:
- tagDef.children holds tuples, one per field, in authored order
- tuple.children[0] is the field label node, or a raw system marker
- tuple.children[1], when present and named, is the default value

Inheritance discovery:
- tagDef._metaNodeId points to the metaNode
- one of the metaNode's tuples carries the SYS_A13 marker
- that tuple's other children that are live tagDefs are the parents
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from tana_schema.types.inference import infer_type_from_name
from tana_schema.util_text import normalize_name

from .index import DEFAULT_TRASH_MARKER, NodeIndex, TrashSet, is_node_in_trash
from .markers import SYS_A13, SYSTEM_FIELD_MARKERS
from .models import Marker, NodeRecord, ParentEdge, SupertagFieldEntry, SupertagMetadataEntry

logger = logging.getLogger(__name__)


def _default_value(tup: NodeRecord, index: NodeIndex) -> tuple[str | None, str | None]:
    if len(tup.children) < 2:
        return None, None
    default_id = tup.children[1]
    text = index.name_of(default_id)
    if not text:
        return None, None
    return default_id, text


def extract_fields_from_tagdef(
    tag_def: NodeRecord,
    index: NodeIndex,
    *,
    markers: Mapping[str, str] = SYSTEM_FIELD_MARKERS,
) -> list[SupertagFieldEntry]:
    """Ordered field entries of one tagDef.

    `field_order` counts kept tuples only and follows authored order.
    """
    if tag_def is None or index is None:
        raise ValueError("tag_def and index are required")

    fields: list[SupertagFieldEntry] = []
    for child_id in tag_def.children:
        tup = index.get(child_id)
        if tup is None or not tup.is_tuple() or not tup.children:
            continue

        label_ref = index.child_refs(tup.id)[0]
        label = index.get(label_ref.raw)
        description: str | None = None
        if label is not None and label.name:
            field_name = label.name
            description = label.props.description
        elif isinstance(label_ref, Marker) and label_ref.raw in markers:
            field_name = markers[label_ref.raw]
        else:
            continue

        default_id, default_text = _default_value(tup, index)
        fields.append(
            SupertagFieldEntry(
                field_name=field_name,
                field_label_id=label_ref.raw,
                field_order=len(fields),
                normalized_name=normalize_name(field_name),
                inferred_data_type=infer_type_from_name(field_name),
                description=description,
                default_value_id=default_id,
                default_value_text=default_text,
            )
        )
    return fields


def extract_parents_from_tagdef(tag_def: NodeRecord, index: NodeIndex) -> list[str]:
    """Parent tagDef ids in authored order; empty when there is no inheritance.

    Children of the SYS_A13 tuple that do not resolve (SYS_T01, SYS_T98, ...)
    are built-in system tags, not authored parents, and are dropped.
    """
    if tag_def is None or index is None:
        raise ValueError("tag_def and index are required")

    meta_id = tag_def.props.meta_node_id
    if not meta_id:
        return []
    meta = index.get(meta_id)
    if meta is None:
        return []

    for tuple_id in meta.children:
        tup = index.get(tuple_id)
        if tup is None or not tup.is_tuple() or SYS_A13 not in tup.children:
            continue
        parents: list[str] = []
        for cid in tup.children:
            if cid == SYS_A13:
                continue
            parent = index.get(cid)
            if parent is not None and parent.is_tag_def():
                parents.append(cid)
        return parents
    return []


def parent_edges(tag_def: NodeRecord, index: NodeIndex) -> list[ParentEdge]:
    return [
        ParentEdge(child_tag_id=tag_def.id, parent_tag_id=pid)
        for pid in extract_parents_from_tagdef(tag_def, index)
    ]


def extract_supertag_metadata_entry(tag_def: NodeRecord) -> SupertagMetadataEntry:
    tag_name = tag_def.name or ""
    return SupertagMetadataEntry(
        tag_id=tag_def.id,
        tag_name=tag_name,
        normalized_name=normalize_name(tag_name),
        description=tag_def.props.description or None,
        color=tag_def.props.color or None,
    )


@dataclass(slots=True)
class SchemaMetadata:
    """Per-tagDef fields, parents and metadata for a whole export."""

    entries: dict[str, SupertagMetadataEntry] = field(default_factory=dict)
    fields: dict[str, list[SupertagFieldEntry]] = field(default_factory=dict)
    parents: list[ParentEdge] = field(default_factory=list)

    @property
    def tag_defs_processed(self) -> int:
        return len(self.entries)

    @property
    def fields_extracted(self) -> int:
        return sum(len(v) for v in self.fields.values())

    @property
    def parents_extracted(self) -> int:
        return len(self.parents)

    def parents_of(self, tag_id: str) -> list[str]:
        return [e.parent_tag_id for e in self.parents if e.child_tag_id == tag_id]

    def field_types(self) -> dict[tuple[str, str], str | None]:
        """(field_name, field_label_id) -> inferred type, for value-based refinement."""
        return {
            (f.field_name, f.field_label_id): f.inferred_data_type
            for entries in self.fields.values()
            for f in entries
        }

    def apply_field_types(self, types: Mapping[tuple[str, str], str | None]) -> None:
        for tag_id, entries in self.fields.items():
            self.fields[tag_id] = [
                replace(f, inferred_data_type=types.get((f.field_name, f.field_label_id), f.inferred_data_type))
                for f in entries
            ]


def extract_schema_metadata(
    index: NodeIndex,
    trash: TrashSet,
    *,
    markers: Mapping[str, str] = SYSTEM_FIELD_MARKERS,
    trash_marker: str = DEFAULT_TRASH_MARKER,
    max_owner_depth: int = 20,
) -> SchemaMetadata:
    """Run field and inheritance extraction over every live tagDef.

    TagDefs whose owner chain leads into the trash are skipped.
    """
    result = SchemaMetadata()
    for node_id, node in index.items():
        if not node.is_tag_def():
            continue
        if is_node_in_trash(node, index, trash, trash_marker=trash_marker, max_depth=max_owner_depth):
            continue
        result.entries[node_id] = extract_supertag_metadata_entry(node)
        result.fields[node_id] = extract_fields_from_tagdef(node, index, markers=markers)
        result.parents.extend(parent_edges(node, index))

    logger.debug(
        "Schema metadata: %d tagDefs, %d fields, %d parent edges",
        result.tag_defs_processed,
        result.fields_extracted,
        result.parents_extracted,
    )
    return result
