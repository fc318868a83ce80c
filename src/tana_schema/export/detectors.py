"""Tuple-pattern classifiers over the export's node set.

A tuple is any live, non-system node with children. Its marker children
decide what it is:

- SYS_A13 + SYS_T01  => supertag definition
- SYS_A13 + SYS_T02  => field definition
- SYS_A13 alone      => tag application

Definitions and applications both point at their subject through two
`_ownerId` hops: tuple -> metaNode -> subject (tagDef, field or data node).
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable

from .index import NodeIndex, TrashSet
from .markers import SYS_A13, SYS_T01, SYS_T02
from .models import FieldDefinition, NodeRecord, SupertagDefinition, TagApplication, TupleKind

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_MARKER = "SYS"


def classify_tuple(children: Collection[str]) -> TupleKind | None:
    """Single decision shared by all detectors, so their outputs never overlap."""
    if SYS_A13 not in children:
        return None
    has_t01 = SYS_T01 in children
    has_t02 = SYS_T02 in children
    if has_t01 and has_t02:
        return None
    if has_t01:
        return TupleKind.SUPERTAG_DEFINITION
    if has_t02:
        return TupleKind.FIELD_DEFINITION
    return TupleKind.TAG_APPLICATION


def iter_tuples(
    records: Iterable[NodeRecord],
    index: NodeIndex,
    trash: TrashSet,
    kind: TupleKind,
    *,
    system_marker: str = DEFAULT_SYSTEM_MARKER,
) -> Iterable[NodeRecord]:
    """Live, non-system records with children whose markers classify as `kind`."""
    if index is None or trash is None:
        raise ValueError("index and trash are required")

    for node in records:
        if node.id not in index or node.id in trash:
            continue
        if not node.children or system_marker in node.id:
            continue
        if classify_tuple(frozenset(node.children)) is kind:
            yield node


def resolve_owner_chain(node: NodeRecord, index: NodeIndex, trash: TrashSet) -> NodeRecord | None:
    """tuple -> metaNode -> owner, or None when either hop is missing or trashed."""
    meta_id = node.props.owner_id
    if not meta_id or meta_id in trash:
        return None
    meta = index.get(meta_id)
    if meta is None:
        return None

    owner_id = meta.props.owner_id
    if not owner_id or owner_id in trash:
        return None
    return index.get(owner_id)


def _live_child_ids(
    node: NodeRecord,
    index: NodeIndex,
    trash: TrashSet,
    system_marker: str,
) -> list[str]:
    return [
        cid
        for cid in node.children
        if system_marker not in cid and cid not in trash and cid in index
    ]


def collect_supertag_definitions(
    records: Iterable[NodeRecord],
    index: NodeIndex,
    trash: TrashSet,
    *,
    system_marker: str = DEFAULT_SYSTEM_MARKER,
) -> dict[str, list[SupertagDefinition]]:
    """All supertag definitions grouped by tag name, in export order."""
    found: dict[str, list[SupertagDefinition]] = {}
    for node in iter_tuples(records, index, trash, TupleKind.SUPERTAG_DEFINITION, system_marker=system_marker):
        tag = resolve_owner_chain(node, index, trash)
        if tag is None or not tag.name:
            continue

        superclasses: list[str] = []
        for cid in _live_child_ids(node, index, trash, system_marker):
            name = index.name_of(cid)
            if name:
                superclasses.append(name)

        found.setdefault(tag.name, []).append(
            SupertagDefinition(
                tag_name=tag.name,
                tag_id=tag.id,
                definition_tuple_id=node.id,
                superclasses=tuple(superclasses),
                color=node.color or node.props.color,
            )
        )
    return found


def collect_field_definitions(
    records: Iterable[NodeRecord],
    index: NodeIndex,
    trash: TrashSet,
    *,
    system_marker: str = DEFAULT_SYSTEM_MARKER,
) -> dict[str, list[FieldDefinition]]:
    """All field definitions grouped by field name, in export order."""
    found: dict[str, list[FieldDefinition]] = {}
    for node in iter_tuples(records, index, trash, TupleKind.FIELD_DEFINITION, system_marker=system_marker):
        field_node = resolve_owner_chain(node, index, trash)
        if field_node is None or not field_node.name:
            continue
        found.setdefault(field_node.name, []).append(
            FieldDefinition(
                field_name=field_node.name,
                field_id=field_node.id,
                definition_tuple_id=node.id,
            )
        )
    return found


def last_write_wins(grouped: dict[str, list]) -> dict:
    return {name: defs[-1] for name, defs in grouped.items() if defs}


def detect_supertags(
    records: Iterable[NodeRecord],
    index: NodeIndex,
    trash: TrashSet,
    *,
    system_marker: str = DEFAULT_SYSTEM_MARKER,
) -> dict[str, SupertagDefinition]:
    return last_write_wins(collect_supertag_definitions(records, index, trash, system_marker=system_marker))


def detect_fields(
    records: Iterable[NodeRecord],
    index: NodeIndex,
    trash: TrashSet,
    *,
    system_marker: str = DEFAULT_SYSTEM_MARKER,
) -> dict[str, FieldDefinition]:
    return last_write_wins(collect_field_definitions(records, index, trash, system_marker=system_marker))


def tag_colors(grouped: dict[str, list[SupertagDefinition]]) -> dict[str, str]:
    """tagName -> color, the last colored definition of each name winning."""
    colors: dict[str, str] = {}
    for name, defs in grouped.items():
        for d in defs:
            if d.color:
                colors[name] = d.color
    return colors


def detect_tag_applications(
    records: Iterable[NodeRecord],
    index: NodeIndex,
    trash: TrashSet,
    *,
    system_marker: str = DEFAULT_SYSTEM_MARKER,
) -> list[TagApplication]:
    """One entry per (tuple, applied tag); a multi-tag tuple yields several."""
    apps: list[TagApplication] = []
    for node in iter_tuples(records, index, trash, TupleKind.TAG_APPLICATION, system_marker=system_marker):
        data_node = resolve_owner_chain(node, index, trash)
        if data_node is None:
            continue
        for tag_id in _live_child_ids(node, index, trash, system_marker):
            tag_name = index.name_of(tag_id)
            if not tag_name:
                continue
            apps.append(
                TagApplication(
                    tuple_node_id=node.id,
                    data_node_id=data_node.id,
                    tag_id=tag_id,
                    tag_name=tag_name,
                )
            )
    return apps


def classified_tuple_ids(
    records: Iterable[NodeRecord],
    index: NodeIndex,
    trash: TrashSet,
    *,
    system_marker: str = DEFAULT_SYSTEM_MARKER,
) -> dict[TupleKind, set[str]]:
    """Tuple ids each detector would consider, keyed by kind."""
    records = list(records)
    return {
        kind: {n.id for n in iter_tuples(records, index, trash, kind, system_marker=system_marker)}
        for kind in TupleKind
    }
