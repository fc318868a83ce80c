from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from .models import ChildRef, Marker, NodeRecord, NodeRef

logger = logging.getLogger(__name__)

DEFAULT_TRASH_MARKER = "TRASH"


class NodeIndex(Mapping[str, NodeRecord]):
    """Live nodes by id, in export order.

    Children entries are classified once at build time into `Marker` or
    `NodeRef` and served through `child_refs`.
    """

    __slots__ = ("_nodes", "_child_refs")

    def __init__(self, nodes: dict[str, NodeRecord], child_refs: dict[str, tuple[ChildRef, ...]]):
        self._nodes = nodes
        self._child_refs = child_refs

    def __getitem__(self, node_id: str) -> NodeRecord:
        return self._nodes[node_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def child_refs(self, node_id: str) -> tuple[ChildRef, ...]:
        return self._child_refs.get(node_id, ())

    def name_of(self, node_id: str | None) -> str | None:
        if not node_id:
            return None
        node = self._nodes.get(node_id)
        return node.name if node else None


class TrashSet(Mapping[str, NodeRecord]):
    """Trash roots and the ids listed directly under them.

    Ids listed under a trash root without a record of their own have no
    mapping value but still test as members.
    """

    __slots__ = ("_records", "_ids")

    def __init__(self, records: dict[str, NodeRecord], ids: frozenset[str]):
        self._records = records
        self._ids = ids | frozenset(records)

    def __getitem__(self, node_id: str) -> NodeRecord:
        return self._records[node_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._ids

    @property
    def ids(self) -> frozenset[str]:
        return self._ids


def load_records(docs: Iterable[NodeRecord | Mapping[str, Any]]) -> list[NodeRecord]:
    """Validate raw export docs into `NodeRecord`s, keeping order."""
    records: list[NodeRecord] = []
    for doc in docs:
        if isinstance(doc, NodeRecord):
            records.append(doc)
        elif isinstance(doc, Mapping):
            records.append(NodeRecord.model_validate(doc))
        else:
            raise TypeError(f"Expected a node record or mapping, got {type(doc).__name__}")
    return records


def classify_child(raw: str, known_ids: set[str] | frozenset[str]) -> ChildRef:
    return NodeRef(raw) if raw in known_ids else Marker(raw)


def build_node_index(
    records: Iterable[NodeRecord],
    *,
    trash_marker: str = DEFAULT_TRASH_MARKER,
) -> tuple[NodeIndex, TrashSet]:
    """Split records into the live index and the trash set.

    Every record whose id contains `trash_marker` is a trash root. Roots and
    the ids listed in their `children` go to the trash; deeper descendants
    stay live unless listed themselves.
    """
    records = list(records)
    by_id: dict[str, NodeRecord] = {}
    trashed_ids: set[str] = set()
    for rec in records:
        by_id[rec.id] = rec
        if trash_marker in rec.id:
            trashed_ids.add(rec.id)
            trashed_ids.update(rec.children)

    known_ids = frozenset(by_id)
    live: dict[str, NodeRecord] = {}
    trash: dict[str, NodeRecord] = {}
    child_refs: dict[str, tuple[ChildRef, ...]] = {}
    for node_id, rec in by_id.items():
        if node_id in trashed_ids:
            trash[node_id] = rec
            continue
        live[node_id] = rec
        if rec.children:
            child_refs[node_id] = tuple(classify_child(c, known_ids) for c in rec.children)

    logger.debug("Indexed %d live nodes, %d trashed", len(live), len(trash))
    return NodeIndex(live, child_refs), TrashSet(trash, frozenset(trashed_ids))


def is_node_in_trash(
    node: NodeRecord,
    index: NodeIndex,
    trash: TrashSet,
    *,
    trash_marker: str = DEFAULT_TRASH_MARKER,
    max_depth: int = 20,
) -> bool:
    """Walk the `_ownerId` chain and report whether any owner is trash.

    Unlike `build_node_index` this catches nodes nested below a trashed
    subtree. The walk stops after `max_depth` hops.
    """
    current: NodeRecord | None = node
    depth = 0
    while current is not None and depth < max_depth:
        owner_id = current.props.owner_id
        if not owner_id:
            break
        if trash_marker in owner_id or owner_id in trash:
            return True
        current = index.get(owner_id)
        depth += 1
    return False
