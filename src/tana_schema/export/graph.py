from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from tana_schema.errors import InvariantViolation
from tana_schema.settings import TanaSchemaSettings, get_settings
from tana_schema.util_text import normalize_name

from .detectors import (
    classified_tuple_ids,
    collect_field_definitions,
    collect_supertag_definitions,
    detect_tag_applications,
    last_write_wins,
    tag_colors,
)
from .index import NodeIndex, TrashSet, build_node_index, load_records
from .inline_refs import extract_inline_refs
from .markers import field_marker_table
from .models import (
    FieldDefinition,
    InlineReference,
    NodeRecord,
    SupertagDefinition,
    TagApplication,
    TupleKind,
)
from .tagdef import SchemaMetadata, extract_schema_metadata

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BuildStats:
    nodes: int = 0
    trashed: int = 0
    supertags: int = 0
    fields: int = 0
    inline_refs: int = 0
    tag_applications: int = 0
    index_ms: float = 0.0
    detect_ms: float = 0.0


@dataclass(slots=True)
class ExportGraph:
    """Everything recovered from one export."""

    records: list[NodeRecord]
    nodes: NodeIndex
    trash: TrashSet
    supertag_candidates: dict[str, list[SupertagDefinition]]
    field_candidates: dict[str, list[FieldDefinition]]
    inline_refs: list[InlineReference]
    tag_applications: list[TagApplication]
    stats: BuildStats = field(default_factory=BuildStats)

    @property
    def supertags(self) -> dict[str, SupertagDefinition]:
        return last_write_wins(self.supertag_candidates)

    @property
    def fields(self) -> dict[str, FieldDefinition]:
        return last_write_wins(self.field_candidates)

    @property
    def tag_colors(self) -> dict[str, str]:
        return tag_colors(self.supertag_candidates)

    def duplicate_supertags(self) -> dict[str, list[SupertagDefinition]]:
        return {k: v for k, v in self.supertag_candidates.items() if len(v) > 1}

    def duplicate_fields(self) -> dict[str, list[FieldDefinition]]:
        return {k: v for k, v in self.field_candidates.items() if len(v) > 1}

    def find_supertags(self, name: str) -> list[SupertagDefinition]:
        """Definitions whose name matches `name` ignoring case, emoji and separators."""
        key = normalize_name(name)
        return [d for n, defs in self.supertag_candidates.items() if normalize_name(n) == key for d in defs]

    def find_fields(self, name: str) -> list[FieldDefinition]:
        key = normalize_name(name)
        return [d for n, defs in self.field_candidates.items() if normalize_name(n) == key for d in defs]

    def tags_of(self, data_node_id: str) -> list[str]:
        return [a.tag_name for a in self.tag_applications if a.data_node_id == data_node_id]


class SchemaRecovery:
    """Rebuilds supertags, fields, tag applications and inline refs from export docs."""

    def __init__(self, settings: TanaSchemaSettings | None = None):
        self.settings = settings or get_settings()
        self.field_markers = field_marker_table(self.settings.extra_field_markers)

    def build(self, docs: Iterable[NodeRecord | Mapping[str, Any]]) -> ExportGraph:
        s = self.settings
        t0 = time.perf_counter()
        records = load_records(docs)
        index, trash = build_node_index(records, trash_marker=s.trash_marker)
        t1 = time.perf_counter()

        supertags = collect_supertag_definitions(records, index, trash, system_marker=s.system_marker)
        fields = collect_field_definitions(records, index, trash, system_marker=s.system_marker)
        inline_refs = extract_inline_refs(index)
        applications = detect_tag_applications(records, index, trash, system_marker=s.system_marker)
        t2 = time.perf_counter()

        stats = BuildStats(
            nodes=len(index),
            trashed=len(trash),
            supertags=len(supertags),
            fields=len(fields),
            inline_refs=len(inline_refs),
            tag_applications=len(applications),
            index_ms=(t1 - t0) * 1000.0,
            detect_ms=(t2 - t1) * 1000.0,
        )
        logger.info(
            "Recovered %d supertags, %d fields, %d tag applications from %d nodes",
            stats.supertags,
            stats.fields,
            stats.tag_applications,
            stats.nodes,
        )
        return ExportGraph(
            records=records,
            nodes=index,
            trash=trash,
            supertag_candidates=supertags,
            field_candidates=fields,
            inline_refs=inline_refs,
            tag_applications=applications,
            stats=stats,
        )

    def schema_metadata(self, graph: ExportGraph) -> SchemaMetadata:
        return extract_schema_metadata(
            graph.nodes,
            graph.trash,
            markers=self.field_markers,
            trash_marker=self.settings.trash_marker,
            max_owner_depth=self.settings.owner_chain_max_depth,
        )


def build_graph(
    docs: Iterable[NodeRecord | Mapping[str, Any]],
    *,
    settings: TanaSchemaSettings | None = None,
) -> ExportGraph:
    return SchemaRecovery(settings).build(docs)


def verify_graph(graph: ExportGraph, *, system_marker: str = "SYS") -> None:
    """Raise InvariantViolation if the detectors contradict each other."""
    ids = classified_tuple_ids(graph.records, graph.nodes, graph.trash, system_marker=system_marker)
    kinds = list(TupleKind)
    for i, a in enumerate(kinds):
        for b in kinds[i + 1 :]:
            overlap = ids[a] & ids[b]
            if overlap:
                raise InvariantViolation(f"Tuples classified as both {a.value} and {b.value}: {sorted(overlap)}")

    for defs in graph.supertag_candidates.values():
        for d in defs:
            if d.tag_id in graph.trash or d.definition_tuple_id in graph.trash:
                raise InvariantViolation(f"Supertag {d.tag_name!r} resolved into trash")
