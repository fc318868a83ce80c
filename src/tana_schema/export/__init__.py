"""Schema recovery over Tana graph exports.

This package provides:
- A live-node index with shallow trash filtering
- Tuple-pattern detectors for supertag/field definitions and tag applications
- Per-tagDef field and inheritance extraction
- A pipeline tying them together

Nothing here performs I/O; callers hand in the already-loaded `docs` array.
"""

from .graph import BuildStats, ExportGraph, SchemaRecovery, build_graph, verify_graph
from .index import NodeIndex, TrashSet, build_node_index, is_node_in_trash, load_records
from .models import (
    ChildRef,
    FieldDefinition,
    InlineReference,
    Marker,
    NodeProps,
    NodeRecord,
    NodeRef,
    ParentEdge,
    SupertagDefinition,
    SupertagFieldEntry,
    SupertagMetadataEntry,
    TagApplication,
    TupleKind,
)
from .tagdef import SchemaMetadata, extract_fields_from_tagdef, extract_parents_from_tagdef, extract_schema_metadata

__all__ = [
    "BuildStats",
    "ChildRef",
    "ExportGraph",
    "FieldDefinition",
    "InlineReference",
    "Marker",
    "NodeIndex",
    "NodeProps",
    "NodeRecord",
    "NodeRef",
    "ParentEdge",
    "SchemaMetadata",
    "SchemaRecovery",
    "SupertagDefinition",
    "SupertagFieldEntry",
    "SupertagMetadataEntry",
    "TagApplication",
    "TrashSet",
    "TupleKind",
    "build_graph",
    "build_node_index",
    "extract_fields_from_tagdef",
    "extract_parents_from_tagdef",
    "extract_schema_metadata",
    "is_node_in_trash",
    "load_records",
    "verify_graph",
]
