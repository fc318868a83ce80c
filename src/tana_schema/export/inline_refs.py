from __future__ import annotations

import re

from .index import NodeIndex
from .models import InlineReference

INLINE_REF_RE = re.compile(r'<span data-inlineref-node="([^"]*)"></span>')


def find_inline_ref_ids(text: str | None) -> list[str]:
    """All inline-ref target ids in `text`, left to right."""
    if not text:
        return []
    return INLINE_REF_RE.findall(text)


def extract_inline_refs(index: NodeIndex) -> list[InlineReference]:
    """Inline references from live node names.

    Targets missing from the index are dropped; a source left with no
    targets yields nothing.
    """
    if index is None:
        raise ValueError("index is required")

    refs: list[InlineReference] = []
    for node_id, node in index.items():
        targets = [t for t in find_inline_ref_ids(node.name) if t in index]
        if targets:
            refs.append(InlineReference(source_node_id=node_id, target_node_ids=tuple(targets)))
    return refs
