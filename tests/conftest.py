from __future__ import annotations

from typing import Any

import pytest


def make_node(
    node_id: str,
    name: str | None = None,
    *,
    children: list[str] | None = None,
    owner: str | None = None,
    meta: str | None = None,
    doc_type: str | None = None,
    color: str | None = None,
    **props: Any,
) -> dict[str, Any]:
    """A raw export doc, shaped like the `docs` entries of a Tana export."""
    p: dict[str, Any] = {"created": 1700000000000}
    if name is not None:
        p["name"] = name
    if owner is not None:
        p["_ownerId"] = owner
    if meta is not None:
        p["_metaNodeId"] = meta
    if doc_type is not None:
        p["_docType"] = doc_type
    p.update(props)
    doc: dict[str, Any] = {"id": node_id, "props": p}
    if children is not None:
        doc["children"] = children
    if color is not None:
        doc["color"] = color
    return doc


@pytest.fixture
def node():
    return make_node


@pytest.fixture
def export_docs() -> list[dict[str, Any]]:
    """Small workspace: Person inherits Entity, one field, one tagged note, some trash."""
    return [
        make_node("ws_TRASH", "Trash", children=["tag_old", "ghost"]),
        # Entity supertag
        make_node("tag_entity", "Entity", doc_type="tagDef", meta="meta_entity"),
        make_node("meta_entity", owner="tag_entity", children=["tup_entity_def"]),
        make_node("tup_entity_def", owner="meta_entity", doc_type="tuple", children=["SYS_A13", "SYS_T01"]),
        # Person supertag, inherits Entity, has Email + Date fields
        make_node(
            "tag_person",
            "👤 Person",
            doc_type="tagDef",
            meta="meta_person",
            children=["tup_f_email", "tup_f_date"],
            description="A human",
            _color="violet",
        ),
        make_node("meta_person", owner="tag_person", children=["tup_person_def"]),
        make_node(
            "tup_person_def",
            owner="meta_person",
            doc_type="tuple",
            children=["SYS_A13", "SYS_T01", "tag_entity", "SYS_T98"],
            color="blue",
        ),
        make_node("tup_f_email", owner="tag_person", doc_type="tuple", children=["field_email"]),
        make_node("tup_f_date", owner="tag_person", doc_type="tuple", children=["SYS_A90"]),
        # Email field definition
        make_node("field_email", "Email", doc_type="attrDef", meta="meta_email", description="Work address"),
        make_node("meta_email", owner="field_email", children=["tup_email_def"]),
        make_node("tup_email_def", owner="meta_email", doc_type="tuple", children=["SYS_A13", "SYS_T02"]),
        # A note tagged #Person and #Entity
        make_node("note_1", "Alice", meta="meta_note_1"),
        make_node("meta_note_1", owner="note_1", children=["tup_note_1_tags"]),
        make_node(
            "tup_note_1_tags",
            owner="meta_note_1",
            doc_type="tuple",
            children=["SYS_A13", "tag_person", "tag_entity"],
        ),
        make_node("note_2", 'Met <span data-inlineref-node="note_1"></span> today'),
        # Supertag whose tagDef sits in the trash
        make_node("tag_old", "Old", doc_type="tagDef", meta="meta_old"),
        make_node("meta_old", owner="tag_old", children=["tup_old_def"]),
        make_node("tup_old_def", owner="meta_old", doc_type="tuple", children=["SYS_A13", "SYS_T01"]),
        # Below a trashed node but not listed under the trash root
        make_node("deep_child", "Still here", owner="tag_old"),
    ]
