from __future__ import annotations

import pytest

from tana_schema.errors import InvariantViolation
from tana_schema.export import SchemaRecovery, SupertagDefinition, build_graph, verify_graph
from tana_schema.settings import TanaSchemaSettings


def _snapshot(graph):
    return (
        graph.supertags,
        graph.fields,
        graph.tag_colors,
        graph.inline_refs,
        graph.tag_applications,
        set(graph.nodes),
        set(graph.trash.ids),
    )


def test_build_graph_over_export(export_docs) -> None:
    graph = build_graph(export_docs, settings=TanaSchemaSettings())

    assert set(graph.supertags) == {"Entity", "👤 Person"}
    assert set(graph.fields) == {"Email"}
    assert graph.tag_colors == {"👤 Person": "blue"}
    assert [(r.source_node_id, r.target_node_ids) for r in graph.inline_refs] == [("note_2", ("note_1",))]
    assert graph.tags_of("note_1") == ["👤 Person", "Entity"]
    assert graph.duplicate_supertags() == {}
    assert graph.duplicate_fields() == {}

    stats = graph.stats
    assert stats.nodes == len(graph.nodes)
    assert stats.trashed == 2
    assert (stats.supertags, stats.fields, stats.inline_refs, stats.tag_applications) == (2, 1, 1, 2)
    assert stats.index_ms >= 0.0
    assert stats.detect_ms >= 0.0
    verify_graph(graph)


def test_rerun_is_idempotent(export_docs) -> None:
    recovery = SchemaRecovery(TanaSchemaSettings())
    first = recovery.build(export_docs)
    second = recovery.build(export_docs)

    assert _snapshot(first) == _snapshot(second)
    assert recovery.schema_metadata(first) == recovery.schema_metadata(second)


def test_duplicates_are_exposed(export_docs, node) -> None:
    docs = export_docs + [
        node("tag_person_2", "👤 Person", doc_type="tagDef"),
        node("meta_person_2", owner="tag_person_2"),
        node("tup_person_2_def", owner="meta_person_2", children=["SYS_A13", "SYS_T01"]),
    ]
    graph = build_graph(docs, settings=TanaSchemaSettings())

    dups = graph.duplicate_supertags()
    assert [d.tag_id for d in dups["👤 Person"]] == ["tag_person", "tag_person_2"]
    assert graph.supertags["👤 Person"].tag_id == "tag_person_2"
    # the earlier definition's color survives
    assert graph.tag_colors["👤 Person"] == "blue"


def test_settings_drive_markers(node) -> None:
    docs = [
        node("ws_BIN", children=["gone"]),
        node("gone", "Gone"),
        node("ws_TRASH", "Kept, not a trash root here"),
        node("tag", "Meeting", doc_type="tagDef", children=["t1"]),
        node("t1", doc_type="tuple", children=["SYS_A300"]),
    ]
    settings = TanaSchemaSettings(trash_marker="BIN", extra_field_markers={"SYS_A300": "Location"})
    recovery = SchemaRecovery(settings)
    graph = recovery.build(docs)

    assert "gone" in graph.trash
    assert "ws_TRASH" in graph.nodes
    meta = recovery.schema_metadata(graph)
    assert [f.field_name for f in meta.fields["tag"]] == ["Location"]
    assert recovery.field_markers["SYS_A90"] == "Date"


def test_settings_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("TANA_SCHEMA_TRASH_MARKER", "RECYCLE")
    monkeypatch.setenv("TANA_SCHEMA_EXTRA_FIELD_MARKERS", '{"SYS_A1": "Thing"}')
    settings = TanaSchemaSettings()
    assert settings.trash_marker == "RECYCLE"
    assert settings.extra_field_markers == {"SYS_A1": "Thing"}
    assert settings.system_marker == "SYS"


def test_verify_graph_flags_trashed_definitions(export_docs) -> None:
    graph = build_graph(export_docs, settings=TanaSchemaSettings())
    graph.supertag_candidates["Old"] = [
        SupertagDefinition(tag_name="Old", tag_id="tag_old", definition_tuple_id="tup_old_def")
    ]
    with pytest.raises(InvariantViolation):
        verify_graph(graph)


def test_empty_export() -> None:
    graph = build_graph([], settings=TanaSchemaSettings())
    assert len(graph.nodes) == 0
    assert graph.supertags == {}
    assert graph.tag_applications == []
    verify_graph(graph)


def test_lookup_by_name_variant(export_docs) -> None:
    graph = build_graph(export_docs, settings=TanaSchemaSettings())

    assert [d.tag_id for d in graph.find_supertags("person")] == ["tag_person"]
    assert [d.tag_id for d in graph.find_supertags("PERSON!")] == ["tag_person"]
    assert [f.field_id for f in graph.find_fields("e-mail")] == ["field_email"]
    assert graph.find_supertags("people") == []
