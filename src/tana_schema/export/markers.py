"""Raw marker tokens that appear in `children` arrays of Tana exports.

Markers are plain strings with no backing record. They carry the schema
information the export never states directly.
"""

from __future__ import annotations

from collections.abc import Mapping

# Association marker: present on every definition and tag-application tuple.
SYS_A13 = "SYS_A13"
# Supertag definition marker.
SYS_T01 = "SYS_T01"
# Field definition marker.
SYS_T02 = "SYS_T02"

# System fields referenced from tagDef tuples by marker instead of by label node.
#   SYS_A90     - Date (calendar events, meetings)
#   SYS_A61     - Due Date (tasks, projects)
#   Mp2A7_2PQw  - Attendees (meetings)
SYSTEM_FIELD_MARKERS: Mapping[str, str] = {
    "SYS_A90": "Date",
    "SYS_A61": "Due Date",
    "Mp2A7_2PQw": "Attendees",
}


def field_marker_table(extra: Mapping[str, str] | None = None) -> dict[str, str]:
    """Built-in marker table with `extra` entries layered on top."""
    table = dict(SYSTEM_FIELD_MARKERS)
    if extra:
        table.update(extra)
    return table
