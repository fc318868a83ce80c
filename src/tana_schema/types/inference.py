"""Field data type inference.

Stage A guesses a type from the field's name alone. Stage B refines the
guess from persisted values, but only where Stage A fell back to "text".
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Iterable, Mapping, MutableMapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from tana_schema.export.models import NodeRecord

logger = logging.getLogger(__name__)

DataType = Literal["text", "date", "reference", "url", "email", "number", "checkbox"]

TEXT: DataType = "text"
DATE: DataType = "date"
REFERENCE: DataType = "reference"
URL: DataType = "url"
EMAIL: DataType = "email"
NUMBER: DataType = "number"
CHECKBOX: DataType = "checkbox"

DATE_TOKENS = ("date", "due", "scheduled", "deadline", "time", "when")
URL_TOKENS = ("url", "link", "website")
EMAIL_TOKENS = ("email", "e-mail")
NUMBER_TOKENS = ("count", "number", "amount")
REFERENCE_TOKENS = ("status", "type", "category")
CHECKBOX_TOKENS = ("enabled", "completed")

# isActive, hasChildren, "Is done", "has_owner"
_BOOL_PREFIX_CASED_RE = re.compile(r"^(is|has)($|[A-Z\s_\-])")
_BOOL_PREFIX_LOWER_RE = re.compile(r"^(is|has)($|[\s_\-])")

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}([T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+\-]\d{2}:?\d{2})?)?$")
_RELATIVE_DATE_RE = re.compile(r"^PARENT([+\-]\d+)?$")

FieldKey = tuple[str, str]


@dataclass(frozen=True, slots=True)
class FieldValueRow:
    """A persisted field value, as sampled by value-based type refinement."""

    field_name: str
    field_def_id: str
    value_text: str | None = None
    value_node_id: str | None = None


def infer_type_from_name(field_name: str | None) -> DataType:
    """Stage A: keyword heuristics on the field name."""
    if not field_name:
        return TEXT
    name = field_name.strip()
    lower = name.lower()

    if _BOOL_PREFIX_CASED_RE.match(name) or _BOOL_PREFIX_LOWER_RE.match(lower):
        return CHECKBOX
    if any(tok in lower for tok in DATE_TOKENS):
        return DATE
    if any(tok in lower for tok in URL_TOKENS):
        return URL
    if any(tok in lower for tok in EMAIL_TOKENS):
        return EMAIL
    if "phone" in lower:
        return TEXT
    if any(tok in lower for tok in NUMBER_TOKENS):
        return NUMBER
    if any(tok in lower for tok in REFERENCE_TOKENS):
        return REFERENCE
    if any(tok in lower for tok in CHECKBOX_TOKENS):
        return CHECKBOX
    return TEXT


def classify_value(row: FieldValueRow, nodes: Mapping[str, NodeRecord]) -> DataType | None:
    """Type suggested by a single stored value, or None when it says nothing."""
    if row.value_node_id:
        backing = nodes.get(row.value_node_id)
        if backing is not None and backing.props.meta_node_id:
            return REFERENCE

    text = (row.value_text or "").strip()
    if not text:
        return None
    if _ISO_DATE_RE.match(text) or _RELATIVE_DATE_RE.match(text):
        return DATE
    if text.lower() in ("true", "false"):
        return CHECKBOX
    return None


def majority_type(samples: Iterable[DataType | None]) -> DataType | None:
    """The classification held by strictly more than half the samples."""
    counts = Counter(samples)
    total = sum(counts.values())
    if not total:
        return None
    kind, n = counts.most_common(1)[0]
    if kind is None or n * 2 <= total:
        return None
    return kind


def refine_field_types(
    field_types: MutableMapping[FieldKey, str | None],
    rows: Iterable[FieldValueRow],
    nodes: Mapping[str, NodeRecord],
    *,
    sample_size: int = 100,
) -> int:
    """Stage B: refine `(field_name, field_def_id) -> type` in place from values.

    Only fields currently typed "text" (or untyped) are eligible; a specific
    name-based type is never replaced. Returns the number of fields changed.
    """
    samples: dict[FieldKey, list[DataType | None]] = {}
    for row in rows:
        key = (row.field_name, row.field_def_id)
        if key not in field_types:
            continue
        bucket = samples.setdefault(key, [])
        if len(bucket) < sample_size:
            bucket.append(classify_value(row, nodes))

    changed = 0
    for key, values in samples.items():
        current = field_types[key]
        if current not in (None, TEXT):
            continue
        refined = majority_type(values)
        if refined is None or refined == current:
            continue
        logger.debug("Field %s (%s): %s -> %s", key[0], key[1], current, refined)
        field_types[key] = refined
        changed += 1
    return changed


class FieldTypeInferencer:
    """Both inference stages bound to one sample size."""

    def __init__(self, sample_size: int = 100):
        self.sample_size = sample_size

    def infer(self, field_name: str | None) -> DataType:
        return infer_type_from_name(field_name)

    def refine(
        self,
        field_types: MutableMapping[FieldKey, str | None],
        rows: Iterable[FieldValueRow],
        nodes: Mapping[str, NodeRecord],
    ) -> int:
        changed = refine_field_types(field_types, rows, nodes, sample_size=self.sample_size)
        if changed:
            logger.info("Refined %d field type(s) from stored values", changed)
        return changed
