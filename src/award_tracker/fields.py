"""
Column-name normalization for Airtable records.

Airtable field names are case-sensitive and user-defined, and the bases this
service talks to have been created with different casings over time ("name" vs
"Name", "url" vs "URL"). Every canonical field therefore carries an ordered
tuple of accepted column names: the first entry is the primary column (the one
written to), the rest are alternates checked in order on read.

All read paths (list, create echo, update echo) go through `map_award` /
`map_requirement` so they resolve identically.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from .schemas import Award, Requirement


@dataclass(frozen=True)
class FieldSpec:
    name: str
    columns: Tuple[str, ...]
    default: Any = ""

    @property
    def primary(self) -> str:
        return self.columns[0]


AWARD_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("name", ("name", "Name")),
    FieldSpec("url", ("url", "URL", "Url")),
    FieldSpec("notes", ("notes", "Notes")),
    FieldSpec("deadline", ("deadline", "Deadline")),
    FieldSpec("status", ("status", "Status"), default="researching"),
)

# Airtable checkbox cells are omitted from the record (not `false`) when unchecked.
REQUIREMENT_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("awardId", ("awardId", "AwardId", "AwardID")),
    FieldSpec("text", ("text", "Text")),
    FieldSpec("done", ("done", "Done"), default=False),
)


def with_primary_columns(specs: Tuple[FieldSpec, ...], overrides: Mapping[str, str]) -> Tuple[FieldSpec, ...]:
    """Promote configured column names to primary; built-in casings stay as alternates."""
    if not overrides:
        return specs
    out = []
    for spec in specs:
        column = overrides.get(spec.name)
        if column:
            rest = tuple(c for c in spec.columns if c != column)
            spec = replace(spec, columns=(column,) + rest)
        out.append(spec)
    return tuple(out)


def _missing(value: Any) -> bool:
    # Empty lookup and linked-record cells come back as [].
    return value is None or value == "" or (isinstance(value, (list, tuple)) and not value)


def resolve_field(fields: Mapping[str, Any], spec: FieldSpec) -> Any:
    """First non-missing value across `spec.columns`, else `spec.default`."""
    for column in spec.columns:
        value = fields.get(column)
        if not _missing(value):
            if isinstance(spec.default, bool):
                return bool(value)
            return value
    return spec.default


def resolve_fields(record: Mapping[str, Any], specs: Tuple[FieldSpec, ...]) -> Dict[str, Any]:
    fields = record.get("fields") if isinstance(record.get("fields"), dict) else {}
    return {spec.name: resolve_field(fields, spec) for spec in specs}


def to_columns(values: Mapping[str, Any], specs: Tuple[FieldSpec, ...]) -> Dict[str, Any]:
    """Rename canonical keys to primary column names. Keys absent from `values` are not emitted."""
    out: Dict[str, Any] = {}
    for spec in specs:
        if spec.name in values:
            out[spec.primary] = values[spec.name]
    return out


def _first(value: Any) -> Any:
    # Linked-record cells come back as a list of record ids.
    if isinstance(value, list):
        return value[0] if value else ""
    return value


def map_requirement(record: Mapping[str, Any], specs: Tuple[FieldSpec, ...] = REQUIREMENT_FIELDS) -> Requirement:
    resolved = resolve_fields(record, specs)
    return Requirement(
        id=str(record.get("id") or ""),
        awardId=str(_first(resolved["awardId"])),
        text=str(resolved["text"]),
        done=resolved["done"],
    )


def map_award(
    record: Mapping[str, Any],
    specs: Tuple[FieldSpec, ...] = AWARD_FIELDS,
    requirements: Optional[list] = None,
) -> Award:
    resolved = resolve_fields(record, specs)
    return Award(
        id=str(record.get("id") or ""),
        name=str(resolved["name"]),
        url=str(resolved["url"]),
        notes=str(resolved["notes"]),
        deadline=str(resolved["deadline"]),
        status=str(resolved["status"]),
        requirements=list(requirements or []),
    )
