"""Text renderings of a sampling result: a plain table or JSON."""
from __future__ import annotations

import json
from typing import List, Sequence

from .histogram import ValueFrequency, top_k_fields
from .records import FieldSet

MISSING_LABEL = "<no value>"
_COLUMN_GAP = "  "


def render_json(field_set: FieldSet, num_results: int) -> str:
    payload = {
        "top_k_fields": [
            [entry.to_dict() for entry in entries]
            for entries in top_k_fields(field_set, num_results)
        ],
        "missing_field_counts": list(field_set.missing_field_counts),
    }
    return json.dumps(payload, indent=2)


def render_table(field_set: FieldSet, num_results: int) -> str:
    """
    One ``freq value`` column pair per tracked field.

    A ``field N`` header appears when fields are tracked, and a footer row
    reports the number of records lacking each field when any did.
    """
    top = top_k_fields(field_set, num_results)
    body: List[List[str]] = []
    for row_index in range(num_results):
        cells: List[str] = []
        for entries in top:
            cells.extend(_cells_for(entries, row_index))
        body.append(cells)

    footer: List[str] = []
    if any(field_set.missing_field_counts):
        for count in field_set.missing_field_counts:
            footer.extend([str(count), MISSING_LABEL] if count else ["", ""])

    widths = [0] * (2 * len(top))
    for cells in body + ([footer] if footer else []):
        for i, cell in enumerate(cells):
            widths[i] = max(widths[i], len(cell))

    lines: List[str] = []
    if field_set.fields:
        header = []
        for slot, index in enumerate(field_set.fields):
            span = widths[2 * slot] + len(_COLUMN_GAP) + widths[2 * slot + 1]
            header.append(f"field {index}".ljust(span))
        lines.append(_COLUMN_GAP.join(header))
    lines.extend(_join(cells, widths) for cells in body)
    if footer:
        lines.append("")
        lines.append(_join(footer, widths))
    return "\n".join(line.rstrip() for line in lines)


def _cells_for(entries: Sequence[ValueFrequency], row_index: int) -> List[str]:
    if row_index >= len(entries):
        return ["", ""]
    entry = entries[row_index]
    return [f"{entry.freq:.5f}", str(entry.val)]


def _join(cells: Sequence[str], widths: Sequence[int]) -> str:
    return _COLUMN_GAP.join(cell.ljust(width) for cell, width in zip(cells, widths))


__all__ = ["render_table", "render_json", "MISSING_LABEL"]
