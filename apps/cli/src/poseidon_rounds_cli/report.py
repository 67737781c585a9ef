"""Payload and table helpers for the round-number CLI.

Builds JSON export payloads from search reports and renders batch tables as
plain text, Markdown, or LaTeX rows in the layout of the Poseidon paper tables
(M, N, n, t, R_F, R_P, field, S-box cost, size cost).
"""

from __future__ import annotations

import json
import pathlib
from typing import Any, Dict, List, Sequence

from poseidon_rounds.profiles import FieldPreset, SecurityProfile
from poseidon_rounds.search import RoundNumberReport

TABLE_FORMATS = ("text", "markdown", "latex")

_COLUMNS = ("M", "N", "n", "t", "alpha", "R_F", "R_P", "sbox_cost", "size_cost")


def build_payload(preset: FieldPreset, profile: SecurityProfile, report: RoundNumberReport) -> Dict[str, Any]:
    return {
        "field": {
            "name": preset.name,
            "modulus_hex": hex(preset.modulus),
            "bits": report.field_bits,
        },
        "security": {
            "t": profile.t,
            "M": profile.M,
            "alpha": profile.a,
            "state_bits": report.state_bits,
        },
        "rounds": {
            "full": report.full_rounds,
            "partial": report.partial_rounds,
        },
        "costs": {
            "sbox": report.sbox_cost,
            "size": report.size_cost,
            "depth": report.depth_cost,
        },
        "margin_applied": report.margin_applied,
        "found": report.found,
    }


def _sbox_label(alpha: int) -> str:
    return f"x^{{{alpha}}}"


def _row_values(payload: Dict[str, Any]) -> List[str]:
    sec = payload["security"]
    return [
        str(sec["M"]),
        str(sec["state_bits"]),
        str(payload["field"]["bits"]),
        str(sec["t"]),
        str(sec["alpha"]),
        str(payload["rounds"]["full"]),
        str(payload["rounds"]["partial"]),
        str(payload["costs"]["sbox"]),
        str(payload["costs"]["size"]),
    ]


def render_table(payloads: Sequence[Dict[str, Any]], fmt: str = "text") -> str:
    if fmt not in TABLE_FORMATS:
        raise ValueError(f"Unknown table format {fmt!r}; expected one of {', '.join(TABLE_FORMATS)}")
    rows = [_row_values(p) for p in payloads]
    if fmt == "latex":
        lines = []
        for row in rows:
            m, big_n, n, t, alpha, rf, rp, sbox, size = row
            cells = [m, big_n, n, t, rf, rp, r"\mathbb F_{p}", _sbox_label(int(alpha)), sbox, size]
            lines.append(" & ".join(f"${c}$" for c in cells) + r" \\")
        return "\n".join(lines)
    if fmt == "markdown":
        header = "| " + " | ".join(_COLUMNS) + " |"
        sep = "|" + "|".join("---" for _ in _COLUMNS) + "|"
        body = ["| " + " | ".join(r) + " |" for r in rows]
        return "\n".join([header, sep, *body])
    widths = [max(len(col), *(len(r[i]) for r in rows)) if rows else len(col) for i, col in enumerate(_COLUMNS)]
    lines = ["  ".join(col.rjust(w) for col, w in zip(_COLUMNS, widths))]
    for r in rows:
        lines.append("  ".join(cell.rjust(w) for cell, w in zip(r, widths)))
    return "\n".join(lines)


def export_json(data: Any, export_path: str | None) -> pathlib.Path | None:
    if not export_path:
        return None
    # Normalize Windows separators for relative paths
    if "\\" in export_path and ":" not in export_path:
        export_path = export_path.replace("\\", "/")
    path = pathlib.Path(export_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return path


__all__ = ["TABLE_FORMATS", "build_payload", "export_json", "render_table"]
