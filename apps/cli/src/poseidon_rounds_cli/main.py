from __future__ import annotations
import logging
import os
from typing import Dict, List, Optional

import typer

from poseidon_rounds.profiles import (
    ENV_FIELDS,
    FieldPreset,
    SecurityProfile,
    UnknownFieldError,
    default_margin,
    default_security_level,
    load_field_presets,
    resolve_field,
)
from poseidon_rounds.search import calc_final_numbers
from poseidon_rounds.security import evaluate_all

from .report import TABLE_FORMATS, build_payload, export_json, render_table

app = typer.Typer(add_completion=False, help="Poseidon round-number CLI")

log = logging.getLogger(__name__)


@app.callback()
def _main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _presets() -> Dict[str, FieldPreset]:
    return load_field_presets(os.environ.get(ENV_FIELDS))


def _resolve(field: str) -> FieldPreset:
    try:
        return resolve_field(field, _presets())
    except UnknownFieldError:
        raise typer.BadParameter(
            f"unknown field {field!r}; use a preset name (see list-fields) or a prime literal",
            param_hint="FIELD",
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="FIELD")


def _profile(preset: FieldPreset, t: int, security: Optional[int], alpha: Optional[int]) -> SecurityProfile:
    M = default_security_level() if security is None else security
    profile = preset.security_profile(t, M=M, a=alpha)
    # x -> x^1 is linear; every bound would divide by log(1)
    if profile.a == 1:
        raise typer.BadParameter("alpha must be >= 2, or -1 for the inverse S-box", param_hint="--alpha")
    return profile


@app.command("list-fields")
def list_fields() -> None:
    """List the prime-field presets."""
    for preset in _presets().values():
        aliases = f"  aliases: {', '.join(preset.aliases)}" if preset.aliases else ""
        typer.echo(f"- {preset.name}: {preset.bits} bits, x^{preset.alpha}{aliases}")
        if preset.notes:
            typer.echo(f"    {preset.notes}")


@app.command()
def find(
    field: str = typer.Argument(..., help="Preset name/alias or prime literal (decimal or 0x hex)."),
    width: int = typer.Option(..., "--width", "-t", min=1, help="State width t."),
    alpha: Optional[int] = typer.Option(None, "--alpha", "-a", help="S-box exponent (-1 for inverse). Defaults to the preset's."),
    security: Optional[int] = typer.Option(None, "--security", "-M", min=0, help="Security level M in bits."),
    margin: Optional[bool] = typer.Option(None, "--margin/--no-margin", help="Add 2 full rounds and 7.5% partial rounds."),
    export: Optional[str] = typer.Option(None, "--json", help="Write the result as JSON to this path."),
    strict: bool = typer.Option(False, "--strict", help="Exit with code 1 when no secure profile is found."),
) -> None:
    """Find the cheapest secure (R_F, R_P) for a field and width."""
    preset = _resolve(field)
    profile = _profile(preset, width, security, alpha)
    sec_margin = default_margin() if margin is None else margin
    report = calc_final_numbers(profile.p, profile.t, profile.M, profile.a, sec_margin)

    typer.echo(
        f"Field: {preset.name} ({report.field_bits} bits), t={profile.t}, M={profile.M}, "
        f"alpha={profile.a}, margin={'yes' if report.margin_applied else 'no'}"
    )
    if not report.found:
        typer.echo("No secure round profile in the search grid; reporting (0, 0).", err=True)
    typer.echo(f"R_F = {report.full_rounds}")
    typer.echo(f"R_P = {report.partial_rounds}")
    typer.echo(f"S-box cost = {report.sbox_cost}")
    typer.echo(f"Size cost = {report.size_cost}")
    typer.echo(f"Depth cost = {report.depth_cost}")

    path = export_json(build_payload(preset, profile, report), export)
    if path is not None:
        typer.echo(f"Wrote {path}")
    if strict and not report.found:
        raise typer.Exit(code=1)


@app.command()
def check(
    field: str = typer.Argument(..., help="Preset name/alias or prime literal."),
    width: int = typer.Option(..., "--width", "-t", min=1, help="State width t."),
    full: int = typer.Option(..., "--full", "-f", min=0, help="Full rounds R_F."),
    partial: int = typer.Option(..., "--partial", "-p", min=0, help="Partial rounds R_P."),
    alpha: Optional[int] = typer.Option(None, "--alpha", "-a", help="S-box exponent (-1 for inverse)."),
    security: Optional[int] = typer.Option(None, "--security", "-M", min=0, help="Security level M in bits."),
) -> None:
    """Evaluate a round profile against every security-test variant."""
    preset = _resolve(field)
    profile = _profile(preset, width, security, alpha)
    verdicts = evaluate_all(profile.p, profile.t, profile.M, full, partial, profile.a)
    typer.echo(
        f"Field: {preset.name}, t={profile.t}, M={profile.M}, alpha={profile.a}, R_F={full}, R_P={partial}"
    )
    for name, ok in verdicts.items():
        typer.echo(f"- {name}: {'secure' if ok else 'insecure'}")


@app.command()
def table(
    field: str = typer.Argument(..., help="Preset name/alias or prime literal."),
    widths: List[int] = typer.Option([2, 3, 4, 5, 6, 8, 12], "--width", "-t", help="State widths (repeatable)."),
    alpha: Optional[int] = typer.Option(None, "--alpha", "-a", help="S-box exponent (-1 for inverse)."),
    security: Optional[int] = typer.Option(None, "--security", "-M", min=0, help="Security level M in bits."),
    margin: Optional[bool] = typer.Option(None, "--margin/--no-margin", help="Add 2 full rounds and 7.5% partial rounds."),
    fmt: str = typer.Option("text", "--format", help=f"Output format: {', '.join(TABLE_FORMATS)}."),
    export: Optional[str] = typer.Option(None, "--json", help="Write all rows as JSON to this path."),
) -> None:
    """Round numbers for several widths in one table."""
    if fmt not in TABLE_FORMATS:
        raise typer.BadParameter(f"expected one of {', '.join(TABLE_FORMATS)}", param_hint="--format")
    if any(t < 1 for t in widths):
        raise typer.BadParameter("widths must be >= 1", param_hint="--width")
    preset = _resolve(field)
    sec_margin = default_margin() if margin is None else margin
    payloads = []
    for t in widths:
        profile = _profile(preset, t, security, alpha)
        report = calc_final_numbers(profile.p, profile.t, profile.M, profile.a, sec_margin)
        log.debug("t=%d -> R_F=%d R_P=%d", t, report.full_rounds, report.partial_rounds)
        payloads.append(build_payload(preset, profile, report))
    typer.echo(render_table(payloads, fmt))
    path = export_json(payloads, export)
    if path is not None:
        typer.echo(f"Wrote {path}")


def app_main():
    app()

if __name__ == "__main__":
    app_main()
