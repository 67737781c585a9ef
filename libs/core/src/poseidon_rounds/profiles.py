"""Security/hash profile records and named prime-field presets.

`SecurityProfile` carries the algebraic inputs of a Poseidon instance
(p, t, M, a); `with_round_numbers` runs the round search and returns the
`HashProfile` consumed by whatever builds the permutation (constants, MDS).

Field presets give short names to the primes commonly used with Poseidon so
the CLI can take `bn254` instead of a 77-digit modulus. Extra presets can be
supplied as a JSON file, either passed explicitly or through the
`POSEIDON_ROUNDS_FIELDS` environment variable:

    {"my-field": {"modulus": "0x...", "alpha": 5, "aliases": ["mine"], "notes": "..."}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
import math
import os
import pathlib
from typing import Dict, Mapping, Optional, Tuple

from .search import RoundSearchResult, find_round_numbers

log = logging.getLogger(__name__)

ENV_FIELDS = "POSEIDON_ROUNDS_FIELDS"
ENV_SECURITY_LEVEL = "POSEIDON_ROUNDS_SECURITY_LEVEL"
ENV_MARGIN = "POSEIDON_ROUNDS_MARGIN"

DEFAULT_SECURITY_LEVEL = 128
DEFAULT_ALPHA = 5


class UnknownFieldError(KeyError):
    """Raised when a field name is neither a preset, an alias nor a prime literal."""


@dataclass(frozen=True)
class SecurityProfile:
    p: int
    t: int
    M: int = DEFAULT_SECURITY_LEVEL
    a: int = DEFAULT_ALPHA

    @property
    def field_bits(self) -> int:
        return int(math.ceil(math.log(self.p, 2)))

    @property
    def state_bits(self) -> int:
        return self.field_bits * self.t


@dataclass(frozen=True)
class HashProfile:
    security: SecurityProfile
    full_rounds: int
    partial_rounds: int
    margin_applied: bool = False
    found: bool = True

    @property
    def half_full_rounds(self) -> int:
        """Full rounds applied before (and after) the partial rounds."""
        return self.full_rounds // 2


def with_round_numbers(profile: SecurityProfile, sec_margin: bool = False) -> HashProfile:
    result: RoundSearchResult = find_round_numbers(
        profile.p, profile.t, profile.M, profile.a, sec_margin
    )
    return HashProfile(
        security=profile,
        full_rounds=result.full_rounds,
        partial_rounds=result.partial_rounds,
        margin_applied=result.margin_applied,
        found=result.found,
    )


@dataclass(frozen=True)
class FieldPreset:
    name: str
    modulus: int
    alpha: int = DEFAULT_ALPHA
    aliases: Tuple[str, ...] = field(default_factory=tuple)
    notes: str = ""

    @property
    def bits(self) -> int:
        return int(math.ceil(math.log(self.modulus, 2)))

    def normalized_aliases(self) -> Tuple[str, ...]:
        return tuple(a.lower() for a in self.aliases)

    def security_profile(self, t: int, M: int = DEFAULT_SECURITY_LEVEL, a: Optional[int] = None) -> SecurityProfile:
        return SecurityProfile(p=self.modulus, t=t, M=M, a=self.alpha if a is None else a)


_DEFAULT_FIELDS: Dict[str, FieldPreset] = {
    "bn254": FieldPreset(
        name="bn254",
        modulus=0x30644E72E131A029B85045B68181585D2833E84879B9709143E1F593F0000001,
        alpha=5,
        aliases=("bn254-fr", "bn128", "alt_bn128"),
        notes="BN254 scalar field (circom, Ethereum precompiles)",
    ),
    "bls12-381": FieldPreset(
        name="bls12-381",
        modulus=0x73EDA753299D7D483339D80809A1D80553BDA402FFFE5BFEFFFFFFFF00000001,
        alpha=5,
        aliases=("bls12_381", "bls12-381-fr", "bls381"),
        notes="BLS12-381 scalar field",
    ),
    "pallas": FieldPreset(
        name="pallas",
        modulus=0x40000000000000000000000000000000224698FC094CF91B992D30ED00000001,
        alpha=5,
        aliases=("pasta-fp",),
        notes="Pallas base field (= Vesta scalar field)",
    ),
    "vesta": FieldPreset(
        name="vesta",
        modulus=0x40000000000000000000000000000000224698FC0994A8DD8C46EB2100000001,
        alpha=5,
        aliases=("pasta-fq",),
        notes="Vesta base field (= Pallas scalar field)",
    ),
    "goldilocks": FieldPreset(
        name="goldilocks",
        modulus=0xFFFFFFFF00000001,
        alpha=7,
        aliases=("gl64", "p64"),
        notes="2^64 - 2^32 + 1; 3 and 5 divide p - 1, so x^7",
    ),
    "babybear": FieldPreset(
        name="babybear",
        modulus=0x78000001,
        alpha=7,
        aliases=("baby-bear",),
        notes="2^31 - 2^27 + 1; 3 and 5 divide p - 1, so x^7",
    ),
    "mnt4-753": FieldPreset(
        name="mnt4-753",
        modulus=int(
            "1c4c62d92c41110229022eee2cdadb7f997505b8fafed5eb7e8f96c97d87307fdb925e8a0ed8d99d124d9a1"
            "5af79db26c5c28c859a99b3eebca9429212636b9dff97634993aa4d6c381bc3f0057974ea099170fa13a4fd"
            "90776e240000001",
            16,
        ),
        alpha=-1,
        aliases=("mnt4_753",),
        notes="MNT4-753 scalar field with the inverse S-box",
    ),
}


def parse_modulus(text: str) -> int:
    """Parse a decimal or 0x-prefixed prime literal."""
    try:
        value = int(str(text).strip().replace("_", ""), 0)
    except ValueError as exc:
        raise ValueError(f"Invalid prime literal: {text!r}") from exc
    if value < 2:
        raise ValueError(f"Field modulus must be >= 2, got {value}")
    return value


def load_field_presets(extra_config: str | os.PathLike[str] | None = None) -> Dict[str, FieldPreset]:
    presets: Dict[str, FieldPreset] = dict(_DEFAULT_FIELDS)
    if not extra_config:
        return presets
    path = pathlib.Path(extra_config)
    if not path.exists():
        log.warning("Field preset file not found: %s", path)
        return presets
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        log.warning("Failed to read field presets %s: %s", path, exc)
        return presets
    if not isinstance(raw, Mapping):
        log.warning("Field preset file %s must contain a JSON object", path)
        return presets
    for key, value in raw.items():
        parsed = _parse_preset_entry(str(key), value)
        if parsed:
            presets[parsed.name] = parsed
        else:
            log.warning("Skipping invalid field preset %r in %s", key, path)
    return presets


def _parse_preset_entry(name: str, value: object) -> FieldPreset | None:
    if not isinstance(value, Mapping):
        return None
    modulus = value.get("modulus")
    if modulus is None:
        return None
    try:
        p = modulus if isinstance(modulus, int) else parse_modulus(str(modulus))
        alpha = int(value.get("alpha", DEFAULT_ALPHA))
    except (TypeError, ValueError):
        return None
    if p < 2:
        return None
    aliases = value.get("aliases") or ()
    if isinstance(aliases, str):
        aliases = (aliases,)
    return FieldPreset(
        name=name.strip().lower(),
        modulus=p,
        alpha=alpha,
        aliases=tuple(str(a) for a in aliases),
        notes=str(value.get("notes", "")),
    )


def resolve_field(spec: str | int, presets: Optional[Mapping[str, FieldPreset]] = None) -> FieldPreset:
    """Look up a preset by name or alias, or wrap a prime literal.

    Raises `UnknownFieldError` for names that match nothing and `ValueError`
    for literals below 2.
    """
    if isinstance(spec, int):
        return FieldPreset(name="custom", modulus=parse_modulus(str(spec)))
    table = presets if presets is not None else load_field_presets(os.environ.get(ENV_FIELDS))
    key = spec.strip().lower()
    if key in table:
        return table[key]
    for preset in table.values():
        if key in preset.normalized_aliases():
            return preset
    if key[:1].isdigit():
        return FieldPreset(name="custom", modulus=parse_modulus(key))
    raise UnknownFieldError(spec)


def default_security_level() -> int:
    raw = os.environ.get(ENV_SECURITY_LEVEL)
    if not raw:
        return DEFAULT_SECURITY_LEVEL
    try:
        value = int(raw)
    except ValueError:
        log.warning("Ignoring non-integer %s=%r", ENV_SECURITY_LEVEL, raw)
        return DEFAULT_SECURITY_LEVEL
    if value < 0:
        log.warning("Ignoring negative %s=%r", ENV_SECURITY_LEVEL, raw)
        return DEFAULT_SECURITY_LEVEL
    return value


def default_margin() -> bool:
    raw = os.environ.get(ENV_MARGIN, "")
    return raw.strip().lower() in {"1", "true", "yes", "on"}


__all__ = [
    "DEFAULT_ALPHA",
    "DEFAULT_SECURITY_LEVEL",
    "ENV_FIELDS",
    "ENV_MARGIN",
    "ENV_SECURITY_LEVEL",
    "FieldPreset",
    "HashProfile",
    "SecurityProfile",
    "UnknownFieldError",
    "default_margin",
    "default_security_level",
    "load_field_presets",
    "parse_modulus",
    "resolve_field",
    "with_round_numbers",
]
