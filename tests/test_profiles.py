from __future__ import annotations

import json
import logging
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
CORE_SRC = ROOT / "libs" / "core" / "src"
core_str = str(CORE_SRC)
if core_str not in sys.path:
    sys.path.insert(0, core_str)

from poseidon_rounds.profiles import (  # noqa: E402
    ENV_FIELDS,
    ENV_MARGIN,
    ENV_SECURITY_LEVEL,
    FieldPreset,
    HashProfile,
    SecurityProfile,
    UnknownFieldError,
    default_margin,
    default_security_level,
    load_field_presets,
    parse_modulus,
    resolve_field,
    with_round_numbers,
)

BLS12_381 = 0x73EDA753299D7D483339D80809A1D80553BDA402FFFE5BFEFFFFFFFF00000001


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in (ENV_FIELDS, ENV_MARGIN, ENV_SECURITY_LEVEL):
        monkeypatch.delenv(var, raising=False)


def test_security_profile_bits():
    profile = SecurityProfile(p=BLS12_381, t=3)
    assert profile.M == 128 and profile.a == 5
    assert profile.field_bits == 255
    assert profile.state_bits == 765


def test_with_round_numbers_enriches_profile():
    profile = SecurityProfile(p=BLS12_381, t=3, M=128, a=5)
    hashed = with_round_numbers(profile)
    assert isinstance(hashed, HashProfile)
    assert hashed.security is profile
    assert (hashed.full_rounds, hashed.partial_rounds) == (6, 52)
    assert hashed.half_full_rounds == 3
    assert hashed.found and not hashed.margin_applied

    margined = with_round_numbers(profile, sec_margin=True)
    assert (margined.full_rounds, margined.partial_rounds) == (8, 56)
    assert margined.margin_applied


def test_with_round_numbers_unsupported_alpha():
    hashed = with_round_numbers(SecurityProfile(p=BLS12_381, t=3, a=-2))
    assert (hashed.full_rounds, hashed.partial_rounds) == (0, 0)
    assert not hashed.found


def test_resolve_preset_by_name_and_alias():
    presets = load_field_presets()
    assert resolve_field("bls12-381", presets).modulus == BLS12_381
    assert resolve_field("BLS12_381", presets).name == "bls12-381"
    assert resolve_field("gl64", presets).name == "goldilocks"
    assert resolve_field("goldilocks", presets).alpha == 7
    assert resolve_field("mnt4-753", presets).alpha == -1


def test_resolve_prime_literals():
    assert resolve_field(hex(BLS12_381)).modulus == BLS12_381
    assert resolve_field(str(BLS12_381)).modulus == BLS12_381
    custom = resolve_field(2013265921)
    assert custom.name == "custom"
    assert custom.bits == 31


def test_resolve_unknown_field():
    with pytest.raises(UnknownFieldError):
        resolve_field("no-such-field")
    with pytest.raises(ValueError):
        resolve_field("1")


def test_parse_modulus():
    assert parse_modulus("0xffffffff00000001") == 0xFFFFFFFF00000001
    assert parse_modulus(" 2_013_265_921 ") == 2013265921
    with pytest.raises(ValueError):
        parse_modulus("0xzz")
    with pytest.raises(ValueError):
        parse_modulus("0")


def test_preset_security_profile_defaults_to_preset_alpha():
    preset = FieldPreset(name="gl", modulus=0xFFFFFFFF00000001, alpha=7)
    assert preset.security_profile(12).a == 7
    assert preset.security_profile(12, M=100, a=3) == SecurityProfile(0xFFFFFFFF00000001, 12, 100, 3)


def test_load_field_presets_merges_and_skips_invalid(tmp_path, caplog):
    config = tmp_path / "fields.json"
    config.write_text(
        json.dumps(
            {
                "Mersenne31": {"modulus": "0x7fffffff", "alpha": 5, "aliases": "m31", "notes": "2^31 - 1"},
                "broken": {"alpha": 5},
                "also-broken": "0x11",
            }
        ),
        encoding="utf-8",
    )
    with caplog.at_level(logging.WARNING, logger="poseidon_rounds.profiles"):
        presets = load_field_presets(config)
    assert "bn254" in presets
    assert presets["mersenne31"].modulus == 0x7FFFFFFF
    assert presets["mersenne31"].aliases == ("m31",)
    assert "broken" not in presets and "also-broken" not in presets
    assert "broken" in caplog.text
    assert resolve_field("m31", presets).name == "mersenne31"


def test_load_field_presets_tolerates_bad_files(tmp_path):
    defaults = load_field_presets()
    assert load_field_presets(tmp_path / "missing.json") == defaults
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    assert load_field_presets(bad) == defaults
    listing = tmp_path / "list.json"
    listing.write_text("[1, 2]", encoding="utf-8")
    assert load_field_presets(listing) == defaults


def test_resolve_field_reads_env_presets(tmp_path, monkeypatch):
    config = tmp_path / "fields.json"
    config.write_text(json.dumps({"koalabear": {"modulus": 2130706433, "alpha": 3}}), encoding="utf-8")
    monkeypatch.setenv(ENV_FIELDS, str(config))
    preset = resolve_field("koalabear")
    assert preset.modulus == 2130706433
    assert preset.alpha == 3


def test_env_defaults(monkeypatch):
    assert default_security_level() == 128
    assert default_margin() is False
    monkeypatch.setenv(ENV_SECURITY_LEVEL, "80")
    monkeypatch.setenv(ENV_MARGIN, "yes")
    assert default_security_level() == 80
    assert default_margin() is True
    monkeypatch.setenv(ENV_SECURITY_LEVEL, "lots")
    monkeypatch.setenv(ENV_MARGIN, "0")
    assert default_security_level() == 128
    assert default_margin() is False
