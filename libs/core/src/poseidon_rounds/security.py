"""Security predicates for Poseidon round profiles.

Each predicate decides whether `(rF, rP)` full/partial rounds are secure for
a prime field of size `p`, state width `t`, security level `M` (bits) and
S-box exponent `a` (`a > 0` for x -> x^a, `a == -1` for x -> x^-1).

Three formulations of the statistical, interpolation and Groebner bounds are
kept side by side:

- `security_test`: the inequalities as printed in the Poseidon paper.
- `security_test_reference`: the published Python reference script
  (`calc_round_numbers.py`, `sat_inequiv_alpha`). The round search uses this one.
- `security_test_external`: replica of an external implementation that runs the
  reference formulas with a hard-coded 256-bit field and M=128, whatever the
  caller passes. It is a compatibility oracle and must not be corrected.

The three are written out independently on purpose; only the coercion helpers
in `_numeric` are shared.

Preconditions (not checked): `p >= 2`, `t >= 1`, and `a >= 2` or `a == -1`.
Log domain errors surface as `ValueError` / `ZeroDivisionError`.
"""

from __future__ import annotations

from typing import Callable, Dict

from ._numeric import ceil_nat, floor_nat, fmin, imax, log_base

SecurityTest = Callable[[int, int, int, int, int, int], bool]

INVERSE_SBOX = -1


def _unsupported_alpha(a: int) -> bool:
    return a <= 0 and a != INVERSE_SBOX


def security_test(p: int, t: int, M: int, rF: int, rP: int, a: int) -> bool:
    """White-paper variant: real-valued log2(p), statistical constant log2(a-1)."""
    if _unsupported_alpha(a):
        return False
    log2p = log_base(2, p)
    if a > 0:
        rf_1 = 6 if M <= floor_nat(log2p - log_base(2, a - 1)) * (t + 1) else 10  # Statistical
        rf_2 = ceil_nat(log_base(a, 2) * fmin(M, log2p)) + ceil_nat(log_base(a, t)) - rP  # Interpolation
        rf_3 = log_base(a, 2) * fmin(M / 3.0, log2p / 2.0) - rP  # Groebner 1
        rf_4 = t - 1 + fmin(log_base(a, 2) * M / (t + 1), log_base(a, 2) * log2p / 2.0) - rP  # Groebner 2
        rf_max = imax(ceil_nat(rf_1), ceil_nat(rf_2), ceil_nat(rf_3), ceil_nat(rf_4))
        return rF >= rf_max

    rf_1 = 6 if M <= floor_nat(log2p - 2) * (t + 1) else 10  # Statistical
    absorbed = floor_nat(rF * log_base(2, t))
    rp_1 = ceil_nat(0.5 * fmin(M, log2p)) + ceil_nat(log_base(2, t)) - absorbed  # Interpolation
    rp_2 = (
        t - 1
        + ceil_nat(log_base(2, t))
        + fmin(ceil_nat(M / (t + 1)), ceil_nat(0.5 * log2p))
        - absorbed
    )  # Groebner 2
    rf_max = ceil_nat(rf_1)
    rp_max = imax(ceil_nat(rp_1), ceil_nat(rp_2))
    return rF >= rf_max and rP >= rp_max


def security_test_reference(p: int, t: int, M: int, rF: int, rP: int, a: int) -> bool:
    """Reference-script variant: n = ceil(log2 p), `+1` corrections."""
    if _unsupported_alpha(a):
        return False
    n = ceil_nat(log_base(2, p))
    if a > 0:
        rf_1 = 6 if M <= floor_nat(log_base(2, p) - ((a - 1) / 2.0)) * (t + 1) else 10  # Statistical
        rf_2 = 1 + ceil_nat(log_base(a, 2) * fmin(M, n)) + ceil_nat(log_base(a, t)) - rP  # Interpolation
        rf_3 = 1 + (log_base(a, 2) * fmin(M / 3.0, log_base(2, p) / 2.0)) - rP  # Groebner 1
        rf_4 = (
            t - 1
            + fmin((log_base(a, 2) * M) / (t + 1), (log_base(a, 2) * log_base(2, p)) / 2.0)
            - rP
        )  # Groebner 2
        rf_max = imax(ceil_nat(rf_1), ceil_nat(rf_2), ceil_nat(rf_3), ceil_nat(rf_4))
        return rF >= rf_max

    rf_1 = 6 if M <= floor_nat(log_base(2, p) - 2) * (t + 1) else 10  # Statistical
    absorbed = floor_nat(rF * log_base(2, t))
    rp_1 = 1 + ceil_nat(0.5 * fmin(M, n)) + ceil_nat(log_base(2, t)) - absorbed  # Interpolation
    # the reference script repeats the interpolation bound as its Groebner 1
    rp_2 = 1 + ceil_nat(0.5 * fmin(M, n)) + ceil_nat(log_base(2, t)) - absorbed
    rp_3 = (
        t - 1
        + ceil_nat(log_base(2, t))
        + fmin(ceil_nat(M / (t + 1)), ceil_nat(0.5 * log_base(2, p)))
        - absorbed
    )  # Groebner 2
    rf_max = ceil_nat(rf_1)
    rp_max = imax(ceil_nat(rp_1), ceil_nat(rp_2), ceil_nat(rp_3))
    return rF >= rf_max and rP >= rp_max


_EXTERNAL_N = 256
_EXTERNAL_M = 128


def security_test_external(p: int, t: int, M: int, rF: int, rP: int, a: int) -> bool:
    """Replica of an external tool's check, hard-coded parameters included.

    `p` and `M` are accepted for signature compatibility but ignored: the
    external code hard-codes a 256-bit field and M = 128.
    """
    if _unsupported_alpha(a):
        return False
    n, m = _EXTERNAL_N, _EXTERNAL_M
    if a > 0:
        rf_1 = 6 if m <= floor_nat(n - ((a - 1) / 2.0)) * (t + 1) else 10  # Statistical
        rf_2 = 1 + ceil_nat(log_base(a, 2) * fmin(m, n)) + ceil_nat(log_base(a, t)) - rP  # Interpolation
        rf_3 = 1 + (log_base(a, 2) * fmin(m / 3.0, n / 2.0)) - rP  # Groebner 1
        rf_4 = t - 1 + fmin((log_base(a, 2) * m) / (t + 1), (log_base(a, 2) * n) / 2.0) - rP  # Groebner 2
        rf_max = imax(ceil_nat(rf_1), ceil_nat(rf_2), ceil_nat(rf_3), ceil_nat(rf_4))
        return rF >= rf_max

    rf_1 = 6 if m <= floor_nat(n - 2) * (t + 1) else 10  # Statistical
    absorbed = floor_nat(rF * log_base(2, t))
    rp_1 = 1 + ceil_nat(0.5 * fmin(m, n)) + ceil_nat(log_base(2, t)) - absorbed  # Interpolation
    rp_2 = 1 + ceil_nat(0.5 * fmin(m, n)) + ceil_nat(log_base(2, t)) - absorbed
    rp_3 = t - 1 + ceil_nat(log_base(2, t)) + fmin(ceil_nat(m / (t + 1)), ceil_nat(0.5 * n)) - absorbed  # Groebner 2
    rf_max = ceil_nat(rf_1)
    rp_max = imax(ceil_nat(rp_1), ceil_nat(rp_2), ceil_nat(rp_3))
    return rF >= rf_max and rP >= rp_max


SECURITY_TESTS: Dict[str, SecurityTest] = {
    "whitepaper": security_test,
    "reference": security_test_reference,
    "external": security_test_external,
}


def evaluate_all(p: int, t: int, M: int, rF: int, rP: int, a: int) -> Dict[str, bool]:
    """Run every predicate variant on the same inputs."""
    return {name: test(p, t, M, rF, rP, a) for name, test in SECURITY_TESTS.items()}


__all__ = [
    "INVERSE_SBOX",
    "SECURITY_TESTS",
    "SecurityTest",
    "evaluate_all",
    "security_test",
    "security_test_external",
    "security_test_reference",
]
