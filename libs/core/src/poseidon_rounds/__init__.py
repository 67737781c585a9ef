
from .security import (
    SECURITY_TESTS,
    evaluate_all,
    security_test,
    security_test_external,
    security_test_reference,
)
from .search import (
    RoundNumberReport,
    RoundSearchResult,
    calc_final_numbers,
    depth_cost,
    find_round_numbers,
    sbox_cost,
    size_cost,
)
from .profiles import (
    FieldPreset,
    HashProfile,
    SecurityProfile,
    UnknownFieldError,
    load_field_presets,
    resolve_field,
    with_round_numbers,
)

__all__ = [
    "SECURITY_TESTS",
    "evaluate_all",
    "security_test",
    "security_test_external",
    "security_test_reference",
    "RoundNumberReport",
    "RoundSearchResult",
    "calc_final_numbers",
    "depth_cost",
    "find_round_numbers",
    "sbox_cost",
    "size_cost",
    "FieldPreset",
    "HashProfile",
    "SecurityProfile",
    "UnknownFieldError",
    "load_field_presets",
    "resolve_field",
    "with_round_numbers",
]
