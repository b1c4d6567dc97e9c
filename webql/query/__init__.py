"""Query parsing: key specs, steps and parameter interpolation."""

from webql.query.interpolation import (
    UNRESOLVED,
    Placeholder,
    canonical_json,
    interpolate,
    is_resolved,
    placeholders_in,
)
from webql.query.keyspec import KeySpec, ResolutionMode, parse_key_spec
from webql.query.models import Step, normalize_query

__all__ = [
    "KeySpec",
    "ResolutionMode",
    "parse_key_spec",
    "Step",
    "normalize_query",
    "UNRESOLVED",
    "Placeholder",
    "canonical_json",
    "interpolate",
    "is_resolved",
    "placeholders_in",
]
