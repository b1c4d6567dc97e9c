"""Parameter interpolation against the call buffer.

String leaves of a parameter tree may reference earlier results with
placeholder tokens of the form ``_name`` or ``_name.path.to.value``::

    {"user_id": "_user.id", "title": "Orders for _user.name"}

A leaf that is exactly one placeholder is replaced by a deep copy of the
referenced value, whatever its type, so resolvers never share objects with
the buffer. Placeholders embedded in longer text are
replaced by their text form. References that cannot be followed produce
the ``UNRESOLVED`` marker, which callers detect with ``is_resolved``.
"""

import copy
import dataclasses
import json
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

DEFAULT_THIS_KEYWORD = "this"

PLACEHOLDER_PATTERN = re.compile(r"(?<![\w.])_([A-Za-z0-9_]+(?:\.[A-Za-z0-9_]+)*)")

_SCALARS = (str, bytes, bytearray, int, float, bool)


class Unresolved:
    """Marker for a buffer reference that could not be followed."""

    _instance: "Unresolved | None" = None

    def __new__(cls) -> "Unresolved":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNRESOLVED"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "UNRESOLVED"


UNRESOLVED = Unresolved()


@dataclass(frozen=True, slots=True)
class Placeholder:
    """A parsed ``_a.b.c`` reference."""

    path: tuple[str, ...]

    @classmethod
    def parse(cls, token: str) -> "Placeholder":
        return cls(tuple(token.split(".")))

    def resolve(self, buffer: Mapping[str, Any], this_keyword: str = DEFAULT_THIS_KEYWORD) -> Any:
        """Referenced value, not copied. ``interpolate`` copies it."""
        if self.path == (this_keyword,):
            return dict(buffer)
        return lookup_path(buffer, self.path)


def lookup_path(root: Any, path: Sequence[str]) -> Any:
    """Follow ``path`` from ``root``.

    Mappings are indexed by key, sequences by integer segments, and other
    objects (dataclasses, models) by public non-callable attributes.
    ``None`` anywhere along the way, including the final value, counts as
    unresolved.
    """
    value = root
    for segment in path:
        if value is None:
            return UNRESOLVED
        if isinstance(value, Mapping):
            if segment not in value:
                return UNRESOLVED
            value = value[segment]
        elif isinstance(value, Sequence) and not isinstance(value, _SCALARS):
            if not segment.isdigit() or int(segment) >= len(value):
                return UNRESOLVED
            value = value[int(segment)]
        elif isinstance(value, _SCALARS) or segment.startswith("_"):
            return UNRESOLVED
        else:
            attr = getattr(value, segment, UNRESOLVED)
            if callable(attr):
                return UNRESOLVED
            value = attr
    return UNRESOLVED if value is None else value


def _key_text(key: Any) -> str:
    # Non-string keys are tagged with their type so 1 and "1" stay distinct
    if isinstance(key, str):
        return key
    return f"{type(key).__name__}:{canonical_json(key)}"


def _with_text_keys(value: Any) -> Any:
    """Rewrite mapping keys as text so mixed key types can be sorted."""
    if isinstance(value, Mapping):
        return {_key_text(key): _with_text_keys(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [_with_text_keys(item) for item in value]
    return value


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return _with_text_keys(value.model_dump(mode="json"))
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _with_text_keys(dataclasses.asdict(value))
    if isinstance(value, set | frozenset):
        return sorted((_with_text_keys(item) for item in value), key=repr)
    if value is UNRESOLVED:
        return "__unresolved__"
    return str(value)


def canonical_json(value: Any) -> str:
    """Stable text form of a value: sorted keys, compact separators.

    Mapping keys of any hashable type are accepted.
    """
    return json.dumps(
        _with_text_keys(value),
        sort_keys=True,
        separators=(",", ":"),
        default=_json_default,
    )


def text_form(value: Any) -> str:
    """Text substituted for a placeholder embedded in a longer string."""
    if isinstance(value, str):
        return value
    return canonical_json(value)


def _interpolate_string(text: str, buffer: Mapping[str, Any], this_keyword: str) -> Any:
    matches = list(PLACEHOLDER_PATTERN.finditer(text))
    if not matches:
        return text

    if len(matches) == 1 and matches[0].span() == (0, len(text)):
        value = Placeholder.parse(matches[0].group(1)).resolve(buffer, this_keyword)
        return value if value is UNRESOLVED else copy.deepcopy(value)

    parts: list[str] = []
    cursor = 0
    for match in matches:
        value = Placeholder.parse(match.group(1)).resolve(buffer, this_keyword)
        if value is UNRESOLVED:
            return UNRESOLVED
        parts.append(text[cursor : match.start()])
        parts.append(text_form(value))
        cursor = match.end()
    parts.append(text[cursor:])
    return "".join(parts)


def interpolate(
    params: Any,
    buffer: Mapping[str, Any],
    this_keyword: str = DEFAULT_THIS_KEYWORD,
) -> Any:
    """Expand placeholders in a parameter tree.

    The returned tree has the same shape as ``params``. Mapping keys are
    left untouched; only values are interpolated.
    """
    if isinstance(params, str):
        return _interpolate_string(params, buffer, this_keyword)
    if isinstance(params, Mapping):
        return {key: interpolate(value, buffer, this_keyword) for key, value in params.items()}
    if isinstance(params, list):
        return [interpolate(item, buffer, this_keyword) for item in params]
    if isinstance(params, tuple):
        return tuple(interpolate(item, buffer, this_keyword) for item in params)
    return params


def is_resolved(tree: Any) -> bool:
    """True when no UNRESOLVED marker appears anywhere in ``tree``."""
    if tree is UNRESOLVED:
        return False
    if isinstance(tree, Mapping):
        return all(is_resolved(value) for value in tree.values())
    if isinstance(tree, list | tuple):
        return all(is_resolved(item) for item in tree)
    return True


def placeholders_in(params: Any) -> list[Placeholder]:
    """All placeholder references found in a parameter tree, in order."""
    if isinstance(params, str):
        return [Placeholder.parse(m.group(1)) for m in PLACEHOLDER_PATTERN.finditer(params)]
    if isinstance(params, Mapping):
        return [p for value in params.values() for p in placeholders_in(value)]
    if isinstance(params, list | tuple):
        return [p for item in params for p in placeholders_in(item)]
    return []
