"""Query and step models.

A query is an ordered list of steps. Each step maps one or more key
notations to a parameter tree::

    ["user", {"greeting": "_user"}, {"!profile>me": {"id": "_user.id"}}]

A bare string is shorthand for ``{key: None}``.
"""

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from webql.exceptions import InvalidQueryError


@dataclass
class Step:
    """One query entry: key notation -> parameter tree.

    All keys of a step form a single retry unit. If any of them has to be
    deferred, the whole step is deferred.
    """

    entries: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Any) -> "Step":
        """Build a step from a bare key or a key -> params mapping."""
        if isinstance(raw, Step):
            return cls(dict(raw.entries))
        if isinstance(raw, str):
            return cls({raw: None})
        if isinstance(raw, Mapping):
            for key in raw:
                if not isinstance(key, str):
                    raise InvalidQueryError(
                        f"Step keys must be strings, got {type(key).__name__}", step=raw
                    )
            return cls(dict(raw))
        raise InvalidQueryError(
            f"A step must be a string or a mapping, got {type(raw).__name__}", step=raw
        )

    def keys(self) -> list[str]:
        return list(self.entries)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.entries)

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return iter(self.entries.items())

    def __len__(self) -> int:
        return len(self.entries)


def normalize_query(query: Any) -> list[Step]:
    """Turn a query (single step or ordered list of steps) into Steps.

    The caller's objects are never mutated.

    Raises:
        InvalidQueryError: If the query or one of its steps has an unsupported shape
    """
    if isinstance(query, str | Mapping | Step):
        return [Step.from_raw(query)]
    if isinstance(query, Sequence) and not isinstance(query, bytes | bytearray):
        return [Step.from_raw(item) for item in query]
    raise InvalidQueryError(
        f"A query must be a step or a list of steps, got {type(query).__name__}",
        step=query,
    )
