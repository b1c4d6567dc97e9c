"""Key-spec parsing.

A step key has the shape::

    [flags] identifier [">" rename]

``flags`` is a run of ``?`` / ``!`` characters. A lone ``?`` selects
buffer-only mode, a lone ``!`` selects dominant mode, and anything else
(including combinations such as ``?!``) falls back to standard mode.
The identifier is made of ASCII word characters and the builtin prefix.

Parsing never fails. Text that does not fit the grammar is dropped, so
``"user>"`` parses as ``user`` and ``"user name"`` as ``user``.
"""

from dataclasses import dataclass
from enum import Enum

MODE_FLAGS = "?!"
RENAME_MARKER = ">"
DEFAULT_BUILTIN_PREFIX = "@"


class ResolutionMode(str, Enum):
    """How a key's value is folded into the call result."""

    STANDARD = "standard"  # result[result_key] = value
    DOMINANT = "dominant"  # non-null value replaces the whole result
    BUFFER_ONLY = "buffer"  # only visible to later interpolation


_FLAG_MODES = {
    "?": ResolutionMode.BUFFER_ONLY,
    "!": ResolutionMode.DOMINANT,
}


@dataclass(frozen=True, slots=True)
class KeySpec:
    """Parsed form of a step key."""

    resolver_key: str
    mode: ResolutionMode
    result_key: str

    def is_builtin(self, prefix: str = DEFAULT_BUILTIN_PREFIX) -> bool:
        return self.resolver_key.startswith(prefix)


def _is_word_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == "_")


def _scan(text: str, start: int, accept) -> int:
    end = start
    while end < len(text) and accept(text[end]):
        end += 1
    return end


def parse_key_spec(key: str, builtin_prefix: str = DEFAULT_BUILTIN_PREFIX) -> KeySpec:
    """Parse a step key into a KeySpec.

    Examples:
        >>> parse_key_spec("user")
        KeySpec(resolver_key='user', mode=<ResolutionMode.STANDARD: 'standard'>, result_key='user')
        >>> parse_key_spec("!profile>me").mode
        <ResolutionMode.DOMINANT: 'dominant'>
    """
    flags_end = _scan(key, 0, lambda ch: ch in MODE_FLAGS)
    mode = _FLAG_MODES.get(key[:flags_end], ResolutionMode.STANDARD)

    ident_end = _scan(key, flags_end, lambda ch: _is_word_char(ch) or ch == builtin_prefix)
    resolver_key = key[flags_end:ident_end]

    result_key = resolver_key
    if key[ident_end : ident_end + 1] == RENAME_MARKER:
        rename_end = _scan(key, ident_end + 1, _is_word_char)
        if rename_end > ident_end + 1:
            result_key = key[ident_end + 1 : rename_end]

    return KeySpec(resolver_key=resolver_key, mode=mode, result_key=result_key)
