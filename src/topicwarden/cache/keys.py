"""Cache key schema for topics.

Key format: {prefix}:{part}:{part}:...

Where:
- prefix: namespace for the cache host (e.g. "tw")
- part: one element of the topic's key tuple, percent-encoded so that
  ":" and "*" inside parameters never clash with the separator or glob

A key either names one cached entry exactly, or (``family=True``) every
entry whose key starts with its parts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union
from urllib.parse import quote

Primitive = Union[str, int, float, bool, None]

SEPARATOR = ":"
NONE_PART = "~"


def encode_part(part: Primitive) -> str:
    """Encode one key part for use inside a Redis key."""
    if part is None:
        return NONE_PART
    if isinstance(part, bool):
        return "true" if part else "false"
    # "~" is unreserved for quote(); escape it so it stays free for None
    return quote(str(part), safe="").replace("~", "%7E")


@dataclass(frozen=True, eq=False)
class TopicKey:
    """An ordered, immutable cache key descriptor.

    Identity follows the encoded parts, so keys that render to different
    Redis keys (``1``, ``1.0`` and ``True``) are never equal.
    """

    parts: tuple[Primitive, ...]
    family: bool = False

    def __post_init__(self) -> None:
        if not self.parts:
            raise ValueError("TopicKey requires at least one part")
        for part in self.parts:
            if part is not None and not isinstance(part, (str, int, float, bool)):
                raise TypeError(f"Key parts must be primitives, got {type(part).__name__}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TopicKey):
            return NotImplemented
        return self.encoded == other.encoded and self.family == other.family

    def __hash__(self) -> int:
        return hash((self.encoded, self.family))

    @property
    def encoded(self) -> tuple[str, ...]:
        """Parts as they appear in the rendered key."""
        return tuple(encode_part(p) for p in self.parts)

    def matches(self, parts: tuple[Primitive, ...]) -> bool:
        """Whether a concrete key falls under this descriptor."""
        return self.covers(tuple(encode_part(p) for p in parts))

    def covers(self, encoded: tuple[str, ...]) -> bool:
        """Like ``matches``, for parts that are already encoded."""
        if self.family:
            return encoded[: len(self.parts)] == self.encoded
        return encoded == self.encoded

    def render(self, prefix: str) -> str:
        """Render the exact Redis key."""
        return SEPARATOR.join([prefix, *self.encoded])

    def pattern(self, prefix: str) -> str:
        """Glob matching every key below this one."""
        return f"{self.render(prefix)}{SEPARATOR}*"
