"""Resolve client-supplied identifiers to stopwatches by name or id fragment.

A stopwatch is referred to either by its exact name or by a hex fragment of the
"node" of its UUID (the low 48 bits, 12 hex digits). Name matches always win
over id matches.
"""

import string
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from functools import cached_property
from typing import TYPE_CHECKING

from stopwatchd.errors import Duplicate, ResolutionError

if TYPE_CHECKING:
    from stopwatchd.stopwatch import Stopwatch

NODE_BITS = 48
NODE_HEX_LENGTH = NODE_BITS // 4
UUID_HEX_LENGTH = 32

_HEX_DIGITS = frozenset(string.hexdigits.lower())


def uuid_node(value: uuid.UUID) -> int:
    """Return the low 48 bits of a UUID."""
    return value.int & ((1 << NODE_BITS) - 1)


def node_hex(value: uuid.UUID) -> str:
    """Return the UUID node as 12 lowercase hex digits."""
    return f"{uuid_node(value):0{NODE_HEX_LENGTH}x}"


class MatchKind(StrEnum):
    """Which part of a stopwatch an identifier matched."""

    NAME = "name"
    ID = "id"


class Identifier:
    """Unresolved reference to a stopwatch, as typed by a user."""

    def __init__(self, raw: str) -> None:
        self.raw = raw

    @cached_property
    def fragment(self) -> str | None:
        """Normalized hex fragment, or None if the raw string cannot be an id."""
        candidate = self.raw.replace("-", "").lower()
        if not candidate or not set(candidate) <= _HEX_DIGITS:
            return None
        if len(candidate) > NODE_HEX_LENGTH and len(candidate) != UUID_HEX_LENGTH:
            return None
        return candidate

    def matches_name(self, name: str) -> bool:
        return self.raw == name

    def matches_id(self, value: uuid.UUID) -> bool:
        fragment = self.fragment
        if fragment is None:
            return False
        if len(fragment) == UUID_HEX_LENGTH:
            return fragment == value.hex
        return node_hex(value).startswith(fragment)

    def matches(self, id_: uuid.UUID, name: str) -> MatchKind | None:
        """Return how this identifier matches an ``(id, name)`` pair, name first."""
        if self.matches_name(name):
            return MatchKind.NAME
        if self.matches_id(id_):
            return MatchKind.ID
        return None

    def __str__(self) -> str:
        return self.raw

    def __repr__(self) -> str:
        return f"Identifier({self.raw!r})"


@dataclass(frozen=True)
class Resolution:
    """Outcome of scanning a collection for one identifier."""

    identifier: Identifier
    kind: MatchKind | None = None
    matches: list["Stopwatch"] = field(default_factory=list)


def resolve(identifier: Identifier, stopwatches: Iterable["Stopwatch"]) -> Resolution:
    """Find every stopwatch the identifier refers to.

    ``stopwatches`` must be ordered oldest access first. They are scanned most
    recently accessed first, so matches come back in that order. Any name match
    discards all id matches.
    """
    by_name: list[Stopwatch] = []
    by_id: list[Stopwatch] = []
    for stopwatch in reversed(list(stopwatches)):
        match stopwatch.matches_identifier(identifier):
            case MatchKind.NAME:
                by_name.append(stopwatch)
            case MatchKind.ID:
                by_id.append(stopwatch)
    if by_name:
        return Resolution(identifier, MatchKind.NAME, by_name)
    if by_id:
        return Resolution(identifier, MatchKind.ID, by_id)
    return Resolution(identifier)


def resolve_exactly_one(identifier: Identifier, stopwatches: Iterable["Stopwatch"]) -> "Stopwatch":
    """Return the single stopwatch the identifier refers to.

    Raises:
        ResolutionError: Nothing matched (code: ``not_found``) or several stopwatches
            matched (code: ``ambiguous``, with every colliding ``(id, name)``).

    """
    resolution = resolve(identifier, stopwatches)
    if len(resolution.matches) != 1:
        duplicates = [Duplicate(id=sw.id, name=sw.name) for sw in resolution.matches]
        raise ResolutionError(identifier.raw, duplicates)
    return resolution.matches[0]
