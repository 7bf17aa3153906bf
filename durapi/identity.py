from __future__ import annotations

import hashlib
import secrets
import string
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover
    from .namespace import ActorNamespace

CANONICAL_ID_LENGTH = 64

_HEX_DIGITS = frozenset(string.hexdigits.lower())


@dataclass(frozen=True, slots=True)
class ActorId:
    """
    Opaque actor identity.

    This is *not* a runtime pointer.
    It is a stable, serializable identity: 64 lowercase hex characters.
    `name` is informational only and never takes part in equality.
    """

    hex: str
    name: str | None = field(default=None, compare=False)

    def __str__(self) -> str:
        return self.hex

    @classmethod
    def parse(cls, raw: str) -> "ActorId":
        """
        Parse a canonical id string.

        Raises
        ------
        ValueError
            If `raw` is not 64 hex characters.
        """
        if not isinstance(raw, str) or len(raw) != CANONICAL_ID_LENGTH:
            raise ValueError(f"Invalid actor id. Expected {CANONICAL_ID_LENGTH} hex characters.")

        value = raw.lower()
        if not set(value) <= _HEX_DIGITS:
            raise ValueError("Invalid actor id. Expected hex characters only.")

        return cls(hex=value)

    @classmethod
    def from_name(cls, name: str, *, scope: str = "") -> "ActorId":
        """
        Derive an id from a human-readable name.

        The result depends only on `scope` and `name`, so the same name
        yields the same id in every process.
        """
        digest = hashlib.sha256(f"{scope}:{name}".encode("utf-8")).hexdigest()
        return cls(hex=digest, name=name)

    @classmethod
    def unique(cls) -> "ActorId":
        return cls(hex=secrets.token_hex(CANONICAL_ID_LENGTH // 2))

    def to_dict(self) -> dict[str, object]:
        return {"id": self.hex, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ActorId":
        parsed = cls.parse(str(data["id"]))
        name = data.get("name")
        return cls(hex=parsed.hex, name=None if name is None else str(name))


def resolve_id(namespace: "ActorNamespace", raw: Any = None) -> Any:
    """
    Turn a caller supplied identifier into an actor identity.

    - nothing (or an empty string): a fresh unique id
    - an id object: returned unchanged
    - a string of exactly 64 characters: parsed as a canonical id
    - any other string: derived from the name

    The branch depends on the string length alone. Malformed canonical
    strings are rejected by the namespace, not here.
    """
    if not raw:
        return namespace.new_unique_id()
    if not isinstance(raw, str):
        return raw
    if len(raw) == CANONICAL_ID_LENGTH:
        return namespace.id_from_string(raw)
    return namespace.id_from_name(raw)
