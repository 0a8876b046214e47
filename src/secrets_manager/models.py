"""Domain models."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from secrets_manager.constants import DEFAULT_IDENTIFIER, MISSING_ARN, NAME_SEPARATOR


class ParameterError(ValueError):
    """Raised when a secret name cannot be split into its five components."""


@dataclass(frozen=True)
class Tag:
    key: str
    value: str


@dataclass(frozen=True)
class CompactRecord:
    """Name and description only; what the picker shows."""

    name: str | None
    description: str | None = None

    def compact(self) -> "CompactRecord":
        return CompactRecord(name=self.name, description=self.description)


@dataclass
class SecretRecord:
    """A secret as returned by ListSecrets, without its value.

    ``version`` maps each version id to the stage labels attached to it,
    e.g. ``{"v1": ["AWSCURRENT"]}``.
    """

    name: str | None
    id: str = MISSING_ARN
    description: str | None = None
    version: dict[str, list[str]] = field(default_factory=dict)
    tags: list[Tag] = field(default_factory=list)
    creation: datetime | None = None
    modification: datetime | None = None
    access: datetime | None = None
    deletion: datetime | None = None

    def compact(self) -> CompactRecord:
        """Project down to name and description. Lossy."""
        return CompactRecord(name=self.name, description=self.description)


@dataclass
class SecretValue:
    """One version of one secret, as returned by GetSecretValue.

    Create and update responses reuse this shape; they carry no payload.
    """

    name: str | None
    id: str | None = None
    creation: datetime | None = None
    binary: bytes | None = None
    secret: str | None = None
    version: str | None = None
    stages: list[str] = field(default_factory=list)

    def serialize(self) -> Any:
        """Return the string payload decoded as JSON.

        Falls back to the raw string when it is not JSON, and to None when
        there is no string payload at all.
        """
        if not self.secret:
            return None
        try:
            return json.loads(self.secret)
        except json.JSONDecodeError:
            return self.secret


@dataclass
class Page:
    """One ListSecrets response. ``token`` is None on the last page."""

    records: list[SecretRecord]
    token: str | None = None


@dataclass(frozen=True)
class CredentialSet:
    access_key_id: str
    secret_access_key: str
    profile: str
    session_token: str | None = None

    def __repr__(self) -> str:
        return f"CredentialSet(access_key_id={self.access_key_id!r}, profile={self.profile!r})"


@dataclass(frozen=True)
class Parameter:
    """A structured secret name: Organization/Environment/Application/Resource/Identifier."""

    organization: str
    environment: str
    application: str
    resource: str
    identifier: str = DEFAULT_IDENTIFIER

    @classmethod
    def create(cls, name: str) -> "Parameter":
        """Parse a ``/``-separated name.

        Four components get the default identifier; five map one-to-one.
        Leading and trailing separators are ignored.
        """
        parts = [part.strip() for part in name.strip().strip(NAME_SEPARATOR).split(NAME_SEPARATOR)]
        if len(parts) not in (4, 5):
            raise ParameterError(
                f"'{name}' must have 4 or 5 components "
                "(Organization/Environment/Application/Resource[/Identifier])"
            )
        if not all(parts):
            raise ParameterError(f"'{name}' contains an empty component")
        return cls(*parts)

    @property
    def name(self) -> str:
        return NAME_SEPARATOR.join(
            (self.organization, self.environment, self.application, self.resource, self.identifier)
        )


@dataclass
class Choice:
    """A selectable row in the picker."""

    value: str
    label: str
    detail: str = ""

    def matches(self, query: str) -> bool:
        """Return True if label or detail contains the query (case-insensitive)."""
        q = query.lower()
        return q in self.label.lower() or q in self.detail.lower()
