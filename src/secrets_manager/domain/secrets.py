"""Pure domain functions mapping Secrets Manager responses onto domain models.

Responses are the plain dicts boto3 returns.  Optional fields are defaulted
(missing tags become ``[]``, a missing version map becomes ``{}``); required
fields are the service's contract and are not validated here.  Nothing in
this module performs I/O.
"""

from collections.abc import Iterable
from typing import Any

from secrets_manager.constants import MISSING_ARN, TAG_KEYS
from secrets_manager.models import (
    Choice,
    CompactRecord,
    Page,
    Parameter,
    SecretRecord,
    SecretValue,
    Tag,
)


def record_from_wire(entry: dict[str, Any]) -> SecretRecord:
    """Convert one ``SecretList`` entry into a SecretRecord."""
    return SecretRecord(
        id=entry.get("ARN") or MISSING_ARN,
        name=entry.get("Name"),
        description=entry.get("Description"),
        version={k: list(v) for k, v in (entry.get("SecretVersionsToStages") or {}).items()},
        tags=tags_from_wire(entry.get("Tags")),
        creation=entry.get("CreatedDate"),
        modification=entry.get("LastChangedDate"),
        access=entry.get("LastAccessedDate"),
        deletion=entry.get("DeletedDate"),
    )


def page_from_wire(response: dict[str, Any]) -> Page:
    """Convert a ListSecrets response into a Page.

    An empty-string ``NextToken`` is treated the same as an absent one.
    """
    records = [record_from_wire(entry) for entry in response.get("SecretList") or []]
    return Page(records=records, token=response.get("NextToken") or None)


def value_from_wire(response: dict[str, Any]) -> SecretValue:
    """Convert a GetSecretValue (or CreateSecret/UpdateSecret) response."""
    return SecretValue(
        id=response.get("ARN"),
        name=response.get("Name"),
        creation=response.get("CreatedDate"),
        binary=response.get("SecretBinary"),
        secret=response.get("SecretString"),
        version=response.get("VersionId"),
        stages=list(response.get("VersionStages") or []),
    )


def tags_from_wire(tags: list[dict[str, str]] | None) -> list[Tag]:
    return [Tag(key=t.get("Key", ""), value=t.get("Value", "")) for t in tags or []]


def tags_to_wire(tags: Iterable[Tag]) -> list[dict[str, str]]:
    return [{"Key": t.key, "Value": t.value} for t in tags]


def build_tags(parameter: Parameter) -> list[Tag]:
    """Return the five tags mirroring each component of the secret's name."""
    values = (
        parameter.organization,
        parameter.environment,
        parameter.application,
        parameter.resource,
        parameter.identifier,
    )
    return [Tag(key=key, value=str(value)) for key, value in zip(TAG_KEYS, values)]


def compact(record: SecretRecord | CompactRecord) -> CompactRecord:
    return record.compact()


def sort_by_name(records: Iterable[CompactRecord | SecretRecord]) -> list:
    """Sort records by name, ignoring case; ties keep uppercase first.

    Records without a name sort first.
    """
    return sorted(records, key=lambda r: ((r.name or "").casefold(), r.name or ""))


def to_choices(records: Iterable[CompactRecord | SecretRecord]) -> list[Choice]:
    """Build picker rows from records, sorted by name."""
    return [
        Choice(value=r.name, label=r.name, detail=r.description or "")
        for r in sort_by_name(records)
        if r.name
    ]


def to_display(record: SecretRecord | CompactRecord) -> dict[str, Any]:
    """Return a JSON-friendly dict of a record for printing."""
    if isinstance(record, CompactRecord):
        return {"name": record.name, "description": record.description}
    return {
        "id": record.id,
        "name": record.name,
        "description": record.description,
        "version": record.version,
        "tags": [{"key": t.key, "value": t.value} for t in record.tags],
        "creation": _iso(record.creation),
        "modification": _iso(record.modification),
        "access": _iso(record.access),
        "deletion": _iso(record.deletion),
    }


def _iso(value: Any) -> str | None:
    return value.isoformat() if value is not None else None
