"""Secrets Manager backend protocol and an in-memory implementation.

``SecretsBackend`` is the slice of the boto3 ``secretsmanager`` client that
``SecretsClient`` calls; a real boto3 client satisfies it structurally.
``MockBackend`` mimics the same request/response shapes and raises the same
``botocore.exceptions.ClientError`` codes, so it can stand in for AWS in
``--mock`` mode and in tests.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Protocol

from botocore.exceptions import ClientError

from secrets_manager.constants import (
    DEFAULT_STAGE,
    MOCK_ACCOUNT_ID,
    MOCK_REGION,
    MOCK_SECRETS,
    PAGE_SIZE,
    PREVIOUS_STAGE,
)


class SecretsBackend(Protocol):
    """Protocol satisfied by ``boto3.client("secretsmanager")``."""

    def get_secret_value(self, **kwargs: Any) -> dict[str, Any]: ...

    def list_secrets(self, **kwargs: Any) -> dict[str, Any]: ...

    def create_secret(self, **kwargs: Any) -> dict[str, Any]: ...

    def update_secret(self, **kwargs: Any) -> dict[str, Any]: ...

    def tag_resource(self, **kwargs: Any) -> dict[str, Any]: ...


def _client_error(code: str, message: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class MockBackend:
    """In-memory Secrets Manager seeded from MOCK_SECRETS.

    Secrets are kept in insertion order, which is also the listing order.
    ``page_size`` caps how many entries a single ListSecrets call returns so
    pagination can be exercised with small data sets.  Every request is
    appended to ``requests`` as ``(operation, kwargs)``.
    """

    def __init__(
        self,
        secrets: dict[str, tuple[str, str]] | None = None,
        page_size: int = PAGE_SIZE,
    ) -> None:
        self._secrets: dict[str, dict[str, Any]] = {}
        self._page_size = page_size
        self.requests: list[tuple[str, dict[str, Any]]] = []
        seed = MOCK_SECRETS if secrets is None else secrets
        for name, (description, value) in seed.items():
            self._insert(name, description, value, tags=[])

    # ------------------------------------------------------------------
    # SecretsBackend protocol
    # ------------------------------------------------------------------

    def get_secret_value(self, **kwargs: Any) -> dict[str, Any]:
        self.requests.append(("GetSecretValue", kwargs))
        entry = self._lookup(kwargs["SecretId"], "GetSecretValue")
        stage = kwargs.get("VersionStage", DEFAULT_STAGE)
        version_id = kwargs.get("VersionId") or self._version_at(entry, stage)
        if version_id is None or version_id not in entry["versions"]:
            raise _client_error(
                "ResourceNotFoundException",
                "Secrets Manager can't find the specified secret value for staging label: "
                f"{stage}",
                "GetSecretValue",
            )
        version = entry["versions"][version_id]
        return {
            "ARN": entry["ARN"],
            "Name": entry["Name"],
            "VersionId": version_id,
            "SecretString": version["SecretString"],
            "VersionStages": list(version["stages"]),
            "CreatedDate": version["CreatedDate"],
        }

    def list_secrets(self, **kwargs: Any) -> dict[str, Any]:
        self.requests.append(("ListSecrets", kwargs))
        matches = [e for e in self._secrets.values() if self._matches(e, kwargs.get("Filters"))]
        start = int(kwargs.get("NextToken") or 0)
        size = min(kwargs.get("MaxResults", PAGE_SIZE), self._page_size)
        chunk = matches[start : start + size]
        response: dict[str, Any] = {"SecretList": [self._summary(e) for e in chunk]}
        if start + size < len(matches):
            response["NextToken"] = str(start + size)
        return response

    def create_secret(self, **kwargs: Any) -> dict[str, Any]:
        self.requests.append(("CreateSecret", kwargs))
        name = kwargs["Name"]
        if name in self._secrets:
            raise _client_error(
                "ResourceExistsException",
                f"The operation failed because the secret {name} already exists.",
                "CreateSecret",
            )
        entry = self._insert(
            name, kwargs.get("Description"), kwargs.get("SecretString"), kwargs.get("Tags", [])
        )
        version_id = self._version_at(entry, DEFAULT_STAGE)
        return {"ARN": entry["ARN"], "Name": name, "VersionId": version_id}

    def update_secret(self, **kwargs: Any) -> dict[str, Any]:
        self.requests.append(("UpdateSecret", kwargs))
        entry = self._lookup(kwargs["SecretId"], "UpdateSecret")
        if "Description" in kwargs:
            entry["Description"] = kwargs["Description"]
        response = {"ARN": entry["ARN"], "Name": entry["Name"]}
        if "SecretString" in kwargs:
            response["VersionId"] = self._add_version(entry, kwargs["SecretString"])
        entry["LastChangedDate"] = _now()
        return response

    def tag_resource(self, **kwargs: Any) -> dict[str, Any]:
        self.requests.append(("TagResource", kwargs))
        entry = self._lookup(kwargs["SecretId"], "TagResource")
        tags = {t["Key"]: t["Value"] for t in entry["Tags"]}
        tags.update({t["Key"]: t["Value"] for t in kwargs.get("Tags", [])})
        entry["Tags"] = [{"Key": k, "Value": v} for k, v in tags.items()]
        return {}

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _insert(
        self, name: str, description: str | None, value: str | None, tags: list[dict[str, str]]
    ) -> dict[str, Any]:
        now = _now()
        entry: dict[str, Any] = {
            "ARN": f"arn:aws:secretsmanager:{MOCK_REGION}:{MOCK_ACCOUNT_ID}:secret:{name}-"
            f"{uuid.uuid4().hex[:6]}",
            "Name": name,
            "Description": description,
            "Tags": list(tags),
            "CreatedDate": now,
            "LastChangedDate": now,
            "versions": {},
        }
        self._secrets[name] = entry
        self._add_version(entry, value)
        return entry

    def _add_version(self, entry: dict[str, Any], value: str | None) -> str:
        """Add a version and move AWSCURRENT onto it; the old current becomes AWSPREVIOUS."""
        for version in entry["versions"].values():
            version["stages"].discard(PREVIOUS_STAGE)
            if DEFAULT_STAGE in version["stages"]:
                version["stages"].discard(DEFAULT_STAGE)
                version["stages"].add(PREVIOUS_STAGE)
        # Versions with no stage left are deprecated and dropped.
        entry["versions"] = {k: v for k, v in entry["versions"].items() if v["stages"]}
        version_id = str(uuid.uuid4())
        entry["versions"][version_id] = {
            "SecretString": value,
            "stages": {DEFAULT_STAGE},
            "CreatedDate": _now(),
        }
        return version_id

    def _lookup(self, secret_id: str, operation: str) -> dict[str, Any]:
        for entry in self._secrets.values():
            if secret_id in (entry["Name"], entry["ARN"]):
                return entry
        raise _client_error(
            "ResourceNotFoundException",
            "Secrets Manager can't find the specified secret.",
            operation,
        )

    @staticmethod
    def _version_at(entry: dict[str, Any], stage: str) -> str | None:
        for version_id, version in entry["versions"].items():
            if stage in version["stages"]:
                return version_id
        return None

    @staticmethod
    def _summary(entry: dict[str, Any]) -> dict[str, Any]:
        summary = {
            "ARN": entry["ARN"],
            "Name": entry["Name"],
            "CreatedDate": entry["CreatedDate"],
            "LastChangedDate": entry["LastChangedDate"],
            "SecretVersionsToStages": {
                k: sorted(v["stages"]) for k, v in entry["versions"].items()
            },
        }
        if entry["Description"] is not None:
            summary["Description"] = entry["Description"]
        if entry["Tags"]:
            summary["Tags"] = list(entry["Tags"])
        return summary

    @staticmethod
    def _matches(entry: dict[str, Any], filters: list[dict[str, Any]] | None) -> bool:
        """Apply ListSecrets filters: prefix match, values OR'ed, filters AND'ed."""
        for f in filters or []:
            key, values = f["Key"], f.get("Values", [])
            if key == "name":
                fields = [entry["Name"]]
            elif key == "description":
                fields = [entry["Description"] or ""]
            elif key == "tag-key":
                fields = [t["Key"] for t in entry["Tags"]]
            elif key == "tag-value":
                fields = [t["Value"] for t in entry["Tags"]]
            elif key == "all":
                fields = [entry["Name"], entry["Description"] or ""]
                fields += [t["Key"] for t in entry["Tags"]] + [t["Value"] for t in entry["Tags"]]
            else:
                fields = []
            if not any(field.startswith(value) for field in fields for value in values):
                return False
        return True


def _now() -> datetime:
    return datetime.now(timezone.utc)
