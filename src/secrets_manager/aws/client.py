"""Adapter over the AWS Secrets Manager API.

``SecretsClient`` is the only object the CLI talks to.  It resolves a named
profile to credentials on first use, pages through ListSecrets until the
continuation token runs out, and maps responses onto domain models.

Failures are never retried or recovered: every botocore error is translated
into the ``secrets_manager.aws.errors`` taxonomy and raised to the caller.
"""

import logging
from collections.abc import Callable, Sequence
from typing import Any

from secrets_manager.aws.credentials import create_session, resolve_credentials
from secrets_manager.aws.errors import (
    REMOTE_ERRORS,
    ConflictError,
    translate,
)
from secrets_manager.backends import SecretsBackend
from secrets_manager.constants import DEFAULT_PROFILE, DEFAULT_STAGE, FILTER_KEYS, PAGE_SIZE
from secrets_manager.domain.secrets import (
    build_tags,
    page_from_wire,
    tags_to_wire,
    value_from_wire,
)
from secrets_manager.models import CredentialSet, Parameter, SecretRecord, SecretValue

logger = logging.getLogger(__name__)


class SecretsClient:
    """Lists, searches, reads and creates secrets for one AWS profile.

    Args:
        profile: Named profile in the shared AWS config/credentials files.
        region: Region override; defaults to the profile's region.
        service: Backend to use instead of a boto3 client (e.g. MockBackend).
    """

    def __init__(
        self,
        profile: str = DEFAULT_PROFILE,
        region: str | None = None,
        service: SecretsBackend | None = None,
    ) -> None:
        self.profile = profile
        self.region = region
        self._service = service
        self._credentials: CredentialSet | None = None

    @property
    def service(self) -> SecretsBackend:
        """Lazily build the boto3 client from the resolved credentials."""
        if self._service is None:
            session = create_session(self.profile)
            self._credentials = resolve_credentials(self.profile, session=session)
            try:
                self._service = session.client(
                    "secretsmanager",
                    region_name=self.region,
                    aws_access_key_id=self._credentials.access_key_id,
                    aws_secret_access_key=self._credentials.secret_access_key,
                    aws_session_token=self._credentials.session_token,
                )
            except REMOTE_ERRORS as exc:
                raise translate(exc, "CreateClient") from exc
            logger.debug(
                "Secrets Manager client ready (profile=%s, region=%s)",
                self.profile,
                self._service.meta.region_name,
            )
        return self._service

    def get_secret(self, name: str, stage: str = DEFAULT_STAGE) -> SecretValue:
        """Fetch the version of ``name`` carrying the ``stage`` label.

        Raises NotFoundError if the secret or the stage does not exist.
        """
        response = self._call(
            "GetSecretValue", self.service.get_secret_value, SecretId=name, VersionStage=stage
        )
        return value_from_wire(response)

    def list_secrets(self) -> list[SecretRecord]:
        """Return every secret in the account, in the order the service lists them."""
        return self._paginate()

    def search_secrets(
        self, filter_key: str, filter_values: str | Sequence[str | None] | None = None
    ) -> list[SecretRecord]:
        """Return secrets matching a server-side filter.

        The ``name`` filter is a case-sensitive prefix match.  With no
        (non-blank) values this is the same as ``list_secrets``.
        """
        if filter_key not in FILTER_KEYS:
            raise ValueError(
                f"Unknown filter key '{filter_key}'; expected one of {', '.join(FILTER_KEYS)}"
            )
        if isinstance(filter_values, str):
            filter_values = [filter_values]
        values = [v for v in filter_values or [] if v]
        if not values:
            return self._paginate()
        return self._paginate(Filters=[{"Key": filter_key, "Values": values}])

    def create_secret(
        self,
        parameter: Parameter,
        description: str,
        secret_value: str,
        overwrite: bool = False,
    ) -> SecretValue:
        """Create a secret named and tagged after ``parameter``.

        If the name is taken, raises ConflictError unless ``overwrite`` is
        set, in which case the existing secret gets a new current version,
        the new description and the tags.
        """
        name = parameter.name
        tags = tags_to_wire(build_tags(parameter))
        try:
            response = self._call(
                "CreateSecret",
                self.service.create_secret,
                Name=name,
                Description=description,
                SecretString=secret_value,
                Tags=tags,
                ForceOverwriteReplicaSecret=overwrite,
            )
        except ConflictError:
            if not overwrite:
                raise
            logger.debug("Secret %s exists; overwriting", name)
            response = self._call(
                "UpdateSecret",
                self.service.update_secret,
                SecretId=name,
                Description=description,
                SecretString=secret_value,
            )
            self._call("TagResource", self.service.tag_resource, SecretId=name, Tags=tags)
        return value_from_wire(response)

    def _paginate(self, **request: Any) -> list[SecretRecord]:
        """Follow NextToken until the service stops returning one.

        Nothing is returned if any page fails.
        """
        records: list[SecretRecord] = []
        token: str | None = None
        pages = 0
        while True:
            kwargs = dict(request, MaxResults=PAGE_SIZE)
            if token:
                kwargs["NextToken"] = token
            page = page_from_wire(self._call("ListSecrets", self.service.list_secrets, **kwargs))
            pages += 1
            records.extend(page.records)
            if not page.token:
                break
            token = page.token
        logger.debug("Listed %d secret(s) over %d page(s)", len(records), pages)
        return records

    def _call(
        self, operation: str, method: Callable[..., dict[str, Any]], **kwargs: Any
    ) -> dict[str, Any]:
        logger.debug("%s %s", operation, sorted(k for k in kwargs if k != "SecretString"))
        try:
            return method(**kwargs)
        except REMOTE_ERRORS as exc:
            raise translate(exc, operation) from exc
