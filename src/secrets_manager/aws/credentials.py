"""Profile-based credential resolution.

Profiles come from the shared AWS files (``~/.aws/credentials`` and
``~/.aws/config``, or wherever ``AWS_SHARED_CREDENTIALS_FILE`` /
``AWS_CONFIG_FILE`` point).  Nothing is cached: every call re-reads them.
"""

import logging

import boto3
from botocore.exceptions import BotoCoreError, PartialCredentialsError, ProfileNotFound

from secrets_manager.aws.errors import AuthResolutionError
from secrets_manager.constants import DEFAULT_PROFILE
from secrets_manager.models import CredentialSet

logger = logging.getLogger(__name__)


def create_session(profile: str = DEFAULT_PROFILE) -> boto3.Session:
    """Return a boto3 session bound to ``profile``.

    Raises AuthResolutionError if the profile is not defined.
    """
    try:
        return boto3.Session(profile_name=profile)
    except ProfileNotFound as exc:
        raise AuthResolutionError(f"AWS profile '{profile}' not found") from exc


def resolve_credentials(
    profile: str = DEFAULT_PROFILE, session: boto3.Session | None = None
) -> CredentialSet:
    """Resolve ``profile`` to access-key material.

    Raises AuthResolutionError if the profile is absent, incomplete, or
    produces no credentials.
    """
    session = session or create_session(profile)
    try:
        credentials = session.get_credentials()
    except PartialCredentialsError as exc:
        raise AuthResolutionError(f"AWS profile '{profile}' is malformed: {exc}") from exc
    except BotoCoreError as exc:
        raise AuthResolutionError(f"Could not resolve AWS profile '{profile}': {exc}") from exc

    if credentials is None:
        raise AuthResolutionError(f"AWS profile '{profile}' has no credentials")

    frozen = credentials.get_frozen_credentials()
    if not frozen.access_key or not frozen.secret_key:
        raise AuthResolutionError(f"AWS profile '{profile}' is missing an access key or secret key")

    logger.debug("Resolved credentials for profile %s via %s", profile, credentials.method)
    return CredentialSet(
        access_key_id=frozen.access_key,
        secret_access_key=frozen.secret_key,
        session_token=frozen.token,
        profile=profile,
    )
