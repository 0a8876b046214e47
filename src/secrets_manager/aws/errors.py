"""Error taxonomy for Secrets Manager operations.

botocore failures are translated into one of these at the adapter boundary
and re-raised with the original exception chained as ``__cause__``.
"""

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    NoCredentialsError,
    NoRegionError,
    PartialCredentialsError,
    ProfileNotFound,
)


class SecretsManagerError(Exception):
    """Base class for every error raised by the secrets client."""


class AuthResolutionError(SecretsManagerError):
    """The named profile is missing, malformed, or yields no credentials."""


class NotFoundError(SecretsManagerError):
    """No secret (or no version at the requested stage) matches."""


class ConflictError(SecretsManagerError):
    """A secret with that name already exists and overwrite was not requested."""


class TransientNetworkError(SecretsManagerError):
    """Any other failure talking to the remote service."""


_AUTH_ERRORS = (ProfileNotFound, NoCredentialsError, PartialCredentialsError, NoRegionError)

_CLIENT_ERROR_CODES: dict[str, type[SecretsManagerError]] = {
    "ResourceNotFoundException": NotFoundError,
    "ResourceExistsException": ConflictError,
    "UnrecognizedClientException": AuthResolutionError,
    "InvalidSignatureException": AuthResolutionError,
    "ExpiredTokenException": AuthResolutionError,
}


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


def translate(exc: Exception, operation: str) -> SecretsManagerError:
    """Map a botocore exception onto the taxonomy.

    Exceptions already in the taxonomy are returned unchanged.
    """
    if isinstance(exc, SecretsManagerError):
        return exc
    if isinstance(exc, ClientError):
        code = _error_code(exc)
        message = exc.response.get("Error", {}).get("Message", str(exc))
        error_type = _CLIENT_ERROR_CODES.get(code, TransientNetworkError)
        return error_type(f"{operation} failed ({code or 'unknown'}): {message}")
    if isinstance(exc, _AUTH_ERRORS):
        return AuthResolutionError(str(exc))
    return TransientNetworkError(f"{operation} failed: {exc}")


# Everything the adapter catches and hands to ``translate``.
REMOTE_ERRORS = (ClientError, BotoCoreError)
