"""Application-wide constants."""

APP_TITLE = "secrets-manager"

DEFAULT_PROFILE: str = "default"
DEFAULT_STAGE: str = "AWSCURRENT"
PREVIOUS_STAGE: str = "AWSPREVIOUS"

# ListSecrets rejects MaxResults above 100.
PAGE_SIZE: int = 100

FILTER_KEYS: tuple[str, ...] = (
    "description",
    "name",
    "tag-key",
    "tag-value",
    "primary-region",
    "owning-service",
    "all",
)

# Organization/Environment/Application/Resource/Identifier
NAME_SEPARATOR = "/"
DEFAULT_IDENTIFIER = "Default"
TAG_KEYS: tuple[str, ...] = (
    "Organization",
    "Environment",
    "Application",
    "Resource",
    "Identifier",
)

MISSING_ARN = "N/A"

MOCK_ACCOUNT_ID = "123456789012"
MOCK_REGION = "us-east-2"

# Seed data for the in-memory backend: name -> (description, secret string).
MOCK_SECRETS: dict[str, tuple[str, str]] = {
    "Acme/Production/Billing/Database/Credentials": (
        "Billing service database login",
        '{"username": "billing", "password": "p@ssw0rd-prod"}',
    ),
    "Acme/Production/Billing/Stripe/Default": (
        "Stripe API key for billing",
        "sk_live_4fGhJ8kLmNpQrStUvWxYz",
    ),
    "Acme/Staging/Billing/Database/Credentials": (
        "Billing service database login (staging)",
        '{"username": "billing", "password": "p@ssw0rd-stg"}',
    ),
    "Acme/Production/Frontend/Sentry/DSN": (
        "Sentry DSN for the web frontend",
        "https://abc123@o987654.ingest.sentry.io/1234567",
    ),
    "Acme/Development/Frontend/Api/Key": (
        "Local development API key",
        "sk-dev-localonly",
    ),
    "Globex/Production/Infra/Datadog/Keys": (
        "Datadog API and application keys",
        '{"api_key": "dd-prod-api-key-abc123", "app_key": "dd-prod-app-key-xyz789"}',
    ),
}

PICKER_COLUMNS = ("#", "Name", "Description")
PICKER_HINT = " j/k move · / search · Enter select · q/Esc cancel"
