"""Config file loading, validation, and persistence.

Schema on disk (~/.config/secrets-manager/config.json):

    {
        "profile": "default",
        "region": "us-east-2",
        "stage": "AWSCURRENT"
    }

Every key is optional.  Keys prefixed with "_" are reserved (e.g. "_comment")
and are stripped on load.
"""

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError

from secrets_manager.constants import DEFAULT_PROFILE, DEFAULT_STAGE

CONFIG_PATH = Path("~/.config/secrets-manager/config.json").expanduser()

_README_PATH = Path("~/.config/secrets-manager/README.md").expanduser()

_README_CONTENT = """\
# secrets-manager configuration

Edit `config.json` in this directory to change the defaults used when a
command-line flag is not given.

## Schema

```json
{
    "profile": "<AWS profile name from ~/.aws/credentials>",
    "region": "<AWS region, e.g. us-east-2; omit to use the profile's region>",
    "stage": "<staging label to read, e.g. AWSCURRENT>"
}
```

All keys are optional.  Keys prefixed with `_` (e.g. `_comment`) are ignored.
"""


class Settings(BaseModel):
    """User defaults for profile, region and stage."""

    model_config = ConfigDict(extra="forbid")

    profile: str = DEFAULT_PROFILE
    region: str | None = None
    stage: str = DEFAULT_STAGE


class ConfigError(Exception):
    """Raised when config.json exists but cannot be parsed or validated."""


def load_config() -> Settings:
    """Load and validate the config file.

    Creates the config directory, an empty config.json, and a README on first
    run.  Returns default Settings if the file is empty.  Raises ConfigError
    if the file exists but is malformed.
    """
    if not CONFIG_PATH.exists():
        _bootstrap()
        return Settings()

    text = CONFIG_PATH.read_text()
    if not text.strip():
        return Settings()

    try:
        raw: object = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"config.json is not valid JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("config.json must be a JSON object at the top level")

    # Strip reserved/comment keys.
    data = {k: v for k, v in raw.items() if not k.startswith("_")}

    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config: {exc}") from exc


def save_config(settings: Settings) -> None:
    """Persist settings to disk, creating directories as needed."""
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text(json.dumps(settings.model_dump(exclude_none=True), indent=2))


def _bootstrap() -> None:
    """Create the config directory, an empty config.json, and a README."""
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text("{}\n")
    if not _README_PATH.exists():
        _README_PATH.write_text(_README_CONTENT)
