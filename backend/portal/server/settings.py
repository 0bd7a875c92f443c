"""Portal server configuration via environment variables."""

import json
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode


class PortalServerSettings(BaseSettings):
    model_config = {"env_prefix": "PORTAL_"}

    log_dir: str = "backend/logs/portal"
    allowed_hosts: Annotated[list[str], NoDecode] = ["localhost", "127.0.0.1", "testserver", "*.local"]
    static_dir: str = "frontend/public"

    @field_validator("allowed_hosts", mode="before")
    @classmethod
    def validate_allowed_hosts(cls, v: str | list[str]) -> list[str]:
        return parse_string_list(v)


def parse_string_list(value: str | list[str]) -> list[str]:
    """Parse a non-empty string list from a list, a JSON array string, or a comma-separated string."""
    if isinstance(value, list):
        result = value
    elif value.strip().startswith("["):
        try:
            result = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON array: {e}") from e
        if not isinstance(result, list) or not all(isinstance(item, str) for item in result):
            raise ValueError("JSON value must be an array of strings")
    else:
        result = [item.strip() for item in value.split(",") if item.strip()]

    if not result:
        raise ValueError("String list value must not be empty")
    return result
