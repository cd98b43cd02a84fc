"""
Remote Connection Resolution

Decides whether the remote tier is usable and which credentials to use.

Sources, highest precedence first:
1. Explicit runtime arguments (e.g. passed by a test or a launcher)
2. Environment / .env (SupabaseSettings)
3. User-entered configuration persisted in the local cache

A source counts only if BOTH its URL and key pass validation. A source with
a valid URL but a placeholder key is skipped entirely, so a half-configured
environment is treated as unconfigured rather than tried and failed on every
call.
"""

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from eden_wallet.config.settings import get_settings


MIN_KEY_LENGTH = 21

# Values copied from setup guides and never replaced
PLACEHOLDER_MARKERS = (
    "your-project",
    "your_project",
    "your-supabase",
    "your_supabase",
    "your-anon-key",
    "your_anon_key",
    "changeme",
    "change-me",
    "placeholder",
    "example.supabase.co",
    "xxxxxxxx",
)

# Whole values that mean "not set"
SENTINEL_VALUES = frozenset({"undefined", "null", "none", "false", "todo"})

_TEMPLATE_PATTERN = re.compile(r"(<[^>]*>|\{\{.*\}\}|\$\{.*\})")


class ConfigSource(str, Enum):
    """Where the active remote configuration came from."""
    RUNTIME = "runtime"
    ENVIRONMENT = "environment"
    USER = "user"
    NONE = "none"


class RemoteConfig(BaseModel):
    """Resolved remote connection settings."""

    url: str = ""
    key: str = ""
    source: ConfigSource = ConfigSource.NONE

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.key) and self.source != ConfigSource.NONE


class UserRemoteConfig(BaseModel):
    """Remote credentials entered by the user and persisted locally."""

    url: str = Field(..., min_length=1)
    key: str = Field(..., min_length=1)


def is_placeholder(value: str) -> bool:
    """Check for sentinel values left over from templates."""
    lowered = value.strip().lower()
    if not lowered or lowered in SENTINEL_VALUES:
        return True
    if _TEMPLATE_PATTERN.search(value):
        return True
    return any(marker in lowered for marker in PLACEHOLDER_MARKERS)


def is_valid_url(value: Optional[str]) -> bool:
    """A usable endpoint is a non-placeholder https URL with a host."""
    if not isinstance(value, str):
        return False
    value = value.strip()
    if not value.startswith("https://") or len(value) <= len("https://"):
        return False
    return not is_placeholder(value)


def is_valid_key(value: Optional[str]) -> bool:
    """A usable key is long enough, has no whitespace and is not a placeholder."""
    if not isinstance(value, str):
        return False
    value = value.strip()
    if len(value) < MIN_KEY_LENGTH:
        return False
    if any(ch.isspace() for ch in value):
        return False
    return not is_placeholder(value)


def _candidate(
    url: Optional[str],
    key: Optional[str],
    source: ConfigSource,
) -> Optional[RemoteConfig]:
    if is_valid_url(url) and is_valid_key(key):
        return RemoteConfig(url=url.strip(), key=key.strip(), source=source)
    return None


def resolve_remote_config(
    url: Optional[str] = None,
    key: Optional[str] = None,
    user_config: Optional[UserRemoteConfig] = None,
) -> RemoteConfig:
    """
    Resolve the active remote configuration.

    Args:
        url: Explicit runtime URL (highest precedence)
        key: Explicit runtime key
        user_config: Credentials the user saved locally (lowest precedence)

    Returns:
        RemoteConfig; check is_configured before using it
    """
    env = get_settings().supabase

    candidates = [
        (url, key, ConfigSource.RUNTIME),
        (env.url, env.anon_key, ConfigSource.ENVIRONMENT),
    ]
    if user_config is not None:
        candidates.append((user_config.url, user_config.key, ConfigSource.USER))

    for cand_url, cand_key, source in candidates:
        resolved = _candidate(cand_url, cand_key, source)
        if resolved is not None:
            return resolved

    return RemoteConfig()


def get_debug_config(config: Optional[RemoteConfig] = None) -> dict:
    """
    Summarize the remote configuration for a settings screen.

    Never exposes more than the last 8 characters of the key.
    """
    config = config or resolve_remote_config()
    return {
        "url": config.url or "Missing SUPABASE_URL in Environment",
        "key_suffix": (
            f"...{config.key[-8:]}" if config.key
            else "Missing SUPABASE_ANON_KEY in Environment"
        ),
        "is_configured": config.is_configured,
        "source": config.source.value,
    }
