"""Active profile handling through environment variables."""

from __future__ import annotations

import os
from collections.abc import Iterable

PROFILE_ENV_KEY = "CARGO_MAKE_PROFILE"
ADDITIONAL_PROFILES_ENV_KEY = "CARGO_MAKE_ADDITIONAL_PROFILES"
DEFAULT_PROFILE = "development"


def normalize_profile(profile: str) -> str:
    """Lower-case and strip a profile name."""
    return profile.lower().strip()


def normalize_additional_profiles(profiles: Iterable[str]) -> str:
    """Normalise profile names and join the non-empty ones with ';'."""
    normalized = (normalize_profile(profile) for profile in profiles)
    return ";".join(profile for profile in normalized if profile)


def get_profile() -> str:
    """Return the active profile name."""
    return os.environ.get(PROFILE_ENV_KEY, DEFAULT_PROFILE)


def set_profile(profile: str) -> str:
    """Set the active profile, falling back to the default, and return it."""
    os.environ[PROFILE_ENV_KEY] = normalize_profile(profile) or DEFAULT_PROFILE
    return get_profile()


def set_additional_profiles(profiles: Iterable[str]) -> None:
    """Store the normalised additional profiles in the environment."""
    os.environ[ADDITIONAL_PROFILES_ENV_KEY] = normalize_additional_profiles(profiles)