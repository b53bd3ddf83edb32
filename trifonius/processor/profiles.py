"""Deployment profile selection."""

from trifonius.errors import AmbiguousDefaultProfile, NoProfilesDefined, ProfileNotFound
from trifonius.processor.types import ProfileConfig


def select_profile(profiles, requested: str | None = None) -> ProfileConfig:
    """Pick the profile with id *requested*, or the only profile when none is requested."""
    profiles = list(profiles)
    if requested is not None:
        for profile in profiles:
            if profile.id == requested:
                return profile
        raise ProfileNotFound(requested)
    if not profiles:
        raise NoProfilesDefined()
    if len(profiles) == 1:
        return profiles[0]
    raise AmbiguousDefaultProfile([p.id for p in profiles])
