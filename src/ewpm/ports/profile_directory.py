"""Profile lookup interface."""

from typing import Protocol

from ewpm.core.profiles import Profile


class ProfileDirectory(Protocol):
    """Interface for resolving users to names and email addresses."""

    def fetch_all(self) -> list[Profile]:
        """Fetch every profile."""
        ...

    def fetch_many(self, user_ids: list[str]) -> dict[str, Profile]:
        """Fetch profiles by id. Unknown ids are absent from the result."""
        ...
