"""User profiles referenced by assignments, payments and ratings."""

from dataclasses import dataclass


@dataclass
class Profile:
    """A user that can be responsible for payments or assigned work."""

    id: str
    name: str = ""
    email: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "Profile":
        return cls(id=data["id"], name=data.get("name") or "", email=data.get("email"))
