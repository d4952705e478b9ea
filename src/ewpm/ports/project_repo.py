"""Project repository interface."""

from typing import Protocol

from ewpm.core.projects import Project


class ProjectRepository(Protocol):
    def fetch_all(self) -> list[Project]:
        ...

    def get(self, project_id: str) -> Project | None:
        ...

    def update(self, project_id: str, changes: dict) -> Project:
        """Apply changes and return the stored row."""
        ...
