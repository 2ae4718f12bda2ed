"""Data models for the Jira client."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass(frozen=True)
class CreatedIssue:
    """Issue returned by Jira after creation."""

    id: str
    key: str
    url: str  # API url of the issue ("self" in the payload)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> CreatedIssue:
        return cls(id=str(data["id"]), key=data["key"], url=data.get("self", ""))


@dataclass(frozen=True)
class Version:
    """A Jira version (a "Fix Version" on a board)."""

    project_id: int
    name: str
    description: str | None = None
    start_date: date | None = None
    released: bool = False
    id: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "projectId": self.project_id,
            "name": self.name,
            "released": self.released,
        }
        if self.description is not None:
            payload["description"] = self.description
        if self.start_date is not None:
            payload["startDate"] = self.start_date.isoformat()
        return payload

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Version:
        start_date = data.get("startDate")
        return cls(
            id=str(data["id"]) if data.get("id") is not None else None,
            project_id=int(data["projectId"]),
            name=data["name"],
            description=data.get("description"),
            start_date=date.fromisoformat(start_date) if start_date else None,
            released=bool(data.get("released", False)),
        )


@dataclass(frozen=True)
class JiraIssue:
    """An issue as returned by a JQL search."""

    id: str
    key: str
    fields: dict[str, Any] = field(default_factory=dict)

    @property
    def summary(self) -> str:
        return str(self.fields.get("summary") or "")

    @property
    def status(self) -> str | None:
        status = self.fields.get("status")
        if isinstance(status, dict):
            return status.get("name")
        return None
