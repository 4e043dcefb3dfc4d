"""Domain model for a trip the user has described but not yet paid for."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from .exceptions import DraftValidationError

# Older clients and the payment gateway metadata use camelCase names.
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "title": ("title", "name", "tripName"),
    "group_label": ("group_label", "groupName", "group_name"),
    "description": ("description",),
    "start_at": ("start_at", "departureTime", "departure_time"),
    "end_at": ("end_at", "returnTime", "return_time"),
}


def parse_instant(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or datetime; naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"unsupported timestamp value: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _pick(payload: Mapping[str, Any], field: str) -> Any:
    for key in _FIELD_ALIASES[field]:
        if key in payload:
            return payload[key]
    return None


@dataclass(frozen=True, slots=True)
class TripDraft:
    title: str
    start_at: datetime
    group_label: Optional[str] = None
    description: Optional[str] = None
    end_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        title: str,
        start_at: datetime | str,
        group_label: Optional[str] = None,
        description: Optional[str] = None,
        end_at: datetime | str | None = None,
    ) -> "TripDraft":
        """Normalise raw form values into a structurally valid draft."""
        try:
            start = parse_instant(start_at)
        except ValueError as exc:
            raise DraftValidationError("Invalid departure date", field="start_at") from exc
        try:
            end = parse_instant(end_at)
        except ValueError as exc:
            raise DraftValidationError("Invalid return date", field="end_at") from exc
        if start is None:
            raise DraftValidationError("Please select a departure date", field="start_at")

        draft = cls(
            title=(title or "").strip(),
            start_at=start,
            group_label=_clean_text(group_label),
            description=_clean_text(description),
            end_at=end,
        )
        draft.validate()
        return draft

    def validate(self) -> None:
        """Structural checks, safe to repeat on drafts read back from storage."""
        if not isinstance(self.title, str) or not self.title.strip():
            raise DraftValidationError("Please enter a trip name", field="title", salvaged=self.to_mapping())
        if not isinstance(self.start_at, datetime) or self.start_at.tzinfo is None:
            raise DraftValidationError("Invalid departure date", field="start_at", salvaged=self.to_mapping())
        if self.end_at is not None:
            if not isinstance(self.end_at, datetime) or self.end_at.tzinfo is None:
                raise DraftValidationError("Invalid return date", field="end_at", salvaged=self.to_mapping())
            if self.end_at < self.start_at:
                raise DraftValidationError(
                    "Return date must be after departure date",
                    field="end_at",
                    salvaged=self.to_mapping(),
                )

    def validate_for_submission(self, now: datetime | None = None) -> None:
        self.validate()
        current = now or datetime.now(timezone.utc)
        if self.start_at < current:
            raise DraftValidationError(
                "Departure date cannot be in the past",
                field="start_at",
                salvaged=self.to_mapping(),
            )

    @classmethod
    def from_mapping(cls, payload: Any) -> "TripDraft":
        if not isinstance(payload, Mapping):
            raise DraftValidationError("Draft payload must be an object")

        salvaged: dict[str, Any] = {}
        problems: list[tuple[str, str]] = []

        title = _clean_text(_pick(payload, "title"))
        if title:
            salvaged["title"] = title
        else:
            problems.append(("title", "Please enter a trip name"))
        for field in ("group_label", "description"):
            value = _clean_text(_pick(payload, field))
            if value:
                salvaged[field] = value

        instants: dict[str, datetime | None] = {}
        for field, label in (("start_at", "departure"), ("end_at", "return")):
            raw = _pick(payload, field)
            try:
                instants[field] = parse_instant(raw)
            except ValueError:
                instants[field] = None
                problems.append((field, f"Invalid {label} date"))
                continue
            if instants[field] is not None:
                salvaged[field] = instants[field].isoformat()
        if instants.get("start_at") is None and not any(field == "start_at" for field, _ in problems):
            problems.append(("start_at", "Please select a departure date"))

        if problems:
            field, message = problems[0]
            raise DraftValidationError(message, field=field, salvaged=salvaged)

        return cls.create(
            title=title or "",
            start_at=instants["start_at"],
            group_label=salvaged.get("group_label"),
            description=salvaged.get("description"),
            end_at=instants["end_at"],
        )

    def to_mapping(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"title": self.title}
        if isinstance(self.start_at, datetime):
            payload["start_at"] = self.start_at.isoformat()
        if self.group_label:
            payload["group_label"] = self.group_label
        if self.description:
            payload["description"] = self.description
        if isinstance(self.end_at, datetime):
            payload["end_at"] = self.end_at.isoformat()
        return payload
