"""The rental aggregate: a tenant party renting a subject."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol, runtime_checkable

from luminor.platform.clock import Clock

EVENT_RENTAL_ESTABLISHED = "rental.RentalEstablished.v1"

_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


class RentalNotFoundError(LookupError):
    def __init__(self, message: str = "rental not found") -> None:
        super().__init__(message)


class DuplicateRentalError(ValueError):
    def __init__(
        self, message: str = "rental already exists for this subject and tenant"
    ) -> None:
        super().__init__(message)


class AlreadyEstablishedError(ValueError):
    def __init__(self, message: str = "rental already established") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class DomainEvent:
    """An event produced by the aggregate, not yet stored."""

    event_type: str
    payload: Any


@dataclass(frozen=True)
class RentalEstablished:
    """Payload of the event recording that a rental was established."""

    rental_id: str
    subject_id: str
    tenant_party_id: str
    org_id: str
    created_by_account_id: str
    established_at: datetime

    def to_dict(self) -> dict[str, str]:
        """Return the JSON-ready form of the payload."""
        return {
            "rental_id": self.rental_id,
            "subject_id": self.subject_id,
            "tenant_party_id": self.tenant_party_id,
            "org_id": self.org_id,
            "created_by_account_id": self.created_by_account_id,
            "established_at": self.established_at.isoformat(),
        }


@dataclass(frozen=True)
class EstablishRentalCmd:
    """The data needed to establish a new rental."""

    rental_id: str
    subject_id: str
    tenant_party_id: str
    org_id: str
    created_by_account_id: str


@dataclass
class Rental:
    """Event-sourced aggregate linking a tenant party to a subject."""

    clock: Clock | None = field(default=None, repr=False, compare=False)
    id: str = ""
    subject_id: str = ""
    tenant_party_id: str = ""
    org_id: str = ""
    created_by_account_id: str = ""
    established: bool = False
    version: int = 0

    def apply(self, event_type: str, payload: Any) -> None:
        """Update state from one event; raise ValueError for unknown event types."""
        if event_type == EVENT_RENTAL_ESTABLISHED:
            if not isinstance(payload, RentalEstablished):
                raise TypeError(
                    f"rental.apply: payload of {event_type} must be RentalEstablished"
                )
            self.id = payload.rental_id
            self.subject_id = payload.subject_id
            self.tenant_party_id = payload.tenant_party_id
            self.org_id = payload.org_id
            self.created_by_account_id = payload.created_by_account_id
            self.established = True
        else:
            raise ValueError(f"rental.apply: unknown event type: {event_type}")
        self.version += 1

    def establish_rental(self, cmd: EstablishRentalCmd) -> list[DomainEvent]:
        """Return the events establishing this rental; raise if already established."""
        if self.established:
            raise AlreadyEstablishedError()
        if self.clock is None:
            raise RuntimeError("rental has no clock")
        return [
            DomainEvent(
                event_type=EVENT_RENTAL_ESTABLISHED,
                payload=RentalEstablished(
                    rental_id=cmd.rental_id,
                    subject_id=cmd.subject_id,
                    tenant_party_id=cmd.tenant_party_id,
                    org_id=cmd.org_id,
                    created_by_account_id=cmd.created_by_account_id,
                    established_at=self.clock.now(),
                ),
            )
        ]


@runtime_checkable
class Repository(Protocol):
    """Read model of rentals."""

    def find_by_id(self, rental_id: str) -> Rental: ...

    def find_by_subject_id(self, subject_id: str) -> list[Rental]: ...

    def find_by_tenant_party_id(self, tenant_party_id: str) -> list[Rental]: ...

    def find_by_org_id(self, org_id: str) -> list[Rental]: ...

    def exists_by_subject_and_tenant(self, subject_id: str, tenant_party_id: str) -> bool: ...


@runtime_checkable
class DuplicateChecker(Protocol):
    """Tells whether a rental already exists for a subject and tenant."""

    def exists_by_subject_and_tenant(self, subject_id: str, tenant_party_id: str) -> bool: ...


def _string_field(data: Mapping[str, Any], name: str, event_type: str) -> str:
    value = data.get(name, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"unmarshal {event_type}: field {name} must be a string")
    return value


def _rental_established(data: Mapping[str, Any]) -> RentalEstablished:
    event_type = EVENT_RENTAL_ESTABLISHED
    raw_time = data.get("established_at")
    if raw_time is None:
        established_at = _ZERO_TIME
    elif isinstance(raw_time, str):
        try:
            established_at = datetime.fromisoformat(raw_time)
        except ValueError as err:
            raise ValueError(f"unmarshal {event_type}: {err}") from err
    else:
        raise ValueError(f"unmarshal {event_type}: established_at must be a string")
    return RentalEstablished(
        rental_id=_string_field(data, "rental_id", event_type),
        subject_id=_string_field(data, "subject_id", event_type),
        tenant_party_id=_string_field(data, "tenant_party_id", event_type),
        org_id=_string_field(data, "org_id", event_type),
        created_by_account_id=_string_field(data, "created_by_account_id", event_type),
        established_at=established_at,
    )


_EVENT_FACTORY = {EVENT_RENTAL_ESTABLISHED: _rental_established}


def deserialize_event(event_type: str, raw: str | bytes | Mapping[str, Any]) -> Any:
    """Rebuild an event payload from its stored JSON; raise ValueError if that fails."""
    factory = _EVENT_FACTORY.get(event_type)
    if factory is None:
        raise ValueError(f"unknown event type: {event_type}")
    if isinstance(raw, Mapping):
        data: Any = raw
    else:
        try:
            data = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as err:
            raise ValueError(f"unmarshal {event_type}: {err}") from err
    if not isinstance(data, Mapping):
        raise ValueError(f"unmarshal {event_type}: payload must be a JSON object")
    return factory(data)


def establish_new_rental(
    checker: DuplicateChecker, clock: Clock, cmd: EstablishRentalCmd
) -> list[DomainEvent]:
    """Establish a rental, allowing at most one per subject and tenant."""
    try:
        exists = checker.exists_by_subject_and_tenant(cmd.subject_id, cmd.tenant_party_id)
    except Exception as err:
        err.add_note("check duplicate rental")
        raise
    if exists:
        raise DuplicateRentalError()
    return Rental(clock).establish_rental(cmd)