"""Public entry point of the rental vertical."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from luminor.platform.clock import Clock
from luminor.platform.eventbus import EventBus, EventHandlerError
from luminor.platform.eventstore import EventStore, UncommittedEvent
from luminor.rental.domain import (
    EVENT_RENTAL_ESTABLISHED,
    DomainEvent,
    DuplicateChecker,
    DuplicateRentalError,
    EstablishRentalCmd,
    Rental,
    RentalEstablished,
    RentalNotFoundError,
    deserialize_event,
    establish_new_rental,
)

logger = logging.getLogger(__name__)

__all__ = [
    "CreateRentalDTO",
    "DuplicateRentalError",
    "RentalEstablishedEvent",
    "RentalFacade",
    "RentalInfoDTO",
    "RentalNotFoundError",
]


@dataclass(frozen=True)
class RentalEstablishedEvent:
    """Published on the bus once a rental has been established."""

    rental_id: str
    subject_id: str
    tenant_party_id: str
    org_id: str
    created_by_account_id: str
    established_at: datetime


@dataclass(frozen=True)
class RentalInfoDTO:
    """Rental data shared with other verticals."""

    id: str
    subject_id: str
    tenant_party_id: str
    org_id: str


@dataclass(frozen=True)
class CreateRentalDTO:
    """Data for creating a new rental."""

    subject_id: str
    tenant_party_id: str
    org_id: str
    created_by_account_id: str


class _RentalQueryModel(Protocol):
    def find_by_id(self, rental_id: str) -> Rental: ...

    def find_by_subject_id(self, subject_id: str) -> list[Rental]: ...

    def find_by_tenant_party_id(self, tenant_party_id: str) -> list[Rental]: ...

    def find_by_org_id(self, org_id: str) -> list[Rental]: ...


def _to_dtos(rentals: list[Rental]) -> list[RentalInfoDTO]:
    return [
        RentalInfoDTO(
            id=r.id, subject_id=r.subject_id, tenant_party_id=r.tenant_party_id, org_id=r.org_id
        )
        for r in rentals
    ]


def _to_uncommitted(events: list[DomainEvent]) -> list[UncommittedEvent]:
    return [
        UncommittedEvent(
            event_type=event.event_type,
            payload=event.payload.to_dict()
            if hasattr(event.payload, "to_dict")
            else event.payload,
        )
        for event in events
    ]


class RentalFacade:
    """Creates rentals through the event store and answers rental queries."""

    def __init__(
        self,
        store: EventStore,
        bus: EventBus,
        clock: Clock,
        checker: DuplicateChecker,
        query_model: _RentalQueryModel,
    ) -> None:
        self._store = store
        self._bus = bus
        self._clock = clock
        self._checker = checker
        self._query_model = query_model

    def create_rental(self, dto: CreateRentalDTO) -> str:
        """Establish a rental, store its events, publish them and return its id."""
        rental_id = str(uuid.uuid4())
        stream_id = "rental-" + rental_id
        domain_events = establish_new_rental(
            self._checker,
            self._clock,
            EstablishRentalCmd(
                rental_id=rental_id,
                subject_id=dto.subject_id,
                tenant_party_id=dto.tenant_party_id,
                org_id=dto.org_id,
                created_by_account_id=dto.created_by_account_id,
            ),
        )
        try:
            stored = self._store.append(stream_id, 0, _to_uncommitted(domain_events))
        except Exception as err:
            err.add_note("append events")
            raise
        self._publish_all(stored)
        return rental_id

    def list_rentals_by_org(self, org_id: str) -> list[RentalInfoDTO]:
        return _to_dtos(self._query_model.find_by_org_id(org_id))

    def list_rentals_by_tenant(self, tenant_party_id: str) -> list[RentalInfoDTO]:
        return _to_dtos(self._query_model.find_by_tenant_party_id(tenant_party_id))

    def list_rentals_by_subject(self, subject_id: str) -> list[RentalInfoDTO]:
        return _to_dtos(self._query_model.find_by_subject_id(subject_id))

    def _publish_all(self, stored) -> None:
        for event in stored:
            try:
                payload = deserialize_event(event.event_type, event.payload)
            except ValueError as err:
                logger.error(
                    "failed to deserialize event for publishing: event_type=%s error=%s",
                    event.event_type,
                    err,
                )
                continue
            if event.event_type != EVENT_RENTAL_ESTABLISHED or not isinstance(
                payload, RentalEstablished
            ):
                continue
            try:
                self._bus.publish(
                    RentalEstablishedEvent(
                        rental_id=payload.rental_id,
                        subject_id=payload.subject_id,
                        tenant_party_id=payload.tenant_party_id,
                        org_id=payload.org_id,
                        created_by_account_id=payload.created_by_account_id,
                        established_at=payload.established_at,
                    )
                )
            except EventHandlerError as err:
                logger.error(
                    "failed to publish event: event_type=%s error=%s", event.event_type, err
                )