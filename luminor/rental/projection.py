"""Keeps the rentals read model in step with rental events."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Protocol, runtime_checkable

from luminor.platform.eventbus import EventBus
from luminor.rental.facade import RentalEstablishedEvent

logger = logging.getLogger(__name__)


@runtime_checkable
class ProjectionWriter(Protocol):
    """Writes rows of the rentals read model."""

    def upsert_projection(
        self,
        rental_id: str,
        subject_id: str,
        tenant_party_id: str,
        org_id: str,
        created_by_account_id: str,
        created_at: datetime,
    ) -> None: ...


def register_projection_subscribers(bus: EventBus, writer: ProjectionWriter) -> None:
    """Subscribe the read-model writer to rental events on the bus."""

    def on_rental_established(event: RentalEstablishedEvent) -> None:
        logger.info("projecting RentalEstablishedEvent rental_id=%s", event.rental_id)
        try:
            writer.upsert_projection(
                event.rental_id,
                event.subject_id,
                event.tenant_party_id,
                event.org_id,
                event.created_by_account_id,
                event.established_at,
            )
        except Exception as err:
            err.add_note("upsert rental projection")
            raise

    bus.subscribe(RentalEstablishedEvent, on_rental_established)