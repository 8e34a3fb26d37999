from datetime import datetime, timezone

import pytest

from luminor.platform.eventbus import EventBus, EventHandlerError
from luminor.rental.facade import RentalEstablishedEvent
from luminor.rental.projection import register_projection_subscribers

NOW = datetime(2025, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


class _WriterDown(Exception):
    pass


class _FakeWriter:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def upsert_projection(
        self, rental_id, subject_id, tenant_party_id, org_id, created_by_account_id, created_at
    ):
        self.calls.append(
            (rental_id, subject_id, tenant_party_id, org_id, created_by_account_id, created_at)
        )
        if self.error is not None:
            raise self.error


def _event(**overrides):
    values = dict(
        rental_id="rental-1",
        subject_id="subject-1",
        tenant_party_id="party-1",
        org_id="org-1",
        created_by_account_id="account-1",
        established_at=NOW,
    )
    values.update(overrides)
    return RentalEstablishedEvent(**values)


def test_projection_rental_established():
    bus = EventBus()
    writer = _FakeWriter()
    register_projection_subscribers(bus, writer)

    bus.publish(_event())

    assert writer.calls == [
        ("rental-1", "subject-1", "party-1", "org-1", "account-1", NOW)
    ]


def test_projection_writer_error():
    bus = EventBus()
    writer = _FakeWriter(error=_WriterDown("db is down"))
    register_projection_subscribers(bus, writer)

    with pytest.raises((EventHandlerError, _WriterDown)):
        bus.publish(_event(created_by_account_id=""))
    assert len(writer.calls) == 1