import json
from datetime import datetime, timezone

import pytest

from luminor.platform.clock import FixedClock
from luminor.rental.domain import (
    EVENT_RENTAL_ESTABLISHED,
    AlreadyEstablishedError,
    DuplicateRentalError,
    EstablishRentalCmd,
    Rental,
    RentalEstablished,
    deserialize_event,
    establish_new_rental,
)

NOW = datetime(2025, 1, 15, 10, 0, 0, tzinfo=timezone.utc)
CLOCK = FixedClock(NOW)


def _cmd(**overrides):
    values = dict(
        rental_id="rental-1",
        subject_id="subject-1",
        tenant_party_id="party-1",
        org_id="org-1",
        created_by_account_id="account-1",
    )
    values.update(overrides)
    return EstablishRentalCmd(**values)


def _apply_all(rental, events):
    for event in events:
        rental.apply(event.event_type, event.payload)


class _Checker:
    def __init__(self, exists=False, error=None):
        self.exists = exists
        self.error = error

    def exists_by_subject_and_tenant(self, subject_id, tenant_party_id):
        if self.error is not None:
            raise self.error
        return self.exists


def test_establish_rental_success():
    events = Rental(CLOCK).establish_rental(_cmd())
    assert len(events) == 1
    assert events[0].event_type == EVENT_RENTAL_ESTABLISHED
    payload = events[0].payload
    assert payload == RentalEstablished(
        rental_id="rental-1",
        subject_id="subject-1",
        tenant_party_id="party-1",
        org_id="org-1",
        created_by_account_id="account-1",
        established_at=NOW,
    )


def test_establish_rental_already_established():
    rental = Rental(CLOCK)
    _apply_all(rental, rental.establish_rental(_cmd()))
    with pytest.raises(AlreadyEstablishedError):
        rental.establish_rental(
            _cmd(rental_id="rental-2", subject_id="subject-2", tenant_party_id="party-2")
        )


def test_apply_rental_established():
    rental = Rental(CLOCK)
    _apply_all(rental, rental.establish_rental(_cmd()))
    assert rental.id == "rental-1"
    assert rental.subject_id == "subject-1"
    assert rental.tenant_party_id == "party-1"
    assert rental.org_id == "org-1"
    assert rental.created_by_account_id == "account-1"
    assert rental.established is True
    assert rental.version == 1


def test_apply_unknown_event_type():
    rental = Rental(CLOCK)
    with pytest.raises(ValueError):
        rental.apply("rental.Unknown.v1", {})
    assert rental.version == 0


def test_to_dict_values():
    payload = Rental(CLOCK).establish_rental(_cmd())[0].payload
    assert payload.to_dict() == {
        "rental_id": "rental-1",
        "subject_id": "subject-1",
        "tenant_party_id": "party-1",
        "org_id": "org-1",
        "created_by_account_id": "account-1",
        "established_at": "2025-01-15T10:00:00+00:00",
    }


def test_deserialize_rental_established():
    events = Rental(CLOCK).establish_rental(_cmd())
    raw = json.dumps(events[0].payload.to_dict())
    got = deserialize_event(EVENT_RENTAL_ESTABLISHED, raw)
    assert isinstance(got, RentalEstablished)
    assert got.rental_id == "rental-1"
    assert got.subject_id == "subject-1"
    assert got.tenant_party_id == "party-1"
    assert got.org_id == "org-1"
    assert got.created_by_account_id == "account-1"
    assert got.established_at == NOW


def test_deserialize_accepts_go_style_timestamp():
    raw = b'{"rental_id":"r","established_at":"2025-01-15T10:00:00Z"}'
    got = deserialize_event(EVENT_RENTAL_ESTABLISHED, raw)
    assert got.rental_id == "r"
    assert got.established_at == NOW


def test_deserialize_unknown_type():
    with pytest.raises(ValueError):
        deserialize_event("rental.Unknown.v1", "{}")


def test_deserialize_malformed_json():
    with pytest.raises(ValueError):
        deserialize_event(EVENT_RENTAL_ESTABLISHED, "{not json")


def test_deserialize_roundtrip_apply_consistency():
    first = Rental(CLOCK)
    events = first.establish_rental(_cmd())
    _apply_all(first, events)

    raw = json.dumps(events[0].payload.to_dict())
    second = Rental(CLOCK)
    second.apply(events[0].event_type, deserialize_event(events[0].event_type, raw))

    assert first == second
    assert (first.id, first.version) == (second.id, second.version)


def test_establish_new_rental_success():
    events = establish_new_rental(_Checker(exists=False), CLOCK, _cmd())
    assert len(events) == 1
    assert events[0].event_type == EVENT_RENTAL_ESTABLISHED
    payload = events[0].payload
    assert payload.rental_id == "rental-1"
    assert payload.subject_id == "subject-1"
    assert payload.tenant_party_id == "party-1"


def test_establish_new_rental_duplicate():
    with pytest.raises(DuplicateRentalError):
        establish_new_rental(_Checker(exists=True), CLOCK, _cmd())


def test_establish_new_rental_checker_error():
    failure = ConnectionError("db connection failed")
    with pytest.raises(ConnectionError) as info:
        establish_new_rental(_Checker(error=failure), CLOCK, _cmd())
    assert info.value is failure