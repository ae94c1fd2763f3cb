"""Unit tests for pass issuance, verification and check-in."""

import itertools

import pytest

from venue.models import (
    BookingError,
    BookingStatus,
    CheckInStatus,
    ErrorCode,
    PassIssuanceError,
)
from venue.services.pass_service import PassService


@pytest.fixture
def confirmed_event_booking(pending_event_booking, dynamodb_table):
    dynamodb_table("bookings").update_item(
        Key={"booking_id": pending_event_booking.booking_id},
        UpdateExpression="SET #s = :confirmed",
        ExpressionAttributeNames={"#s": "status"},
        ExpressionAttributeValues={":confirmed": "CONFIRMED"},
    )
    return pending_event_booking.model_copy(update={"status": BookingStatus.CONFIRMED})


def _fixed_ids(*ids):
    source = itertools.chain(ids, itertools.repeat(ids[-1]))
    return lambda: next(source)


class TestIssuePass:
    def test_issues_and_links_pass(self, pass_service, booking_service, confirmed_event_booking):
        event_pass = pass_service.issue_pass(confirmed_event_booking)

        assert event_pass.booking_id == confirmed_event_booking.booking_id
        assert event_pass.event_id == confirmed_event_booking.event_id
        assert event_pass.check_in_status is CheckInStatus.NOT_CHECKED_IN
        stored = booking_service.get_booking(confirmed_event_booking.booking_id)
        assert stored.pass_id == event_pass.pass_id
        assert pass_service.get_pass_for_booking(stored.booking_id) == event_pass

    def test_second_issue_returns_same_pass(self, pass_service, booking_service, confirmed_event_booking):
        first = pass_service.issue_pass(confirmed_event_booking)
        # Stale copy without pass_id, as a concurrent worker would hold
        second = pass_service.issue_pass(confirmed_event_booking)

        assert second == first

    def test_identifier_collision_retried(self, db, booking_service, catalog_service, confirmed_event_booking, dynamodb_table):
        dynamodb_table("passes").put_item(
            Item={
                "pass_id": "OSS-EV-AAAAAAAA",
                "booking_id": "someone-else",
                "event_id": confirmed_event_booking.event_id,
                "check_in_status": "NOT_CHECKED_IN",
                "created_at": "2026-01-01T00:00:00+00:00",
            }
        )
        service = PassService(
            db,
            booking_service,
            catalog=catalog_service,
            id_generator=_fixed_ids("OSS-EV-AAAAAAAA", "OSS-EV-BBBBBBBB"),
        )

        event_pass = service.issue_pass(confirmed_event_booking)

        assert event_pass.pass_id == "OSS-EV-BBBBBBBB"

    def test_exhaustion_raises(self, db, booking_service, catalog_service, confirmed_event_booking, dynamodb_table):
        dynamodb_table("passes").put_item(
            Item={
                "pass_id": "OSS-EV-AAAAAAAA",
                "booking_id": "someone-else",
                "event_id": confirmed_event_booking.event_id,
                "check_in_status": "NOT_CHECKED_IN",
                "created_at": "2026-01-01T00:00:00+00:00",
            }
        )
        calls = []

        def always_colliding():
            calls.append(1)
            return "OSS-EV-AAAAAAAA"

        service = PassService(
            db, booking_service, catalog=catalog_service, id_generator=always_colliding
        )

        with pytest.raises(PassIssuanceError) as exc_info:
            service.issue_pass(confirmed_event_booking)

        assert exc_info.value.attempts == PassService.MAX_ATTEMPTS
        assert len(calls) == PassService.MAX_ATTEMPTS
        assert booking_service.get_booking(confirmed_event_booking.booking_id).pass_id is None


class TestVerifyPass:
    def test_known_pass(self, pass_service, confirmed_event_booking, sample_event):
        event_pass = pass_service.issue_pass(confirmed_event_booking)

        result = pass_service.verify_pass(f"  {event_pass.pass_id.lower()} ")

        assert result.valid
        assert result.event_pass == event_pass
        assert result.event.title == sample_event["title"]
        assert result.attendee_name == "Asha Rao"
        assert result.booking_status is BookingStatus.CONFIRMED

    def test_unknown_pass_is_invalid(self, pass_service, aws_mock):
        result = pass_service.verify_pass("OSS-EV-ZZZZZZZZ")
        assert not result.valid
        assert result.event_pass is None

    @pytest.mark.parametrize("pass_id", [None, "", "   "])
    def test_missing_pass_id(self, pass_service, aws_mock, pass_id):
        with pytest.raises(BookingError) as exc_info:
            pass_service.verify_pass(pass_id)
        assert exc_info.value.message == "passId is required"

    def test_verification_does_not_check_in(self, pass_service, confirmed_event_booking):
        event_pass = pass_service.issue_pass(confirmed_event_booking)
        pass_service.verify_pass(event_pass.pass_id)
        pass_service.verify_pass(event_pass.pass_id)
        assert pass_service.get_pass(event_pass.pass_id) == event_pass


class TestCheckIn:
    def test_first_check_in(self, pass_service, confirmed_event_booking):
        event_pass = pass_service.issue_pass(confirmed_event_booking)

        result = pass_service.check_in(event_pass.pass_id, "staff-1")

        assert not result.already_checked_in
        assert result.event_pass.check_in_status is CheckInStatus.CHECKED_IN
        assert result.event_pass.checked_in_by == "staff-1"
        assert result.event_pass.check_in_time is not None

    def test_second_check_in_reported(self, pass_service, confirmed_event_booking):
        event_pass = pass_service.issue_pass(confirmed_event_booking)
        pass_service.check_in(event_pass.pass_id, "staff-1")

        result = pass_service.check_in(event_pass.pass_id, "staff-2")

        assert result.already_checked_in
        assert result.event_pass.checked_in_by == "staff-1"

    def test_unconfirmed_booking_rejected(self, pass_service, confirmed_event_booking, dynamodb_table):
        event_pass = pass_service.issue_pass(confirmed_event_booking)
        dynamodb_table("bookings").update_item(
            Key={"booking_id": confirmed_event_booking.booking_id},
            UpdateExpression="SET #s = :cancelled",
            ExpressionAttributeNames={"#s": "status"},
            ExpressionAttributeValues={":cancelled": "CANCELLED"},
        )

        with pytest.raises(BookingError) as exc_info:
            pass_service.check_in(event_pass.pass_id, "staff-1")

        assert exc_info.value.message == "Cannot check in - booking status is CANCELLED"

    def test_unknown_pass(self, pass_service, aws_mock):
        with pytest.raises(BookingError) as exc_info:
            pass_service.check_in("OSS-EV-ZZZZZZZZ", "staff-1")
        assert exc_info.value.code is ErrorCode.NOT_FOUND
