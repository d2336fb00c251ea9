"""
Unit tests for driver removal execution and impact assessment.
"""

from datetime import datetime, timezone

import pytest

from carpool.config import RemovalConfig
from carpool.core.models import NotificationKind, ParticipantRole, TripLeg
from carpool.core.removal import (
    RemovalExecutor,
    assess_removal_impact,
    execute_driver_removal,
)
from carpool.core.timing import EMERGENCY_WARNING, HIGH_IMPACT_WARNING
from carpool.exceptions import ParticipantNotFoundError

ORGANIZER = "organizer@example.com"
EXECUTED_AT = datetime(2025, 2, 13, 8, 0, tzinfo=timezone.utc)


def kinds(result):
    return [n.kind for n in result.notifications]


class TestDisbandment:
    """Test removals that leave the carpool without a driver."""

    def test_removing_only_driver_disbands(self, one_driver_carpool, event, driver_a, passenger):
        """Test 1 driver / 1 passenger: one disband notice for the passenger."""
        result = execute_driver_removal(
            one_driver_carpool, event, driver_a.participant_id, ORGANIZER, "Car broke down"
        )

        assert result.disbanded is True
        assert result.updated_carpool is None
        assert kinds(result) == [NotificationKind.CARPOOL_DISBANDED]
        notice = result.notifications[0]
        assert notice.recipient_id == passenger.participant_id
        assert "has been disbanded" in notice.message
        assert "Reason: Car broke down" in notice.message

    def test_removing_last_participant_disbands_without_notices(
        self, make_carpool, event, driver_a
    ):
        """Test removing the only participant yields no notifications."""
        carpool = make_carpool(driver_a)

        result = execute_driver_removal(carpool, event, driver_a.participant_id, ORGANIZER, "Left")

        assert result.disbanded is True
        assert result.updated_carpool is None
        assert result.notifications == ()

    def test_disband_notifies_every_remaining_participant(
        self, make_participant, make_carpool, event, driver_a
    ):
        """Test one disband notice per remaining participant, not to the target."""
        riders = [make_participant(str(i), ParticipantRole.PASSENGER) for i in (5, 6, 7)]
        carpool = make_carpool(driver_a, *riders, max_capacity=5)

        result = execute_driver_removal(carpool, event, driver_a.participant_id, ORGANIZER, "Sick")

        assert kinds(result) == [NotificationKind.CARPOOL_DISBANDED] * 3
        assert [n.recipient_id for n in result.notifications] == ["5", "6", "7"]


class TestPartialRemoval:
    """Test removals that leave at least one driver."""

    def test_two_drivers_one_passenger(self, two_driver_carpool, event, driver_a, driver_b, passenger):
        """Test notices go to the target and everyone except the remover."""
        result = execute_driver_removal(
            two_driver_carpool, event, driver_b.participant_id, driver_b.email, "Schedule change"
        )

        assert result.disbanded is False
        assert len(result.updated_carpool.participants) == 2
        assert result.updated_carpool.find_participant(driver_b.participant_id) is None
        assert kinds(result) == [NotificationKind.DRIVER_REMOVED] * 3
        assert [n.recipient_id for n in result.notifications] == [
            driver_b.participant_id,
            driver_a.participant_id,
            passenger.participant_id,
        ]

    def test_remover_among_remaining_is_not_notified(
        self, two_driver_carpool, event, driver_a, driver_b, passenger
    ):
        """Test a remaining participant who performed the removal gets no notice."""
        result = execute_driver_removal(
            two_driver_carpool, event, driver_b.participant_id, driver_a.email, "Schedule change"
        )

        assert len(result.notifications) == 2
        assert [n.recipient_id for n in result.notifications] == [
            driver_b.participant_id,
            passenger.participant_id,
        ]

    def test_organizer_outside_carpool_notifies_all_remaining(
        self, two_driver_carpool, event, driver_b
    ):
        result = execute_driver_removal(
            two_driver_carpool, event, driver_b.participant_id, ORGANIZER, "No show"
        )

        assert len(result.notifications) == 3

    def test_messages(self, two_driver_carpool, event, driver_b):
        result = execute_driver_removal(
            two_driver_carpool, event, driver_b.participant_id, ORGANIZER, "No show"
        )

        target_notice, *others = result.notifications
        assert target_notice.message == (
            'You have been removed as a driver from the carpool "Downtown Carpool" '
            "for Tech Conference 2025. Reason: No show"
        )
        for notice in others:
            assert notice.message == (
                'Driver Person 2 has been removed from your carpool "Downtown Carpool" '
                "for Tech Conference 2025. Other drivers are still available."
            )

    def test_other_fields_are_unchanged(self, two_driver_carpool, event, driver_b):
        result = execute_driver_removal(
            two_driver_carpool, event, driver_b.participant_id, ORGANIZER, "No show"
        )

        updated = result.updated_carpool
        assert updated.carpool_id == two_driver_carpool.carpool_id
        assert updated.max_capacity == two_driver_carpool.max_capacity
        assert updated.created_by == two_driver_carpool.created_by
        assert len(two_driver_carpool.participants) == 3


class TestNotificationProperties:
    """Test properties shared by all notifications of a call."""

    def test_ids_are_unique_and_timestamps_shared(self, two_driver_carpool, event, driver_b):
        executor = RemovalExecutor()

        result = executor.execute(
            two_driver_carpool, event, driver_b.participant_id, ORGANIZER, "No show",
            now=EXECUTED_AT,
        )

        ids = [n.notification_id for n in result.notifications]
        assert len(set(ids)) == len(ids)
        assert {n.timestamp for n in result.notifications} == {"2025-02-13T08:00:00Z"}
        assert all(n.read is False for n in result.notifications)
        assert {n.carpool_id for n in result.notifications} == {"cp-1"}
        assert {n.event_id for n in result.notifications} == {"evt-1"}

    def test_naive_time_is_stamped_in_utc(self, two_driver_carpool, event, driver_b, now):
        result = RemovalExecutor().execute(
            two_driver_carpool, event, driver_b.participant_id, ORGANIZER, "No show",
            now=now,
        )

        expected = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        assert {n.timestamp for n in result.notifications} == {expected}


class TestErrors:
    """Test executor error handling."""

    def test_unknown_target_raises(self, two_driver_carpool, event):
        with pytest.raises(ParticipantNotFoundError) as exc_info:
            execute_driver_removal(two_driver_carpool, event, "missing", ORGANIZER, "No show")

        assert exc_info.value.participant_id == "missing"
        assert exc_info.value.carpool_id == "cp-1"

    @pytest.mark.parametrize("reason", ["", "   "])
    def test_empty_reason_raises(self, two_driver_carpool, event, driver_b, reason):
        with pytest.raises(ValueError):
            execute_driver_removal(
                two_driver_carpool, event, driver_b.participant_id, ORGANIZER, reason
            )


class TestDegradePolicy:
    """Test the policy that keeps driverless carpools alive."""

    @pytest.fixture
    def executor(self):
        return RemovalExecutor(RemovalConfig(disband_without_driver=False))

    def test_last_driver_removal_degrades(self, executor, one_driver_carpool, event, driver_a, passenger):
        """Test passengers are told a new driver is needed."""
        result = executor.execute(
            one_driver_carpool, event, driver_a.participant_id, ORGANIZER, "Car broke down"
        )

        assert result.disbanded is False
        assert result.updated_carpool.participants == (passenger,)
        assert kinds(result) == [
            NotificationKind.DRIVER_REMOVED,
            NotificationKind.DRIVER_REMOVED,
            NotificationKind.DRIVER_NEEDED,
        ]
        assert result.notifications[1].message.endswith("A new driver is needed.")
        assert result.notifications[2].message.startswith("URGENT:")
        assert result.notifications[2].recipient_id == passenger.participant_id

    def test_last_participant_still_disbands(self, executor, make_carpool, event, driver_a):
        carpool = make_carpool(driver_a)

        result = executor.execute(carpool, event, driver_a.participant_id, ORGANIZER, "Left")

        assert result.disbanded is True


class TestImpactAssessment:
    """Test the pre-confirmation impact summary."""

    def test_impact_of_removing_only_driver(self, one_driver_carpool, event, driver_a, now):
        impact = assess_removal_impact(one_driver_carpool, event, driver_a, now)

        assert impact.remaining_drivers == 0
        assert impact.affected_passengers == 1
        assert impact.will_disband is True
        assert impact.uncovered_legs == {TripLeg.TO_EVENT, TripLeg.FROM_EVENT}
        assert impact.hours_until_event == pytest.approx(48)
        assert impact.time_sensitivity is None

    def test_impact_reports_uncovered_leg(self, make_participant, make_carpool, event, passenger, now):
        """Test removing the drive-from driver leaves the return leg uncovered."""
        to_driver = make_participant("1", ParticipantRole.DRIVE_TO)
        from_driver = make_participant("2", ParticipantRole.DRIVE_FROM)
        carpool = make_carpool(to_driver, from_driver, passenger)

        impact = assess_removal_impact(carpool, event, from_driver, now)

        assert impact.will_disband is False
        assert impact.uncovered_legs == {TripLeg.FROM_EVENT}

    @pytest.mark.parametrize("hours,warning", [
        (23, HIGH_IMPACT_WARNING),
        (1, EMERGENCY_WARNING),
        (30, None),
    ])
    def test_time_sensitivity(self, make_event, two_driver_carpool, driver_b, now, hours, warning):
        impact = assess_removal_impact(two_driver_carpool, make_event(hours), driver_b, now)

        assert impact.time_sensitivity == warning

    def test_will_disband_matches_execution(self, one_driver_carpool, event, driver_a, now):
        for config in (RemovalConfig(), RemovalConfig(disband_without_driver=False)):
            executor = RemovalExecutor(config)
            impact = executor.assess_impact(one_driver_carpool, event, driver_a, now)
            result = executor.execute(
                one_driver_carpool, event, driver_a.participant_id, ORGANIZER, "Test"
            )
            assert impact.will_disband == result.disbanded

    def test_unknown_target_raises(self, one_driver_carpool, event, make_participant, now):
        stranger = make_participant("99", ParticipantRole.DRIVE_BOTH)

        with pytest.raises(ParticipantNotFoundError):
            assess_removal_impact(one_driver_carpool, event, stranger, now)

    def test_to_dict(self, one_driver_carpool, event, driver_a, now):
        data = assess_removal_impact(one_driver_carpool, event, driver_a, now).to_dict()

        assert data["uncovered_legs"] == ["from-event", "to-event"]
        assert data["hours_until_event"] == 48.0
