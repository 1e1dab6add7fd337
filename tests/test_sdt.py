"""
SDT Planner Tests
=================
Tests for translating maintenance windows into set*SDT parameters.
"""

from datetime import datetime, timedelta, timezone

import pytest
from structlog.testing import capture_logs

from logicmonitor_rpc.errors import (
    UnsupportedEntityError,
    UnsupportedRecurrenceError,
    ValidationError,
)
from logicmonitor_rpc.sdt import (
    ENTITY_RULES,
    EntityKind,
    RecurrenceType,
    SDTWindowPlanner,
    coerce_entity_kind,
    parse_time,
)


@pytest.fixture
def planner() -> SDTWindowPlanner:
    return SDTWindowPlanner()


class TestEntityRules:
    """Tests for the entity kind table."""

    @pytest.mark.parametrize("kind", list(EntityKind))
    def test_every_kind_has_rule(self, kind: EntityKind):
        """Test method and id key follow set{Kind}SDT / {kind}Id."""
        rule = ENTITY_RULES[kind]

        assert rule.method == f"set{kind.value}SDT"
        assert rule.id_key == kind.value[0].lower() + kind.value[1:] + "Id"

    def test_only_host_accepts_names(self):
        named = [kind for kind, rule in ENTITY_RULES.items() if rule.name_key]

        assert named == [EntityKind.HOST]

    def test_coerce_case_insensitive(self):
        assert coerce_entity_kind("hostgroup") is EntityKind.HOST_GROUP
        assert coerce_entity_kind(EntityKind.AGENT) is EntityKind.AGENT

    def test_coerce_unknown(self):
        with pytest.raises(UnsupportedEntityError):
            coerce_entity_kind("Website")


class TestPlan:
    """Tests for SDTWindowPlanner.plan."""

    def test_host_by_name(self, planner: SDTWindowPlanner):
        """Test a host display name window with zero-based months."""
        plan = planner.plan(
            EntityKind.HOST,
            "web01",
            start=datetime(2024, 1, 5, 10, 0),
            end=datetime(2024, 1, 5, 13, 50),
        )

        assert plan.method == "setHostSDT"
        assert plan.params == {
            "host": "web01",
            "type": 1,
            "year": 2024,
            "month": 0,
            "day": 5,
            "hour": 10,
            "minute": 0,
            "endYear": 2024,
            "endMonth": 0,
            "endDay": 5,
            "endHour": 13,
            "endMinute": 50,
        }

    def test_numeric_id(self, planner: SDTWindowPlanner):
        plan = planner.plan("HostGroup", "456", "2024-03-01T00:00", "2024-03-02T00:00")

        assert plan.method == "setHostGroupSDT"
        assert plan.params["hostGroupId"] == "456"
        assert "host" not in plan.params

    def test_numeric_host_uses_host_id(self, planner: SDTWindowPlanner):
        plan = planner.plan("Host", 42, "2024-03-01T00:00", "2024-03-02T00:00")

        assert plan.params["hostId"] == "42"

    def test_non_numeric_for_other_kind(self, planner: SDTWindowPlanner):
        with pytest.raises(UnsupportedEntityError):
            planner.plan("HostGroup", "notanumber", "2024-03-01T00:00", "2024-03-02T00:00")

    def test_non_ascii_digits_are_not_numeric(self, planner: SDTWindowPlanner):
        """Test full-width digits don't count as a numeric id."""
        with pytest.raises(UnsupportedEntityError):
            planner.plan("HostGroup", "４５６", "2024-03-01T00:00", "2024-03-02T00:00")

        plan = planner.plan("Host", "４５６", "2024-03-01T00:00", "2024-03-02T00:00")
        assert "hostId" not in plan.params
        assert plan.params["host"] == "４５６"

    def test_recurrence_enum_accepted(self, planner: SDTWindowPlanner):
        plan = planner.plan("Host", "1", "2024-01-05T10:00", "2024-01-05T11:00", recurrence=RecurrenceType.ONE_TIME)

        assert plan.params["type"] == 1

    def test_iso_strings(self, planner: SDTWindowPlanner):
        """Test ISO-8601 strings are parsed, December becomes 11."""
        plan = planner.plan("Agent", "9", "2024-12-31T23:15:00Z", "2025-01-01T01:30:00Z")

        assert plan.method == "setAgentSDT"
        assert plan.params["agentId"] == "9"
        assert (plan.params["year"], plan.params["month"], plan.params["day"]) == (2024, 11, 31)
        assert (plan.params["endYear"], plan.params["endMonth"], plan.params["endDay"]) == (2025, 0, 1)
        assert (plan.params["hour"], plan.params["minute"]) == (23, 15)

    def test_comment_included_when_given(self, planner: SDTWindowPlanner):
        plan = planner.plan("Host", "web01", "2024-01-05T10:00", "2024-01-05T11:00", comment="patching")

        assert plan.params["comment"] == "patching"

    @pytest.mark.parametrize("comment", [None, ""])
    def test_comment_absent_otherwise(self, planner: SDTWindowPlanner, comment):
        plan = planner.plan("Host", "web01", "2024-01-05T10:00", "2024-01-05T11:00", comment=comment)

        assert "comment" not in plan.params

    @pytest.mark.parametrize("recurrence", [2, 3, 0, "weekly", "1", 1.5, True])
    def test_only_one_time(self, planner: SDTWindowPlanner, recurrence):
        with pytest.raises(UnsupportedRecurrenceError):
            planner.plan("Host", "1", "2024-01-05T10:00", "2024-01-05T11:00", recurrence=recurrence)

    def test_bad_time(self, planner: SDTWindowPlanner):
        with pytest.raises(ValidationError):
            planner.plan("Host", "1", "yesterday", "2024-01-05T11:00")

    def test_missing_id(self, planner: SDTWindowPlanner):
        with pytest.raises(ValidationError):
            planner.plan("Host", "", "2024-01-05T10:00", "2024-01-05T11:00")

    def test_end_before_start_permitted(self, planner: SDTWindowPlanner):
        """Test reversed windows are passed through with a warning."""
        with capture_logs() as logs:
            plan = planner.plan("Host", "1", "2024-01-05T10:00", "2024-01-05T09:00")

        assert plan.params["endHour"] == 9
        assert any(entry["log_level"] == "warning" for entry in logs)

    def test_plan_is_deterministic(self, planner: SDTWindowPlanner):
        args = ("Host", "web01", "2024-01-05T10:00", "2024-01-05T13:50")

        first, second = planner.plan(*args), planner.plan(*args)

        assert first == second
        assert list(first.params.items()) == list(second.params.items())


class TestPlanDuration:
    """Tests for the duration convenience."""

    NOW = datetime(2024, 1, 31, 23, 30, tzinfo=timezone.utc)

    def test_hours(self, planner: SDTWindowPlanner):
        """Test end is start plus the duration, across a month boundary."""
        plan = planner.plan_duration("Host", "web01", now=self.NOW, hours=2)

        assert (plan.params["month"], plan.params["day"], plan.params["hour"]) == (0, 31, 23)
        assert (plan.params["endMonth"], plan.params["endDay"], plan.params["endHour"]) == (1, 1, 1)
        assert plan.params["endMinute"] == 30

    def test_minutes(self, planner: SDTWindowPlanner):
        plan = planner.plan_duration("Host", "web01", now=self.NOW, minutes=45)

        end = self.NOW + timedelta(minutes=45)
        assert (plan.params["endHour"], plan.params["endMinute"]) == (end.hour, end.minute)

    def test_defaults_to_utc_now(self, planner: SDTWindowPlanner):
        before = datetime.now(timezone.utc)
        plan = planner.plan_duration("Host", "web01", days=1)

        assert plan.params["year"] >= before.year

    def test_more_than_one_unit(self, planner: SDTWindowPlanner):
        with pytest.raises(ValidationError):
            planner.plan_duration("Host", "web01", hours=1, minutes=30)

    def test_no_unit(self, planner: SDTWindowPlanner):
        with pytest.raises(ValidationError):
            planner.plan_duration("Host", "web01")

    def test_unknown_unit(self, planner: SDTWindowPlanner):
        with pytest.raises(ValidationError):
            planner.plan_duration("Host", "web01", fortnights=1)

    def test_non_positive(self, planner: SDTWindowPlanner):
        with pytest.raises(ValidationError):
            planner.plan_duration("Host", "web01", hours=0)


class TestParseTime:
    def test_datetime_passthrough(self):
        moment = datetime(2024, 1, 1)

        assert parse_time(moment) is moment

    def test_wrong_type(self):
        with pytest.raises(ValidationError):
            parse_time(1700000000)  # type: ignore[arg-type]
