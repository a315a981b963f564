"""Unit tests for war payload parsing."""

from datetime import datetime, timezone

import pytest

from integrations.pnw.parsing import normalize_alliance_id, parse_date, parse_war
from modules.war_alerts.exceptions import ParseError
from modules.war_alerts.models import (
    NO_REASON,
    UNKNOWN_LEADER,
    UNKNOWN_NATION,
    UNKNOWN_WAR_TYPE,
)


@pytest.mark.unit
class TestNormalizeAllianceId:
    @pytest.mark.parametrize("value", [None, "", "0", 0, "  "])
    def test_no_alliance(self, value):
        assert normalize_alliance_id(value) is None

    def test_numeric_id(self):
        assert normalize_alliance_id(790) == "790"


@pytest.mark.unit
class TestParseDate:
    def test_zulu_suffix(self):
        assert parse_date("2025-01-01T12:00:00Z") == datetime(
            2025, 1, 1, 12, 0, tzinfo=timezone.utc
        )

    @pytest.mark.parametrize("value", [None, "", "yesterday", 123])
    def test_invalid(self, value):
        assert parse_date(value) is None


@pytest.mark.unit
class TestParseWar:
    """Tests for parse_war."""

    def test_full_payload(self, war_payload):
        event = parse_war(war_payload(id="105", def_alliance_id="800"))

        assert event.id == "105"
        assert event.category == "RAID"
        assert event.reason == "Raiding"
        assert event.date == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert event.side_a.actor_id == "11"
        assert event.side_a.tenant_external_id == "790"
        assert event.side_a.tenant_name == "Rose"
        assert event.side_a.tenant_acronym == "RS"
        assert event.side_b.name == "Defender Nation"
        assert event.side_b.tenant_external_id == "800"
        assert event.side_b.tenant_name is None

    def test_defaults_for_missing_fields(self):
        event = parse_war({"id": 7})

        assert event.id == "7"
        assert event.date is None
        assert event.category == UNKNOWN_WAR_TYPE
        assert event.reason == NO_REASON
        assert event.side_a.name == UNKNOWN_NATION
        assert event.side_a.leader_name == UNKNOWN_LEADER
        assert event.side_a.tenant_external_id is None

    def test_alliance_from_nested_nation(self):
        event = parse_war(
            {
                "id": "8",
                "defender": {"id": "22", "alliance": {"id": "800", "name": "Eclipse"}},
            }
        )

        assert event.side_b.tenant_external_id == "800"
        assert event.side_b.actor_id == "22"

    def test_zero_alliance_is_none(self, war_payload):
        event = parse_war(war_payload(att_alliance_id="0", def_alliance_id="0"))

        assert event.side_b.tenant_external_id is None

    @pytest.mark.parametrize("payload", [{}, {"id": ""}, {"id": None}, [], "105"])
    def test_invalid_payload_raises(self, payload):
        with pytest.raises(ParseError):
            parse_war(payload)
