"""Unit tests for person status normalization."""

import pytest

from people.domain.status import (
    LegacyStatusField,
    NoStatusFields,
    PersonStatus,
    SplitStatusFields,
    classify_status_fields,
    normalize_status,
)


class TestClassifyStatusFields:
    """Tests for deciding a row's schema generation."""

    def test_split_fields(self):
        row = {"employment_status": "active", "associate_status": None}

        assert classify_status_fields(row) == SplitStatusFields("active", None)

    def test_associate_only_is_split(self):
        row = {"employment_status": None, "associate_status": "consultant"}

        assert classify_status_fields(row) == SplitStatusFields(None, "consultant")

    def test_legacy_field(self):
        assert classify_status_fields({"status": "previous"}) == LegacyStatusField(
            "previous"
        )

    def test_unrecognised_employment_status_defers_to_legacy(self):
        row = {"employment_status": "terminated", "status": "active"}

        assert classify_status_fields(row) == LegacyStatusField("active")

    def test_no_fields(self):
        row = {"employment_status": None, "associate_status": "", "status": None}

        assert classify_status_fields(row) == NoStatusFields()


class TestNormalizeStatus:
    """Tests for the canonical status resolution order."""

    @pytest.mark.parametrize(
        "row,expected",
        [
            ({"employment_status": "active"}, PersonStatus.ACTIVE),
            ({"employment_status": "former"}, PersonStatus.PREVIOUS),
            ({"employment_status": "future"}, PersonStatus.FUTURE),
            ({"associate_status": "board_member"}, PersonStatus.OTHER),
            ({"status": "active"}, PersonStatus.ACTIVE),
            ({"status": "offboarded"}, PersonStatus.PREVIOUS),
            ({"status": "future"}, PersonStatus.FUTURE),
            ({"status": "on_leave"}, PersonStatus.OTHER),
            ({"employment_status": "terminated"}, PersonStatus.OTHER),
            ({}, PersonStatus.OTHER),
        ],
    )
    def test_resolution(self, row, expected):
        assert normalize_status(row) == expected

    def test_employment_status_wins_over_associate_status(self):
        row = {"employment_status": "active", "associate_status": "advisor"}

        assert normalize_status(row) == PersonStatus.ACTIVE

    def test_split_fields_win_over_legacy_status(self):
        """Rows migrated in place keep a stale legacy column; it is ignored."""
        row = {"employment_status": "former", "status": "active"}

        assert normalize_status(row) == PersonStatus.PREVIOUS

    def test_associate_wins_over_legacy_status(self):
        row = {"associate_status": "consultant", "status": "active"}

        assert normalize_status(row) == PersonStatus.OTHER
