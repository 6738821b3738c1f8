"""
Tests for the Typer command line interface, run against mock calendar data.
"""

import json

import pytest
from typer.testing import CliRunner

from availabilityfinder import __version__
from availabilityfinder.cli.app import app

runner = CliRunner()

CONFIG_YAML = """
timezone: Europe/Berlin
defaults:
  duration_minutes: 30
participants:
  - name: alice
    email: alice@example.com
    calendar_id: alice
  - name: bob
    email: bob@example.com
    calendar_id: bob
  - name: carol
    email: carol@example.com
    calendar_id: carol
"""

MOCK_DATA = {
    "events": [
        {"calendarId": "alice", "start": "2024-11-25T09:00:00", "end": "2024-11-25T09:30:00"},
        {"calendarId": "alice", "start": "2024-11-25T13:00:00", "end": "2024-11-25T14:30:00"},
        {"calendarId": "bob", "start": "2024-11-25T10:00:00", "end": "2024-11-25T11:00:00"},
    ],
    "unavailable": ["carol"],
}


@pytest.fixture
def files(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(CONFIG_YAML, encoding="utf-8")
    mock_file = tmp_path / "calendar.json"
    mock_file.write_text(json.dumps(MOCK_DATA), encoding="utf-8")
    return config_file, mock_file


def _invoke(files, *args):
    config_file, mock_file = files
    return runner.invoke(
        app,
        [*args, "--config", str(config_file), "--mock-data", str(mock_file)],
    )


class TestFind:
    def test_json_output(self, files):
        result = _invoke(
            files, "find", "alice", "bob",
            "--start", "2024-11-25", "--end", "2024-11-25", "--duration", "30", "--json",
        )

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert sorted((s["startTime"], s["endTime"]) for s in payload) == [
            ("2024-11-25T09:30:00+01:00", "2024-11-25T10:00:00+01:00"),
            ("2024-11-25T11:00:00+01:00", "2024-11-25T13:00:00+01:00"),
            ("2024-11-25T14:30:00+01:00", "2024-11-25T17:00:00+01:00"),
        ]
        assert all(not s["isMultiDay"] for s in payload)

    def test_table_output(self, files):
        result = _invoke(
            files, "find", "alice", "--start", "2024-11-26", "--end", "2024-11-26", "--duration", "60",
        )

        assert result.exit_code == 0, result.output
        assert "2024-11-26" in result.output
        assert "1 available time slot(s)" in result.output

    def test_top_limits_results(self, files):
        result = _invoke(
            files, "find", "alice", "bob",
            "--start", "2024-11-25", "--end", "2024-11-25", "--top", "1", "--json",
        )

        assert result.exit_code == 0, result.output
        assert len(json.loads(result.stdout)) == 1

    def test_request_file(self, files, tmp_path):
        request_file = tmp_path / "request.json"
        request_file.write_text(json.dumps({
            "startDate": "2024-11-25",
            "endDate": "2024-11-27",
            "minimumDurationMinutes": 60,
            "consecutiveDaysRequired": 2,
        }), encoding="utf-8")

        result = _invoke(files, "find", "bob", "--request", str(request_file), "--json")

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        # Monday is broken up by a meeting, Tuesday and Wednesday are free
        assert payload == [
            {
                "startTime": "2024-11-26T09:00:00+01:00",
                "endTime": "2024-11-27T17:00:00+01:00",
                "durationMinutes": 1920,
                "confidenceScore": payload[0]["confidenceScore"],
                "isMultiDay": True,
                "degradedConfidence": False,
            }
        ]

    def test_request_file_with_duration_instead_of_date(self, files, tmp_path):
        request_file = tmp_path / "request.json"
        request_file.write_text(json.dumps({
            "startDate": "P1D",
            "endDate": "2024-11-27",
            "minimumDurationMinutes": 60,
        }), encoding="utf-8")

        result = _invoke(files, "find", "bob", "--request", str(request_file), "--json")

        assert result.exit_code == 1
        assert "P1D" in result.output

    def test_invalid_duration(self, files):
        result = _invoke(files, "find", "alice", "--start", "2024-11-25", "--duration", "0")

        assert result.exit_code == 1
        assert "Minimum duration" in result.output

    def test_unknown_participant(self, files):
        result = _invoke(files, "find", "mallory", "--start", "2024-11-25")

        assert result.exit_code == 1
        assert "mallory" in result.output


class TestCommon:
    def test_unavailable_participant_yields_no_slots(self, files):
        result = _invoke(
            files, "common", "alice", "carol", "--start", "2024-11-25", "--end", "2024-11-29", "--json",
        )

        assert result.exit_code == 0, result.output
        assert "[]" in result.stdout

    def test_whole_day_windows(self, files):
        result = _invoke(
            files, "common", "alice", "bob", "--start", "2024-11-26", "--end", "2024-11-26", "--json",
        )

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert [(s["startTime"], s["durationMinutes"]) for s in payload] == [
            ("2024-11-26T09:00:00+01:00", 480),
        ]


class TestMisc:
    def test_list_participants(self, files):
        config_file, _ = files

        result = runner.invoke(app, ["list-participants", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "carol@example.com" in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output
