"""
Tests for history data models.
"""

from datetime import datetime, timedelta, timezone

import pytest

from whiskerlog.history.enricher import enrich
from whiskerlog.history.models import (
    ROW_FIELDS,
    Command,
    HostKind,
    HostType,
    PackageAction,
    PackageRef,
    RawRecord,
)
from whiskerlog.history.parsers import parse_bash


class TestPackageAction:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("install", PackageAction.INSTALL),
            ("UNINSTALL", PackageAction.UNINSTALL),
            (" upgrade ", PackageAction.UPGRADE),
            ("add", PackageAction.INSTALL),
            ("", PackageAction.INSTALL),
        ],
    )
    def test_parse(self, text, expected):
        assert PackageAction.parse(text) is expected

    @pytest.mark.parametrize(
        "action,kind",
        [
            (PackageAction.INSTALL, PackageAction.INSTALL),
            (PackageAction.REMOVE, PackageAction.REMOVE),
            (PackageAction.UNINSTALL, PackageAction.REMOVE),
            (PackageAction.UPDATE, PackageAction.UPDATE),
            (PackageAction.UPGRADE, PackageAction.UPDATE),
        ],
    )
    def test_kind_folds_synonyms(self, action, kind):
        assert action.kind is kind

    def test_is_removal(self):
        assert PackageAction.UNINSTALL.is_removal
        assert not PackageAction.UPDATE.is_removal


class TestPackageRef:
    def test_action_text_is_coerced(self):
        ref = PackageRef("npm", "react", action="remove")
        assert ref.action is PackageAction.REMOVE

    def test_dict_round_trip(self):
        ref = PackageRef("pip", "requests", "2.31.0", PackageAction.UNINSTALL)
        assert ref.to_dict() == {
            "manager": "pip",
            "name": "requests",
            "version": "2.31.0",
            "action": "uninstall",
        }
        assert PackageRef.from_dict(ref.to_dict()) == ref


class TestHostType:
    def test_ssh(self):
        host = HostType.parse("ssh:deploy@web1")
        assert host.kind is HostKind.SSH
        assert (host.user, host.host) == ("deploy", "web1")
        assert host.is_remote
        assert str(host) == "ssh:deploy@web1"

    @pytest.mark.parametrize(
        "host_id,kind,target",
        [
            ("docker:api", HostKind.DOCKER, "api"),
            ("k8s:web-0", HostKind.KUBERNETES, "web-0"),
            ("local", HostKind.LOCAL, "local"),
            ("", HostKind.LOCAL, "local"),
        ],
    )
    def test_parse(self, host_id, kind, target):
        host = HostType.parse(host_id)
        assert (host.kind, host.target) == (kind, target)

    def test_local_is_not_remote(self):
        assert not HostType.parse("local").is_remote
        assert str(HostType.parse("local")) == "local"


class TestCommand:
    @pytest.fixture
    def command(self) -> Command:
        return Command(
            command="npm install react@18.2.0",
            timestamp=datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc),
            exit_code=0,
            duration=1500,
            working_directory="/home/dev/app",
            session_id="zsh-1705312800",
            host_id="local",
            network_endpoints=["https://registry.npmjs.org"],
            packages_used=[PackageRef("npm", "react", "18.2.0")],
            is_experiment=False,
            experiment_tags=[],
            is_dangerous=False,
            danger_score=0.0,
            danger_reasons=[],
            shell="zsh",
        )

    def test_defaults(self):
        cmd = Command(command="ls")
        assert cmd.id is None
        assert cmd.host_id == "local"
        assert cmd.shell == "unknown"
        assert cmd.timestamp.tzinfo is not None

    def test_naive_timestamp_becomes_utc(self):
        cmd = Command(command="ls", timestamp=datetime(2024, 1, 15, 10, 0))
        assert cmd.timestamp == datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)

    def test_aware_timestamp_is_converted(self):
        tz = timezone(timedelta(hours=2))
        cmd = Command(command="ls", timestamp=datetime(2024, 1, 15, 12, 0, tzinfo=tz))
        assert cmd.timestamp.hour == 10
        assert cmd.timestamp.utcoffset() == timedelta(0)

    @pytest.mark.parametrize(
        "exit_code,failed", [(None, False), (0, False), (1, True), (127, True)]
    )
    def test_failed(self, exit_code, failed):
        assert Command(command="ls", exit_code=exit_code).failed is failed

    def test_first_word_and_host(self):
        cmd = Command(command="  ssh deploy@web1", host_id="ssh:deploy@web1")
        assert cmd.first_word == "ssh"
        assert cmd.host.kind is HostKind.SSH
        assert Command(command="   ").first_word == ""

    def test_is_frozen(self, command):
        with pytest.raises(AttributeError):
            command.command = "ls"

    def test_with_id(self, command):
        stored = command.with_id(7)
        assert stored.id == 7
        assert command.id is None

    def test_dict_round_trip(self, command):
        data = command.to_dict()
        assert data["timestamp"] == "2024-01-15T10:00:00+00:00"
        assert data["packages_used"][0]["name"] == "react"
        assert Command.from_dict(data) == command

    def test_json_round_trip(self, command):
        assert Command.from_json(command.to_json()) == command.with_id(None)

    def test_from_dict_accepts_epoch(self):
        cmd = Command.from_dict({"command": "ls", "timestamp": 1700000000})
        assert cmd.timestamp == datetime.fromtimestamp(1700000000, tz=timezone.utc)

    def test_row_round_trip(self, command):
        row = command.with_id(3).to_row()
        assert len(row) == len(ROW_FIELDS)
        assert row[ROW_FIELDS.index("timestamp")] == 1705312800000000
        assert row[ROW_FIELDS.index("packages_used")].startswith("[{")
        assert Command.from_row(row) == command.with_id(3)

    def test_row_keeps_microseconds(self):
        stamp = datetime(2024, 1, 15, 10, 0, 0, 123456, tzinfo=timezone.utc)
        cmd = Command(command="ls -la", timestamp=stamp)
        assert cmd.to_row()[ROW_FIELDS.index("timestamp")] == 1705312800123456
        assert Command.from_row(cmd.to_row()).timestamp == stamp

    def test_parsed_bash_line_survives_row(self):
        now = datetime(2024, 1, 15, 10, 0, 0, 123456, tzinfo=timezone.utc)
        [record] = parse_bash("ls -la\n", now=now)
        cmd = enrich(record)
        assert Command.from_row(cmd.to_row()) == cmd

    def test_sequence_fields_are_tuples(self, command):
        assert command.network_endpoints == ("https://registry.npmjs.org",)
        assert isinstance(command.packages_used, tuple)
        assert isinstance(command.experiment_tags, tuple)
        with pytest.raises(AttributeError):
            command.network_endpoints.append("https://example.com")

    def test_from_row_tolerates_bad_json(self, command):
        row = list(command.to_row())
        row[ROW_FIELDS.index("network_endpoints")] = "not json"
        row[ROW_FIELDS.index("danger_reasons")] = None
        restored = Command.from_row(row)
        assert restored.network_endpoints == ()
        assert restored.danger_reasons == ()


class TestRawRecord:
    def test_defaults(self):
        record = RawRecord(command="ls")
        assert record.shell == "unknown"
        assert record.session_id == ""
        assert record.timestamp is None
        assert record.duration is None
