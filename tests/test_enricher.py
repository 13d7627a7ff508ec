"""Tests for CommandEnricher."""

from datetime import datetime, timezone

import pytest

from whiskerlog.detectors import default_tables
from whiskerlog.detectors.pattern import DangerPattern
from whiskerlog.history.enricher import CommandEnricher, enrich
from whiskerlog.history.models import Command, PackageRef, RawRecord

STAMP = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


class TestEnrich:
    def test_raw_record_fields_carried_over(self):
        record = RawRecord(
            command="npm install react@18.2.0",
            shell="zsh",
            session_id="zsh-1",
            timestamp=STAMP,
            duration=1200,
            exit_code=0,
            working_directory="/srv/app",
        )
        cmd = enrich(record)

        assert cmd.command == record.command
        assert (cmd.shell, cmd.session_id, cmd.timestamp) == ("zsh", "zsh-1", STAMP)
        assert (cmd.duration, cmd.exit_code, cmd.working_directory) == (1200, 0, "/srv/app")
        assert cmd.packages_used == (PackageRef("npm", "react", "18.2.0"),)
        assert cmd.host_id == "local"
        assert cmd.id is None

    def test_missing_timestamp_gets_now(self):
        before = datetime.now(tz=timezone.utc)
        cmd = enrich(RawRecord(command="ls"))
        assert cmd.timestamp >= before.replace(microsecond=0)
        assert cmd.timestamp.tzinfo is not None

    def test_all_detectors_applied(self):
        cmd = enrich(RawRecord(command="ssh deploy@web1", timestamp=STAMP))
        assert cmd.host_id == "ssh:deploy@web1"
        assert cmd.network_endpoints == ("ssh://web1",)
        assert not cmd.is_dangerous

    def test_nothing_detected_leaves_defaults(self):
        cmd = enrich(RawRecord(command="echo hi", timestamp=STAMP))
        assert cmd.network_endpoints == ()
        assert cmd.packages_used == ()
        assert (cmd.is_dangerous, cmd.danger_score, cmd.danger_reasons) == (False, 0.0, ())
        assert (cmd.is_experiment, cmd.experiment_tags) == (False, ())

    @pytest.mark.parametrize(
        "text", ["rm -rf /", "rmdir build", "mv a b", "man ls", "git --help", "ls", ""]
    )
    def test_flags_consistent_with_scores(self, text):
        cmd = enrich(RawRecord(command=text, timestamp=STAMP))
        assert cmd.is_dangerous == (cmd.danger_score > 0.5)
        assert cmd.is_experiment == bool(cmd.experiment_tags)

    def test_enriching_twice_is_stable(self):
        once = enrich(RawRecord(command="sudo rm -rf /tmp/x", timestamp=STAMP))
        assert enrich(once) == once

    def test_enriching_command_replaces_stale_annotations(self):
        stale = Command(command="ls", timestamp=STAMP, is_dangerous=True, danger_score=0.9, id=4)
        cmd = enrich(stale)
        assert (cmd.is_dangerous, cmd.danger_score) == (False, 0.0)
        assert cmd.id == 4


class TestCommandEnricher:
    def test_experiment_detection_can_be_disabled(self):
        enricher = CommandEnricher(detect_experiments=False)
        cmd = enricher.enrich(RawRecord(command="man ls", timestamp=STAMP))
        assert (cmd.is_experiment, cmd.experiment_tags) == (False, ())

    def test_custom_tables(self):
        tables = default_tables().extended(
            danger_patterns=(DangerPattern(r"terraform\s+destroy", 0.9, "Infrastructure teardown"),)
        )
        cmd = CommandEnricher(tables).enrich(RawRecord(command="terraform destroy", timestamp=STAMP))
        assert cmd.danger_reasons == ("Infrastructure teardown",)
        assert cmd.is_dangerous

    def test_enrich_all_keeps_order(self):
        records = [RawRecord(command=t, timestamp=STAMP) for t in ("b", "a", "c")]
        assert [c.command for c in CommandEnricher().enrich_all(records)] == ["b", "a", "c"]
