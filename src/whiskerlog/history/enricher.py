"""
Command enrichment - applies every detector to a parsed record.

Enrichment never fails and never skips a record: a detector that finds
nothing leaves its field at the default ("local" host, empty lists,
not dangerous, not an experiment).
"""

from dataclasses import replace
from typing import Optional, Union

from ..detectors.danger import assess_danger
from ..detectors.experiment import detect_experiment
from ..detectors.host import detect_host
from ..detectors.network import detect_network
from ..detectors.packages import detect_packages
from ..detectors.patterns import DetectorTables, default_tables
from ..utils.datetime import utc_now
from .models import Command, RawRecord


class CommandEnricher:
    """Builds fully annotated Command records from parser output."""

    def __init__(
        self,
        tables: Optional[DetectorTables] = None,
        detect_experiments: bool = True,
    ):
        self.tables = tables or default_tables()
        self.detect_experiments = detect_experiments

    def enrich(self, record: Union[RawRecord, Command]) -> Command:
        """Run every detector exactly once over the record's command text."""
        if isinstance(record, RawRecord):
            base = Command(
                command=record.command,
                timestamp=record.timestamp or utc_now(),
                exit_code=record.exit_code,
                duration=record.duration,
                working_directory=record.working_directory,
                session_id=record.session_id,
                shell=record.shell,
            )
        else:
            base = record

        text = base.command
        danger = assess_danger(text, self.tables)
        if self.detect_experiments:
            experiment_tags = detect_experiment(text, self.tables).tags
        else:
            experiment_tags = ()

        return replace(
            base,
            host_id=detect_host(text, self.tables),
            network_endpoints=detect_network(text, self.tables),
            packages_used=detect_packages(text, self.tables),
            is_dangerous=danger.is_dangerous,
            danger_score=danger.score,
            danger_reasons=tuple(danger.reasons),
            is_experiment=bool(experiment_tags),
            experiment_tags=tuple(experiment_tags),
        )

    def enrich_all(self, records) -> list[Command]:
        return [self.enrich(r) for r in records]


def enrich(record: Union[RawRecord, Command], tables: Optional[DetectorTables] = None) -> Command:
    """Enrich a single record with the given (or built-in) detector tables."""
    return CommandEnricher(tables).enrich(record)
