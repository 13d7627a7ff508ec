"""
Whiskerlog - shell history ingestion, enrichment and analytics.

Structure:
- history/: Command model, history file parsers, enrichment pipeline
- detectors/: Pure per-command classifiers (host, network, package, danger, experiment)
- analysis/: Aggregate analyzers over enriched command lists
- storage/: DuckDB persistence for enriched commands
- utils/: Logging, settings and datetime helpers
"""

__version__ = "0.3.0"
