"""
Detectors - Pure classifiers over a single command string

Each detector takes the raw command text (and optionally a DetectorTables
value) and returns one annotation:
- detect_host: tagged host id ("ssh:user@host", "docker:x", "k8s:x", "local")
- detect_network: endpoints touched by the command
- detect_packages: package manager operations
- assess_danger: risk score and reasons
- detect_experiment: learning / exploration tags
"""

# Types
from .types import DangerResult, ExperimentResult

# Tables
from .pattern import DangerPattern, RiskyCommand, PackageManager
from .patterns import DetectorTables, default_tables
from .registry import PatternRegistry, load_tables

# Detectors
from .host import detect_host
from .network import detect_network
from .packages import detect_packages
from .danger import assess_danger
from .experiment import detect_experiment

__all__ = [
    # Types
    "DangerResult",
    "ExperimentResult",
    # Tables
    "DangerPattern",
    "RiskyCommand",
    "PackageManager",
    "DetectorTables",
    "default_tables",
    "PatternRegistry",
    "load_tables",
    # Detectors
    "detect_host",
    "detect_network",
    "detect_packages",
    "assess_danger",
    "detect_experiment",
]
