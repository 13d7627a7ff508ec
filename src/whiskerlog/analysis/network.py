"""
Network analysis - endpoints, protocols and security posture.
"""

from collections import Counter
from typing import Sequence

from ..history.models import Command
from .common import success_rate
from .models import (
    ConnectionPattern,
    ConnectionType,
    EndpointStats,
    IssueType,
    NetworkAnalysis,
    SecurityIssue,
    Severity,
)

TOP_ENDPOINTS_LIMIT = 20

# Format: (prefix, protocol), checked in order before the port suffixes
SCHEME_PROTOCOLS = (
    ("https://", "HTTPS"),
    ("http://", "HTTP"),
    ("ssh://", "SSH"),
    ("db://", "Database"),
)

PORT_PROTOCOLS = (
    (":22", "SSH"),
    (":80", "HTTP"),
    (":443", "HTTPS"),
)

SECURE_PREFIXES = ("https://", "ssh://")
SECURE_PORTS = (":22", ":443")

CREDENTIAL_PATTERNS = (
    "password=",
    "pwd=",
    "pass=",
    "token=",
    "key=",
    "secret=",
    "user:",
    "username:",
    "login:",
    "auth:",
    "api_key=",
)

SUSPICIOUS_DOMAINS = (
    # URL shorteners
    "bit.ly",
    "tinyurl.com",
    "t.co",
    "goo.gl",
    # Paste sites
    "pastebin.com",
    "hastebin.com",
    "raw.githubusercontent.com",
)

# Format: (type, endpoint predicate, minimum count exclusive, severity, description)
CONNECTION_RULES = (
    (
        ConnectionType.API_USAGE,
        lambda e: "api." in e,
        10,
        Severity.LOW,
        "High API usage detected ({} commands)",
    ),
    (
        ConnectionType.DATABASE_ACCESS,
        lambda e: e.startswith("db://"),
        5,
        Severity.MEDIUM,
        "Database connections detected ({} commands)",
    ),
    (
        ConnectionType.REMOTE_ACCESS,
        lambda e: e.startswith("ssh://"),
        3,
        Severity.LOW,
        "SSH connections detected ({} commands)",
    ),
)


def extract_protocol(endpoint: str) -> str:
    for prefix, protocol in SCHEME_PROTOCOLS:
        if endpoint.startswith(prefix):
            return protocol
    for port, protocol in PORT_PROTOCOLS:
        if port in endpoint:
            return protocol
    return "Unknown"


def is_secure_endpoint(endpoint: str) -> bool:
    return endpoint.startswith(SECURE_PREFIXES) or any(p in endpoint for p in SECURE_PORTS)


def contains_potential_credentials(command: str) -> bool:
    lowered = command.lower()
    return any(pattern in lowered for pattern in CREDENTIAL_PATTERNS)


def is_suspicious_endpoint(endpoint: str) -> bool:
    return any(domain in endpoint for domain in SUSPICIOUS_DOMAINS)


def analyze_network(commands: Sequence[Command]) -> NetworkAnalysis:
    network_commands = [c for c in commands if c.network_endpoints]

    protocols: Counter = Counter()
    usage: dict[str, list[Command]] = {}
    for cmd in network_commands:
        for endpoint in cmd.network_endpoints:
            protocols[extract_protocol(endpoint)] += 1
            usage.setdefault(endpoint, []).append(cmd)

    endpoints = [
        EndpointStats(
            endpoint=endpoint,
            protocol=extract_protocol(endpoint),
            usage_count=len(used_by),
            first_seen=min(c.timestamp for c in used_by),
            last_seen=max(c.timestamp for c in used_by),
            is_secure=is_secure_endpoint(endpoint),
            success_rate=success_rate(used_by),
        )
        for endpoint, used_by in usage.items()
    ]
    endpoints.sort(key=lambda e: (-e.usage_count, e.endpoint))

    return NetworkAnalysis(
        total_network_commands=len(network_commands),
        unique_endpoints=len(usage),
        protocol_breakdown=dict(protocols),
        security_issues=security_issues(network_commands),
        top_endpoints=endpoints[:TOP_ENDPOINTS_LIMIT],
        connection_patterns=connection_patterns(network_commands),
    )


def security_issues(commands: Sequence[Command]) -> list[SecurityIssue]:
    issues = []

    insecure = [
        c.command
        for c in commands
        if any(e.startswith("http://") for e in c.network_endpoints)
    ]
    if insecure:
        issues.append(
            SecurityIssue(
                issue_type=IssueType.INSECURE_HTTP,
                description=f"{len(insecure)} commands using insecure HTTP protocol",
                severity=Severity.MEDIUM,
                affected_commands=insecure,
                recommendation="Use HTTPS instead of HTTP for secure communication",
            )
        )

    exposed = [c.command for c in commands if contains_potential_credentials(c.command)]
    if exposed:
        issues.append(
            SecurityIssue(
                issue_type=IssueType.CREDENTIAL_EXPOSURE,
                description="Commands may contain exposed credentials",
                severity=Severity.HIGH,
                affected_commands=exposed,
                recommendation=(
                    "Use environment variables or credential files instead of inline credentials"
                ),
            )
        )

    suspicious = [
        c.command for c in commands if any(is_suspicious_endpoint(e) for e in c.network_endpoints)
    ]
    if suspicious:
        issues.append(
            SecurityIssue(
                issue_type=IssueType.SUSPICIOUS_ENDPOINTS,
                description="Connections to potentially suspicious endpoints detected",
                severity=Severity.MEDIUM,
                affected_commands=suspicious,
                recommendation="Verify the legitimacy of these endpoints before connecting",
            )
        )

    return issues


def connection_patterns(commands: Sequence[Command]) -> list[ConnectionPattern]:
    patterns = []
    for pattern_type, predicate, minimum, severity, description in CONNECTION_RULES:
        count = sum(1 for c in commands if any(predicate(e) for e in c.network_endpoints))
        if count > minimum:
            patterns.append(
                ConnectionPattern(
                    pattern_type=pattern_type,
                    description=description.format(count),
                    frequency=count,
                    risk_level=severity,
                )
            )
    return patterns


def calculate_network_security_score(analysis: NetworkAnalysis) -> float:
    """1.0 minus severity-weighted issue shares, plus up to 0.2 for secure usage."""
    if analysis.total_network_commands == 0:
        return 1.0

    score = 1.0
    for issue in analysis.security_issues:
        affected = len(issue.affected_commands) / analysis.total_network_commands
        score -= issue.severity.penalty * affected

    total_usage = sum(e.usage_count for e in analysis.top_endpoints)
    if total_usage > 0:
        secure_usage = sum(e.usage_count for e in analysis.top_endpoints if e.is_secure)
        score += secure_usage / total_usage * 0.2

    return max(0.0, min(1.0, score))
