"""Network endpoint detection."""

from typing import Optional

from .patterns import DetectorTables, default_tables


def detect_network(command: str, tables: Optional[DetectorTables] = None) -> list[str]:
    """Extract endpoints touched by a command.

    Endpoints come out in a fixed order: curl URL, wget URL, SSH target as
    "ssh://host", database host as "db://host".
    """
    tables = tables or default_tables()
    endpoints = []

    for regex in tables.url_patterns:
        match = regex.search(command)
        if match:
            endpoints.append(match.group(1))

    match = tables.ssh_target.search(command)
    if match:
        endpoints.append(f"ssh://{match.group(1)}")

    match = tables.database_host.search(command)
    if match:
        host = match.group(1) or match.group(2)
        if host:
            endpoints.append(f"db://{host}")

    return endpoints
