"""Host detection: where a command actually runs."""

from typing import Optional

from ..history.models import LOCAL_HOST
from .patterns import DetectorTables, default_tables


def detect_host(command: str, tables: Optional[DetectorTables] = None) -> str:
    """Return a tagged host id for remote-execution idioms, else "local".

    Priority is SSH > Docker > Kubernetes:
        "ssh deploy@web1"              -> "ssh:deploy@web1"
        "ssh web1"                     -> "ssh:unknown@web1"
        "docker exec -it api bash"     -> "docker:<first token after the verb>"
        "kubectl exec web-0 -- ls"     -> "k8s:web-0"
    """
    tables = tables or default_tables()

    match = tables.ssh_host.search(command)
    if match:
        user = match.group(1) or "unknown"
        return f"ssh:{user}@{match.group(2)}"

    match = tables.docker_host.search(command)
    if match:
        return f"docker:{match.group(1)}"

    match = tables.kubectl_host.search(command)
    if match:
        return f"k8s:{match.group(1)}"

    return LOCAL_HOST
