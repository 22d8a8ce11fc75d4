"""Enumeration and project classification of stored credentials."""

from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from .backend import CredentialBackend
from .namespace import NamespaceResolver

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CredentialRecord:
    """A stored credential as seen by listings.

    Attributes:
        name: Account name of the secret
        service: Backend service identifier it is stored under
        project: "global" or the project the service is scoped to
    """

    name: str
    service: str
    project: str


def list_all_credentials(backend: CredentialBackend, resolver: NamespaceResolver) -> list[CredentialRecord]:
    """Snapshot every credential in the resolver's namespace tree.

    Services outside the namespace, including ones that merely share its
    prefix (``secret-lover-old``), are skipped.

    Returns:
        Records sorted by name, then project
    """
    records = []
    for service, account in backend.list_all():
        project = resolver.project_for_service(service)
        if project is None:
            continue
        records.append(CredentialRecord(name=account, service=service, project=project))

    records.sort(key=lambda record: (record.name, record.project))
    log.debug("credentials_listed", namespace=resolver.namespace, count=len(records))
    return records


def format_records(records: Iterable[CredentialRecord]) -> list[str]:
    """Render records as ``name<TAB>project`` report lines."""
    return [f"{record.name}\t{record.project}" for record in records]
