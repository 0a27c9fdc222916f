"""Group listings and schema lookup over a set of CRD records.

The module-level functions are pure: they only look at the records they are
given. :class:`CRDCatalog` binds them to a fresh cluster fetch per call.
"""

from typing import Callable, List, Sequence, Set, Tuple

from crdviz.cluster import fetch_all_crds
from crdviz.errors import NotFoundError, SchemaUnavailableError, ValidationError
from crdviz.models import CRDRecord, CRDVersion, SchemaNode


def list_api_groups(records: Sequence[CRDRecord]) -> Set[str]:
    """Distinct API groups owning at least one CRD."""
    return {record.group for record in records}


def list_crds(records: Sequence[CRDRecord], group: str) -> List[CRDRecord]:
    """CRDs whose group is exactly ``group``.

    A group with no CRDs yields an empty list.

    Raises:
        ValidationError: if ``group`` is empty.
    """
    if not group:
        raise ValidationError("No API group selected")
    return [record for record in records if record.group == group]


def find_crd(records: Sequence[CRDRecord], name: str) -> CRDRecord:
    for record in records:
        if record.name == name:
            return record
    raise NotFoundError(f"CRD '{name}' not found")


def storage_version(record: CRDRecord) -> CRDVersion:
    """The single version of ``record`` flagged as the storage version."""
    candidates = record.storage_versions
    if not candidates:
        raise SchemaUnavailableError(f"CRD '{record.name}' has no storage version")
    if len(candidates) > 1:
        names = ", ".join(v.name for v in candidates)
        raise SchemaUnavailableError(
            f"CRD '{record.name}' has {len(candidates)} storage versions ({names})"
        )
    return candidates[0]


def resolve_storage_schema(records: Sequence[CRDRecord], crd_name: str) -> SchemaNode:
    """Root schema of the storage version of the CRD named ``crd_name``.

    Raises:
        ValidationError: if ``crd_name`` is empty.
        NotFoundError: if no record has that name.
        SchemaUnavailableError: if the CRD has no single storage version, or
            that version has no schema.
    """
    if not crd_name:
        raise ValidationError("No CRD selected")
    record = find_crd(records, crd_name)
    version = storage_version(record)
    if version.schema is None:
        raise SchemaUnavailableError(
            f"Storage version '{version.name}' of CRD '{crd_name}' has no schema"
        )
    return version.schema


class CRDCatalog:
    """Catalog operations backed by a fresh fetch on every call."""

    def __init__(self, fetch: Callable[[str], List[CRDRecord]] = fetch_all_crds, context: str = ""):
        self._fetch = fetch
        self.context = context

    def _records(self) -> List[CRDRecord]:
        return self._fetch(self.context)

    def list_api_groups(self) -> Set[str]:
        return list_api_groups(self._records())

    def list_crds(self, group: str) -> List[CRDRecord]:
        if not group:
            raise ValidationError("No API group selected")
        return list_crds(self._records(), group)

    def describe(self, crd_name: str) -> Tuple[CRDRecord, SchemaNode]:
        """The named record and its storage schema, from a single fetch."""
        if not crd_name:
            raise ValidationError("No CRD selected")
        records = self._records()
        return find_crd(records, crd_name), resolve_storage_schema(records, crd_name)

    def resolve_storage_schema(self, crd_name: str) -> SchemaNode:
        if not crd_name:
            raise ValidationError("No CRD selected")
        return resolve_storage_schema(self._records(), crd_name)
