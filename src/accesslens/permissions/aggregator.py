"""Multi-source object and field permission aggregation.

A user's effective object/field access is the union of the grants of
their profile, permission sets and permission-set groups. Aggregation
keeps one attribution per contributing record so the caller can show
*why* each permission is granted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Sequence

from ..models import FieldPermissionSet, ObjectPermissionSet, PermissionGrant, PrincipalRef
from .constants import FIELD_PERMISSION_KINDS, OBJECT_PERMISSION_KINDS

if TYPE_CHECKING:
    from ..directory.records import FieldPermissionRecord, ObjectPermissionRecord

logger = logging.getLogger(__name__)


def _collect_sources(
    kinds: Sequence[str],
    principals: Sequence[PrincipalRef],
    records: Iterable[object],
) -> dict[str, PermissionGrant]:
    """Accumulate principal labels per permission kind, in record order."""
    by_id = {p.id: p for p in principals}
    sources: dict[str, list[str]] = {kind: [] for kind in kinds}

    for record in records:
        principal = by_id.get(record.principal_id)  # type: ignore[attr-defined]
        if principal is None:
            logger.debug("Skipping grant from unassigned principal %s", record.principal_id)  # type: ignore[attr-defined]
            continue
        for kind in kinds:
            if getattr(record, kind):
                sources[kind].append(principal.label)

    return {kind: PermissionGrant(sources=tuple(labels)) for kind, labels in sources.items()}


def aggregate_object_permissions(
    object_name: str,
    principals: Sequence[PrincipalRef],
    raw_grants: Iterable[ObjectPermissionRecord],
) -> ObjectPermissionSet:
    """Merge object grants for ``object_name`` across principals.

    Args:
        object_name: API name of the object.
        principals: Entities assigned to the user (profile, permission
            sets, permission-set groups).
        raw_grants: ObjectPermissions records, possibly for many objects.

    Returns:
        ObjectPermissionSet where each grant lists one label per
        contributing record. No matching record yields all grants false.

    Example::

        perms = aggregate_object_permissions("Account", principals, records)
        perms.read.sources  # ("Sales (Profile)", "API Access (Permission Set)")
    """
    matching = (r for r in raw_grants if r.sobject_type == object_name)
    return ObjectPermissionSet(**_collect_sources(OBJECT_PERMISSION_KINDS, principals, matching))


def aggregate_field_permissions(
    field_name: str,
    principals: Sequence[PrincipalRef],
    raw_grants: Iterable[FieldPermissionRecord],
) -> FieldPermissionSet:
    """Merge read/edit grants for one field.

    ``field_name`` must be object-qualified (``Account.Industry``) so that
    same-named fields of different objects are never merged.

    Raises:
        ValueError: ``field_name`` has no object prefix.
    """
    if "." not in field_name:
        raise ValueError(f"Field name must be object-qualified, e.g. Account.Industry: {field_name!r}")
    matching = (r for r in raw_grants if r.field == field_name)
    return FieldPermissionSet(**_collect_sources(FIELD_PERMISSION_KINDS, principals, matching))


__all__ = ["aggregate_field_permissions", "aggregate_object_permissions"]
