"""Record-level sharing access for one object/user pair.

The result is an ordered list of facts:

1. the org-wide default (always present),
2. queue access (first queue the user belongs to, if any),
3. every sharing rule whose audience includes the user, in document order.

No precedence is applied between facts; a user may appear under several
rules with different levels. Use ``max_access()`` to collapse the list.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..exceptions import MalformedMetadataError, QueryError, RuleSourceError
from ..interfaces import BaseDirectory, BaseRuleSource
from ..logging import get_inspector_logger
from ..models import AccessLevel, SharingFact
from .hierarchy import HierarchyResolver
from .rules import parse_rules

logger = logging.getLogger(__name__)

OWD_FACT_TYPE = "OWD"
OWD_FACT_NAME = "Internal Sharing Model"
QUEUE_FACT_TYPE = "Queue Access"
DEFAULT_SHARING_MODEL = "Private"


def owd_access(sharing_model: Optional[str]) -> AccessLevel:
    """Map a sharing model value to the access it gives every user."""
    if sharing_model == "Read":
        return AccessLevel.READ_ONLY
    if sharing_model in ("ReadWrite", "Edit"):
        return AccessLevel.EDIT
    return AccessLevel.NO_ACCESS


def rule_access(access_level: str) -> AccessLevel:
    """Sharing rules grant Edit or, for anything else, Read Only."""
    return AccessLevel.EDIT if access_level == "Edit" else AccessLevel.READ_ONLY


class SharingAccessResolver:
    """Composes OWD, queue and sharing-rule access for a user.

    Args:
        directory: Typed directory to query.
        rule_source: Supplier of raw sharing-rule documents.
        hierarchy: Membership resolver (defaults to one over ``directory``).
    """

    def __init__(
        self,
        directory: BaseDirectory,
        rule_source: BaseRuleSource,
        hierarchy: Optional[HierarchyResolver] = None,
    ):
        self.directory = directory
        self.rule_source = rule_source
        self.hierarchy = hierarchy or HierarchyResolver(directory)

    async def resolve(self, object_name: str, user_id: str) -> list[SharingFact]:
        """Sharing facts for ``user_id`` on records of ``object_name``.

        Missing metadata and rejected queries drop the affected fact.
        AuthenticationError and TransportError abort the whole call.
        """
        log = get_inspector_logger(__name__, user_id=user_id, object_name=object_name)

        sharing_model = await self._resolve_sharing_model(object_name)
        facts = [SharingFact(type=OWD_FACT_TYPE, name=OWD_FACT_NAME, access=owd_access(sharing_model))]
        log.debug("OWD: %s -> %s", sharing_model, facts[0].access.value)

        queue_fact = await self._resolve_queue_access(object_name, user_id)
        if queue_fact is not None:
            facts.append(queue_fact)

        facts.extend(await self._resolve_rule_access(object_name, user_id))
        log.info("Resolved %d sharing facts", len(facts))
        return facts

    async def _resolve_sharing_model(self, object_name: str) -> str:
        try:
            model = await self.directory.get_internal_sharing_model(object_name)
            if model:
                return model
        except QueryError as e:
            logger.info("Sharing model unavailable for %s, using organization settings: %s", object_name, e.message)

        try:
            legacy = await self.directory.get_legacy_default_access(object_name)
        except QueryError as e:
            logger.warning("Organization default access unavailable for %s: %s", object_name, e.message)
            return DEFAULT_SHARING_MODEL
        return legacy or DEFAULT_SHARING_MODEL

    async def _resolve_queue_access(self, object_name: str, user_id: str) -> Optional[SharingFact]:
        try:
            for queue in await self.directory.get_object_queues(object_name):
                if await self.directory.is_direct_member(queue.id, user_id):
                    logger.debug("Queue access found: %s", queue.display_name)
                    return SharingFact(type=QUEUE_FACT_TYPE, name=queue.display_name, access=AccessLevel.EDIT)
        except QueryError as e:
            logger.warning("Queue access check failed for %s: %s", object_name, e.message)
        return None

    async def _resolve_rule_access(self, object_name: str, user_id: str) -> list[SharingFact]:
        try:
            document = await self.rule_source.fetch(object_name)
        except (RuleSourceError, MalformedMetadataError) as e:
            logger.warning("Sharing rules unavailable for %s: %s", object_name, e.message)
            return []

        facts = []
        for rule in parse_rules(document):
            if not await self.hierarchy.is_user_in_target(rule.target, user_id):
                continue
            facts.append(
                SharingFact(
                    type=rule.rule_type.value,
                    name=rule.rule_name,
                    access=rule_access(rule.access_level),
                    tooltip=rule.criteria_statement,
                )
            )
        return facts


__all__ = ["SharingAccessResolver", "owd_access", "rule_access"]
