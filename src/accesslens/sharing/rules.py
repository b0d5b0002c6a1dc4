"""Sharing-rule metadata parsing.

The raw document (as produced by ``xmltodict``) is first mapped to a
small tagged tree::

    RuleNode = CriteriaRuleNode | OwnerRuleNode | ContainerNode(children)

Rules are classified by the collection key that holds them
(``sharingCriteriaRules`` or ``sharingOwnerRules``); the classification
flows down to every descendant. A mapping is a rule when it carries
``sharedTo``, ``accessLevel`` and ``fullName`` together. Anything else is
either a container to descend into or skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Optional, Union

import xmltodict
from xml.parsers.expat import ExpatError

from ..exceptions import MalformedMetadataError
from ..models import RuleType, SharingRuleDescriptor, SharingTarget, TargetKind
from .criteria import CriteriaItem, format_criteria, format_owner_statement

logger = logging.getLogger(__name__)

RULE_COLLECTIONS: dict[str, RuleType] = {
    "sharingCriteriaRules": RuleType.CRITERIA_BASED,
    "sharingOwnerRules": RuleType.OWNER_BASED,
}

_RULE_KEYS = ("sharedTo", "accessLevel", "fullName")

# Checked in order; allInternalUsers is an empty element, so presence counts
_TARGET_KEYS: tuple[TargetKind, ...] = (
    TargetKind.ALL_INTERNAL_USERS,
    TargetKind.GROUP,
    TargetKind.ROLE,
    TargetKind.ROLE_AND_SUBORDINATES,
    TargetKind.ROLE_AND_SUBORDINATES_INTERNAL,
)


@dataclass(frozen=True)
class CriteriaRuleNode:
    rule_name: str
    access_level: str
    target: SharingTarget
    items: tuple[CriteriaItem, ...] = ()
    boolean_filter: Optional[str] = None

    def to_descriptor(self) -> SharingRuleDescriptor:
        return SharingRuleDescriptor(
            rule_type=RuleType.CRITERIA_BASED,
            rule_name=self.rule_name,
            access_level=self.access_level,
            target=self.target,
            criteria_statement=format_criteria(self.items, self.boolean_filter),
        )


@dataclass(frozen=True)
class OwnerRuleNode:
    rule_name: str
    access_level: str
    target: SharingTarget
    shared_from: Mapping[str, Any] = field(default_factory=dict)

    def to_descriptor(self) -> SharingRuleDescriptor:
        return SharingRuleDescriptor(
            rule_type=RuleType.OWNER_BASED,
            rule_name=self.rule_name,
            access_level=self.access_level,
            target=self.target,
            criteria_statement=format_owner_statement(self.shared_from),
        )


@dataclass(frozen=True)
class ContainerNode:
    children: tuple["RuleNode", ...] = ()


RuleNode = Union[CriteriaRuleNode, OwnerRuleNode, ContainerNode]


def _as_list(value: Any) -> list[Any]:
    """xmltodict collapses single-element collections to the element."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _first_text(value: Any) -> Optional[str]:
    items = _as_list(value)
    if not items or items[0] is None:
        return None
    return str(items[0]).strip() or None


def parse_target(shared_to: Any) -> Optional[SharingTarget]:
    """Map a ``sharedTo`` element to a target, or None if unsupported."""
    candidates = _as_list(shared_to)
    shared_to = candidates[0] if candidates else None
    if not isinstance(shared_to, Mapping):
        return None
    for kind in _TARGET_KEYS:
        if kind.value not in shared_to:
            continue
        if kind is TargetKind.ALL_INTERNAL_USERS:
            return SharingTarget(kind=kind)
        name = _first_text(shared_to[kind.value])
        if name:
            return SharingTarget(kind=kind, name=name)
    return None


def _is_rule(node: Mapping[str, Any]) -> bool:
    return all(node.get(key) is not None for key in _RULE_KEYS)


def _build_rule(node: Mapping[str, Any], rule_type: Optional[RuleType]) -> Optional[RuleNode]:
    rule_name = _first_text(node.get("fullName"))
    access_level = _first_text(node.get("accessLevel"))
    target = parse_target(node.get("sharedTo"))

    if rule_type is None:
        logger.debug("Skipping rule %s outside a known rule collection", rule_name)
        return None
    if not rule_name or not access_level or target is None:
        logger.debug("Skipping incomplete or unsupported rule %s", rule_name)
        return None

    if rule_type is RuleType.CRITERIA_BASED:
        items = tuple(
            CriteriaItem.from_mapping(item) for item in _as_list(node.get("criteriaItems")) if isinstance(item, Mapping)
        )
        return CriteriaRuleNode(
            rule_name=rule_name,
            access_level=access_level,
            target=target,
            items=items,
            boolean_filter=_first_text(node.get("booleanFilter")),
        )

    shared_from = next((s for s in _as_list(node.get("sharedFrom")) if isinstance(s, Mapping)), {})
    return OwnerRuleNode(rule_name=rule_name, access_level=access_level, target=target, shared_from=shared_from)


def build_rule_tree(node: Any, rule_type: Optional[RuleType] = None) -> RuleNode:
    """Map a raw document subtree to a RuleNode tree, depth first."""
    if isinstance(node, Mapping):
        if _is_rule(node):
            rule = _build_rule(node, rule_type)
            return rule if rule is not None else ContainerNode()
        children = []
        for key, value in node.items():
            child_type = RULE_COLLECTIONS.get(key, rule_type)
            for item in _as_list(value):
                if isinstance(item, (Mapping, list)):
                    children.append(build_rule_tree(item, child_type))
        return ContainerNode(children=tuple(children))

    if isinstance(node, list):
        return ContainerNode(children=tuple(build_rule_tree(item, rule_type) for item in node))

    return ContainerNode()


def iter_rules(tree: RuleNode) -> Iterator[SharingRuleDescriptor]:
    """Descriptors in document order."""
    if isinstance(tree, ContainerNode):
        for child in tree.children:
            yield from iter_rules(child)
    else:
        yield tree.to_descriptor()


def parse_rules(document: Any) -> list[SharingRuleDescriptor]:
    """Extract every recognizable sharing rule from a raw document."""
    if document is None:
        return []
    return list(iter_rules(build_rule_tree(document)))


def parse_rules_xml(text: str) -> list[SharingRuleDescriptor]:
    """Parse a sharing-rules XML string.

    Raises:
        MalformedMetadataError: the text is not well-formed XML.
    """
    try:
        document = xmltodict.parse(text)
    except ExpatError as e:
        raise MalformedMetadataError(f"Unreadable sharing rules document: {e}") from e
    return parse_rules(document)


__all__ = [
    "ContainerNode",
    "CriteriaRuleNode",
    "OwnerRuleNode",
    "RuleNode",
    "build_rule_tree",
    "iter_rules",
    "parse_rules",
    "parse_rules_xml",
    "parse_target",
]
