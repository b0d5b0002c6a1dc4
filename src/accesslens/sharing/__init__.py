"""Record-level sharing resolution.

Provides:
- parse_rules() / parse_rules_xml(): sharing-rule metadata to descriptors
- format_criteria() / format_owner_statement(): rule criteria statements
- HierarchyResolver: group and role membership checks
- SharingAccessResolver: OWD + queue + rule facts for one object/user
"""

from .criteria import CriteriaItem, format_criteria, format_owner_statement
from .hierarchy import HierarchyResolver
from .resolver import SharingAccessResolver, owd_access, rule_access
from .rules import build_rule_tree, parse_rules, parse_rules_xml

__all__ = [
    "CriteriaItem",
    "HierarchyResolver",
    "SharingAccessResolver",
    "build_rule_tree",
    "format_criteria",
    "format_owner_statement",
    "owd_access",
    "parse_rules",
    "parse_rules_xml",
    "rule_access",
]
