"""Human-readable statements for sharing-rule criteria and owners."""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict

_INDEX_TOKEN = re.compile(r"\b(\d+)\b")

OWNER_TEMPLATES = (
    ("role", "Records owned by users in role: {}"),
    ("roleAndSubordinates", "Records owned by users in role and subordinates: {}"),
    ("group", "Records owned by users in group: {}"),
)


class CriteriaItem(BaseModel):
    """One ``field operation value`` clause of a criteria-based rule."""

    model_config = ConfigDict(frozen=True)

    field: str
    operation: str
    value: str = ""

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "CriteriaItem":
        return cls(
            field=_text(raw.get("field")),
            operation=_text(raw.get("operation", raw.get("operator"))),
            value=_text(raw.get("value")),
        )

    def render(self) -> str:
        return f"{self.field} {self.operation} {self.value}"


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(_text(v) for v in value)
    return str(value)


def format_criteria(
    items: Sequence[Union[CriteriaItem, Mapping[str, Any]]],
    boolean_filter: Optional[str] = None,
) -> str:
    """Render rule criteria as one statement.

    Without ``boolean_filter`` the clauses are joined with ``AND``. With a
    filter such as ``"1 AND (2 OR 3)"`` every whole-number token N is
    replaced by the N-th clause (1-based). Replacement is a single pass,
    so digits inside a substituted clause are left alone, and tokens with
    no matching clause are kept as written.

    Example::

        format_criteria(
            [
                {"field": "Amount", "operation": "greater than", "value": "100000"},
                {"field": "StageName", "operation": "equals", "value": "Closed Won"},
            ],
            "1 OR 2",
        )
        # "Amount greater than 100000 OR StageName equals Closed Won"
    """
    if not items:
        return ""

    clauses = [
        (item if isinstance(item, CriteriaItem) else CriteriaItem.from_mapping(item)).render()
        for item in items
    ]

    if not boolean_filter:
        return " AND ".join(clauses)

    def substitute(match: re.Match[str]) -> str:
        index = int(match.group(1))
        if 1 <= index <= len(clauses):
            return clauses[index - 1]
        return match.group(0)

    return _INDEX_TOKEN.sub(substitute, boolean_filter)


def format_owner_statement(shared_from: Optional[Mapping[str, Any]]) -> str:
    """Describe whose records an owner-based rule shares."""
    if not shared_from:
        return ""
    for key, template in OWNER_TEMPLATES:
        name = shared_from.get(key)
        if name:
            return template.format(_text(name))
    return ""


__all__ = ["CriteriaItem", "format_criteria", "format_owner_statement"]
