"""Collection matcher - decides dynamic collection membership.

A match definition is a JSON document::

    {
        "fields": {"status": "draft", "size": {"gte": 10}},
        "tags": {"env": ["prod", "staging"], "pii": "*"},
        "patterns": {"name": {"glob": "report-*"}},
        "time": {"created_at": {"after": "now-30d"}},
        "any": [{...}, {...}],
        "condition": {"==": [{"var": "data.owner"}, "alice"]}
    }

Every category present must pass. Membership is computed on each call and
never stored.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime, timedelta
from fnmatch import fnmatchcase
from typing import Any

from bedrock.domain.conditions import DEFAULT_MAX_DEPTH, evaluate
from bedrock.domain.conditions.evaluator import is_missing, resolve_path
from bedrock.domain.entities import Resource, ResourceTag

logger = logging.getLogger(__name__)

RULE_CATEGORIES = frozenset(
    {"fields", "tags", "patterns", "time", "all", "any", "none", "condition"}
)
FIELD_OPERATORS = frozenset(
    {"eq", "ne", "in", "not_in", "gt", "gte", "lt", "lte", "contains", "exists"}
)
ANY_LABEL = "*"

_RELATIVE_INSTANT = re.compile(r"^now(?:\s*([+-])\s*(\d+)\s*([smhdw]))?$")
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}


class MalformedDefinition(ValueError):
    """Match definition cannot be interpreted; the category does not match."""


class CollectionMatcher:
    """Evaluates match definitions against a resource, its field data and tags."""

    def __init__(
        self,
        max_depth: int = 32,
        condition_max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._max_depth = max_depth
        self._condition_max_depth = condition_max_depth

    def matches(
        self,
        resource: Resource,
        resource_data: Mapping[str, Any] | None,
        tags: Iterable[ResourceTag] | Mapping[str, str | None] | None,
        match_definition: Mapping[str, Any] | None,
        *,
        now: datetime | None = None,
    ) -> bool:
        """True when the resource satisfies every category of the definition."""
        if not match_definition:
            return True
        data = dict(resource_data or {})
        tag_map = normalize_tags(tags)
        try:
            return self._matches(
                resource, data, tag_map, match_definition, now or datetime.now(UTC), 0
            )
        except MalformedDefinition as exc:
            logger.debug("Match definition rejected for resource %s: %s", resource.id, exc)
            return False

    def _matches(
        self,
        resource: Resource,
        data: dict[str, Any],
        tags: dict[str, str | None],
        definition: Mapping[str, Any],
        now: datetime,
        depth: int,
    ) -> bool:
        if depth > self._max_depth:
            raise MalformedDefinition(f"Definition nested deeper than {self._max_depth}")
        if not isinstance(definition, Mapping):
            raise MalformedDefinition("Definition must be an object")
        unknown = set(definition) - RULE_CATEGORIES
        if unknown:
            raise MalformedDefinition(f"Unknown rule categories: {sorted(unknown)}")

        fields = definition.get("fields")
        if fields and not self._fields_match(resource, data, fields):
            return False

        expected_tags = definition.get("tags")
        if expected_tags and not _tags_match(tags, expected_tags):
            return False

        patterns = definition.get("patterns")
        if patterns and not self._patterns_match(resource, data, patterns):
            return False

        time_rules = definition.get("time")
        if time_rules and not self._time_match(resource, data, time_rules, now):
            return False

        for combinator in ("all", "any", "none"):
            nested = definition.get(combinator)
            if nested is None:
                continue
            if not isinstance(nested, list):
                raise MalformedDefinition(f"{combinator} expects a list")
            results = (
                self._matches(resource, data, tags, item, now, depth + 1) for item in nested
            )
            if combinator == "all" and not all(results):
                return False
            if combinator == "any" and not any(results):
                return False
            if combinator == "none" and any(results):
                return False

        condition = definition.get("condition")
        if condition is not None:
            context = {
                "resource": resource.context_view(),
                "data": data,
                "tags": tags,
            }
            if not evaluate(condition, context, max_depth=self._condition_max_depth):
                return False

        return True

    def _fields_match(self, resource: Resource, data: dict[str, Any], rules: Any) -> bool:
        if not isinstance(rules, Mapping):
            raise MalformedDefinition("fields expects an object")
        for name, rule in rules.items():
            value = _field_value(resource, data, name)
            if not _field_rule_passes(value, rule):
                return False
        return True

    def _patterns_match(self, resource: Resource, data: dict[str, Any], rules: Any) -> bool:
        if not isinstance(rules, Mapping):
            raise MalformedDefinition("patterns expects an object")
        for name, rule in rules.items():
            value = _field_value(resource, data, name)
            if is_missing(value) or not isinstance(value, str):
                return False
            if isinstance(rule, str):
                rule = {"glob": rule}
            if not isinstance(rule, Mapping) or not rule:
                raise MalformedDefinition(f"Pattern rule for {name} must be an object")
            for kind, pattern in rule.items():
                if not isinstance(pattern, str):
                    raise MalformedDefinition(f"Pattern for {name} must be a string")
                if kind == "glob":
                    if not fnmatchcase(value, pattern):
                        return False
                elif kind == "regex":
                    try:
                        if re.search(pattern, value) is None:
                            return False
                    except re.error as exc:
                        raise MalformedDefinition(f"Invalid regex for {name}: {exc}") from exc
                else:
                    raise MalformedDefinition(f"Unknown pattern kind: {kind}")
        return True

    def _time_match(
        self, resource: Resource, data: dict[str, Any], rules: Any, now: datetime
    ) -> bool:
        if not isinstance(rules, Mapping):
            raise MalformedDefinition("time expects an object")
        for name, rule in rules.items():
            if not isinstance(rule, Mapping) or not rule:
                raise MalformedDefinition(f"Time rule for {name} must be an object")
            value = _field_value(resource, data, name)
            instant = None if is_missing(value) else _to_datetime(value)
            if instant is None:
                return False
            for kind, reference in rule.items():
                bound = resolve_instant(reference, now)
                if kind == "before":
                    if not instant < bound:
                        return False
                elif kind == "after":
                    if not instant > bound:
                        return False
                else:
                    raise MalformedDefinition(f"Unknown time comparison: {kind}")
        return True


def normalize_tags(
    tags: Iterable[ResourceTag] | Mapping[str, str | None] | None,
) -> dict[str, str | None]:
    """Tag key -> label map. The last tag wins when a key repeats."""
    if tags is None:
        return {}
    if isinstance(tags, Mapping):
        return dict(tags)
    return {tag.key: tag.label for tag in tags}


def resolve_instant(reference: Any, now: datetime) -> datetime:
    """Resolve an absolute ISO instant or a relative ``now-30d`` expression."""
    if isinstance(reference, str):
        relative = _RELATIVE_INSTANT.match(reference.strip())
        if relative:
            sign, amount, unit = relative.groups()
            if not sign:
                return now
            delta = timedelta(seconds=int(amount) * _UNIT_SECONDS[unit])
            return now + delta if sign == "+" else now - delta
    instant = _to_datetime(reference)
    if instant is None:
        raise MalformedDefinition(f"Not an instant: {reference!r}")
    return instant


def _field_value(resource: Resource, data: dict[str, Any], name: str) -> Any:
    value = resolve_path(data, name)
    if is_missing(value):
        value = resolve_path(resource.context_view(), name)
    return value


def _field_rule_passes(value: Any, rule: Any) -> bool:
    if isinstance(rule, list):
        rule = {"in": rule}
    elif not isinstance(rule, Mapping):
        rule = {"eq": rule}
    if not rule:
        raise MalformedDefinition("Field rule must name at least one operator")

    missing = is_missing(value)
    for op, operand in rule.items():
        if op not in FIELD_OPERATORS:
            raise MalformedDefinition(f"Unknown field operator: {op}")
        if op == "exists":
            if not isinstance(operand, bool):
                raise MalformedDefinition("exists expects a boolean")
            if (not missing and value is not None) != operand:
                return False
            continue
        if missing:
            return False
        if op == "eq":
            if value != operand:
                return False
        elif op == "ne":
            if value == operand:
                return False
        elif op in ("in", "not_in"):
            if not isinstance(operand, list):
                raise MalformedDefinition(f"{op} expects a list")
            if (value in operand) != (op == "in"):
                return False
        elif op == "contains":
            if isinstance(value, str):
                if not isinstance(operand, str) or operand not in value:
                    return False
            elif isinstance(value, (list, tuple)):
                if operand not in value:
                    return False
            else:
                return False
        elif not _ordered(op, value, operand):
            return False
    return True


def _ordered(op: str, value: Any, operand: Any) -> bool:
    left, right = value, operand
    if isinstance(left, datetime) or isinstance(right, datetime):
        left, right = _to_datetime(left), _to_datetime(right)
        if left is None or right is None:
            return False
    elif isinstance(left, bool) or isinstance(right, bool):
        return False
    try:
        if op == "gt":
            return left > right
        if op == "gte":
            return left >= right
        if op == "lt":
            return left < right
        return left <= right
    except TypeError:
        return False


def _tags_match(tags: dict[str, str | None], expected: Any) -> bool:
    if not isinstance(expected, Mapping):
        raise MalformedDefinition("tags expects an object")
    for key, labels in expected.items():
        if key not in tags:
            return False
        if labels is None or labels is True or labels == ANY_LABEL:
            continue
        label = tags[key]
        if isinstance(labels, list):
            if label not in labels:
                return False
        elif label != labels:
            return False
    return True


def _to_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
