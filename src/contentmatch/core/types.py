"""
Core Types: Typed shapes for rules, content, records and glossary entries.

Everything the engine evaluates is one of these dataclasses. Payloads arrive
either from the extension (camelCase keys) or from database rows (snake_case
keys); every type exposes ``from_dict`` accepting both spellings and a
``coerce`` helper that passes instances through, converts mappings, and
raises TypeError for anything else.

Type Hierarchy:
    Condition          - one property/operator/value test
    ConditionGroup     - conditions combined with their own logic
    Targeted           - shared targeting fields (conditions, logic, gates)
      Rule             - banner or play, may display on all records
      TagRule          - emits tag ids when it matches
      ContentItem      - recommended content, matched by tags or conditions
    ContentTag         - display metadata for a tag id
    MatchContext       - object type / pipeline / stage of the current page
    RecordSnapshot     - read-only field map of the current record
    GlossaryEntry      - a tooltip term with aliases
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Set, Union

from contentmatch.utils.serialize import normalize_id_list, normalize_scalar
from contentmatch.utils.text import Scalar, scalar_text

DEFAULT_LOGIC = "AND"


def _pick(data: Mapping, *keys: str, default: Any = None) -> Any:
    """Return the first present key among camelCase/snake_case spellings."""
    for key in keys:
        if key in data:
            return data[key]
    return default


def _require_mapping(data: Any, type_name: str) -> Mapping:
    if not isinstance(data, Mapping):
        raise TypeError(
            f"{type_name} expects a mapping, got {type(data).__name__}"
        )
    return data


def _as_priority(value: Any) -> Union[int, float]:
    value = normalize_scalar(value)
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def _as_optional_str(value: Any) -> Optional[str]:
    value = normalize_scalar(value)
    if value is None:
        return None
    return str(value)


# =============================================================================
# CONDITIONS
# =============================================================================

@dataclass
class Condition:
    """A single property test. ``value`` is always text."""
    property: str
    operator: str
    value: str = ""

    @classmethod
    def from_dict(cls, data: Mapping) -> "Condition":
        data = _require_mapping(data, "Condition")
        raw_value = _pick(data, "value", default="")
        if isinstance(raw_value, (list, tuple)):
            value = ",".join(scalar_text(normalize_scalar(v)) for v in raw_value)
        else:
            value = scalar_text(normalize_scalar(raw_value))
        return cls(
            property=str(_pick(data, "property", "field", default="")),
            operator=str(_pick(data, "operator", default="")),
            value=value,
        )

    @classmethod
    def coerce(cls, obj: Any) -> "Condition":
        if isinstance(obj, cls):
            return obj
        return cls.from_dict(obj)

    def to_dict(self) -> Dict[str, str]:
        return {"property": self.property, "operator": self.operator, "value": self.value}


@dataclass
class ConditionGroup:
    """
    Conditions grouped under their own AND/OR logic.

    Groups are carried through payloads and count as targeting for content
    items, but rule evaluation only reads the flat ``conditions``.
    """
    id: Optional[str] = None
    logic: str = DEFAULT_LOGIC
    conditions: List[Condition] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping) -> "ConditionGroup":
        data = _require_mapping(data, "ConditionGroup")
        return cls(
            id=_as_optional_str(_pick(data, "id")),
            logic=_pick(data, "logic") or DEFAULT_LOGIC,
            conditions=_conditions(_pick(data, "conditions")),
        )

    @classmethod
    def coerce(cls, obj: Any) -> "ConditionGroup":
        if isinstance(obj, cls):
            return obj
        return cls.from_dict(obj)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "logic": self.logic,
            "conditions": [c.to_dict() for c in self.conditions],
        }


def _conditions(raw: Any) -> List[Condition]:
    if not raw:
        return []
    return [Condition.coerce(c) for c in raw]


def _groups(raw: Any) -> List[ConditionGroup]:
    if not raw:
        return []
    return [ConditionGroup.coerce(g) for g in raw]


# =============================================================================
# TARGETED SHAPES (Rule, TagRule, ContentItem)
# =============================================================================

_TARGETED_KEYS: Set[str] = {
    "id", "name", "conditions", "logic",
    "conditionGroups", "condition_groups", "groupLogic", "group_logic",
    "enabled", "priority",
    "objectTypes", "object_types", "pipelines", "stages",
}


@dataclass
class Targeted:
    """
    Fields shared by everything that is matched against a record.

    Attributes:
        conditions: Flat conditions combined with ``logic``.
        logic: "AND" or "OR"; anything else fails closed.
        condition_groups: Nested groups passed through for the UI; they make
            a content item eligible for direct matching but are not evaluated.
        enabled: Only an explicit False disables.
        priority: Higher sorts first; missing is 0.
        object_types/pipelines/stages: Context gates; empty means unrestricted.
        extra: Unrecognized payload keys, preserved for the display layer.
    """
    id: Optional[str] = None
    name: Optional[str] = None
    conditions: List[Condition] = field(default_factory=list)
    logic: str = DEFAULT_LOGIC
    condition_groups: List[ConditionGroup] = field(default_factory=list)
    group_logic: str = DEFAULT_LOGIC
    enabled: bool = True
    priority: Union[int, float] = 0
    object_types: List[str] = field(default_factory=list)
    pipelines: List[str] = field(default_factory=list)
    stages: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def _targeted_kwargs(cls, data: Mapping, known: Set[str]) -> Dict[str, Any]:
        return {
            "id": _as_optional_str(_pick(data, "id")),
            "name": _as_optional_str(_pick(data, "name")),
            "conditions": _conditions(_pick(data, "conditions")),
            "logic": _pick(data, "logic") or DEFAULT_LOGIC,
            "condition_groups": _groups(_pick(data, "conditionGroups", "condition_groups")),
            "group_logic": _pick(data, "groupLogic", "group_logic") or DEFAULT_LOGIC,
            "enabled": _pick(data, "enabled", default=True) is not False,
            "priority": _as_priority(_pick(data, "priority")),
            "object_types": normalize_id_list(_pick(data, "objectTypes", "object_types")),
            "pipelines": normalize_id_list(_pick(data, "pipelines")),
            "stages": normalize_id_list(_pick(data, "stages")),
            "extra": {k: v for k, v in data.items() if k not in known},
        }

    @classmethod
    def coerce(cls, obj: Any):
        if isinstance(obj, cls):
            return obj
        return cls.from_dict(obj)

    @property
    def has_conditions(self) -> bool:
        """True when any flat condition or condition group is defined (content direct-match gate)."""
        return bool(self.conditions) or bool(self.condition_groups)

    def _targeted_dict(self) -> Dict[str, Any]:
        payload = dict(self.extra)
        payload.update({
            "id": self.id,
            "name": self.name,
            "conditions": [c.to_dict() for c in self.conditions],
            "logic": self.logic,
            "conditionGroups": [g.to_dict() for g in self.condition_groups],
            "groupLogic": self.group_logic,
            "enabled": self.enabled,
            "priority": self.priority,
            "objectTypes": list(self.object_types),
            "pipelines": list(self.pipelines),
            "stages": list(self.stages),
        })
        return payload


@dataclass
class Rule(Targeted):
    """A banner or play. ``display_on_all`` bypasses conditions, not gates."""
    display_on_all: bool = False

    _KNOWN = _TARGETED_KEYS | {"displayOnAll", "display_on_all"}

    @classmethod
    def from_dict(cls, data: Mapping) -> "Rule":
        data = _require_mapping(data, "Rule")
        return cls(
            display_on_all=bool(_pick(data, "displayOnAll", "display_on_all", default=False)),
            **cls._targeted_kwargs(data, cls._KNOWN),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = self._targeted_dict()
        payload["displayOnAll"] = self.display_on_all
        return payload


@dataclass
class TagRule(Targeted):
    """A rule whose effect is to activate ``output_tag_ids``."""
    output_tag_ids: List[str] = field(default_factory=list)

    _KNOWN = _TARGETED_KEYS | {"outputTagIds", "output_tag_ids"}

    @classmethod
    def from_dict(cls, data: Mapping) -> "TagRule":
        data = _require_mapping(data, "TagRule")
        return cls(
            output_tag_ids=normalize_id_list(_pick(data, "outputTagIds", "output_tag_ids")),
            **cls._targeted_kwargs(data, cls._KNOWN),
        )


@dataclass
class ContentItem(Targeted):
    """Recommended content, surfaced via active tags or its own conditions."""
    title: str = ""
    tag_ids: List[str] = field(default_factory=list)
    display_on_all: bool = False
    category: Optional[str] = None
    content_type: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None

    _KNOWN = _TARGETED_KEYS | {
        "title", "tagIds", "tag_ids", "displayOnAll", "display_on_all",
        "category", "contentType", "content_type", "url", "description",
    }

    @classmethod
    def from_dict(cls, data: Mapping) -> "ContentItem":
        data = _require_mapping(data, "ContentItem")
        return cls(
            title=_as_optional_str(_pick(data, "title")) or "",
            tag_ids=normalize_id_list(_pick(data, "tagIds", "tag_ids")),
            display_on_all=bool(_pick(data, "displayOnAll", "display_on_all", default=False)),
            category=_as_optional_str(_pick(data, "category")),
            content_type=_as_optional_str(_pick(data, "contentType", "content_type")),
            url=_as_optional_str(_pick(data, "url")),
            description=_as_optional_str(_pick(data, "description")),
            **cls._targeted_kwargs(data, cls._KNOWN),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = self._targeted_dict()
        payload.update({
            "title": self.title,
            "tagIds": list(self.tag_ids),
            "displayOnAll": self.display_on_all,
            "category": self.category,
            "contentType": self.content_type,
            "url": self.url,
            "description": self.description,
        })
        return payload


@dataclass
class ContentTag:
    """Display metadata for a tag id."""
    id: str
    name: str = ""
    slug: Optional[str] = None
    color: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping) -> "ContentTag":
        data = _require_mapping(data, "ContentTag")
        return cls(
            id=str(_pick(data, "id")),
            name=_as_optional_str(_pick(data, "name")) or "",
            slug=_as_optional_str(_pick(data, "slug")),
            color=_as_optional_str(_pick(data, "color")),
            description=_as_optional_str(_pick(data, "description")),
        )

    @classmethod
    def coerce(cls, obj: Any) -> "ContentTag":
        if isinstance(obj, cls):
            return obj
        return cls.from_dict(obj)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "color": self.color,
            "description": self.description,
        }


# =============================================================================
# CONTEXT AND RECORD
# =============================================================================

@dataclass(frozen=True)
class MatchContext:
    """Where the record is being viewed; drives the coarse gates."""
    object_type: Optional[str] = None
    pipeline: Optional[str] = None
    stage: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping) -> "MatchContext":
        data = _require_mapping(data, "MatchContext")
        return cls(
            object_type=_as_optional_str(_pick(data, "objectType", "object_type")),
            pipeline=_as_optional_str(_pick(data, "pipeline")),
            stage=_as_optional_str(_pick(data, "stage")),
        )

    @classmethod
    def coerce(cls, obj: Any) -> "MatchContext":
        if obj is None:
            return cls()
        if isinstance(obj, cls):
            return obj
        return cls.from_dict(obj)


class RecordSnapshot:
    """
    Read-only view of a record's field values.

    All property lookups go through ``get``, which is the one place that
    decides what "missing" means: an absent key, None, or NaN.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: Optional[Mapping] = None):
        if fields is None:
            fields = {}
        self._fields = MappingProxyType(dict(_require_mapping(fields, "RecordSnapshot")))

    @classmethod
    def coerce(cls, obj: Any) -> "RecordSnapshot":
        if isinstance(obj, cls):
            return obj
        return cls(obj)

    def get(self, property_name: str) -> Scalar:
        """Return the field value, or None when the field is missing."""
        return normalize_scalar(self._fields.get(property_name))

    def __contains__(self, property_name: object) -> bool:
        return self.get(property_name) is not None  # type: ignore[arg-type]

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"RecordSnapshot({dict(self._fields)!r})"


# =============================================================================
# GLOSSARY
# =============================================================================

MATCH_TYPE_EXACT = "exact"
MATCH_TYPE_STARTS_WITH = "starts_with"


@dataclass
class GlossaryEntry:
    """
    A glossary term shown as a tooltip.

    ``trigger`` is the primary match text; ``term`` is the legacy field it
    replaced and is only consulted when ``trigger`` is empty.
    """
    id: str
    trigger: Optional[str] = None
    term: Optional[str] = None
    aliases: List[str] = field(default_factory=list)
    enabled: bool = True
    match_type: str = MATCH_TYPE_EXACT
    title: Optional[str] = None
    definition: Optional[str] = None
    link: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN = {
        "id", "trigger", "term", "aliases", "enabled", "matchType",
        "match_type", "title", "definition", "link",
    }

    @classmethod
    def from_dict(cls, data: Mapping) -> "GlossaryEntry":
        data = _require_mapping(data, "GlossaryEntry")
        aliases = _pick(data, "aliases") or []
        return cls(
            id=str(_pick(data, "id")),
            trigger=_pick(data, "trigger"),
            term=_pick(data, "term"),
            aliases=[a for a in aliases if isinstance(a, str)],
            enabled=_pick(data, "enabled", default=True) is not False,
            match_type=_pick(data, "matchType", "match_type") or MATCH_TYPE_EXACT,
            title=_as_optional_str(_pick(data, "title")),
            definition=_as_optional_str(_pick(data, "definition")),
            link=_as_optional_str(_pick(data, "link")),
            extra={k: v for k, v in data.items() if k not in cls._KNOWN},
        )

    @classmethod
    def coerce(cls, obj: Any) -> "GlossaryEntry":
        if isinstance(obj, cls):
            return obj
        return cls.from_dict(obj)

    @property
    def primary_trigger(self) -> Optional[str]:
        """``trigger`` when set, else the legacy ``term``."""
        return self.trigger or self.term or None

    def to_dict(self) -> Dict[str, Any]:
        payload = dict(self.extra)
        payload.update({
            "id": self.id,
            "trigger": self.trigger,
            "term": self.term,
            "aliases": list(self.aliases),
            "enabled": self.enabled,
            "matchType": self.match_type,
            "title": self.title,
            "definition": self.definition,
            "link": self.link,
        })
        return payload


__all__ = [
    "DEFAULT_LOGIC",
    "Condition",
    "ConditionGroup",
    "Targeted",
    "Rule",
    "TagRule",
    "ContentItem",
    "ContentTag",
    "MatchContext",
    "RecordSnapshot",
    "MATCH_TYPE_EXACT",
    "MATCH_TYPE_STARTS_WITH",
    "GlossaryEntry",
]
