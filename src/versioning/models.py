"""Data models for versioning and dedupe options."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping


class Strategy(Enum):
    """Ranking strategy applied when several versions satisfy a requester."""
    FEWER = "fewer"  # legacy alias of MOST_COMMON
    MOST_COMMON = "mostCommon"
    FEWER_HIGHEST = "fewerHighest"
    HIGHEST = "highest"

    @property
    def ranks_by_popularity(self) -> bool:
        """Whether candidates are ordered by how many requesters they satisfy."""
        return self is not Strategy.HIGHEST

    @property
    def converges(self) -> bool:
        """Whether the cross-instance consensus pass runs."""
        return self is Strategy.FEWER_HIGHEST

    @classmethod
    def parse(cls, value: Any) -> "Strategy":
        """Accept a Strategy, its value, or None (default)."""
        if value is None:
            return cls.FEWER_HIGHEST
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown strategy '{value}' (expected one of: {valid})") from None


class SatisfactionResult(Enum):
    """Outcome of testing a version against a requested range."""
    SATISFIES = "satisfies"
    DOES_NOT_SATISFY = "does_not_satisfy"
    RANGE_INVALID = "range_invalid"


_OPTION_ALIASES = {
    "includeScopes": "include_scopes",
    "includePackages": "include_packages",
    "excludePackages": "exclude_packages",
    "excludeScopes": "exclude_scopes",
    "includePrerelease": "include_prerelease",
}


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


_TRUE_STRINGS = ("true", "yes", "on", "1")
_FALSE_STRINGS = ("false", "no", "off", "0", "")


def _as_bool(key: str, value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValueError(f"Option '{key}' expects a boolean, got {value!r}")


@dataclass
class DedupeOptions:
    """Options consumed by the extractor and resolver."""
    include_scopes: List[str] = field(default_factory=list)
    include_packages: List[str] = field(default_factory=list)
    exclude_packages: List[str] = field(default_factory=list)
    exclude_scopes: List[str] = field(default_factory=list)
    strategy: Strategy = Strategy.FEWER_HIGHEST
    include_prerelease: bool = False

    def __post_init__(self):
        self.strategy = Strategy.parse(self.strategy)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DedupeOptions":
        """Build options from a config mapping using camelCase or snake_case keys."""
        kwargs = {}
        for key, value in (data or {}).items():
            name = _OPTION_ALIASES.get(key, key)
            if name in ("include_scopes", "include_packages", "exclude_packages", "exclude_scopes"):
                kwargs[name] = _as_list(value)
            elif name == "include_prerelease":
                kwargs[name] = _as_bool(key, value)
            elif name == "strategy":
                kwargs[name] = Strategy.parse(value)
        return cls(**kwargs)
