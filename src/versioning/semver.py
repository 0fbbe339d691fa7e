"""npm range semantics over semantic_version.

Range validity, satisfaction and descending version ordering, with an
``include_prerelease`` switch mirroring npm's option of the same name.
"""

from functools import cmp_to_key, lru_cache
from typing import Iterable, List, Optional

import semantic_version
from semantic_version.base import AllOf, AnyOf, Range

from .models import SatisfactionResult


@lru_cache(maxsize=4096)
def _parse_version(version: str) -> Optional[semantic_version.Version]:
    try:
        return semantic_version.Version(version)
    except ValueError:
        return None


def _prerelease_floor(target: semantic_version.Version) -> semantic_version.Version:
    """``5.0.0`` -> ``5.0.0-0``, the lowest prerelease of that release."""
    return semantic_version.Version(
        major=target.major,
        minor=target.minor,
        patch=target.patch,
        prerelease=("0",),
    )


def _relax_prerelease(clause):
    """Rebuild a clause tree so prerelease versions compare by plain ordering.

    Exclusive upper bounds on a release move down to that release's ``-0``
    prerelease, as npm does for caret, tilde and x-ranges: ``^4.0.3`` must not
    admit ``5.0.0-beta``.
    """
    if isinstance(clause, Range):
        target = clause.target
        if clause.operator == Range.OP_LT and not target.prerelease:
            target = _prerelease_floor(target)
        return Range(
            clause.operator,
            target,
            prerelease_policy=Range.PRERELEASE_ALWAYS,
            build_policy=clause.build_policy,
        )
    if isinstance(clause, AllOf):
        return AllOf(*(_relax_prerelease(c) for c in clause.clauses))
    if isinstance(clause, AnyOf):
        return AnyOf(*(_relax_prerelease(c) for c in clause.clauses))
    return clause


@lru_cache(maxsize=4096)
def _parse_range(range_str: str, include_prerelease: bool):
    """Return a matchable clause for ``range_str`` or None when it is not a range."""
    try:
        spec = semantic_version.NpmSpec(range_str.strip())
    except ValueError:
        return None
    if include_prerelease:
        return _relax_prerelease(spec.clause)
    return spec.clause


def range_is_valid(range_str: str, include_prerelease: bool = False) -> bool:
    """Return True when ``range_str`` is a valid npm version range."""
    if not isinstance(range_str, str):
        return False
    return _parse_range(range_str, include_prerelease) is not None


def check_satisfaction(version: str, range_str: str, include_prerelease: bool = False) -> SatisfactionResult:
    """Test ``version`` against ``range_str``.

    An unparsable range yields RANGE_INVALID rather than an exception; an
    unparsable version never satisfies anything.
    """
    if not range_is_valid(range_str, include_prerelease):
        return SatisfactionResult.RANGE_INVALID
    parsed = _parse_version(version)
    if parsed is None:
        return SatisfactionResult.DOES_NOT_SATISFY
    clause = _parse_range(range_str, include_prerelease)
    if clause.match(parsed):
        return SatisfactionResult.SATISFIES
    return SatisfactionResult.DOES_NOT_SATISFY


def satisfies(version: str, range_str: str, include_prerelease: bool = False) -> bool:
    """Boolean shorthand for check_satisfaction."""
    return check_satisfaction(version, range_str, include_prerelease) is SatisfactionResult.SATISFIES


def compare_descending(version_a: str, version_b: str) -> int:
    """Comparator placing higher versions first.

    Invalid version strings sort after every valid one, ordered by text.
    """
    parsed_a = _parse_version(version_a)
    parsed_b = _parse_version(version_b)
    if parsed_a is not None and parsed_b is not None:
        if parsed_a > parsed_b:
            return -1
        if parsed_a < parsed_b:
            return 1
        return 0
    if parsed_a is not None:
        return -1
    if parsed_b is not None:
        return 1
    if version_a < version_b:
        return -1
    if version_a > version_b:
        return 1
    return 0


def sort_descending(versions: Iterable[str]) -> List[str]:
    """Return versions ordered highest first (stable for equal versions)."""
    return sorted(versions, key=cmp_to_key(compare_descending))
