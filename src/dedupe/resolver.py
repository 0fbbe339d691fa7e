"""Pick the best version for every package instance.

Round 1 ranks each instance's compatible versions independently; round 2
(``fewerHighest`` only) narrows every instance to versions that some member
of its group already picked, so groups converge on fewer distinct versions.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Callable, Dict, Iterable, List, Optional, Set

from common.logging_utils import extra_context, is_debug_enabled
from versioning.models import DedupeOptions, SatisfactionResult, Strategy
from versioning.semver import check_satisfaction, compare_descending, sort_descending

from .models import PackageGroups, PackageInstance, VersionRecord, VersionTable

logger = logging.getLogger(__name__)

SelectedVersions = Dict[str, Set[str]]


@dataclass
class Resolution:
    """Resolved instances plus the per-group version tables that ranked them."""
    instances: List[PackageInstance] = field(default_factory=list)
    version_tables: Dict[str, VersionTable] = field(default_factory=dict)

    def versions_for(self, instance: PackageInstance) -> VersionTable:
        return self.version_tables.get(instance.package_key, {})

    def changed(self) -> List[PackageInstance]:
        return find_changed_instances(self.instances)


def build_version_table(instances: Iterable[PackageInstance]) -> VersionTable:
    """One record per distinct installed version of the non-ignored instances."""
    table: VersionTable = {}
    for instance in instances:
        if instance.ignored or instance.installed_version in table:
            continue
        table[instance.installed_version] = VersionRecord(
            version=instance.installed_version,
            entry=instance.entry,
        )
    return table


def link_satisfiability(instances: List[PackageInstance], table: VersionTable, include_prerelease: bool = False) -> None:
    """Record which versions of ``table`` each instance accepts, and vice versa."""
    for instance in instances:
        # an instance always accepts what it already has
        instance.add_satisfying(instance.installed_version)

    for version, record in table.items():
        for instance in instances:
            if instance.ignored:
                continue
            outcome = check_satisfaction(version, instance.requested_version, include_prerelease)
            if outcome is SatisfactionResult.RANGE_INVALID:
                continue
            if outcome is SatisfactionResult.SATISFIES:
                instance.add_satisfying(version)
                record.satisfies.append(instance.descriptor_string)


def candidate_comparator(strategy: Strategy, table: VersionTable) -> Callable[[str, str], int]:
    """Comparator ordering candidates best first under ``strategy``."""
    if not strategy.ranks_by_popularity:
        return compare_descending

    def _popularity(version: str) -> int:
        record = table.get(version)
        return record.popularity if record else 0

    def _compare(version_a: str, version_b: str) -> int:
        diff = _popularity(version_b) - _popularity(version_a)
        if diff:
            return 1 if diff > 0 else -1
        return compare_descending(version_a, version_b)

    return _compare


def compute_package_instances(
    instances: List[PackageInstance], options: Optional[DedupeOptions] = None
) -> VersionTable:
    """Round 1 for one group: link satisfiability and make the initial pick.

    Mutates the instances of the group and returns its version table.
    """
    options = options or DedupeOptions()
    table = build_version_table(instances)
    link_satisfiability(instances, table, options.include_prerelease)
    compare = candidate_comparator(options.strategy, table)

    for instance in instances:
        if instance.ignored:
            instance.best_version = instance.installed_version
            continue
        instance.candidate_versions = sorted(instance.satisfied_by, key=cmp_to_key(compare))
        instance.best_version = instance.candidate_versions[0]
    return table


def build_selected_versions(instances: Iterable[PackageInstance]) -> SelectedVersions:
    """Map each package key to the set of versions its instances picked."""
    selected: SelectedVersions = {}
    for instance in instances:
        selected.setdefault(instance.package_key, set()).add(instance.best_version)
    return selected


def select_best_versions(instances: List[PackageInstance], selected: SelectedVersions) -> List[PackageInstance]:
    """Round 2: steer each instance to the highest version its group already chose.

    Returns new instances; the inputs are left untouched.
    """
    resolved = []
    for instance in instances:
        if instance.ignored or not instance.candidate_versions:
            resolved.append(instance)
            continue
        chosen = selected.get(instance.package_key, set())
        remaining = sort_descending(v for v in instance.candidate_versions if v in chosen)
        resolved.append(dataclasses.replace(instance, best_version=remaining[0]))
    return resolved


def resolve(groups: PackageGroups, options: Optional[DedupeOptions] = None) -> Resolution:
    """Resolve every group and return the instances with their best versions."""
    options = options or DedupeOptions()
    resolution = Resolution()

    for package_key, instances in groups.items():
        resolution.version_tables[package_key] = compute_package_instances(instances, options)
        resolution.instances.extend(instances)

    if options.strategy.converges:
        selected = build_selected_versions(resolution.instances)
        resolution.instances = select_best_versions(resolution.instances, selected)

    if is_debug_enabled(logger):
        logger.debug(
            "Resolved package instances",
            extra=extra_context(
                component="resolver",
                action="resolve",
                strategy=options.strategy.value,
                groups=len(groups),
                instances=len(resolution.instances),
                changed=len(find_changed_instances(resolution.instances)),
            ),
        )
    return resolution


def find_changed_instances(instances: Iterable[PackageInstance]) -> List[PackageInstance]:
    """Instances whose best version differs from the installed one."""
    return [instance for instance in instances if instance.best_version != instance.installed_version]
