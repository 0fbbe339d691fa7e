"""High-level list/fix operations over lockfile text."""

from __future__ import annotations

import logging
from typing import List, Optional

from constants import Constants
from lockfile.yarn_berry import parse_lockfile, stringify_lockfile
from versioning.models import DedupeOptions

from .extractor import extract_packages
from .models import PackageGroups, PackageInstance
from .resolver import Resolution, find_changed_instances, resolve
from .rewriter import rewrite

logger = logging.getLogger(__name__)


def get_best(groups: PackageGroups, options: Optional[DedupeOptions] = None) -> Resolution:
    return resolve(groups, options or DedupeOptions())


def get_duplicates(groups: PackageGroups, options: Optional[DedupeOptions] = None) -> List[PackageInstance]:
    return find_changed_instances(get_best(groups, options).instances)


def format_duplicate(instance: PackageInstance) -> str:
    return (
        f'Package "{instance.package_name}" wants {instance.requested_version} '
        f"and could get {instance.best_version}, but got {instance.installed_version}"
    )


def list_duplicates(lockfile_text: str, options: Optional[DedupeOptions] = None) -> List[str]:
    """Describe every instance that would move to another version."""
    options = options or DedupeOptions()
    document = parse_lockfile(lockfile_text)
    groups = extract_packages(document.entries, options)
    return [format_duplicate(instance) for instance in get_duplicates(groups, options)]


def fix_duplicates(lockfile_text: str, options: Optional[DedupeOptions] = None) -> str:
    """Return the lockfile text with duplicated entries merged."""
    options = options or DedupeOptions()
    document = parse_lockfile(lockfile_text)
    groups = extract_packages(document.entries, options)
    resolution = get_best(groups, options)
    new_entries = rewrite(
        resolution.instances,
        metadata=document.entries.get(Constants.METADATA_KEY),
        version_tables=resolution.version_tables,
    )
    logger.info(
        "Rewrote %d lockfile entries into %d",
        len(document.entries),
        len(new_entries),
    )
    return stringify_lockfile(new_entries, header=document.header, newline=document.newline)
