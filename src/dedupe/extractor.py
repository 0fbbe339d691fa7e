"""Flatten lockfile entries into package instances grouped by package key."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from constants import Constants
from lockfile.descriptor import parse_descriptor, parse_range, try_parse_descriptor
from versioning.models import DedupeOptions

from .models import PackageGroups, PackageInstance

logger = logging.getLogger(__name__)


def _in_scopes(package_name: str, scopes) -> bool:
    return any(package_name.startswith(f"{scope}/") for scope in scopes)


def is_filtered_out(package_name: str, options: DedupeOptions) -> bool:
    """Apply include/exclude filters; scope filters win over package filters."""
    if options.include_scopes and not _in_scopes(package_name, options.include_scopes):
        return True
    if options.exclude_scopes and _in_scopes(package_name, options.exclude_scopes):
        return True
    if options.include_packages and package_name not in options.include_packages:
        return True
    if options.exclude_packages and package_name in options.exclude_packages:
        return True
    return False


def extract_packages(entries: Mapping[str, Dict[str, Any]], options: Optional[DedupeOptions] = None) -> PackageGroups:
    """Build ``packageKey -> [PackageInstance]`` from raw lockfile entries.

    Every descriptor string of a compound key yields one instance, all sharing
    the same entry record.

    Raises:
        DescriptorParseError: when a key holds a malformed descriptor.
    """
    options = options or DedupeOptions()
    packages: PackageGroups = {}

    for entry_name, entry in entries.items():
        if entry_name == Constants.METADATA_KEY:
            continue

        for descriptor_string in entry_name.split(Constants.MULTI_KEY_SEPARATOR):
            descriptor = parse_descriptor(descriptor_string)
            range_parts = parse_range(descriptor.range)

            # "foo@npm:bar@^1.0.0" requests bar under the name foo
            actual_descriptor = try_parse_descriptor(range_parts.selector) or descriptor
            package_name = actual_descriptor.ident

            link_type = entry.get("linkType")
            ignored = (
                range_parts.protocol != Constants.RANGE_PROTOCOL
                or (bool(link_type) and link_type != Constants.HARD_LINK)
            )
            if is_filtered_out(package_name, options):
                ignored = True

            if ignored:
                package_key = entry_name
            else:
                package_key = f"{package_name}@{range_parts.protocol}"

            packages.setdefault(package_key, []).append(
                PackageInstance(
                    package_key=package_key,
                    package_name=package_name,
                    descriptor_string=descriptor_string,
                    descriptor=descriptor,
                    actual_descriptor=actual_descriptor,
                    requested_protocol=range_parts.protocol,
                    requested_version=range_parts.selector,
                    installed_version=str(entry.get("version", "")),
                    entry=entry,
                    ignored=ignored,
                )
            )

    logger.debug("Extracted %d package groups from %d entries", len(packages), len(entries))
    return packages
