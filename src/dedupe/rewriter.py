"""Regroup resolved instances into new lockfile entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from constants import Constants
from lockfile.descriptor import stringify_descriptor

from .models import PackageInstance, VersionTable

logger = logging.getLogger(__name__)


class RewriteError(RuntimeError):
    """Raised when no entry record can represent a rewritten key."""


@dataclass
class _Resolution:
    keys: List[str] = field(default_factory=list)
    entry: Optional[Dict[str, Any]] = None
    fallback: Optional[Dict[str, Any]] = None


def final_key(instance: PackageInstance) -> str:
    """Descriptor the instance resolves to once its best version is applied."""
    if instance.ignored:
        return instance.package_key
    return stringify_descriptor(
        instance.descriptor.with_range(f"{instance.requested_protocol}:{instance.best_version}")
    )


def rewrite(
    instances: Iterable[PackageInstance],
    metadata: Optional[Mapping[str, Any]] = None,
    version_tables: Optional[Mapping[str, VersionTable]] = None,
) -> Dict[str, Dict[str, Any]]:
    """Build new lockfile entries from resolved instances.

    The representative entry of a key is the one of the first instance that
    kept its installed version. When every instance of a key moved, the entry
    that installed the chosen version elsewhere in the group is used instead.

    Raises:
        RewriteError: when neither source yields an entry for a key.
    """
    version_tables = version_tables or {}
    resolutions: Dict[str, _Resolution] = {}

    for instance in instances:
        key = final_key(instance)
        resolution = resolutions.setdefault(key, _Resolution())
        if instance.descriptor_string not in resolution.keys:
            resolution.keys.append(instance.descriptor_string)
        if resolution.entry is None and instance.best_version == instance.installed_version:
            resolution.entry = instance.entry
        if resolution.fallback is None:
            record = version_tables.get(instance.package_key, {}).get(instance.best_version)
            if record is not None:
                resolution.fallback = record.entry

    # keys sharing one entry record were a single lockfile entry; keep them together
    merged: Dict[int, _Resolution] = {}
    for key, resolution in resolutions.items():
        entry = resolution.entry
        if entry is None:
            if resolution.fallback is None:
                raise RewriteError(f"No lockfile entry provides the version selected for {key}")
            logger.debug("No unchanged instance for %s; using the group's entry for that version", key)
            entry = resolution.fallback
        target = merged.setdefault(id(entry), _Resolution(entry=entry))
        for descriptor_string in resolution.keys:
            if descriptor_string not in target.keys:
                target.keys.append(descriptor_string)

    new_entries: Dict[str, Dict[str, Any]] = {}
    if metadata is not None:
        new_entries[Constants.METADATA_KEY] = dict(metadata)
    for resolution in merged.values():
        new_entries[Constants.MULTI_KEY_SEPARATOR.join(resolution.keys)] = resolution.entry
    return new_entries
