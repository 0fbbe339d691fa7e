"""Records shared by the extractor, resolver and rewriter."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from lockfile.descriptor import Descriptor


@dataclass
class PackageInstance:
    """One occurrence of a package requirement in the lockfile."""
    package_key: str
    package_name: str
    descriptor_string: str
    descriptor: Descriptor
    actual_descriptor: Descriptor
    requested_protocol: Optional[str]
    requested_version: str
    installed_version: str
    entry: Dict[str, Any] = field(repr=False)
    ignored: bool = False
    satisfied_by: List[str] = field(default_factory=list)  # ordered set
    candidate_versions: Optional[List[str]] = None
    best_version: Optional[str] = None

    def add_satisfying(self, version: str) -> None:
        if version not in self.satisfied_by:
            self.satisfied_by.append(version)

    @property
    def changed(self) -> bool:
        return self.best_version != self.installed_version


@dataclass
class VersionRecord:
    """A distinct installed version seen among a group's non-ignored instances.

    ``satisfies`` holds the descriptor strings of the instances whose range
    accepts this version; its length is the popularity used for ranking.
    """
    version: str
    entry: Dict[str, Any] = field(repr=False)
    satisfies: List[str] = field(default_factory=list)

    @property
    def popularity(self) -> int:
        return len(self.satisfies)


# packageKey -> ordered instances sharing it
PackageGroups = Dict[str, List[PackageInstance]]

# version -> record, one table per packageKey
VersionTable = Dict[str, VersionRecord]
