"""Descriptor and range parsing for Yarn Berry lockfile keys.

A descriptor is ``[@<scope>/]<name>@<range>`` and a range is
``[<protocol>:]<selector>[#...][::<params>]``.
"""

import re
from dataclasses import dataclass
from typing import Optional

DESCRIPTOR_RE = re.compile(r"^(?:@([^/]+?)/)?([^@/]+?)(?:@(.+))$")
RANGE_RE = re.compile(r"^([^#:]*:)?((?:(?!::)[^#])*)(?:#((?:(?!::).)*))?(?:::(.*))?$")


class DescriptorParseError(ValueError):
    """Raised when a lockfile key is not a valid descriptor."""


@dataclass(frozen=True)
class Descriptor:
    """Package identity plus the requested range, as written by a requester."""
    scope: Optional[str]
    name: str
    range: str

    @property
    def ident(self) -> str:
        """Scoped package name, e.g. ``@babel/core``."""
        if self.scope:
            return f"@{self.scope}/{self.name}"
        return self.name

    def with_range(self, range_str: str) -> "Descriptor":
        return Descriptor(scope=self.scope, name=self.name, range=range_str)


@dataclass(frozen=True)
class RangeParts:
    """Decomposed range string."""
    protocol: Optional[str]
    selector: str
    source: Optional[str] = None
    params: Optional[str] = None


def try_parse_descriptor(text: str) -> Optional[Descriptor]:
    """Parse ``text`` as a descriptor, returning None when it is not one."""
    if not isinstance(text, str):
        return None
    match = DESCRIPTOR_RE.match(text.strip())
    if not match:
        return None
    scope, name, range_str = match.groups()
    return Descriptor(scope=scope, name=name, range=range_str)


def parse_descriptor(text: str) -> Descriptor:
    """Parse ``text`` as a descriptor or raise DescriptorParseError."""
    descriptor = try_parse_descriptor(text)
    if descriptor is None:
        raise DescriptorParseError(f"Invalid descriptor ({text!r})")
    return descriptor


def parse_range(range_str: str) -> RangeParts:
    """Split a range into protocol (without its colon), selector, source and params."""
    match = RANGE_RE.match(range_str)
    if not match:
        raise DescriptorParseError(f"Invalid range ({range_str!r})")
    protocol, body, hash_part, params = match.groups()
    if protocol is not None:
        protocol = protocol[:-1]
    if hash_part is not None:
        return RangeParts(protocol=protocol, selector=hash_part, source=body, params=params)
    return RangeParts(protocol=protocol, selector=body, params=params)


def stringify_descriptor(descriptor: Descriptor) -> str:
    return f"{descriptor.ident}@{descriptor.range}"
