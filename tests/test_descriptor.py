"""Tests for descriptor and range parsing."""

import pytest

from lockfile.descriptor import (
    Descriptor,
    DescriptorParseError,
    parse_descriptor,
    parse_range,
    stringify_descriptor,
    try_parse_descriptor,
)


class TestParseDescriptor:
    """Descriptor grammar."""

    def test_plain_package(self):
        """Unscoped descriptors split into name and range."""
        d = parse_descriptor("lodash@npm:^4.17.0")
        assert d.scope is None
        assert d.name == "lodash"
        assert d.range == "npm:^4.17.0"
        assert d.ident == "lodash"

    def test_scoped_package(self):
        """Scoped descriptors keep the scope separately."""
        d = parse_descriptor("@babel/core@npm:^7.0.0")
        assert d.scope == "babel"
        assert d.name == "core"
        assert d.ident == "@babel/core"

    def test_range_with_alternatives(self):
        """Ranges with spaces and || survive intact."""
        d = parse_descriptor("string-width@npm:^1.0.2 || 2 || 3 || 4")
        assert d.range == "npm:^1.0.2 || 2 || 3 || 4"

    @pytest.mark.parametrize("text", ["lodash", "@scope", "", "@scope/"])
    def test_malformed_descriptor_raises(self, text):
        """Malformed descriptors raise DescriptorParseError."""
        with pytest.raises(DescriptorParseError):
            parse_descriptor(text)

    def test_try_parse_returns_none_for_plain_ranges(self):
        """Plain ranges are not descriptors."""
        assert try_parse_descriptor("^4.2.0") is None
        assert try_parse_descriptor(">=1.0.0") is None

    def test_try_parse_alias_target(self):
        """Alias selectors parse as descriptors."""
        d = try_parse_descriptor("string-width@^4.2.0")
        assert d == Descriptor(scope=None, name="string-width", range="^4.2.0")

    def test_stringify_round_trip(self):
        """Stringify reverses parse."""
        text = "@scope/lib@npm:>=1.0.0"
        assert stringify_descriptor(parse_descriptor(text)) == text

    def test_with_range(self):
        """with_range swaps only the range."""
        d = parse_descriptor("@scope/lib@npm:>=1.0.0").with_range("npm:4.17.15")
        assert stringify_descriptor(d) == "@scope/lib@npm:4.17.15"


class TestParseRange:
    """Range grammar."""

    def test_protocol_and_selector(self):
        """The protocol is split off the selector."""
        parts = parse_range("npm:^1.2.0")
        assert parts.protocol == "npm"
        assert parts.selector == "^1.2.0"

    def test_no_protocol(self):
        """A range without protocol has none."""
        parts = parse_range("^1.2.0")
        assert parts.protocol is None
        assert parts.selector == "^1.2.0"

    def test_workspace_protocol(self):
        """Workspace paths are selectors."""
        assert parse_range("workspace:.").protocol == "workspace"

    def test_alias_selector_kept_whole(self):
        """An alias selector is not split further."""
        parts = parse_range("npm:string-width@^4.2.0")
        assert parts.protocol == "npm"
        assert parts.selector == "string-width@^4.2.0"

    def test_source_and_params(self):
        """Source and params parts are extracted."""
        parts = parse_range("patch:lodash@npm%3A4.17.21#./fix.patch::version=4.17.21")
        assert parts.protocol == "patch"
        assert parts.source == "lodash@npm%3A4.17.21"
        assert parts.selector == "./fix.patch"
        assert parts.params == "version=4.17.21"
