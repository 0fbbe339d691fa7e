"""Tests for version ranking and cross-instance convergence."""

import pytest

from dedupe.extractor import extract_packages
from dedupe.resolver import (
    build_selected_versions,
    build_version_table,
    compute_package_instances,
    find_changed_instances,
    resolve,
    select_best_versions,
)
from versioning.models import DedupeOptions, Strategy


def _groups(installed):
    """Build groups from ``{descriptor: installed_version}``."""
    return extract_packages({key: {"version": version} for key, version in installed.items()})


def _best(resolution):
    return {i.descriptor_string: i.best_version for i in resolution.instances}


class TestVersionTable:
    """Round 0."""

    def test_duplicate_installed_versions_collapse(self):
        """One table record per installed version."""
        groups = _groups({"lib@npm:^1.1.0": "1.2.0", "lib@npm:^1.2.0": "1.2.0", "lib@npm:^1.3.0": "1.3.0"})
        table = build_version_table(groups["lib@npm"])
        assert list(table) == ["1.2.0", "1.3.0"]

    def test_ignored_instances_contribute_nothing(self):
        """Ignored instances add no versions."""
        groups = extract_packages({"lib@npm:^1.0.0": {"version": "1.0.0", "linkType": "soft"}})
        (instances,) = groups.values()
        assert build_version_table(instances) == {}


class TestRoundOne:
    """Satisfiability and initial pick."""

    def test_popularity_then_highest(self):
        """Popularity ranks first, then version."""
        groups = _groups({"lib@npm:^1.1.0": "1.2.0", "lib@npm:^1.2.0": "1.2.0", "lib@npm:^1.3.0": "1.3.0"})
        instances = groups["lib@npm"]
        table = compute_package_instances(instances, DedupeOptions(strategy=Strategy.MOST_COMMON))
        assert table["1.2.0"].popularity == 2
        assert table["1.3.0"].popularity == 3
        assert [i.best_version for i in instances] == ["1.3.0", "1.3.0", "1.3.0"]
        assert instances[0].candidate_versions == ["1.3.0", "1.2.0"]

    def test_most_common_beats_highest(self):
        """mostCommon prefers the popular version."""
        groups = _groups({"lib@npm:>=1.0.0": "3.0.0", "lib@npm:>=1.1.0": "3.0.0", "lib@npm:^2.0.0": "2.1.0"})
        instances = groups["lib@npm"]
        compute_package_instances(instances, DedupeOptions(strategy=Strategy.MOST_COMMON))
        assert [i.best_version for i in instances] == ["2.1.0", "2.1.0", "2.1.0"]

    def test_highest_ignores_popularity(self):
        """highest picks the top version."""
        groups = _groups({"lib@npm:>=1.0.0": "3.0.0", "lib@npm:>=1.1.0": "3.0.0", "lib@npm:^2.0.0": "2.1.0"})
        instances = groups["lib@npm"]
        compute_package_instances(instances, DedupeOptions(strategy=Strategy.HIGHEST))
        assert [i.best_version for i in instances] == ["3.0.0", "3.0.0", "2.1.0"]
        assert instances[0].candidate_versions == ["3.0.0", "2.1.0"]

    def test_own_version_always_satisfies(self):
        """The installed version is always a candidate."""
        groups = _groups({"lib@npm:next": "2.0.0-rc.1", "lib@npm:^1.0.0": "1.0.0"})
        instances = groups["lib@npm"]
        compute_package_instances(instances)
        for instance in instances:
            assert instance.installed_version in instance.satisfied_by

    def test_invalid_range_only_matches_itself(self):
        """Dist-tags only match their own version."""
        groups = _groups({"lib@npm:next": "1.5.0", "lib@npm:^1.0.0": "1.0.0"})
        instances = groups["lib@npm"]
        table = compute_package_instances(instances)
        tagged = instances[0]
        assert tagged.satisfied_by == ["1.5.0"]
        assert tagged.best_version == "1.5.0"
        assert tagged.descriptor_string not in table["1.0.0"].satisfies

    def test_ignored_instance_keeps_installed_version(self):
        """Ignored instances keep their version."""
        groups = extract_packages({"lib@npm:^1.0.0": {"version": "1.0.0", "linkType": "soft"}})
        (instances,) = groups.values()
        compute_package_instances(instances)
        assert instances[0].best_version == "1.0.0"
        assert instances[0].candidate_versions is None


class TestRoundTwo:
    """Cross-instance consensus."""

    @pytest.fixture
    def divergent(self):
        # >=1.0.0 first picks the popular 1.0.0 although ^1.2.0 already holds 1.2.0
        return _groups({
            "lib@npm:>=1.0.0": "1.0.0",
            "lib@npm:~1.0.0": "1.0.0",
            "lib@npm:<1.1.0": "1.0.0",
            "lib@npm:^1.2.0": "1.2.0",
        })

    def test_selected_versions_per_key(self):
        """Round 1 picks are collected per package key."""
        groups = _groups({"lib@npm:^1.0.0": "1.0.0", "other@npm:^2.0.0": "2.0.0"})
        for instances in groups.values():
            compute_package_instances(instances)
        selected = build_selected_versions(i for g in groups.values() for i in g)
        assert selected == {"lib@npm": {"1.0.0"}, "other@npm": {"2.0.0"}}

    def test_round_two_returns_new_instances(self, divergent):
        """Round 2 leaves its inputs untouched."""
        instances = divergent["lib@npm"]
        compute_package_instances(instances)
        selected = build_selected_versions(instances)
        resolved = select_best_versions(instances, selected)
        assert all(a is not b for a, b in zip(instances, resolved))

    def test_without_round_two_popular_pick_stays(self, divergent):
        """Without round 2 the popular pick stays."""
        most_common = resolve(divergent, DedupeOptions(strategy=Strategy.MOST_COMMON))
        assert _best(most_common)["lib@npm:>=1.0.0"] == "1.0.0"

    def test_round_two_default_strategy(self, divergent):
        """The default strategy converges on picked versions."""
        resolution = resolve(divergent)
        assert _best(resolution) == {
            "lib@npm:>=1.0.0": "1.2.0",
            "lib@npm:~1.0.0": "1.0.0",
            "lib@npm:<1.1.0": "1.0.0",
            "lib@npm:^1.2.0": "1.2.0",
        }

    def test_round_two_only_picks_chosen_and_compatible_versions(self, divergent):
        """Round 2 picks come from round 1 and satisfy the range."""
        resolution = resolve(divergent)
        round_one = {"1.0.0", "1.2.0"}
        for instance in resolution.instances:
            assert instance.best_version in instance.satisfied_by
            assert instance.best_version in round_one

    def test_convergence_never_increases_distinct_versions(self, divergent):
        """Round 2 never adds distinct versions."""
        one = resolve(_groups({
            "lib@npm:>=1.0.0": "1.0.0",
            "lib@npm:~1.0.0": "1.0.0",
            "lib@npm:<1.1.0": "1.0.0",
            "lib@npm:^1.2.0": "1.2.0",
        }), DedupeOptions(strategy=Strategy.MOST_COMMON))
        two = resolve(divergent)
        assert len({i.best_version for i in two.instances}) <= len({i.best_version for i in one.instances})

    def test_round_two_skipped_for_other_strategies(self):
        """Only fewerHighest runs round 2."""
        groups = _groups({"lib@npm:^1.0.0": "1.0.0"})
        resolution = resolve(groups, DedupeOptions(strategy=Strategy.HIGHEST))
        assert resolution.instances[0] is groups["lib@npm"][0]


class TestResolve:
    """End-to-end resolution properties."""

    def test_single_instance_is_a_no_op(self):
        """A lone instance keeps its version."""
        resolution = resolve(_groups({"lib@npm:^1.0.0": "1.4.2"}))
        assert _best(resolution) == {"lib@npm:^1.0.0": "1.4.2"}
        assert find_changed_instances(resolution.instances) == []

    @pytest.mark.parametrize("strategy", list(Strategy))
    def test_max_compatible_version(self, strategy):
        """All strategies merge onto the highest compatible version."""
        resolution = resolve(
            _groups({"lib@npm:^1.1.0": "1.2.0", "lib@npm:^1.2.0": "1.2.0", "lib@npm:^1.3.0": "1.3.0"}),
            DedupeOptions(strategy=strategy),
        )
        assert set(_best(resolution).values()) == {"1.3.0"}
        changed = [i.descriptor_string for i in resolution.changed()]
        assert changed == ["lib@npm:^1.1.0", "lib@npm:^1.2.0"]

    def test_best_version_always_satisfies(self):
        """The best version is always a satisfier."""
        resolution = resolve(_groups({
            "lib@npm:>=1.0.0": "3.0.0",
            "lib@npm:>=1.1.0": "3.0.0",
            "lib@npm:^2.0.0": "2.1.0",
            "lib@npm:next": "4.0.0-rc.0",
        }))
        for instance in resolution.instances:
            assert instance.best_version in instance.satisfied_by

    def test_prerelease_flag(self):
        """Prereleases only count with the flag."""
        installed = {"typescript@npm:^4.1.0-beta": "4.1.0-beta", "typescript@npm:^4.0.3": "4.0.3"}
        with_flag = resolve(_groups(installed), DedupeOptions(include_prerelease=True))
        without = resolve(_groups(installed))
        assert set(_best(with_flag).values()) == {"4.1.0-beta"}
        assert _best(without) == installed

    @pytest.mark.parametrize("strategy", list(Strategy))
    def test_prerelease_flag_never_crosses_a_major(self, strategy):
        """A caret range does not move to a prerelease of the next major."""
        installed = {"lib@npm:^4.0.3": "4.0.3", "lib@npm:^5.0.0-beta": "5.0.0-beta"}
        resolution = resolve(_groups(installed), DedupeOptions(strategy=strategy, include_prerelease=True))
        assert _best(resolution) == installed
        assert resolution.changed() == []

    def test_excluded_scope_is_untouched(self):
        """Excluded scopes keep installed versions."""
        entries = {"@a/lib@npm:^1.0.0": {"version": "1.0.0"}, "@a/lib@npm:^1.0.1": {"version": "1.0.1"}}
        groups = extract_packages(entries, DedupeOptions(exclude_scopes=["@a"]))
        resolution = resolve(groups)
        assert list(groups) == list(entries)
        assert all(i.best_version == i.installed_version for i in resolution.instances)

    def test_versions_for_looks_up_group_table(self):
        """versions_for returns the group table."""
        resolution = resolve(_groups({"lib@npm:^1.1.0": "1.2.0", "lib@npm:^1.3.0": "1.3.0"}))
        table = resolution.versions_for(resolution.instances[0])
        assert set(table) == {"1.2.0", "1.3.0"}

    def test_empty_groups(self):
        """No groups resolve to nothing."""
        resolution = resolve({})
        assert resolution.instances == []
