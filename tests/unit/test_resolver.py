"""Tests for selector parsing and target resolution."""

import pytest

from flotilla.core.exceptions import ConfigurationError, DiscoveryError
from flotilla.core.resolver import (
    TargetResolver,
    parse_instance_ids,
    parse_scope,
    parse_tag_filter,
)


class TestParseInstanceIds:
    def test_trims_and_keeps_order(self):
        assert parse_instance_ids(" i-1, i-2 ,i-3") == ("i-1", "i-2", "i-3")

    def test_keeps_duplicates(self):
        assert parse_instance_ids("i-1,i-1") == ("i-1", "i-1")

    def test_accepts_tuple_from_fire(self):
        assert parse_instance_ids(("i-1", "i-2")) == ("i-1", "i-2")

    @pytest.mark.parametrize("value", ["", " , ", ()])
    def test_rejects_empty(self, value):
        with pytest.raises(ConfigurationError, match="No instance ids"):
            parse_instance_ids(value)


class TestParseTagFilter:
    def test_parses_pairs(self):
        assert parse_tag_filter("env=prod, role = web") == {"env": "prod", "role": "web"}

    def test_accepts_tuple_from_fire(self):
        assert parse_tag_filter(("env=prod", "role=web")) == {"env": "prod", "role": "web"}

    @pytest.mark.parametrize("value", ["env", "env=prod=x", "env:prod"])
    def test_rejects_pairs_without_exactly_one_equals(self, value):
        with pytest.raises(ConfigurationError, match="Invalid tag format"):
            parse_tag_filter(value)

    @pytest.mark.parametrize("value", ["=prod", "env=", " = "])
    def test_rejects_empty_key_or_value(self, value):
        with pytest.raises(ConfigurationError, match="Empty tag key or value"):
            parse_tag_filter(value)

    def test_rejects_empty_filter(self):
        with pytest.raises(ConfigurationError, match="Tag filter is empty"):
            parse_tag_filter(" , ")


class TestParseScope:
    def test_instances(self):
        scope = parse_scope(instances="i-1,i-2")

        assert scope.is_explicit
        assert scope.instance_ids == ("i-1", "i-2")
        assert scope.describe() == "instances i-1,i-2"

    def test_tags(self):
        scope = parse_scope(tags="env=prod")

        assert not scope.is_explicit
        assert scope.tags == {"env": "prod"}
        assert scope.describe() == "tags env=prod"

    def test_both_selectors_rejected(self):
        with pytest.raises(ConfigurationError, match="mutually exclusive"):
            parse_scope(instances="i-1", tags="env=prod")

    def test_no_selector_rejected(self):
        with pytest.raises(ConfigurationError, match="must be specified"):
            parse_scope()


class TestTargetResolver:
    def test_explicit_ids_make_no_network_call(self, fake_cloud):
        targets = TargetResolver(fake_cloud).resolve(
            parse_scope(instances="i-1,i-2"), "us-east-1"
        )

        assert [t.id for t in targets] == ["i-1", "i-2"]
        assert all(t.needs_state_lookup for t in targets)
        assert fake_cloud.calls() == {"discover": [], "state": [], "power": []}

    def test_tag_filter_discovers_matching_instances(self, fake_cloud):
        fake_cloud.add_instance("us-east-1", "i-1", tags={"env": "prod"})
        fake_cloud.add_instance("us-east-1", "i-2", tags={"env": "dev"})

        targets = TargetResolver(fake_cloud).resolve(
            parse_scope(tags="env=prod"), "us-east-1"
        )

        assert [t.id for t in targets] == ["i-1"]
        assert fake_cloud.discover_calls == [("us-east-1", {"env": "prod"})]

    def test_no_match_is_empty_not_error(self, fake_cloud):
        targets = TargetResolver(fake_cloud).resolve(
            parse_scope(tags="env=prod"), "us-east-1"
        )

        assert targets == []

    def test_discovery_failure_raises_region_scoped_error(self, fake_cloud):
        fake_cloud.fail_discovery("eu-west-1")

        with pytest.raises(DiscoveryError) as exc_info:
            TargetResolver(fake_cloud).resolve(parse_scope(tags="env=prod"), "eu-west-1")

        assert exc_info.value.region == "eu-west-1"
        assert "Failed to discover instances" in str(exc_info.value)
