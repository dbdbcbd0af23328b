"""Tests for role-to-access-tier resolution."""

from __future__ import annotations

import pytest

from redmag.access.policy import AccessTier, RolePolicy, TieBreak, resolve_tier


class TestResolveTier:

    def test_read_role(self):
        assert resolve_tier(1, {1}, {2}) is AccessTier.READ

    def test_read_write_role(self):
        assert resolve_tier(2, {1}, {2}) is AccessTier.READ_WRITE

    def test_unlisted_role_gets_nothing(self):
        assert resolve_tier(3, {1}, {2}) is AccessTier.NONE
        assert resolve_tier(3, [], []) is AccessTier.NONE

    def test_role_in_both_sets_defaults_to_read(self):
        # Read roles are checked first; this precedence is intentional.
        for _ in range(3):
            assert resolve_tier(5, {1, 5}, {2, 5}) is AccessTier.READ

    def test_role_in_both_sets_with_read_write_tie_break(self):
        assert resolve_tier(5, {5}, {5}, TieBreak.READ_WRITE) is AccessTier.READ_WRITE

    def test_tie_break_does_not_affect_single_set_roles(self):
        assert resolve_tier(1, {1}, {2}, TieBreak.READ_WRITE) is AccessTier.READ
        assert resolve_tier(2, {1}, {2}, TieBreak.READ_WRITE) is AccessTier.READ_WRITE


class TestRolePolicy:

    def test_resolve(self):
        policy = RolePolicy([1], [2])
        assert policy.resolve(1) is AccessTier.READ
        assert policy.resolve(2) is AccessTier.READ_WRITE
        assert policy.resolve(3) is AccessTier.NONE

    def test_overlapping_roles(self):
        assert RolePolicy([1, 2], [2, 3]).overlapping_roles == {2}
        assert RolePolicy([1], [2]).overlapping_roles == frozenset()

    def test_tie_break_from_string(self):
        policy = RolePolicy([4], [4], "read-write")
        assert policy.tie_break is TieBreak.READ_WRITE
        assert policy.resolve(4) is AccessTier.READ_WRITE

    def test_bad_tie_break(self):
        with pytest.raises(ValueError):
            RolePolicy([1], [2], "write")
