"""
Brief: Tests for harbordns.grouping ordered groups and representative merge.

Inputs:
  - None

Outputs:
  - None
"""

import pytest

from harbordns.grouping import OrderedGroups, PendingState, merge_group


def _state(targets, fallback, ttl=None):
    return PendingState(
        ttl=ttl,
        targets=tuple(targets),
        has_fallback_target=fallback,
        labels={"id": targets[0]},
    )


def test_ordered_groups_first_insertion_order():
    """
    Brief: Keys iterate in first-insertion order, members in append order.

    Inputs:
      - None

    Outputs:
      - None: Asserts key and member order
    """
    groups = OrderedGroups()
    groups.add("whoami2", 1)
    groups.add("whoami", 2)
    groups.add("whoami2", 3)
    assert groups.keys() == ["whoami2", "whoami"]
    assert list(groups.items()) == [("whoami2", [1, 3]), ("whoami", [2])]
    assert "whoami" in groups
    assert "missing" not in groups
    assert groups.get("missing") == []
    assert len(groups) == 2


def test_merge_group_appends_fallback_targets_only():
    """
    Brief: Only later members with network-fallback targets add targets.

    Inputs:
      - None

    Outputs:
      - None: Asserts merged targets and representative fields
    """
    rep = _state(["172.19.0.2"], True, ttl=1500)
    members = [
        rep,
        _state(["gateway.example.local"], False),
        _state(["172.19.0.3"], True),
        _state(["172.19.0.4"], True),
    ]
    merged = merge_group(members)
    assert merged.targets == ("172.19.0.2", "172.19.0.3", "172.19.0.4")
    assert merged.ttl == 1500
    assert merged.labels == rep.labels


def test_merge_group_does_not_mutate_members():
    """
    Brief: The fold leaves every member untouched.

    Inputs:
      - None

    Outputs:
      - None: Asserts original targets preserved
    """
    members = [_state(["10.0.0.6"], True), _state(["10.0.0.7"], True)]
    merged = merge_group(members)
    assert merged.targets == ("10.0.0.6", "10.0.0.7")
    assert members[0].targets == ("10.0.0.6",)
    assert merged is not members[0]


def test_merge_group_explicit_representative_skips_explicit_siblings():
    """
    Brief: Siblings with explicit targets add nothing to the representative.

    Inputs:
      - None

    Outputs:
      - None: Asserts single target
    """
    members = [_state(["gateway.example.local"], False) for _ in range(3)]
    assert merge_group(members).targets == ("gateway.example.local",)


def test_merge_group_empty_raises():
    """
    Brief: Empty groups cannot be merged.

    Inputs:
      - None

    Outputs:
      - None: Asserts ValueError
    """
    with pytest.raises(ValueError):
        merge_group([])
