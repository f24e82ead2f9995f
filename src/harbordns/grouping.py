"""Per-pass grouping state for compose and swarm service containers.

Brief:
  - PendingState captures what one grouped container contributes.
  - OrderedGroups keeps groups in first-insertion order of their keys.
  - merge_group folds a group into its representative without mutating any
    member.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import (
    Dict,
    Generic,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
)

T = TypeVar("T")


@dataclass(frozen=True)
class PendingState:
    """Brief: One container's contribution to a compose or swarm group.

    Inputs (constructor fields):
      - ttl: Parsed TTL or None.
      - targets: Targets resolved for this container.
      - provider_specific: Provider hints from the container labels.
      - set_identifier: Optional set identifier.
      - has_fallback_target: True when targets came from network resolution
        rather than the target label.
      - labels: Original labels; the representative's hostnames come from here.

    Outputs:
      - PendingState instance.
    """

    ttl: Optional[int]
    targets: Tuple[str, ...]
    provider_specific: Mapping[str, str] = field(default_factory=dict)
    set_identifier: Optional[str] = None
    has_fallback_target: bool = False
    labels: Mapping[str, str] = field(default_factory=dict)


class OrderedGroups(Generic[T]):
    """Brief: Ordered multimap of group key -> members.

    Keys iterate in the order they were first added; members keep the order
    they were appended in.

    Example:
      >>> groups = OrderedGroups()
      >>> groups.add("b", 1); groups.add("a", 2); groups.add("b", 3)
      >>> list(groups.items())
      [('b', [1, 3]), ('a', [2])]
    """

    def __init__(self) -> None:
        self._order: List[str] = []
        self._members: Dict[str, List[T]] = {}

    def add(self, key: str, member: T) -> None:
        if key not in self._members:
            self._order.append(key)
            self._members[key] = []
        self._members[key].append(member)

    def keys(self) -> List[str]:
        return list(self._order)

    def get(self, key: str) -> List[T]:
        return list(self._members.get(key, []))

    def items(self) -> Iterator[Tuple[str, List[T]]]:
        for key in self._order:
            yield key, list(self._members[key])

    def __contains__(self, key: object) -> bool:
        return key in self._members

    def __len__(self) -> int:
        return len(self._order)


def merge_group(members: Sequence[PendingState]) -> PendingState:
    """Brief: Fold a group into its representative.

    Inputs:
      - members: Pending states in scan order; must be non-empty.

    Outputs:
      - PendingState: a copy of the first member whose targets are extended,
        in scan order, with the targets of every later member that used
        network fallback. Members with explicit target labels add nothing.

    Raises:
      - ValueError: when members is empty.
    """

    if not members:
        raise ValueError("cannot merge an empty group")

    representative = members[0]
    targets = list(representative.targets)
    for member in members[1:]:
        # Fallback targets are per-container IPs, so they never repeat.
        if member.has_fallback_target:
            targets.extend(member.targets)
    return replace(representative, targets=tuple(targets))
