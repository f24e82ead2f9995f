"""Resolve container snapshots into DNS endpoint records.

Brief:
  - endpoints_from_containers is a pure function over one snapshot of
    containers (and, in swarm mode, the known swarm services).
  - Standalone containers emit as soon as they are scanned; compose and swarm
    service containers are grouped and emitted once per group after the scan.

Inputs:
  - containers: Ordered ContainerSnapshot sequence.
  - services: Optional mapping of swarm service id -> service metadata.
  - cluster_mode: Whether swarm service grouping is active.

Outputs:
  - Ordered list of Endpoint records.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional

from harbordns import annotations
from harbordns.endpoint import Endpoint, endpoints_for_hostname
from harbordns.grouping import OrderedGroups, PendingState, merge_group
from harbordns.models import ContainerSnapshot
from harbordns.network import resolve_network_target

logger = logging.getLogger(__name__)


def _emit(state: PendingState) -> List[Endpoint]:
    out: List[Endpoint] = []
    for hostname in annotations.get_hostnames(state.labels):
        out.extend(
            endpoints_for_hostname(
                hostname,
                state.targets,
                state.ttl,
                state.provider_specific,
                state.set_identifier,
            )
        )
    return out


def _pending_state(container: ContainerSnapshot) -> Optional[PendingState]:
    """Brief: Parse one container into a PendingState.

    Inputs:
      - container: ContainerSnapshot.

    Outputs:
      - PendingState, or None when the container must be skipped (bad TTL or
        no resolvable target).
    """

    labels = container.labels
    try:
        ttl = annotations.get_ttl(labels)
    except annotations.TTLParseError as exc:
        logger.warning("container %s: %s; skipping", container.short_id, exc)
        return None

    targets = annotations.get_targets(labels)
    has_fallback_target = False
    if not targets:
        preferred, _ = annotations.get_preferred_network(labels)
        targets = resolve_network_target(container.networks, preferred)
        has_fallback_target = bool(targets)
    if not targets:
        return None

    provider_specific, set_identifier = annotations.get_provider_specific(labels)
    return PendingState(
        ttl=ttl,
        targets=tuple(targets),
        provider_specific=provider_specific,
        set_identifier=set_identifier,
        has_fallback_target=has_fallback_target,
        labels=labels,
    )


def endpoints_from_containers(
    containers: Iterable[ContainerSnapshot],
    services: Optional[Mapping[str, Any]] = None,
    *,
    cluster_mode: bool = False,
) -> List[Endpoint]:
    """Brief: Build the ordered endpoint list for one container snapshot.

    Inputs:
      - containers: Containers in scan order.
      - services: Swarm service id -> descriptor. Only membership is checked;
        swarm groups whose id is missing (or when services is None) are
        dropped.
      - cluster_mode: When False, the swarm service id label is ignored and
        such containers are treated as compose or standalone containers.

    Outputs:
      - list[Endpoint]: standalone records in scan order, then compose groups
        and finally swarm groups, each in first-seen order of their key.

    Example:
      >>> from harbordns.models import NetworkAttachment
      >>> c = ContainerSnapshot(
      ...     labels={annotations.HOSTNAME_KEY: "web.example.local"},
      ...     networks={"bridge": NetworkAttachment("172.17.0.2")},
      ... )
      >>> [e.targets for e in endpoints_from_containers([c])]
      [['172.17.0.2']]
    """

    endpoints: List[Endpoint] = []
    compose_groups: OrderedGroups[PendingState] = OrderedGroups()
    swarm_groups: OrderedGroups[PendingState] = OrderedGroups()

    for container in containers:
        state = _pending_state(container)
        if state is None:
            continue

        swarm_id = annotations.get_swarm_service_id(container.labels)
        compose_service = annotations.get_compose_service(container.labels)

        if swarm_id and cluster_mode:
            swarm_groups.add(swarm_id, state)
        elif compose_service:
            compose_groups.add(compose_service, state)
        else:
            endpoints.extend(_emit(state))

    for _, members in compose_groups.items():
        endpoints.extend(_emit(merge_group(members)))

    for service_id, members in swarm_groups.items():
        if services is None or service_id not in services:
            continue
        endpoints.extend(_emit(merge_group(members)))

    return endpoints
