"""Derive a container's DNS target from its network attachments."""

from __future__ import annotations

from typing import List, Mapping, Optional

from harbordns.models import NetworkAttachment


def resolve_network_target(
    networks: Mapping[str, NetworkAttachment],
    preferred: Optional[str] = None,
) -> List[str]:
    """Brief: Pick the container IP to publish when no target label is set.

    Inputs:
      - networks: Network name -> NetworkAttachment for one container.
      - preferred: Optional network name from the network preference label.

    Outputs:
      - list[str]: A single IP, or an empty list when the choice is ambiguous
        or impossible:
          - a preferred network that is not attached yields nothing (there is
            no fallback to other networks);
          - without a preference, only a container attached to exactly one
            network yields its IP.

    Example:
      >>> resolve_network_target({"bridge": NetworkAttachment("172.17.0.2")})
      ['172.17.0.2']
      >>> resolve_network_target({"a": NetworkAttachment("10.0.0.2"),
      ...                         "b": NetworkAttachment("10.0.1.2")})
      []
    """

    if preferred is not None:
        attachment = networks.get(preferred)
    elif len(networks) == 1:
        attachment = next(iter(networks.values()))
    else:
        return []

    if attachment is None or not attachment.ip_address:
        return []
    return [attachment.ip_address]
