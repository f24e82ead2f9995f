"""Container snapshot models consumed by the endpoint resolver.

Brief:
  - ContainerSnapshot is the immutable view of one container: its labels and
    its network attachments.
  - from_docker_attrs accepts both shapes the Docker SDK hands out: the sparse
    list summary (top-level "Labels") and full inspect data ("Config.Labels").
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class NetworkAttachment:
    """One network endpoint of a container (IP address plus gateway)."""

    ip_address: str = ""
    gateway: str = ""


@dataclass(frozen=True)
class ContainerSnapshot:
    """Brief: Immutable container view used for one resolution pass.

    Inputs (constructor fields):
      - labels: Container labels (copied into a read-only mapping).
      - networks: Network name -> NetworkAttachment.
      - container_id: Optional id, used only in log messages.

    Outputs:
      - ContainerSnapshot instance.

    Example:
      >>> snap = ContainerSnapshot(
      ...     labels={"external-dns.alpha.kubernetes.io/hostname": "web.local"},
      ...     networks={"bridge": NetworkAttachment("172.17.0.2", "172.17.0.1")},
      ... )
      >>> snap.networks["bridge"].ip_address
      '172.17.0.2'
    """

    labels: Mapping[str, str] = field(default_factory=dict)
    networks: Mapping[str, NetworkAttachment] = field(default_factory=dict)
    container_id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "labels", MappingProxyType(dict(self.labels or {}))
        )
        object.__setattr__(
            self, "networks", MappingProxyType(dict(self.networks or {}))
        )

    @property
    def short_id(self) -> str:
        return (self.container_id or "<unknown>")[:12]

    @classmethod
    def from_docker_attrs(cls, attrs: Mapping[str, Any]) -> "ContainerSnapshot":
        """Brief: Build a snapshot from Docker SDK container attrs.

        Inputs:
          - attrs: Container.attrs from docker-py, either the list summary
            (containers.list(sparse=True)) or inspect output.

        Outputs:
          - ContainerSnapshot with labels and per-network IP/gateway data.
        """

        labels = attrs.get("Labels")
        if not isinstance(labels, dict):
            cfg = attrs.get("Config") or {}
            labels = cfg.get("Labels") if isinstance(cfg, dict) else None
        if not isinstance(labels, dict):
            labels = {}

        nets = (attrs.get("NetworkSettings") or {}).get("Networks") or {}
        networks: Dict[str, NetworkAttachment] = {}
        for name, settings in nets.items():
            settings = settings or {}
            networks[str(name)] = NetworkAttachment(
                ip_address=str(settings.get("IPAddress") or "").strip(),
                gateway=str(settings.get("Gateway") or "").strip(),
            )

        return cls(
            labels={str(k): str(v) for k, v in labels.items()},
            networks=networks,
            container_id=attrs.get("Id") or None,
        )
