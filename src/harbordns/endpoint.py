"""Endpoint records produced by the Docker engine source.

Brief:
  - Endpoint is the record intent handed to a downstream DNS synchronizer.
  - infer_record_type decides between address (A, AAAA) and alias (CNAME)
    records from the shape of the targets.
  - endpoints_for_hostname builds the record for one DNS name.
"""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

RECORD_TYPE_A = "A"
RECORD_TYPE_AAAA = "AAAA"
RECORD_TYPE_CNAME = "CNAME"


@dataclass
class Endpoint:
    """Brief: One DNS record intent.

    Inputs (constructor fields):
      - dns_name: Fully qualified name without a trailing dot.
      - targets: Ordered list of record targets.
      - record_type: "A" or "AAAA" for address records, "CNAME" for alias
        records.
      - record_ttl: TTL in seconds; 0 means "not configured".
      - set_identifier: Optional provider-side disambiguation tag ("" when
        unset).
      - provider_specific: Opaque provider hints.
      - labels: Record labels; always empty when produced by this source.

    Outputs:
      - Endpoint instance; to_dict() renders the wire shape.

    Example:
      >>> Endpoint("web.example.local", ["172.17.0.2"], "A").to_dict()["dnsName"]
      'web.example.local'
    """

    dns_name: str
    targets: List[str]
    record_type: str
    record_ttl: int = 0
    set_identifier: str = ""
    provider_specific: Dict[str, str] = field(default_factory=dict)
    labels: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {
            "dnsName": self.dns_name,
            "targets": list(self.targets),
            "recordType": self.record_type,
            "setIdentifier": self.set_identifier,
            "recordTTL": self.record_ttl,
            "providerSpecific": dict(self.provider_specific),
            "labels": dict(self.labels),
        }


def _ip_version(target: str) -> Optional[int]:
    try:
        return ipaddress.ip_address(str(target)).version
    except ValueError:
        return None


def is_ip_literal(target: str) -> bool:
    return _ip_version(target) is not None


def infer_record_type(targets: Sequence[str]) -> str:
    """Brief: Classify a target list as an address or alias record.

    Inputs:
      - targets: Non-empty sequence of target strings.

    Outputs:
      - str: "CNAME" when any target is not an IP literal; "AAAA" when every
        target is an IPv6 literal; otherwise "A" (IPv4 only, or IPv4 mixed
        with IPv6, in which case the IPv6 targets are not published).

    Raises:
      - ValueError: when targets is empty.

    Example:
      >>> infer_record_type(["10.0.0.1", "10.0.0.2"])
      'A'
      >>> infer_record_type(["fd00::2"])
      'AAAA'
      >>> infer_record_type(["10.0.0.1", "gateway.example.local"])
      'CNAME'
    """

    if not targets:
        raise ValueError("cannot infer a record type without targets")
    versions = [_ip_version(t) for t in targets]
    if None in versions:
        return RECORD_TYPE_CNAME
    if all(v == 6 for v in versions):
        return RECORD_TYPE_AAAA
    return RECORD_TYPE_A


def endpoints_for_hostname(
    hostname: str,
    targets: Sequence[str],
    ttl: Optional[int] = None,
    provider_specific: Optional[Mapping[str, str]] = None,
    set_identifier: Optional[str] = None,
) -> List[Endpoint]:
    """Brief: Build the record for one hostname.

    Inputs:
      - hostname: DNS name; a trailing dot is trimmed.
      - targets: Ordered targets for the name.
      - ttl: Optional TTL; None becomes 0.
      - provider_specific: Optional provider hints (copied into the record).
      - set_identifier: Optional set identifier.

    Outputs:
      - list[Endpoint]: Exactly one record, or an empty list when there are
        no targets or the name is empty. Alias records keep only the first
        non-IP target; A records mixed with IPv6 targets keep only the IPv4
        ones.
    """

    dns_name = hostname.rstrip(".")
    if not targets or not dns_name:
        return []

    record_type = infer_record_type(targets)
    if record_type == RECORD_TYPE_AAAA:
        record_targets = list(targets)
    elif record_type == RECORD_TYPE_A:
        record_targets = [t for t in targets if _ip_version(t) == 4]
        if len(record_targets) < len(targets):
            logger.debug(
                "%s: IPv4 record drops IPv6 targets %s",
                hostname,
                [t for t in targets if _ip_version(t) == 6],
            )
    else:
        alias = next(t for t in targets if not is_ip_literal(t))
        if len(targets) > 1:
            logger.debug(
                "%s: alias record keeps a single target %s; dropping %s",
                hostname,
                alias,
                [t for t in targets if t != alias],
            )
        record_targets = [alias]

    return [
        Endpoint(
            dns_name=dns_name,
            targets=record_targets,
            record_type=record_type,
            record_ttl=int(ttl or 0),
            set_identifier=set_identifier or "",
            provider_specific=dict(provider_specific or {}),
            labels={},
        )
    ]
