"""Label parsing helpers for Docker containers.

Brief:
  - Containers opt into DNS publication through labels that mirror the
    external-dns annotation keys (hostname, target, ttl, ...).
  - Grouping keys come from the labels docker-compose and swarm attach to
    every container they manage.

Inputs:
  - Container label mappings (str -> str).

Outputs:
  - Parsed hostnames, targets, TTLs, provider-specific hints and grouping keys.
"""

from __future__ import annotations

import re
from typing import Dict, List, Mapping, Optional, Tuple

HOSTNAME_KEY = "external-dns.alpha.kubernetes.io/hostname"
TARGET_KEY = "external-dns.alpha.kubernetes.io/target"
TTL_KEY = "external-dns.alpha.kubernetes.io/ttl"
SET_IDENTIFIER_KEY = "external-dns.alpha.kubernetes.io/set-identifier"
CLOUDFLARE_PROXIED_KEY = "external-dns.alpha.kubernetes.io/cloudflare-proxied"
ALIAS_KEY = "external-dns.alpha.kubernetes.io/alias"
AWS_PREFIX = "external-dns.alpha.kubernetes.io/aws-"

NETWORK_KEY = "external-dns/network"
COMPOSE_SERVICE_KEY = "com.docker.compose.service"
SWARM_SERVICE_ID_KEY = "com.docker.swarm.service.id"
SWARM_SERVICE_NAME_KEY = "com.docker.swarm.service.name"

TTL_MAXIMUM = 2**32 - 1

_INTEGER = re.compile(r"-?[0-9]+")


class TTLParseError(ValueError):
    """Raised when the ttl label is present but is not a usable TTL."""


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in str(value).split(",") if item.strip()]


def get_hostnames(labels: Mapping[str, str]) -> List[str]:
    """Brief: Return the DNS names requested by the hostname label.

    Inputs:
      - labels: Container label mapping.

    Outputs:
      - list[str]: Comma-separated names, stripped and without a trailing
        dot; entries left empty are dropped. An empty list means the
        container does not ask for any record.
    """

    raw = labels.get(HOSTNAME_KEY)
    if raw is None:
        return []
    names = (item.rstrip(".") for item in _split_list(raw))
    return [name for name in names if name]


def get_ttl(labels: Mapping[str, str]) -> Optional[int]:
    """Brief: Parse the ttl label.

    Inputs:
      - labels: Container label mapping.

    Outputs:
      - Optional[int]: TTL in seconds, or None when the label is absent.

    Raises:
      - TTLParseError: when the label is not an integer in [0, 2**32 - 1].

    Example:
      >>> get_ttl({TTL_KEY: "1700"})
      1700
    """

    raw = labels.get(TTL_KEY)
    if raw is None:
        return None
    text = str(raw).strip()
    if not _INTEGER.fullmatch(text):
        raise TTLParseError(f"{raw!r} is not a valid TTL value")
    value = int(text)
    if value < 0 or value > TTL_MAXIMUM:
        raise TTLParseError(
            f"TTL value must be between [0, {TTL_MAXIMUM}], got {value}"
        )
    return value


def get_targets(labels: Mapping[str, str]) -> List[str]:
    """Brief: Return explicit targets from the target label.

    Inputs:
      - labels: Container label mapping.

    Outputs:
      - list[str]: Comma-separated targets with any trailing dot removed;
        empty when the label is absent or blank.
    """

    raw = labels.get(TARGET_KEY)
    if not raw:
        return []
    targets: List[str] = []
    for item in _split_list(raw):
        item = item.rstrip(".")
        if item:
            targets.append(item)
    return targets


def get_provider_specific(
    labels: Mapping[str, str],
) -> Tuple[Dict[str, str], Optional[str]]:
    """Brief: Collect provider-specific hints and the set identifier.

    Inputs:
      - labels: Container label mapping.

    Outputs:
      - (provider_specific, set_identifier):
          - provider_specific: dict with the cloudflare-proxied label (full
            key), "alias" when the alias label is "true", and "aws/<attr>" for
            every aws-<attr> label.
          - set_identifier: value of the set-identifier label, or None.
    """

    provider_specific: Dict[str, str] = {}
    set_identifier: Optional[str] = None

    if CLOUDFLARE_PROXIED_KEY in labels:
        provider_specific[CLOUDFLARE_PROXIED_KEY] = labels[CLOUDFLARE_PROXIED_KEY]
    if labels.get(ALIAS_KEY) == "true":
        provider_specific["alias"] = "true"

    for key in sorted(labels):
        if key == SET_IDENTIFIER_KEY:
            set_identifier = labels[key]
        elif key.startswith(AWS_PREFIX):
            attr = key[len(AWS_PREFIX) :]
            provider_specific[f"aws/{attr}"] = labels[key]

    return provider_specific, set_identifier


def get_preferred_network(labels: Mapping[str, str]) -> Tuple[Optional[str], bool]:
    """Return (network name, present?) for the network preference label."""

    if NETWORK_KEY not in labels:
        return None, False
    return labels[NETWORK_KEY], True


def get_compose_service(labels: Mapping[str, str]) -> Optional[str]:
    # Blank values behave like a missing label.
    return labels.get(COMPOSE_SERVICE_KEY) or None


def get_swarm_service_id(labels: Mapping[str, str]) -> Optional[str]:
    return labels.get(SWARM_SERVICE_ID_KEY) or None
