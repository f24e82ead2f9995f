"""
Brief: Tests for harbordns.endpoint record construction and type inference.

Inputs:
  - None

Outputs:
  - None
"""

import pytest

from harbordns.endpoint import (
    RECORD_TYPE_A,
    RECORD_TYPE_AAAA,
    RECORD_TYPE_CNAME,
    Endpoint,
    endpoints_for_hostname,
    infer_record_type,
    is_ip_literal,
)


def test_is_ip_literal():
    """
    Brief: IPv4 and IPv6 literals are recognized, hostnames are not.

    Inputs:
      - None

    Outputs:
      - None: Asserts classification
    """
    assert is_ip_literal("172.17.0.2")
    assert is_ip_literal("2001:db8::5")
    assert not is_ip_literal("gateway.example.local")
    assert not is_ip_literal("10.0.0.1/24")


def test_infer_record_type_address_and_alias():
    """
    Brief: IPv4 targets are A, IPv6-only targets AAAA, any hostname CNAME.

    Inputs:
      - None

    Outputs:
      - None: Asserts inferred types
    """
    assert infer_record_type(["10.0.0.6", "10.0.0.7"]) == RECORD_TYPE_A
    assert infer_record_type(["2001:db8::1"]) == RECORD_TYPE_AAAA
    assert infer_record_type(["10.0.0.6", "2001:db8::1"]) == RECORD_TYPE_A
    assert infer_record_type(["gateway.example.local"]) == RECORD_TYPE_CNAME
    assert infer_record_type(["10.0.0.6", "gateway.example.local"]) == RECORD_TYPE_CNAME


def test_infer_record_type_empty_raises():
    """
    Brief: An empty target list has no record type.

    Inputs:
      - None

    Outputs:
      - None: Asserts ValueError
    """
    with pytest.raises(ValueError):
        infer_record_type([])


def test_endpoints_for_hostname_address_record():
    """
    Brief: Address records keep every target in order and default ttl to 0.

    Inputs:
      - None

    Outputs:
      - None: Asserts the single Endpoint
    """
    eps = endpoints_for_hostname("gateway.example.local.", ["172.17.0.2", "172.17.0.3"])
    assert eps == [
        Endpoint(
            dns_name="gateway.example.local",
            targets=["172.17.0.2", "172.17.0.3"],
            record_type="A",
            record_ttl=0,
            set_identifier="",
            provider_specific={},
            labels={},
        )
    ]


def test_endpoints_for_hostname_alias_keeps_first_hostname_target():
    """
    Brief: Mixed targets become one CNAME pointing at the first non-IP target.

    Inputs:
      - None

    Outputs:
      - None: Asserts CNAME record with one target
    """
    eps = endpoints_for_hostname(
        "whoami.example.local",
        ["10.0.0.1", "gateway.example.local", "other.example.local"],
        ttl=1700,
        provider_specific={"alias": "true"},
        set_identifier="blue",
    )
    assert len(eps) == 1
    ep = eps[0]
    assert ep.record_type == "CNAME"
    assert ep.targets == ["gateway.example.local"]
    assert ep.record_ttl == 1700
    assert ep.set_identifier == "blue"
    assert ep.provider_specific == {"alias": "true"}


def test_endpoints_for_hostname_copies_provider_specific():
    """
    Brief: Records never share the caller's provider map.

    Inputs:
      - None

    Outputs:
      - None: Asserts copies are independent
    """
    ps = {"aws/weight": "10"}
    first = endpoints_for_hostname("a.local", ["10.0.0.1"], provider_specific=ps)[0]
    second = endpoints_for_hostname("b.local", ["10.0.0.1"], provider_specific=ps)[0]
    first.provider_specific["x"] = "y"
    assert ps == {"aws/weight": "10"}
    assert second.provider_specific == {"aws/weight": "10"}


def test_endpoints_for_hostname_without_targets():
    """
    Brief: No targets means no record.

    Inputs:
      - None

    Outputs:
      - None: Asserts empty list
    """
    assert endpoints_for_hostname("a.local", []) == []


def test_endpoint_to_dict_wire_shape():
    """
    Brief: to_dict renders the downstream wire keys.

    Inputs:
      - None

    Outputs:
      - None: Asserts dict content
    """
    ep = Endpoint("a.local", ["10.0.0.1"], "A", record_ttl=60)
    assert ep.to_dict() == {
        "dnsName": "a.local",
        "targets": ["10.0.0.1"],
        "recordType": "A",
        "setIdentifier": "",
        "recordTTL": 60,
        "providerSpecific": {},
        "labels": {},
    }


def test_endpoints_for_hostname_ipv6_record():
    """
    Brief: IPv6-only targets produce a single AAAA record.

    Inputs:
      - None

    Outputs:
      - None: Asserts record type and targets
    """
    (ep,) = endpoints_for_hostname("v6.example.local", ["fd00::2", "fd00::3"])
    assert ep.record_type == RECORD_TYPE_AAAA
    assert ep.targets == ["fd00::2", "fd00::3"]


def test_endpoints_for_hostname_mixed_families_keeps_ipv4():
    """
    Brief: Mixed IPv4/IPv6 targets publish an A record with the IPv4 targets.

    Inputs:
      - None

    Outputs:
      - None: Asserts record type and filtered targets
    """
    (ep,) = endpoints_for_hostname("dual.example.local", ["fd00::2", "10.0.0.6", "10.0.0.7"])
    assert ep.record_type == RECORD_TYPE_A
    assert ep.targets == ["10.0.0.6", "10.0.0.7"]


def test_endpoints_for_hostname_root_name_is_skipped():
    """
    Brief: A name that is empty after trimming the trailing dot yields nothing.

    Inputs:
      - None

    Outputs:
      - None: Asserts empty lists
    """
    assert endpoints_for_hostname(".", ["10.0.0.6"]) == []
    assert endpoints_for_hostname("", ["10.0.0.6"]) == []
