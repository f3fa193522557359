import json

import yaml

from nad_provisioner.config import NetworkConfig, NetworkKind, VlanRange
from nad_provisioner.manifest import build_manifest


def build_bridge_network(**overrides) -> NetworkConfig:
    values = dict(
        prefix="nic1-vlan",
        kind=NetworkKind.BRIDGE,
        namespace="vms",
        bridge="br-vmdata",
        labels={"env": "prod", "team": "net"},
    )
    values.update(overrides)
    return NetworkConfig(**values)


def build_localnet_network(**overrides) -> NetworkConfig:
    values = dict(
        prefix="vlan",
        kind=NetworkKind.LOCALNET,
        namespace="tenant-a",
        labels={"env": "prod"},
    )
    values.update(overrides)
    return NetworkConfig(**values)


def test_one_distinct_manifest_per_vlan():
    network = build_localnet_network()
    vlan_range = VlanRange(10, 60)

    manifests = [build_manifest(vlan_id, network) for vlan_id in vlan_range]

    assert len(manifests) == len(vlan_range) == 51
    assert len({m.name for m in manifests}) == 51
    assert manifests[0].name == "vlan10"
    assert manifests[-1].name == "vlan60"


def test_bridge_manifest_payload():
    manifest = build_manifest(42, build_bridge_network())

    assert manifest.name == "nic1-vlan42"
    assert manifest.namespace == "vms"
    assert manifest.description == "VLAN 42 br-vmdata"
    assert manifest.annotations == {
        "k8s.v1.cni.cncf.io/resourceName": "bridge.network.kubevirt.io/br-vmdata"
    }
    assert list(manifest.network_payload) == [
        "cniVersion",
        "name",
        "type",
        "bridge",
        "ipam",
        "macspoofchk",
        "preserveDefaultVlan",
        "vlan",
    ]
    assert manifest.network_payload["cniVersion"] == "0.3.1"
    assert manifest.network_payload["type"] == "bridge"
    assert manifest.network_payload["macspoofchk"] is True
    assert manifest.network_payload["preserveDefaultVlan"] is False
    assert manifest.network_payload["vlan"] == 42


def test_bridge_manifest_mac_spoof_check_disabled():
    manifest = build_manifest(5, build_bridge_network(mac_spoof_check=False))

    assert manifest.network_payload["macspoofchk"] is False
    assert '"macspoofchk": false' in manifest.config_json


def test_localnet_manifest_omits_unset_mtu():
    manifest = build_manifest(100, build_localnet_network())

    assert "mtu" not in manifest.network_payload
    assert "mtu" not in manifest.config_json
    assert manifest.config_json == (
        '{"cniVersion":"0.4.0","name":"vlan100","type":"ovn-k8s-cni-overlay",'
        '"netAttachDefName":"tenant-a/vlan100","topology":"localnet","vlanID":100}'
    )


def test_localnet_manifest_includes_configured_mtu():
    manifest = build_manifest(100, build_localnet_network(mtu=9000))

    assert manifest.network_payload["mtu"] == 9000
    assert '"mtu":9000' in manifest.config_json
    assert manifest.annotations == {
        "k8s.ovn.org/network-id": "100",
        "k8s.ovn.org/network-name": "vlan100",
    }


def test_manifest_yaml_document():
    manifest = build_manifest(7, build_bridge_network())
    text = manifest.to_yaml()
    document = yaml.safe_load(text)

    assert document["apiVersion"] == "k8s.cni.cncf.io/v1"
    assert document["kind"] == "NetworkAttachmentDefinition"
    assert document["metadata"]["name"] == "nic1-vlan7"
    assert document["metadata"]["labels"] == {"env": "prod", "team": "net"}
    assert document["metadata"]["annotations"]["description"] == "VLAN 7 br-vmdata"
    assert json.loads(document["spec"]["config"]) == manifest.network_payload

    assert 'env: "prod"' in text
    assert 'description: "VLAN 7 br-vmdata"' in text
    assert "config: |-" in text


def test_label_values_stay_strings():
    network = build_localnet_network(labels={"tier": "1", "enabled": "true", "quote": 'a"b'})
    document = yaml.safe_load(build_manifest(3, network).to_yaml())

    assert document["metadata"]["labels"] == {"tier": "1", "enabled": "true", "quote": 'a"b'}
    assert document["metadata"]["annotations"]["k8s.ovn.org/network-id"] == "3"


def test_rendering_is_deterministic():
    network = build_localnet_network(mtu=1500)

    first = build_manifest(12, network)
    second = build_manifest(12, network)

    assert first == second
    assert first.to_yaml() == second.to_yaml()
