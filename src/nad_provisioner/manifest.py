"""NetworkAttachmentDefinition manifest construction.

Manifests are assembled as plain Python structures and serialised exactly once
at the boundary, so label values, names and descriptions supplied by the user
never get spliced into YAML or JSON text by hand.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

import yaml

from .config import NetworkConfig, NetworkKind

API_VERSION = "k8s.cni.cncf.io/v1"
KIND = "NetworkAttachmentDefinition"
RESOURCE_TYPE = "network-attachment-definitions.k8s.cni.cncf.io"

BRIDGE_CNI_VERSION = "0.3.1"
LOCALNET_CNI_VERSION = "0.4.0"
LOCALNET_CNI_TYPE = "ovn-k8s-cni-overlay"

BRIDGE_RESOURCE_ANNOTATION = "k8s.v1.cni.cncf.io/resourceName"
BRIDGE_RESOURCE_DOMAIN = "bridge.network.kubevirt.io"
NETWORK_ID_ANNOTATION = "k8s.ovn.org/network-id"
NETWORK_NAME_ANNOTATION = "k8s.ovn.org/network-name"


class _QuotedStr(str):
    pass


class _LiteralStr(str):
    pass


class _ManifestDumper(yaml.SafeDumper):
    pass


def _represent_quoted(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    return dumper.represent_scalar("tag:yaml.org,2002:str", str(data), style='"')


def _represent_literal(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    return dumper.represent_scalar("tag:yaml.org,2002:str", str(data), style="|")


_ManifestDumper.add_representer(_QuotedStr, _represent_quoted)
_ManifestDumper.add_representer(_LiteralStr, _represent_literal)


@dataclass(frozen=True)
class ResourceManifest:
    """Fully rendered NAD for a single VLAN id."""

    vlan_id: int
    kind: NetworkKind
    name: str
    namespace: str
    description: str
    labels: Mapping[str, str]
    annotations: Mapping[str, str]
    network_payload: Mapping[str, Any] = field(default_factory=dict)

    @property
    def config_json(self) -> str:
        """CNI configuration embedded under ``spec.config``.

        Bridge payloads are pretty-printed, localnet payloads stay compact on
        a single line.
        """

        if self.kind is NetworkKind.BRIDGE:
            return json.dumps(self.network_payload, indent=2)
        return json.dumps(self.network_payload, separators=(",", ":"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "apiVersion": API_VERSION,
            "kind": KIND,
            "metadata": {
                "name": self.name,
                "namespace": self.namespace,
                "labels": dict(self.labels),
                "annotations": {"description": self.description, **self.annotations},
            },
            "spec": {"config": self.config_json},
        }

    def to_yaml(self) -> str:
        document = self.to_dict()
        metadata = document["metadata"]
        metadata["labels"] = {k: _QuotedStr(v) for k, v in metadata["labels"].items()}
        metadata["annotations"]["description"] = _QuotedStr(self.description)
        if self.kind is NetworkKind.BRIDGE:
            document["spec"]["config"] = _LiteralStr(self.config_json)
        return yaml.dump(
            document,
            Dumper=_ManifestDumper,
            sort_keys=False,
            default_flow_style=False,
            width=float("inf"),
        )


def build_manifest(vlan_id: int, network: NetworkConfig) -> ResourceManifest:
    """Render the NAD for ``vlan_id``.

    Pure and deterministic: the same inputs always yield an equal manifest.
    ``network`` is expected to have been validated already.
    """

    name = network.name_for(vlan_id)
    if network.kind is NetworkKind.BRIDGE:
        payload, annotations = _bridge_payload(vlan_id, name, network)
    else:
        payload, annotations = _localnet_payload(vlan_id, name, network)

    return ResourceManifest(
        vlan_id=vlan_id,
        kind=network.kind,
        name=name,
        namespace=network.namespace,
        description=network.describe(vlan_id),
        labels=dict(network.labels),
        annotations=annotations,
        network_payload=payload,
    )


def _bridge_payload(vlan_id: int, name: str, network: NetworkConfig):
    payload: Dict[str, Any] = {
        "cniVersion": BRIDGE_CNI_VERSION,
        "name": name,
        "type": "bridge",
        "bridge": network.bridge,
        "ipam": {},
        "macspoofchk": network.macspoofchk,
        "preserveDefaultVlan": False,
        "vlan": vlan_id,
    }
    annotations = {
        BRIDGE_RESOURCE_ANNOTATION: f"{BRIDGE_RESOURCE_DOMAIN}/{network.bridge}",
    }
    return payload, annotations


def _localnet_payload(vlan_id: int, name: str, network: NetworkConfig):
    payload: Dict[str, Any] = {
        "cniVersion": LOCALNET_CNI_VERSION,
        "name": name,
        "type": LOCALNET_CNI_TYPE,
    }
    # An unset MTU must stay absent so the CNI default applies.
    if network.mtu is not None:
        payload["mtu"] = network.mtu
    payload["netAttachDefName"] = f"{network.namespace}/{name}"
    payload["topology"] = "localnet"
    payload["vlanID"] = vlan_id

    annotations = {
        NETWORK_ID_ANNOTATION: str(vlan_id),
        NETWORK_NAME_ANNOTATION: name,
    }
    return payload, annotations
