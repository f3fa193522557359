"""Entry point for the nadctl command."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, List, Mapping, Optional

from nad_provisioner.clients import KubectlClient
from nad_provisioner.config import NetworkKind, build_job
from nad_provisioner.controller import provision
from nad_provisioner.errors import ConfigurationError

from .config import for_operation, load_job_file

LOG = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-p", "--prefix", help="NAD name prefix (ex: nic1-vlan)")
    common.add_argument(
        "-r", "--range", dest="vlan_range", help="VLAN range START-END (ex: 1-4094)"
    )
    common.add_argument(
        "-l", "--labels", help="Labels in format key1=value1,key2=value2"
    )
    common.add_argument("-n", "--namespace", help="Namespace (default: default)")
    common.add_argument(
        "-d", "--description", help="Description template, <VLAN_ID> is substituted"
    )
    common.add_argument("-j", "--jobs", help="Number of parallel jobs (default: 10)")
    common.add_argument(
        "-D", "--delete", action="store_true", help="Remove NADs instead of creating them"
    )
    common.add_argument(
        "-t", "--dry-run", action="store_true", help="Show what would be done without contacting the cluster"
    )
    common.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    common.add_argument(
        "-c", "--config", type=Path, help="YAML job file providing default values"
    )

    parser = argparse.ArgumentParser(
        prog="nadctl",
        description="Create or delete one NetworkAttachmentDefinition per VLAN",
    )
    kinds = parser.add_subparsers(dest="kind", required=True)

    bridge = kinds.add_parser(
        NetworkKind.BRIDGE.value, parents=[common], help="Linux bridge NADs"
    )
    bridge.add_argument("-b", "--bridge", help="Bridge name (ex: br-vmdata)")
    spoof = bridge.add_mutually_exclusive_group()
    spoof.add_argument(
        "-M",
        "--no-mac-spoof-check",
        dest="mac_spoof_check",
        action="store_const",
        const=False,
        default=None,
        help="Disable MAC spoof checking (default: enabled)",
    )
    spoof.add_argument(
        "--mac-spoof-check",
        dest="mac_spoof_check",
        action="store_const",
        const=True,
        default=None,
        help="Enable MAC spoof checking, overriding the job file",
    )

    localnet = kinds.add_parser(
        NetworkKind.LOCALNET.value, parents=[common], help="OVN localnet NADs"
    )
    localnet.add_argument(
        "-m", "--mtu", help="Network MTU (68-9000, CNI default if unset)"
    )
    return parser


def _pick(cli_value: Any, defaults: Mapping[str, Any], key: str) -> Any:
    return cli_value if cli_value is not None else defaults.get(key)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        defaults = load_job_file(args.config) if args.config else {}
        defaults = for_operation(defaults, args.delete)
        job = build_job(
            kind=NetworkKind(args.kind),
            prefix=_pick(args.prefix, defaults, "prefix"),
            vlan_range=_pick(args.vlan_range, defaults, "range"),
            labels=_pick(args.labels, defaults, "labels"),
            namespace=_pick(args.namespace, defaults, "namespace"),
            description=_pick(args.description, defaults, "description"),
            bridge=_pick(getattr(args, "bridge", None), defaults, "bridge"),
            mtu=_pick(getattr(args, "mtu", None), defaults, "mtu"),
            mac_spoof_check=_pick(
                getattr(args, "mac_spoof_check", None), defaults, "mac_spoof_check"
            ),
            concurrency=_pick(args.jobs, defaults, "jobs"),
            delete=args.delete,
            dry_run=args.dry_run,
            debug=args.verbose,
        )
        client = None if job.dry_run else KubectlClient()
    except ConfigurationError as exc:
        LOG.error("Error: %s", exc)
        return 1

    LOG.debug("Job configuration: %s", job)
    print(f"Using command: {client.name if client else 'none (dry run)'}")
    result = provision(job, client)
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
