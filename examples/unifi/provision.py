from __future__ import annotations

import argparse
from pathlib import Path

from unifi_provisioner.config import build_graph, load, provision
from unifi_provisioner.engine.types import NodeStatus
from unifi_provisioner.resources import Resource


def _progress(resource: Resource, status: NodeStatus) -> None:
    print(f"[{status.value:9}] {resource.identity}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Provision the UniFi stack via the Python API")
    parser.add_argument("--config", default="unifi-provisioner.yaml", help="Path to stack file")
    parser.add_argument("--apply", action="store_true", help="Provision the resources")
    args = parser.parse_args()

    config = load(Path(args.config))

    for i, resource in enumerate(build_graph(config).order(), start=1):
        print(f"{i}. {resource.identity}")

    if args.apply:
        report = provision(config, progress=_progress)
        print("Summary:", report.summary())
        report.raise_for_failures()


if __name__ == "__main__":
    main()
