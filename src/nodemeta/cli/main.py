# src/nodemeta/cli/main.py
"""
This module is the main entry point for the nodemeta CLI.

It resolves node metadata through the same factory used by library callers,
so the EKS_* environment overrides apply here too.
"""

import asyncio
import logging
from typing import Any, Dict, List

import typer
from rich.console import Console
from rich.table import Table
from typing_extensions import Annotated

from ..clients.base import MetadataClient
from ..core.config import config
from ..core.exceptions import NodeMetaError
from ..core.factory import build_client
from ..utils.k8s_utils import instance_id_from_provider_id, is_provider_id

# --- Setup Logger ---
logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

console = Console()

app = typer.Typer(
    name="nodemeta",
    help="Resolve AWS identity metadata for a Kubernetes node and look up EC2 instances.",
    add_completion=False,
)


@app.command()
def version():
    """
    Show the version of nodemeta.
    """
    from .. import __version__

    typer.echo(f"nodemeta version: {__version__}")


async def _collect_info() -> Dict[str, str]:
    client = await build_client()
    try:
        return {
            "Region": await client.get_region(),
            "Account ID": await client.get_account_id(),
            "Cluster name": await client.get_cluster_name(),
        }
    finally:
        await client.close()


async def _collect_instances(instance_ids: List[str]) -> List[Dict[str, Any]]:
    client: MetadataClient = await build_client()
    try:
        return await client.get_instances_by_instance_ids(instance_ids)
    finally:
        await client.close()


@app.command()
def info():
    """
    Show the region, account ID and cluster name of the current node.
    """
    try:
        values = asyncio.run(_collect_info())
    except NodeMetaError as e:
        logger.error("Failed to resolve node metadata: %s", e)
        raise typer.Exit(code=1)

    table = Table(title="Node metadata", show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for field, value in values.items():
        table.add_row(field, value)
    console.print(table)


@app.command()
def instances(
    ids: Annotated[
        List[str],
        typer.Argument(help="EC2 instance IDs or Kubernetes provider IDs (aws:///<zone>/<instance-id>)."),
    ],
):
    """
    Describe EC2 instances by instance ID.
    """
    try:
        instance_ids = [instance_id_from_provider_id(i) if is_provider_id(i) else i for i in ids]
    except ValueError as e:
        raise typer.BadParameter(str(e))

    try:
        found = asyncio.run(_collect_instances(instance_ids))
    except NodeMetaError as e:
        logger.error("Failed to describe instances: %s", e)
        raise typer.Exit(code=1)

    if not found:
        console.print("No instances found.", style="yellow")
        return

    table = Table(title="EC2 instances", show_header=True, header_style="bold magenta")
    table.add_column("Instance ID", style="cyan")
    table.add_column("Type")
    table.add_column("State")
    table.add_column("Zone")
    for instance in found:
        table.add_row(
            instance.get("InstanceId", "-"),
            instance.get("InstanceType", "-"),
            (instance.get("State") or {}).get("Name", "-"),
            (instance.get("Placement") or {}).get("AvailabilityZone", "-"),
        )
    console.print(table)


if __name__ == "__main__":
    app()
