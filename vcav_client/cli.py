"""
vCAV replication reports: the `vcav-report` command.

Commands:
  vcav-report replications [--org ORG] [--site SITE]   One row per VM replication
  vcav-report storage                                  Replica storage per source org
  vcav-report sites                                    Sites known to the vCAV instance

Connection settings come from the environment (or a .env file):
VCAV_HOST, VCD_HOST, VCD_ORG, VCD_USER, VCD_PASSWORD or VCD_SESSION_TOKEN.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .client import VcavClient
from .config import AppConfig, load_config
from .credentials import registry_from_config, release_owned
from .errors import VcavError
from .reports import replication_rows, storage_summary, totals

console = Console()
err_console = Console(stderr=True)


def _build_client(cfg: AppConfig) -> VcavClient:
    return VcavClient(cfg.vcav, credentials=registry_from_config(cfg.vcd))


def _run(ctx: click.Context, fn: Callable[[VcavClient], Any]) -> Any:
    """Open a session, run ``fn`` against it and always log out."""
    cfg: AppConfig = ctx.obj["cfg"]
    if not cfg.vcav.host:
        err_console.print("vCAV host required: pass --host or set VCAV_HOST.", style="red", soft_wrap=True)
        ctx.exit(1)
    try:
        client = _build_client(cfg)
        try:
            client.login(credential_source=ctx.obj["credential_source"])
            with client:
                return fn(client)
        finally:
            try:
                client.close()
            finally:
                release_owned(cfg.vcd, client.credentials)
    except VcavError as e:
        err_console.print(str(e), style="red", markup=False, soft_wrap=True)
        ctx.exit(1)


def _echo_json(rows: List[Dict[str, Any]]) -> None:
    click.echo(json.dumps(rows, indent=2, default=str))


@click.group()
@click.option("--host", default=None, help="vCAV API host (default: VCAV_HOST)")
@click.option("--credential-source", default=None, help="vCD session to use when several are configured")
@click.option("--insecure", is_flag=True, help="Skip TLS certificate verification")
@click.option("-v", "--verbose", is_flag=True, help="Log request traffic")
@click.option("--json", "json_output", is_flag=True, help="Print JSON instead of tables")
@click.version_option("0.1.0")
@click.pass_context
def main(ctx: click.Context, host: Optional[str], credential_source: Optional[str],
         insecure: bool, verbose: bool, json_output: bool) -> None:
    """vCloud Availability replication reports."""
    load_dotenv()
    cfg = load_config()
    if host:
        cfg.vcav.host = host.strip()
    if insecure:
        cfg.vcav.verify_ssl = False
        cfg.vcd.verify_ssl = False

    logging.basicConfig(
        level=logging.DEBUG if verbose else cfg.logging.level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"cfg": cfg, "credential_source": credential_source, "json": json_output}


@main.command("replications")
@click.option("--org", default=None, help="Only replications owned by this org")
@click.option("--site", default=None, help="Only replications whose destination is this site")
@click.pass_context
def replications_cmd(ctx: click.Context, org: Optional[str], site: Optional[str]) -> None:
    """List VM replications with RPO and last sync."""
    filters: Dict[str, Any] = {}
    if org:
        filters["org"] = org
    if site:
        filters["site"] = site

    reps = _run(ctx, lambda c: c.list_vm_replications(filters))
    rows = replication_rows(reps)

    if ctx.obj["json"]:
        _echo_json([r.to_dict() for r in rows])
        return

    table = Table(title=f"VM replications ({len(rows)} total)")
    table.add_column("VM", style="bold")
    table.add_column("Org")
    table.add_column("Source")
    table.add_column("Destination")
    table.add_column("RPO (min)", justify="right")
    table.add_column("Last sync")
    table.add_column("Age", justify="right")
    table.add_column("Transferred (GiB)", justify="right")
    table.add_column("Storage (GiB)", justify="right")
    table.add_column("Health")
    for r in rows:
        health = r.health if not r.paused else f"{r.health} (paused)"
        style = "green" if r.health == "GREEN" else "yellow" if r.health == "YELLOW" else "red"
        table.add_row(
            escape(r.vm), escape(r.source_org), escape(r.source_site), escape(r.destination_site),
            "" if r.rpo_minutes is None else str(r.rpo_minutes),
            r.last_sync, r.age, f"{r.transferred_gib:.2f}", f"{r.storage_gib:.2f}",
            f"[{style}]{health}[/{style}]",
        )
    console.print(table)


@main.command("storage")
@click.pass_context
def storage_cmd(ctx: click.Context) -> None:
    """Summarize replica storage per source org."""
    reps = _run(ctx, lambda c: c.list_vm_replications())
    rows = storage_summary(reps)
    total = totals(rows)

    if ctx.obj["json"]:
        _echo_json([r.to_dict() for r in rows + [total]])
        return

    table = Table(title="Replica storage by organization")
    table.add_column("Org", style="bold")
    table.add_column("Replications", justify="right")
    table.add_column("Storage (GiB)", justify="right")
    table.add_column("Last transfer (GiB)", justify="right")
    table.add_column("Unhealthy", justify="right")
    for r in rows + [total]:
        table.add_row(escape(r.org), str(r.replications), f"{r.storage_gib:.2f}",
                      f"{r.transferred_gib:.2f}", str(r.unhealthy),
                      end_section=(r is rows[-1]) if rows else False)
    console.print(table)


@main.command("sites")
@click.pass_context
def sites_cmd(ctx: click.Context) -> None:
    """List sites known to the vCAV instance."""
    sites = _run(ctx, lambda c: c.list_sites())

    if ctx.obj["json"]:
        _echo_json([s.model_dump() for s in sites])
        return

    table = Table(title="Sites")
    table.add_column("Site", style="bold")
    table.add_column("Description")
    table.add_column("Type")
    table.add_column("Local")
    for s in sites:
        table.add_row(escape(s.site), escape(s.description or ""), escape(s.cloud_type or ""),
                      "yes" if s.is_local else "")
    console.print(table)


if __name__ == "__main__":
    main()
