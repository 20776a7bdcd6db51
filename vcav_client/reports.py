"""
Replication reports built from paginated vCAV queries.

  - replication_rows: one line per VM replication with RPO and last sync
  - storage_summary:  replica storage and transfer totals per source org
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from .models import VmReplication

GIB = 1024 ** 3
HEALTHY = "GREEN"


def bytes_to_gib(n: Optional[int], precision: int = 2) -> float:
    if not n:
        return 0.0
    return round(n / GIB, precision)


def format_timestamp(ms: Optional[int]) -> str:
    if not ms:
        return "never"
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).astimezone().strftime("%Y-%m-%d %H:%M:%S")


def format_age(ms: Optional[int], now: Optional[datetime] = None) -> str:
    """Human readable time elapsed since ``ms`` (epoch milliseconds)."""
    if not ms:
        return "-"
    now = now or datetime.now(tz=timezone.utc)
    seconds = int(now.timestamp() - ms / 1000)
    if seconds < 0:
        seconds = 0
    hours, rem = divmod(seconds, 3600)
    minutes = rem // 60
    if hours >= 24:
        days, hours = divmod(hours, 24)
        return f"{days}d {hours}h"
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


@dataclass
class ReplicationRow:
    vm: str
    source_org: str
    source_site: str
    destination_site: str
    rpo_minutes: Optional[int]
    last_sync: str
    age: str
    transferred_gib: float
    storage_gib: float
    health: str
    paused: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class OrgStorageRow:
    org: str
    replications: int = 0
    storage_gib: float = 0.0
    transferred_gib: float = 0.0
    unhealthy: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def replication_rows(replications: Iterable[VmReplication], now: Optional[datetime] = None) -> List[ReplicationRow]:
    rows = []
    for rep in replications:
        last = rep.last_instance
        ts = last.timestamp if last else None
        rows.append(ReplicationRow(
            vm=rep.display_name,
            source_org=rep.source.org or "",
            source_site=rep.source.site or "",
            destination_site=rep.destination.site or "",
            rpo_minutes=rep.rpo,
            last_sync=format_timestamp(ts),
            age=format_age(ts, now),
            transferred_gib=bytes_to_gib(last.transfer_bytes if last else None),
            storage_gib=bytes_to_gib(rep.replica_storage_bytes),
            health=rep.overall_health or "UNKNOWN",
            paused=bool(rep.is_paused),
        ))
    return rows


def storage_summary(replications: Iterable[VmReplication]) -> List[OrgStorageRow]:
    # Sum raw bytes per org and convert once, so rounding does not accumulate.
    acc: Dict[str, Dict[str, int]] = {}
    for rep in replications:
        org = rep.source.org or "(unknown)"
        a = acc.setdefault(org, {"replications": 0, "storage": 0, "transferred": 0, "unhealthy": 0})
        a["replications"] += 1
        a["storage"] += rep.replica_storage_bytes or 0
        if rep.last_instance and rep.last_instance.transfer_bytes:
            a["transferred"] += rep.last_instance.transfer_bytes
        if (rep.overall_health or "").upper() != HEALTHY:
            a["unhealthy"] += 1

    return [
        OrgStorageRow(
            org=org,
            replications=a["replications"],
            storage_gib=bytes_to_gib(a["storage"]),
            transferred_gib=bytes_to_gib(a["transferred"]),
            unhealthy=a["unhealthy"],
        )
        for org, a in sorted(acc.items())
    ]


def totals(rows: Iterable[OrgStorageRow]) -> OrgStorageRow:
    total = OrgStorageRow(org="TOTAL")
    for row in rows:
        total.replications += row.replications
        total.storage_gib = round(total.storage_gib + row.storage_gib, 2)
        total.transferred_gib = round(total.transferred_gib + row.transferred_gib, 2)
        total.unhealthy += row.unhealthy
    return total
