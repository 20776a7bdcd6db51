from datetime import datetime, timezone

from vcav_client.models import VmReplication
from vcav_client.reports import (
    bytes_to_gib,
    format_age,
    format_timestamp,
    replication_rows,
    storage_summary,
    totals,
)

GIB = 1024 ** 3
NOW = datetime(2023, 11, 15, 0, 0, 0, tzinfo=timezone.utc)
NOW_MS = int(NOW.timestamp() * 1000)


def _rep(id, org, storage=0, transferred=None, health="GREEN", ts=None, paused=False):
    data = {
        "id": id,
        "source": {"site": "on-prem", "org": org, "vmName": f"vm-{id}"},
        "destination": {"site": "cloud"},
        "rpo": 60,
        "overallHealth": health,
        "isPaused": paused,
        "replicaStorageBytes": storage,
    }
    if transferred is not None or ts is not None:
        data["lastInstance"] = {"timestamp": ts, "transferBytes": transferred}
    return VmReplication.model_validate(data)


def test_bytes_to_gib():
    assert bytes_to_gib(None) == 0.0
    assert bytes_to_gib(0) == 0.0
    assert bytes_to_gib(GIB) == 1.0
    assert bytes_to_gib(GIB + GIB // 2) == 1.5


def test_format_timestamp():
    assert format_timestamp(None) == "never"
    assert format_timestamp(0) == "never"
    assert len(format_timestamp(NOW_MS)) == len("2023-11-15 00:00:00")


def test_format_age():
    assert format_age(None, NOW) == "-"
    assert format_age(NOW_MS - 5 * 60 * 1000, NOW) == "5m"
    assert format_age(NOW_MS - (2 * 3600 + 10 * 60) * 1000, NOW) == "2h 10m"
    assert format_age(NOW_MS - (49 * 3600) * 1000, NOW) == "2d 1h"
    assert format_age(NOW_MS + 60000, NOW) == "0m"


def test_replication_rows():
    rows = replication_rows([
        _rep("1", "acme", storage=2 * GIB, transferred=GIB, ts=NOW_MS - 30 * 60 * 1000),
        _rep("2", "beta", health="RED", paused=True),
    ], now=NOW)

    assert rows[0].vm == "vm-1"
    assert rows[0].source_org == "acme"
    assert rows[0].destination_site == "cloud"
    assert rows[0].rpo_minutes == 60
    assert rows[0].storage_gib == 2.0
    assert rows[0].transferred_gib == 1.0
    assert rows[0].age == "30m"
    assert rows[1].last_sync == "never"
    assert rows[1].health == "RED"
    assert rows[1].paused is True
    assert rows[1].to_dict()["vm"] == "vm-2"


def test_storage_summary_groups_by_org():
    rows = storage_summary([
        _rep("1", "beta", storage=GIB, transferred=GIB // 2),
        _rep("2", "acme", storage=GIB, health="YELLOW"),
        _rep("3", "acme", storage=3 * GIB, transferred=GIB),
        _rep("4", None, storage=GIB),
    ])

    assert [r.org for r in rows] == ["(unknown)", "acme", "beta"]
    acme = rows[1]
    assert acme.replications == 2
    assert acme.storage_gib == 4.0
    assert acme.transferred_gib == 1.0
    assert acme.unhealthy == 1
    assert rows[2].transferred_gib == 0.5


def test_totals():
    rows = storage_summary([_rep("1", "a", storage=GIB), _rep("2", "b", storage=GIB, health="RED")])
    total = totals(rows)
    assert total.org == "TOTAL"
    assert total.replications == 2
    assert total.storage_gib == 2.0
    assert total.unhealthy == 1
    assert totals([]).replications == 0
