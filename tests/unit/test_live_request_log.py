"""
Tests for the bounded live request log.
"""

from datetime import datetime

from talkai_gateway.services.monitoring import LiveRequestLog, LiveRequestRecord
from talkai_gateway.services.monitoring.live_request_log import LIVE_REQUEST_CAPACITY


def make_record(path="/v1/chat/completions", status=200):
    return LiveRequestRecord(method="POST", path=path, status=status, duration=12, user_agent="pytest")


def test_default_capacity():
    assert LiveRequestLog().capacity == LIVE_REQUEST_CAPACITY == 100


def test_oldest_record_is_evicted():
    log = LiveRequestLog()
    records = [make_record(path=f"/r/{i}") for i in range(101)]
    for record in records:
        log.append(record)

    snapshot = log.snapshot()
    assert len(log) == 100
    assert snapshot[0] is records[1]
    assert snapshot[-1] is records[100]


def test_snapshot_is_a_copy():
    log = LiveRequestLog(capacity=3)
    log.append(make_record())
    snapshot = log.snapshot()
    snapshot.clear()
    assert len(log) == 1


def test_record_serialization():
    record = make_record(status=401)
    data = record.to_dict()

    assert set(data) == {"id", "timestamp", "method", "path", "status", "duration", "user_agent"}
    assert data["status"] == 401
    assert data["duration"] == 12
    assert data["id"].isdigit()
    datetime.fromisoformat(data["timestamp"])


def test_to_json_keeps_insertion_order():
    log = LiveRequestLog(capacity=5)
    for i in range(3):
        log.append(make_record(path=f"/r/{i}"))
    assert [item["path"] for item in log.to_json()] == ["/r/0", "/r/1", "/r/2"]
