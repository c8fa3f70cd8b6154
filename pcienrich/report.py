# pcienrich/report.py
from __future__ import annotations
import dataclasses
import json
from typing import Iterable, List

from .enrich import PciDeviceRecord

REPORT_VERSION = 1


def dumps_records(records: Iterable[PciDeviceRecord]) -> str:
    """Serialize enriched device records (one object per device, slot order kept)."""
    payload = {
        "version": REPORT_VERSION,
        "devices": [r.to_dict() for r in records],
    }
    return json.dumps(payload, separators=(",", ":"), sort_keys=True)


def loads_records(s: str) -> List[PciDeviceRecord]:
    """Deserialize a report back into PciDeviceRecord objects; unknown keys are dropped."""
    obj = json.loads(s)
    if not isinstance(obj, dict):
        raise ValueError(f"report must be a JSON object, got {type(obj).__name__}")
    if obj.get("version") != REPORT_VERSION:
        raise ValueError(f"unsupported report version: {obj.get('version')!r}")
    known = {f.name for f in dataclasses.fields(PciDeviceRecord)}
    return [
        PciDeviceRecord(
            **{k: "" if v is None else str(v) for k, v in d.items() if k in known}
        )
        for d in obj["devices"]
    ]
