#!/usr/bin/python
#
# Python pcienrich library
# Device record enrichment
#
# (c) 2025 Steven Noonan
# Licensed under the MIT license
#

from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple
import logging

from .api import PciDb
from .backends.textdb import build_from_path
from .config import EnrichConfig
from .exceptions import EnumeratorUnavailableError
from .sysfs import (
    KEY_CLASS,
    KEY_DRIVER,
    KEY_ID,
    KEY_MODEL,
    KEY_SLOT,
    KEY_SUBSYS_ID,
    KEY_VENDOR,
    SysfsEnumerator,
)

_logger = logging.getLogger(__name__)

# Written into vendor_id/model_id when the device reported no usable pair.
UNKNOWN_ID = "0"


@dataclass
class PciDeviceRecord:
    pci_slot: str = ""
    pci_class: str = ""
    driver: str = ""
    vendor: str = ""
    vendor_id: str = ""
    model: str = ""
    model_id: str = ""
    subsystem_vendor: str = ""
    subsystem_vendor_id: str = ""
    subsystem_model: str = ""
    subsystem_model_id: str = ""

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def split_id_pair(value: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    ``"10DE:1DB6"`` -> ``("10de", "1db6")``. pci.ids keys are lowercase,
    so the pair is lowercased here once. Anything other than exactly two
    non-empty parts is rejected with ``None``.
    """
    if not value:
        return None
    parts = value.lower().split(":")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


def enrich_device(attributes: Mapping[str, str], db: PciDb) -> PciDeviceRecord:
    """
    Build one output record from the enumerator's raw attributes. Database
    hits replace the enumerator's strings; misses keep them.
    """
    rec = PciDeviceRecord(
        pci_slot=attributes.get(KEY_SLOT, ""),
        pci_class=attributes.get(KEY_CLASS, ""),
        driver=attributes.get(KEY_DRIVER, ""),
        vendor=attributes.get(KEY_VENDOR, ""),
        model=attributes.get(KEY_MODEL, ""),
    )

    raw_id = attributes.get(KEY_ID, "")
    ids = split_id_pair(raw_id)
    if ids is None:
        _logger.warning("%s: malformed %s %r", rec.pci_slot, KEY_ID, raw_id)
    else:
        vendor_id, model_id = ids
        rec.vendor_id, rec.model_id = vendor_id, model_id

        name = db.get_vendor_name(vendor_id)
        if name is not None:
            rec.vendor = name
        else:
            _logger.warning("%s: vendor %s not in pci.ids", rec.pci_slot, vendor_id)

        desc = db.get_model_description(vendor_id, model_id)
        if desc is not None:
            rec.model = desc
        else:
            _logger.warning(
                "%s: model %s:%s not in pci.ids", rec.pci_slot, vendor_id, model_id
            )

        _apply_subsystem(rec, attributes.get(KEY_SUBSYS_ID, ""), db)

    if not rec.vendor_id:
        rec.vendor_id = UNKNOWN_ID
    if not rec.model_id:
        rec.model_id = UNKNOWN_ID
    return rec


def _apply_subsystem(rec: PciDeviceRecord, raw_subsys: str, db: PciDb) -> None:
    sub_ids = split_id_pair(raw_subsys)
    if sub_ids is None:
        # Plenty of devices legitimately have no subsystem IDs.
        _logger.debug("%s: no usable %s %r", rec.pci_slot, KEY_SUBSYS_ID, raw_subsys)
        return
    subvendor_id, subdevice_id = sub_ids
    rec.subsystem_vendor_id, rec.subsystem_model_id = subvendor_id, subdevice_id

    name = db.get_vendor_name(subvendor_id)
    if name is not None:
        rec.subsystem_vendor = name

    sub_desc = db.get_subsystem_name(
        rec.vendor_id, rec.model_id, subvendor_id, subdevice_id
    )
    if sub_desc is not None:
        rec.subsystem_model = sub_desc
    else:
        _logger.warning(
            "%s: subsystem %s %s not in pci.ids",
            rec.pci_slot,
            subvendor_id,
            subdevice_id,
        )


def enrich_devices(
    devices: Iterable[Mapping[str, str]], db: PciDb
) -> List[PciDeviceRecord]:
    """One record per device, in enumeration order."""
    return [enrich_device(attrs, db) for attrs in devices]


def generate_pci_devices(config: Optional[EnrichConfig] = None) -> List[PciDeviceRecord]:
    """
    One complete enrichment pass: enumerate devices, build a fresh
    database, enrich every device. The database is not kept afterwards.
    """
    if config is None:
        config = EnrichConfig.from_env()

    enumerator = SysfsEnumerator(config.sysfs_root, config.udev_data_dir)
    try:
        devices = enumerator.devices()
    except EnumeratorUnavailableError as e:
        _logger.error("%s", e)
        return []

    with PciDb(build_from_path(config.pci_ids_path)) as db:
        return enrich_devices(devices, db)
