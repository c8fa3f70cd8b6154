#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import argparse
import logging
from dataclasses import dataclass
from typing import Optional

from .config import EnrichConfig
from .enrich import PciDeviceRecord, generate_pci_devices
from .report import dumps_records


@dataclass
class ProgramArgs:
    db_path: Optional[str]
    sysfs_path: Optional[str]
    udev_data: Optional[str] = None
    as_json: bool = False


def format_line(rec: PciDeviceRecord) -> str:
    cname = rec.pci_class or "Unclassified device"
    rdesc = " ".join(s for s in (rec.vendor, rec.model) if s) or "Device"
    line = f"{rec.pci_slot} {cname}: {rdesc} [{rec.vendor_id}:{rec.model_id}]"
    if rec.subsystem_model:
        sub = " ".join(s for s in (rec.subsystem_vendor, rec.subsystem_model) if s)
        line += f" (subsystem: {sub})"
    return line


def run(args: ProgramArgs) -> None:
    config = EnrichConfig.from_env(
        pci_ids_path=args.db_path,
        sysfs_root=args.sysfs_path,
        udev_data_dir=args.udev_data,
    )
    records = generate_pci_devices(config)

    if args.as_json:
        print(dumps_records(records))
        return

    for rec in records:
        print(format_line(rec))


def main() -> None:  # pragma: no cover
    ap = argparse.ArgumentParser(
        description="List PCI devices with names resolved from pci.ids"
    )
    ap.add_argument("--db", dest="db_path", default=None, help="path to pci.ids")
    ap.add_argument(
        "--sysfs",
        dest="sysfs_path",
        default=None,
        help="path to /sys/bus/pci/devices",
    )
    ap.add_argument(
        "--udev-data",
        dest="udev_data",
        default=None,
        help="path to the udev runtime database (/run/udev/data)",
    )
    ap.add_argument(
        "--json", dest="as_json", action="store_true", help="emit a JSON report"
    )
    ap.add_argument(
        "-v", "--verbose", action="count", default=0, help="more diagnostics"
    )
    ns = ap.parse_args()

    level = logging.WARNING
    if ns.verbose == 1:
        level = logging.INFO
    elif ns.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    kw = vars(ns)
    kw.pop("verbose")
    run(ProgramArgs(**kw))


if __name__ == "__main__":  # pragma: no cover
    main()
