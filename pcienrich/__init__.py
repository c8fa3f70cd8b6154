"""
pcienrich — pci.ids parser + lookups, and PCI device record enrichment.

Public API:
    - Database & builder:
        Database, Vendor, Model, subsystem_key, build, build_from_path
    - Lookup service:
        PciDb, open_db
    - Enrichment:
        PciDeviceRecord, enrich_device, enrich_devices, generate_pci_devices
    - Configuration & enumeration (Linux):
        EnrichConfig, SysfsEnumerator
"""

from __future__ import annotations

# Version from installed dist; falls back to dev string when run from source tree.
try:
    from importlib.metadata import version, PackageNotFoundError
except Exception:  # pragma: no cover
    version = None  # type: ignore[assignment]
    PackageNotFoundError = Exception  # type: ignore[misc]

try:  # pragma: no cover
    __version__ = version("pcienrich")
except (PackageNotFoundError, Exception):  # pragma: no cover
    __version__ = "0.0.0.dev0"

# Public API re-exports
from .types import Database, Model, Vendor, subsystem_key
from .backends.textdb import build, build_from_path
from .api import PciDb, open_db
from .config import EnrichConfig
from .enrich import (
    PciDeviceRecord,
    enrich_device,
    enrich_devices,
    generate_pci_devices,
)
from .sysfs import SysfsEnumerator

__all__ = [
    "__version__",
    # Database
    "Database",
    "Vendor",
    "Model",
    "subsystem_key",
    "build",
    "build_from_path",
    # Lookups
    "PciDb",
    "open_db",
    # Enrichment
    "PciDeviceRecord",
    "enrich_device",
    "enrich_devices",
    "generate_pci_devices",
    # Config / sysfs
    "EnrichConfig",
    "SysfsEnumerator",
]
