from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

# Vendor ID sentinel that ends the vendor/device section of pci.ids.
SENTINEL_VENDOR_ID = "ffff"


def subsystem_key(subvendor_id: str, subdevice_id: str) -> str:
    """Key for a subsystem entry: ``"<subvendor> <subdevice>"``."""
    return f"{subvendor_id} {subdevice_id}"


@dataclass(frozen=True)
class Model:
    id: str
    desc: str
    # subsystem_key -> subsystem description
    subsystems: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )


@dataclass(frozen=True)
class Vendor:
    id: str
    name: str
    models: Mapping[str, Model] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class Database:
    """Read-only vendor -> model -> subsystem tree parsed from pci.ids."""

    vendors: Mapping[str, Vendor] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __len__(self) -> int:
        return len(self.vendors)

    def __bool__(self) -> bool:
        # An empty database is still a valid database.
        return True


EMPTY_DATABASE = Database()
