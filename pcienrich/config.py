"""Path configuration for an enrichment pass."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Optional, Sequence

ENV_PCI_IDS = "PCIENRICH_PCI_IDS"
ENV_SYSFS = "PCIENRICH_SYSFS"
ENV_UDEV_DATA = "PCIENRICH_UDEV_DATA"

SYSTEM_PCI_IDS_PATHS = (
    "/usr/share/misc/pci.ids",
    "/usr/share/hwdata/pci.ids",
    "/usr/share/pci.ids",
)
SYSFS_DEVICES_DEFAULT = "/sys/bus/pci/devices"
UDEV_DATA_DEFAULT = "/run/udev/data"


def resolve_pci_ids_path(
    *,
    explicit_path: Optional[str],
    env_path: Optional[str],
    system_paths: Sequence[str],
) -> str:
    """
    Pick the pci.ids location. Pure function -> easy to unit test:
    - explicit argument wins, then the environment override
    - otherwise the first existing system path
    - if none exist, the first system path is returned anyway; building
      from it degrades to an empty database
    """
    if explicit_path:
        return str(explicit_path)
    if env_path:
        return env_path
    for p in system_paths:
        if Path(p).is_file():
            return p
    return system_paths[0]


@dataclasses.dataclass(frozen=True)
class EnrichConfig:
    """Where one enrichment pass reads its inputs from.

    Parameters
    ----------
    pci_ids_path : str
        Text pci.ids database.
    sysfs_root : str
        Directory listing PCI devices by slot name.
    udev_data_dir : str
        udev runtime database holding ``ID_*_FROM_DATABASE`` properties.
    """

    pci_ids_path: str = SYSTEM_PCI_IDS_PATHS[0]
    sysfs_root: str = SYSFS_DEVICES_DEFAULT
    udev_data_dir: str = UDEV_DATA_DEFAULT

    @classmethod
    def from_env(
        cls,
        *,
        pci_ids_path: Optional[str] = None,
        sysfs_root: Optional[str] = None,
        udev_data_dir: Optional[str] = None,
    ) -> "EnrichConfig":
        return cls(
            pci_ids_path=resolve_pci_ids_path(
                explicit_path=pci_ids_path,
                env_path=os.getenv(ENV_PCI_IDS),
                system_paths=SYSTEM_PCI_IDS_PATHS,
            ),
            sysfs_root=str(
                sysfs_root or os.getenv(ENV_SYSFS) or SYSFS_DEVICES_DEFAULT
            ),
            udev_data_dir=str(
                udev_data_dir or os.getenv(ENV_UDEV_DATA) or UDEV_DATA_DEFAULT
            ),
        )
