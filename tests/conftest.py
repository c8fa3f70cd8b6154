# tests/conftest.py
from __future__ import annotations
from pathlib import Path
from typing import Optional
import io
import pytest

from pcienrich.api import PciDb
from pcienrich.backends.textdb import build

MINIMAL_PCI_IDS = """\
#
#\tList of PCI ID's
#
# Syntax:
# vendor  vendor_name
#\tdevice  device_name\t\t\t\t<-- single tab
#\t\tsubvendor subdevice  subsystem_name\t<-- two tabs

0010  Allied Telesis, Inc
\t8139  AT-2500TX V3 Ethernet
8086  Intel Corporation
\t1237  440FX - 82441FX PMC
\t2448  82801 Mobile PCI Bridge
10de  NVIDIA Corporation
\t0020  NV4 [Riva TNT]
\t\t1043 0200  V3400 TNT
\t\t1092 0550  Viper V550
\t\t10de 0020  Riva TNT
\t1db6  GV100GL [Tesla V100 PCIe 32GB]
\t1ba1  GP104M [GeForce GTX 1070 Mobile]
\t\t1458 1651  GeForce GTX 1070 Max-Q
1458  Gigabyte Technology Co., Ltd
ffff  Illegal Vendor ID

# List of known device classes, subclasses and programming interfaces
C 02  Network controller
\t00  Ethernet controller
C 03  Display controller
\t00  VGA compatible controller
\t\t00  VGA controller
"""


@pytest.fixture
def pci_ids_text(tmp_path: Path) -> Path:
    p = tmp_path / "pci.ids"
    p.write_text(MINIMAL_PCI_IDS, encoding="utf-8")
    return p


@pytest.fixture
def pci_db() -> PciDb:
    return PciDb(build(io.StringIO(MINIMAL_PCI_IDS)))


def make_device_dir(
    root: Path,
    slot: str,
    *,
    pci_id: str,
    subsys_id: Optional[str] = None,
    pci_class: str = "20000",
    driver: Optional[str] = None,
) -> Path:
    d = root / slot
    d.mkdir(parents=True, exist_ok=True)
    lines = []
    if driver:
        lines.append(f"DRIVER={driver}")
    lines.append(f"PCI_CLASS={pci_class}")
    lines.append(f"PCI_ID={pci_id}")
    if subsys_id is not None:
        lines.append(f"PCI_SUBSYS_ID={subsys_id}")
    lines.append(f"PCI_SLOT_NAME={slot}")
    lines.append(f"MODALIAS=pci:v0000{pci_id[:4]}d0000{pci_id[-4:]}")
    (d / "uevent").write_text("\n".join(lines) + "\n", encoding="utf-8")
    return d


def make_udev_entry(udev: Path, slot: str, **props: str) -> Path:
    udev.mkdir(parents=True, exist_ok=True)
    p = udev / f"+pci:{slot}"
    lines = ["I:1234567", "G:systemd"]
    lines += [f"E:{k}={v}" for k, v in props.items()]
    p.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return p


@pytest.fixture
def fake_udev(tmp_path: Path) -> Path:
    return tmp_path / "udev"


@pytest.fixture
def fake_sysfs(tmp_path: Path, fake_udev: Path) -> Path:
    """
    Build a fake /sys/bus/pci/devices tree (uevent files) plus the matching
    /run/udev/data entries that carry the hwdb-provided names.
    """
    root = tmp_path / "devices"
    root.mkdir()

    # Bridge: both ids known, subsystem ids all zero.
    make_device_dir(
        root,
        "0000:00:01.0",
        pci_id="8086:2448",
        subsys_id="0000:0000",
        pci_class="60400",
        driver="pcieport",
    )
    make_udev_entry(
        fake_udev,
        "0000:00:01.0",
        ID_PCI_CLASS_FROM_DATABASE="Bridge",
        ID_VENDOR_FROM_DATABASE="Intel Corp.",
        ID_MODEL_FROM_DATABASE="stale bridge name",
    )

    # GPU: uppercase ids, known subsystem.
    make_device_dir(
        root,
        "0000:65:00.0",
        pci_id="10DE:1BA1",
        subsys_id="1458:1651",
        pci_class="30000",
        driver="nvidia",
    )
    make_udev_entry(
        fake_udev,
        "0000:65:00.0",
        ID_PCI_CLASS_FROM_DATABASE="Display controller",
        ID_VENDOR_FROM_DATABASE="NVIDIA Corp.",
        ID_MODEL_FROM_DATABASE="stale gpu name",
    )

    # NIC: vendor not in pci.ids, so enumerator strings survive.
    make_device_dir(
        root, "0000:66:00.0", pci_id="15B3:1017", subsys_id="15b3:0020", driver="mlx5_core"
    )
    make_udev_entry(
        fake_udev,
        "0000:66:00.0",
        ID_PCI_CLASS_FROM_DATABASE="Network controller",
        ID_VENDOR_FROM_DATABASE="Mellanox Technologies",
        ID_MODEL_FROM_DATABASE="MT27800 Family [ConnectX-5]",
    )

    # Device whose uevent cannot be read.
    (root / "0000:67:00.0").mkdir()

    # Garbage id pair, no udev entry at all.
    make_device_dir(root, "0000:68:00.0", pci_id="xyz")

    # Dummy to exercise non-bdf check
    (root / "dummy").mkdir()

    return root
