# pcienrich/sysfs.py
from __future__ import annotations
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional
import logging

from .config import SYSFS_DEVICES_DEFAULT, UDEV_DATA_DEFAULT
from .exceptions import DeviceUnavailableError, EnumeratorUnavailableError

_logger = logging.getLogger(__name__)

# udev property names the enrichment pipeline consumes.
KEY_SLOT = "PCI_SLOT_NAME"
KEY_CLASS = "ID_PCI_CLASS_FROM_DATABASE"
KEY_VENDOR = "ID_VENDOR_FROM_DATABASE"
KEY_MODEL = "ID_MODEL_FROM_DATABASE"
KEY_ID = "PCI_ID"
KEY_DRIVER = "DRIVER"
KEY_SUBSYS_ID = "PCI_SUBSYS_ID"


def _is_bdf_name(name: str) -> bool:
    # 0000:00:1f.3
    return name.count(":") == 2 and "." in name


def parse_uevent(text: str) -> Dict[str, str]:
    """Parse ``KEY=VALUE`` lines from a sysfs ``uevent`` file."""
    props: Dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if sep and key:
            props[key.strip()] = value.strip()
    return props


def parse_udev_db(text: str) -> Dict[str, str]:
    """Parse the ``E:KEY=VALUE`` property lines of a udev database entry."""
    props: Dict[str, str] = {}
    for line in text.splitlines():
        if not line.startswith("E:"):
            continue
        key, sep, value = line[2:].partition("=")
        if sep and key:
            props[key] = value
    return props


@dataclass
class DeviceHandle:
    """Attributes of one device, valid while its `open_device` scope is held."""

    path: Path
    properties: Dict[str, str] = field(default_factory=dict)
    released: bool = False


@contextmanager
def open_device(path: Path, udev_data: Optional[Path] = None) -> Iterator[DeviceHandle]:
    """
    Acquire one device: its kernel ``uevent`` properties, overlaid with the
    udev database entry (``+pci:<slot>``) if one exists. The handle is
    released on every exit path.
    """
    try:
        with (path / "uevent").open("r", encoding="utf-8", errors="replace") as f:
            props = parse_uevent(f.read())
    except OSError as e:
        raise DeviceUnavailableError(f"{path}: {e.strerror or e}") from e

    slot = props.get(KEY_SLOT) or path.name
    props.setdefault(KEY_SLOT, slot)
    if udev_data is not None:
        db_entry = udev_data / f"+pci:{slot}"
        try:
            text = db_entry.read_text(encoding="utf-8", errors="replace")
            props.update(parse_udev_db(text))
        except FileNotFoundError:
            pass
        except OSError as e:
            _logger.debug("no udev data for %s: %s", slot, e)

    handle = DeviceHandle(path=path, properties=props)
    try:
        yield handle
    finally:
        handle.released = True
        handle.properties = {}


class SysfsEnumerator:
    def __init__(
        self,
        root: str = SYSFS_DEVICES_DEFAULT,
        udev_data: Optional[str] = UDEV_DATA_DEFAULT,
    ):
        self.root = Path(root)
        self.udev_data = Path(udev_data) if udev_data else None

    def _entries(self) -> List[Path]:
        try:
            return sorted(
                (d for d in self.root.iterdir() if _is_bdf_name(d.name)),
                key=lambda d: d.name,
            )
        except OSError as e:
            raise EnumeratorUnavailableError(
                f"cannot enumerate PCI devices under {self.root}: {e.strerror or e}"
            ) from e

    def devices(self) -> Iterator[Dict[str, str]]:
        """
        Yield one attribute mapping per device, in slot order. The device
        handle stays acquired until the consumer advances (or abandons) the
        iterator. Raises EnumeratorUnavailableError before yielding anything
        if the device list itself cannot be read.
        """
        entries = self._entries()
        return self._iter_devices(entries)

    def _iter_devices(self, entries: List[Path]) -> Iterator[Dict[str, str]]:
        for d in entries:
            with ExitStack() as stack:
                try:
                    handle = stack.enter_context(open_device(d, self.udev_data))
                except DeviceUnavailableError as e:
                    _logger.warning("could not get device: %s", e)
                    continue
                yield dict(handle.properties)

    def scan(self) -> Dict[str, Dict[str, str]]:
        """All device attributes keyed by slot name."""
        return {attrs[KEY_SLOT]: attrs for attrs in self.devices()}
