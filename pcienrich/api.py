#!/usr/bin/python
#
# Python pcienrich library
# Lookup service over a parsed pci.ids database
#
# (c) 2025 Steven Noonan
# Licensed under the MIT license
#

from __future__ import annotations
import logging
from typing import Optional

from .backends.textdb import build_from_path
from .config import EnrichConfig
from .types import Database, Model, subsystem_key

_logger = logging.getLogger(__name__)


class PciDb:
    """
    Read-only queries over a Database. IDs must already be lowercase hex;
    no case folding happens here. Every miss is reported as ``None``.
    """

    def __init__(self, database: Database):
        self.database = database

    def __len__(self) -> int:
        return len(self.database.vendors)

    def __contains__(self, vendor_id: object) -> bool:
        return vendor_id in self.database.vendors

    def __enter__(self) -> "PciDb":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ----- lookup helpers -----
    def _model(self, vendor_id: str, model_id: str) -> Optional[Model]:
        vendor = self.database.vendors.get(vendor_id)
        if vendor is None:
            return None
        return vendor.models.get(model_id)

    # ----- public API -----
    def get_vendor_name(self, vendor_id: str) -> Optional[str]:
        vendor = self.database.vendors.get(vendor_id)
        return None if vendor is None else vendor.name

    def get_model_description(
        self, vendor_id: str, model_id: str, subsystem: Optional[str] = None
    ) -> Optional[str]:
        """
        Model description, with the subsystem description appended as
        ``"<model>, <subsystem>"`` when `subsystem` (a key built by
        `subsystem_key`) names an entry under the model. An unknown
        subsystem leaves the plain model description.
        """
        model = self._model(vendor_id, model_id)
        if model is None:
            return None
        if subsystem is None:
            return model.desc
        sub_desc = model.subsystems.get(subsystem)
        if sub_desc is None:
            _logger.warning(
                "subsystem %s not found under %s:%s", subsystem, vendor_id, model_id
            )
            return model.desc
        return f"{model.desc}, {sub_desc}"

    def get_subsystem_name(
        self, vendor_id: str, model_id: str, subvendor_id: str, subdevice_id: str
    ) -> Optional[str]:
        model = self._model(vendor_id, model_id)
        if model is None:
            return None
        return model.subsystems.get(subsystem_key(subvendor_id, subdevice_id))

    def close(self) -> None:
        # nothing to release
        pass


def open_db(path: Optional[str] = None) -> PciDb:
    """Build a fresh database for one enrichment pass; never raises on I/O."""
    resolved = EnrichConfig.from_env(pci_ids_path=path).pci_ids_path
    _logger.debug("loading pci.ids from %s", resolved)
    return PciDb(build_from_path(resolved))


__all__ = ["Database", "PciDb", "open_db"]
