"""Exception hierarchy for pcienrich.

None of these escape an enrichment pass; they mark the I/O seams where the
builder and the pipeline fall back to a degraded result.
"""

from __future__ import annotations


class PciEnrichError(Exception):
    """Base exception for all pcienrich errors."""


class SourceUnavailableError(PciEnrichError):
    """The pci.ids database could not be opened or read."""

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        msg = f"failed to read {path}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class EnumeratorUnavailableError(PciEnrichError):
    """The device enumerator itself could not be acquired."""


class DeviceUnavailableError(PciEnrichError):
    """A single device's handle could not be acquired."""
