#!/usr/bin/python
#
# Python pcienrich library
# Text database format parser
#
# (c) 2025 Steven Noonan
# Licensed under the MIT license
#

from __future__ import annotations
import enum
import logging
from types import MappingProxyType
from typing import Dict, Iterable, Optional, Tuple

from ..exceptions import SourceUnavailableError
from ..types import EMPTY_DATABASE, SENTINEL_VENDOR_ID, Database, Model, Vendor

_logger = logging.getLogger(__name__)

HEX_DIGITS = "0123456789abcdef"
MIN_LINE_LEN = 7

# Draft layout while parsing, frozen into a Database at the end:
#   vendors[vendor_id] = (vendor_name, {model_id: (model_desc, {sub_key: sub_desc})})
ModelDraft = Tuple[str, Dict[str, str]]
VendorDraft = Tuple[str, Dict[str, ModelDraft]]
VendorDict = Dict[str, VendorDraft]


class ParserState(enum.Enum):
    AWAITING_VENDOR = enum.auto()
    IN_VENDOR = enum.auto()
    IN_VENDOR_AND_MODEL = enum.auto()


def _first_hex_offset(line: str) -> int:
    for i, ch in enumerate(line):
        if ch in HEX_DIGITS:
            return i
    return -1


class _Parser:
    """
    pci.ids lists subsystems under models under vendors purely by
    indentation, so each line is interpreted against the vendor/model
    declared most recently before it.
    """

    def __init__(self) -> None:
        self.vendors: VendorDict = {}
        self.state = ParserState.AWAITING_VENDOR
        self.cur_vendor: Optional[str] = None
        self.cur_model: Optional[str] = None
        self.done = False

    def feed(self, lineno: int, line: str) -> None:
        if len(line) < MIN_LINE_LEN or line.startswith("#"):
            return

        offset = _first_hex_offset(line)
        if offset == 0:
            self._vendor(line)
        elif offset == 1:
            self._model(lineno, line)
        elif offset == 2:
            self._subsystem(lineno, line)
        else:
            _logger.warning("pci.ids line %d: unexpected line format", lineno)

    def _vendor(self, line: str) -> None:
        vendor_id = line[0:4]
        if vendor_id == SENTINEL_VENDOR_ID:
            # Device classes follow; not consumed here.
            self.done = True
            return
        # Skip the two-character separator after the id.
        self.vendors[vendor_id] = (line[6:], {})
        self.cur_vendor, self.cur_model = vendor_id, None
        self.state = ParserState.IN_VENDOR

    def _model(self, lineno: int, line: str) -> None:
        if self.state is ParserState.AWAITING_VENDOR or len(line) <= MIN_LINE_LEN:
            _logger.warning(
                "pci.ids line %d: model outside of a known vendor (vendor %s)",
                lineno,
                self.cur_vendor,
            )
            return
        assert self.cur_vendor is not None
        model_id = line[1:5]
        self.vendors[self.cur_vendor][1][model_id] = (line[7:], {})
        self.cur_model = model_id
        self.state = ParserState.IN_VENDOR_AND_MODEL

    def _subsystem(self, lineno: int, line: str) -> None:
        if self.state is not ParserState.IN_VENDOR_AND_MODEL or len(line) <= 11:
            _logger.warning(
                "pci.ids line %d: subsystem outside of a known model "
                "(vendor %s, model %s)",
                lineno,
                self.cur_vendor,
                self.cur_model,
            )
            return
        assert self.cur_vendor is not None and self.cur_model is not None
        # "ssss dddd" followed by the same two-character separator.
        models = self.vendors[self.cur_vendor][1]
        models[self.cur_model][1][line[2:11]] = line[13:]


def _freeze(vendors: VendorDict) -> Database:
    frozen: Dict[str, Vendor] = {}
    for vendor_id, (name, models) in vendors.items():
        frozen_models = {
            model_id: Model(
                id=model_id, desc=desc, subsystems=MappingProxyType(dict(subs))
            )
            for model_id, (desc, subs) in models.items()
        }
        frozen[vendor_id] = Vendor(
            id=vendor_id, name=name, models=MappingProxyType(frozen_models)
        )
    return Database(vendors=MappingProxyType(frozen))


def build(stream: Iterable[str]) -> Database:
    """
    Parse pci.ids text (any iterable of lines: open file, list, StringIO)
    into a Database. Malformed lines are logged and skipped; parsing stops
    at end of input or at the ``ffff`` vendor, whichever comes first. A
    read error ends parsing early with whatever was parsed before it.
    """
    parser = _Parser()
    lineno = 0
    try:
        for lineno, raw in enumerate(stream, start=1):
            parser.feed(lineno, raw.rstrip("\r\n"))
            if parser.done:
                break
    except (OSError, UnicodeError) as e:
        _logger.error("pci.ids read failed after line %d: %s", lineno, e)
    return _freeze(parser.vendors)


def build_from_path(path: str) -> Database:
    """Build from a file; a file that cannot be opened yields an empty Database."""
    try:
        f = open(path, "r", encoding="utf-8", errors="replace")
    except OSError as e:
        _logger.error("%s", SourceUnavailableError(path, e.strerror or str(e)))
        return EMPTY_DATABASE
    with f:
        return build(f)
