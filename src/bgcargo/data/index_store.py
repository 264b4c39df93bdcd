# src/bgcargo/data/index_store.py
"""
Parsing of GDAC index listings into float records.

The global meta index (``ar_index_global_meta.txt``) starts with a block of
comment and header lines followed by one row per float::

    aoml/1900722/1900722_meta.nc,845,AO,20181011180520
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union

from ..exceptions import ParseError
from ..utils.helpers import ArgoHelpers

logger = logging.getLogger(__name__)

HEADER_LINES = 9
INDEX_COLUMNS = 4


class FileKind(str, Enum):
    PROFILE = 'profile'
    SPROF = 'sprof'
    TRAJ = 'traj'
    META = 'meta'

    @property
    def suffix(self) -> str:
        return FILE_SUFFIXES[self]


FILE_SUFFIXES = {
    FileKind.PROFILE: '_prof.nc',
    FileKind.SPROF: '_Sprof.nc',
    FileKind.TRAJ: '_Rtraj.nc',
    FileKind.META: '_meta.nc',
}


@dataclass(frozen=True)
class FloatRecord:
    wmoid: int
    file_path: str
    file_name: str
    last_update: Optional[datetime]

    @property
    def dac(self) -> str:
        return self.file_path.split('/')[0]

    def path_for(self, kind: FileKind, suffix: Optional[str] = None) -> str:
        """Archive-relative path of this float's file of the given kind"""
        kind = FileKind(kind)
        return f"{self.dac}/{self.wmoid}/{self.wmoid}{suffix or kind.suffix}"


def parse_file_path(file_path: str, line_number: Optional[int] = None):
    """Split ``<dac>/<wmoid>/<file>`` into its WMO ID and bare file name"""
    parts = file_path.strip().split('/')
    if len(parts) < 3 or not all(parts):
        raise ParseError(f"expected <dac>/<wmoid>/<file>, got '{file_path}'", line_number)

    dac, wmoid, file_parts = parts[0], parts[1], parts[2:]
    if not dac.isalpha():
        raise ParseError(f"invalid DAC '{dac}' in '{file_path}'", line_number)
    if not wmoid.isdigit():
        raise ParseError(f"invalid WMO ID '{wmoid}' in '{file_path}'", line_number)
    return int(wmoid), '/'.join(file_parts)


def parse_index(source: Union[str, Path], header_lines: int = HEADER_LINES) -> Dict[int, FloatRecord]:
    """Parse an index listing into a catalog keyed by WMO ID.

    Raises ParseError on the first malformed row; nothing is returned for a
    partially read listing.
    """
    catalog = {}
    with open(source, 'r', encoding='utf-8') as f:
        for line_number, line in enumerate(f, start=1):
            if line_number <= header_lines:
                continue
            row = line.rstrip('\r\n')
            if not row.strip():
                continue

            columns = row.split(',')
            if len(columns) != INDEX_COLUMNS:
                raise ParseError(
                    f"expected {INDEX_COLUMNS} columns, found {len(columns)}", line_number)

            file_path = columns[0].strip()
            wmoid, file_name = parse_file_path(file_path, line_number)
            try:
                last_update = ArgoHelpers.parse_update_time(columns[3])
            except ValueError:
                raise ParseError(f"invalid update time '{columns[3]}'", line_number)

            catalog[wmoid] = FloatRecord(
                wmoid=wmoid,
                file_path=file_path,
                file_name=file_name,
                last_update=last_update,
            )

    logger.info(f"Parsed {len(catalog)} floats from {source}")
    return catalog
