# src/bgcargo/data/download_resolver.py
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, Optional, Set, Union

from ..exceptions import FetchError, UnknownFloatError
from ..utils.helpers import ArgoHelpers
from .catalog import CatalogHandle
from .index_store import FileKind, FloatRecord

logger = logging.getLogger(__name__)


@dataclass
class DownloadOptions:
    kind: FileKind = FileKind.SPROF
    timeout: float = 30
    retries: int = 0
    max_workers: int = 1

    def __post_init__(self):
        self.kind = FileKind(self.kind)
        if self.retries < 0:
            raise ValueError("retries must not be negative")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")

    @classmethod
    def from_config(cls, settings, kind: Union[FileKind, str] = FileKind.SPROF, **overrides) -> 'DownloadOptions':
        options = {
            'kind': kind,
            'timeout': settings.get('download.timeout', 30),
            'retries': settings.get('download.retries', 0),
            'max_workers': settings.get('download.max_workers', 1),
        }
        options.update(overrides)
        return cls(**options)


@dataclass
class LocalFileState:
    wmoid: int
    kind: FileKind
    local_path: Path
    exists: bool
    local_mtime: Optional[datetime] = None

    @classmethod
    def probe(cls, wmoid: int, kind: FileKind, local_path: Path) -> 'LocalFileState':
        try:
            stat = local_path.stat()
        except (FileNotFoundError, NotADirectoryError):
            return cls(wmoid, kind, local_path, exists=False)
        mtime = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        return cls(wmoid, kind, local_path, exists=True, local_mtime=mtime)

    def is_current(self, record: FloatRecord) -> bool:
        if not self.exists:
            return False
        if record.last_update is None:
            return True
        return self.local_mtime >= record.last_update


@dataclass
class ResolutionResult:
    requested: Set[int] = field(default_factory=set)
    fetched: Set[int] = field(default_factory=set)
    failed: Set[int] = field(default_factory=set)
    errors: Dict[int, str] = field(default_factory=dict)

    @property
    def good(self) -> Set[int]:
        return self.requested - self.failed

    def __iter__(self):
        # Unpacks as (good, failed)
        return iter((self.good, self.failed))


class DownloadResolver:
    """Brings the local cache up to date for a batch of floats.

    Each float is handled independently: a float is fetched when its local
    file is missing or older than the catalog's update time, and a failure
    for one float is recorded without affecting the rest of the batch.
    """

    def __init__(self, handle: CatalogHandle):
        self.handle = handle

    def _suffix_for(self, kind: FileKind) -> Optional[str]:
        if kind == FileKind.TRAJ:
            return self.handle.settings.get('download.traj_suffix')
        return None

    def local_state(self, record: FloatRecord, kind: FileKind) -> LocalFileState:
        relative = record.path_for(kind, self._suffix_for(kind))
        return LocalFileState.probe(record.wmoid, kind, self.handle.local_path(relative))

    def local_file(self, wmoid: int, kind: Union[FileKind, str]) -> Optional[Path]:
        """Cached file for a float, or None if the float is unknown"""
        record = self.handle.get(wmoid)
        if record is None:
            return None
        kind = FileKind(kind)
        return self.handle.local_path(record.path_for(kind, self._suffix_for(kind)))

    def resolve(self, wmoids: Iterable[int],
                options: Union[DownloadOptions, FileKind, str, None] = None) -> ResolutionResult:
        if not isinstance(options, DownloadOptions):
            options = DownloadOptions.from_config(self.handle.settings, kind=options or FileKind.SPROF)

        catalog = self.handle.snapshot()
        result = ResolutionResult(requested={int(w) for w in wmoids})

        if options.max_workers == 1 or len(result.requested) <= 1:
            for wmoid in sorted(result.requested):
                self._record(result, wmoid, self._resolve_one, catalog, wmoid, options)
        else:
            with ThreadPoolExecutor(max_workers=options.max_workers) as executor:
                future_to_id = {
                    executor.submit(self._resolve_one, catalog, wmoid, options): wmoid
                    for wmoid in result.requested
                }
                for future in as_completed(future_to_id):
                    self._record(result, future_to_id[future], future.result)

        if result.failed:
            logger.warning(
                f"{options.kind.value} files could not be downloaded for floats:\n"
                f"{ArgoHelpers.format_id_listing(result.failed)}")
        logger.info(f"Resolved {len(result.good)}/{len(result.requested)} {options.kind.value} files "
                    f"({len(result.fetched)} fetched)")
        return result

    def _record(self, result: ResolutionResult, wmoid: int, call, *args):
        try:
            fetched = call(*args)
        except (UnknownFloatError, FetchError) as e:
            result.failed.add(wmoid)
            result.errors[wmoid] = str(e)
            logger.debug(f"Float {wmoid} failed: {e}")
        else:
            if fetched:
                result.fetched.add(wmoid)

    def _resolve_one(self, catalog: Dict[int, FloatRecord], wmoid: int, options: DownloadOptions) -> bool:
        """Returns True when a fetch was needed and succeeded"""
        record = catalog.get(wmoid)
        if record is None:
            raise UnknownFloatError(wmoid)

        state = self.local_state(record, options.kind)
        if state.is_current(record):
            return False

        relative = record.path_for(options.kind, self._suffix_for(options.kind))
        remote = self.handle.remote_path(relative)
        attempts = options.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                logger.info(f"Downloading {remote}" + (f" (attempt {attempt}/{attempts})" if attempt > 1 else ""))
                self.handle.fetcher.fetch(remote, state.local_path, timeout=options.timeout)
                return True
            except FetchError:
                if attempt == attempts:
                    raise
        return False


def resolve(handle: CatalogHandle, wmoids: Iterable[int],
            options: Union[DownloadOptions, FileKind, str, None] = None) -> ResolutionResult:
    return DownloadResolver(handle).resolve(wmoids, options)


def download_multi_floats(handle: CatalogHandle, wmoids: Iterable[int], **overrides) -> Set[int]:
    """Download Sprof files where needed, returns the WMO IDs with a local file"""
    options = DownloadOptions.from_config(handle.settings, kind=FileKind.SPROF, **overrides)
    return resolve(handle, wmoids, options).good


def download_traj_files(handle: CatalogHandle, wmoids: Iterable[int], **overrides) -> Set[int]:
    """Download trajectory files where needed, returns the WMO IDs with a local file"""
    options = DownloadOptions.from_config(handle.settings, kind=FileKind.TRAJ, **overrides)
    return resolve(handle, wmoids, options).good
