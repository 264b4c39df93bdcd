# src/bgcargo/data/catalog.py
import logging
import threading
from pathlib import Path
from typing import Dict, Optional, Union

from ..config import Config, config as default_config
from .fetchers import ArchiveFetcher, make_fetcher
from .index_store import FloatRecord, parse_index

logger = logging.getLogger(__name__)


class CatalogHandle:
    """Session state shared by the resolver, checker and loader.

    Owns the float catalog parsed from the index listing, the local cache
    location and the fetcher used to reach the remote archive. The catalog
    is loaded lazily on first use and replaced wholesale by ``refresh``.
    """

    def __init__(self, settings: Optional[Config] = None,
                 fetcher: Optional[ArchiveFetcher] = None,
                 cache_dir: Optional[Union[str, Path]] = None):
        self.settings = settings or default_config
        self.cache_dir = Path(cache_dir or self.settings.get('data.cache_dir'))
        if cache_dir is not None:
            self.index_dir = self.cache_dir / 'Index'
        else:
            self.index_dir = Path(self.settings.get('data.index_dir'))
        self.fetcher = fetcher or make_fetcher(
            self.settings.get('archive.base_url'),
            chunk_size=self.settings.get('download.chunk_size', 8192))
        self.dac_dir = self.settings.get('archive.dac_dir', 'dac')

        self._catalog: Dict[int, FloatRecord] = {}
        self._source_location = None
        self._lock = threading.Lock()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def is_initialized(self) -> bool:
        with self._lock:
            return bool(self._catalog)

    def initialize(self, source_location: Optional[Union[str, Path]] = None) -> Dict[int, FloatRecord]:
        """Load the catalog from an index listing.

        An existing local file is parsed in place; anything else is taken as
        a name relative to the archive root and downloaded into the index
        directory first.
        """
        source = source_location or self.settings.get('archive.index_file')
        index_path = Path(source)
        if not index_path.is_file():
            index_path = self.index_dir / Path(str(source)).name
            logger.info(f"Downloading index {source} to {index_path}")
            self.fetcher.fetch(str(source), index_path,
                               timeout=self.settings.get('download.timeout'))

        catalog = parse_index(index_path)
        with self._lock:
            self._catalog = catalog
            self._source_location = source
        logger.info(f"Catalog initialized with {len(catalog)} floats")
        return dict(catalog)

    def refresh(self) -> Dict[int, FloatRecord]:
        return self.initialize(self._source_location)

    def ensure_initialized(self):
        if not self.is_initialized:
            self.initialize(self._source_location)

    def snapshot(self) -> Dict[int, FloatRecord]:
        """Copy of the catalog, safe to iterate while another thread refreshes"""
        self.ensure_initialized()
        with self._lock:
            return dict(self._catalog)

    def get(self, wmoid: int) -> Optional[FloatRecord]:
        with self._lock:
            return self._catalog.get(int(wmoid))

    def local_path(self, relative_path: str) -> Path:
        return self.cache_dir / relative_path

    def remote_path(self, relative_path: str) -> str:
        return f"{self.dac_dir}/{relative_path}" if self.dac_dir else relative_path

    def close(self):
        with self._lock:
            self._catalog = {}
        self.fetcher.close()
