# tests/conftest.py

import sys
from pathlib import Path

import netCDF4 as nc
import numpy as np
import pytest

# Add src to path
sys.path.append(str(Path(__file__).parent.parent / 'src'))

from bgcargo.config import Config
from bgcargo.data.catalog import CatalogHandle
from bgcargo.data.fetchers import LocalFetcher

INDEX_HEADER = [
    "# Title : Metadata directory file of the Argo Global Data Assembly Center",
    "# Description : The directory file describes all metadata files of the argo GDAC ftp site.",
    "# Project : ARGO",
    "# Format version : 2.0",
    "# Date of update : 20220526120000",
    "# FTP root number 1 : ftp://ftp.ifremer.fr/ifremer/argo/dac",
    "# FTP root number 2 : ftp://usgodae.org/pub/outgoing/argo/dac",
    "# GDAC node : CORIOLIS",
    "file,profiler_type,institution,date_update",
]


def write_index(path, rows):
    """Write an index listing with the standard header block"""
    lines = INDEX_HEADER + [",".join(row) for row in rows]
    Path(path).write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def create_sample_sprof(file_path, wmoid, variables=('PRES', 'TEMP', 'PSAL'), n_profiles=3, n_levels=20,
                        positions=None, position_qc=None):
    """Create a minimal Sprof-like NetCDF file with Argo character QC variables"""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    if positions is None:
        positions = (np.linspace(-150.0, -148.0, n_profiles), np.linspace(30.0, 32.0, n_profiles))
    if position_qc is None:
        position_qc = [b'1'] * n_profiles

    with nc.Dataset(file_path, 'w') as ds:
        ds.createDimension('N_PROF', n_profiles)
        ds.createDimension('N_LEVELS', n_levels)
        ds.PLATFORM_NUMBER = str(wmoid)

        cycle = ds.createVariable('CYCLE_NUMBER', 'i4', ('N_PROF',))
        cycle[:] = np.arange(1, n_profiles + 1)
        juld = ds.createVariable('JULD', 'f8', ('N_PROF',), fill_value=999999.0)
        juld.units = 'days since 1950-01-01 00:00:00 UTC'
        juld[:] = 25000.0 + 10.0 * np.arange(n_profiles)
        lon = ds.createVariable('LONGITUDE', 'f8', ('N_PROF',), fill_value=99999.0)
        lon[:] = positions[0]
        lat = ds.createVariable('LATITUDE', 'f8', ('N_PROF',), fill_value=99999.0)
        lat[:] = positions[1]
        pos_qc = ds.createVariable('POSITION_QC', 'S1', ('N_PROF',))
        pos_qc[:] = np.array(position_qc, dtype='S1')

        pressure = np.tile(np.linspace(5, 1000, n_levels), (n_profiles, 1))
        for var in variables:
            values = pressure if var == 'PRES' else 10 + 10 * np.exp(-pressure / 100)
            data = ds.createVariable(var, 'f4', ('N_PROF', 'N_LEVELS'), fill_value=99999.0)
            data[:] = values
            qc = ds.createVariable(f'{var}_QC', 'S1', ('N_PROF', 'N_LEVELS'))
            qc[:] = np.full((n_profiles, n_levels), b'1', dtype='S1')
            adjusted = ds.createVariable(f'{var}_ADJUSTED', 'f4', ('N_PROF', 'N_LEVELS'), fill_value=99999.0)
            adjusted[:] = values

    return file_path


class CountingFetcher(LocalFetcher):
    """Local archive fetcher that records every transfer"""

    def __init__(self, base_location):
        super().__init__(base_location)
        self.fetched = []

    def fetch(self, relative_path, destination, timeout=None):
        self.fetched.append(relative_path)
        return super().fetch(relative_path, destination, timeout=timeout)


@pytest.fixture
def archive(tmp_path):
    """Remote archive mirror with two floats on disk and one listed but missing"""
    root = tmp_path / 'archive'
    root.mkdir()
    write_index(root / 'ar_index_global_meta.txt', [
        ('aoml/1900722/1900722_meta.nc', '845', 'AO', '20200101000000'),
        ('coriolis/6901472/6901472_meta.nc', '844', 'IF', '20200101000000'),
        ('aoml/5904859/5904859_meta.nc', '846', 'AO', '20200101000000'),
    ])
    create_sample_sprof(root / 'dac/aoml/1900722/1900722_Sprof.nc', 1900722,
                        variables=('PRES', 'TEMP', 'PSAL', 'DOXY'))
    create_sample_sprof(root / 'dac/coriolis/6901472/6901472_Sprof.nc', 6901472,
                        variables=('PRES', 'TEMP', 'PSAL'))
    return root


@pytest.fixture
def settings():
    settings = Config()
    settings.set('download.max_workers', 1)
    settings.set('download.retries', 0)
    return settings


@pytest.fixture
def handle(archive, tmp_path, settings):
    handle = CatalogHandle(settings, fetcher=CountingFetcher(str(archive)), cache_dir=tmp_path / 'cache')
    handle.initialize()
    handle.fetcher.fetched.clear()
    yield handle
    handle.close()
