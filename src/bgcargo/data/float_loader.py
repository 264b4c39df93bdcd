# src/bgcargo/data/float_loader.py
import logging
from typing import Dict, Iterable, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
import xarray as xr

from ..utils.helpers import ArgoHelpers
from .catalog import CatalogHandle
from .download_resolver import DownloadOptions, DownloadResolver
from .index_store import FileKind
from .variables import _as_list, combine_variables, read_variable_names

logger = logging.getLogger(__name__)

BASE_VARIABLES = ['CYCLE_NUMBER', 'DIRECTION', 'JULD', 'JULD_QC', 'JULD_LOCATION',
                  'LATITUDE', 'LONGITUDE', 'POSITION_QC']

# POSITION_QC value for positions estimated by the data center
INTERPOLATED_POSITION = 8


def load_float_data(handle: CatalogHandle, wmoids: Iterable[int],
                    variables: Optional[Union[str, Sequence[str]]] = None,
                    float_profs: Optional[Dict[int, Sequence[int]]] = None,
                    interp_lonlat: bool = True) -> Dict[int, Dict[str, np.ndarray]]:
    """Load variables from the Sprof files of the given floats.

    Every float's result holds the base variables present in its file plus
    the requested tracers with their associated QC, adjusted and error
    variables. ``float_profs`` restricts a float to the listed profile
    indices. Floats whose file could not be obtained are left out. Positions
    filled by interpolation are flagged in ``POSITION_ESTIMATED``.
    """
    resolver = DownloadResolver(handle)
    result = resolver.resolve(wmoids, DownloadOptions.from_config(handle.settings, kind=FileKind.SPROF))
    wanted = combine_variables(BASE_VARIABLES, _as_list(variables or []))
    float_profs = float_profs or {}

    data = {}
    for wmoid in sorted(result.good):
        path = resolver.local_file(wmoid, FileKind.SPROF)
        present = read_variable_names(path)
        names = [v for v in wanted if v in present]
        skipped = [v for v in wanted if v not in present and v not in BASE_VARIABLES]
        if skipped:
            logger.debug(f"Float {wmoid} has no {', '.join(skipped)}")

        with xr.open_dataset(path, decode_times=False, concat_characters=False) as ds:
            if wmoid in float_profs and 'N_PROF' in ds.dims:
                ds = ds.isel(N_PROF=list(float_profs[wmoid]))
            float_data = {name: ds[name].values for name in names}

        if interp_lonlat:
            _interpolate_positions(float_data)
        data[wmoid] = float_data
        logger.info(f"Loaded {len(names)} variables for float {wmoid}")

    return data


def _interpolate_positions(float_data: Dict[str, np.ndarray]):
    """Fill missing or estimated positions by linear interpolation in time"""
    if not all(k in float_data for k in ('JULD', 'LONGITUDE', 'LATITUDE')):
        return

    juld = np.asarray(float_data['JULD'], dtype=float)
    lon = np.array(float_data['LONGITUDE'], dtype=float)
    lat = np.array(float_data['LATITUDE'], dtype=float)

    missing = np.isnan(lon) | np.isnan(lat)
    if 'POSITION_QC' in float_data:
        missing |= ArgoHelpers.decode_qc_flags(float_data['POSITION_QC']) == INTERPOLATED_POSITION
    known = ~missing & np.isfinite(juld)
    if known.sum() < 2 or not missing.any():
        return

    # only fill gaps bracketed by known fixes
    inside = missing & np.isfinite(juld) & (juld > juld[known].min()) & (juld < juld[known].max())
    if not inside.any():
        return

    order = np.argsort(juld[known])
    known_juld = juld[known][order]
    # unwrap so that tracks crossing the dateline interpolate the short way
    known_lon = np.rad2deg(np.unwrap(np.deg2rad(lon[known][order])))
    filled = np.interp(juld[inside], known_juld, known_lon)
    # keep the longitude convention of the float's own fixes
    if lon[known].max() > 180.0:
        lon[inside] = filled % 360.0
    else:
        lon[inside] = (filled + 180.0) % 360.0 - 180.0
    lat[inside] = np.interp(juld[inside], known_juld, lat[known][order])

    float_data['LONGITUDE'] = lon
    float_data['LATITUDE'] = lat
    float_data['POSITION_ESTIMATED'] = inside


def trajectory_positions(data: Dict[int, Dict[str, np.ndarray]],
                         position: Optional[str] = None) -> pd.DataFrame:
    """Float positions as a table, optionally only the first or last per float.

    ``ESTIMATED`` marks positions estimated by the data center
    (``POSITION_QC`` 8) or filled by interpolation.
    """
    if position not in (None, 'first', 'last'):
        raise ValueError(f"Unknown position selection: {position}")

    records = []
    for wmoid, float_data in data.items():
        lon = np.atleast_1d(float_data.get('LONGITUDE', []))
        lat = np.atleast_1d(float_data.get('LATITUDE', []))
        juld = np.atleast_1d(float_data.get('JULD', np.full(lon.shape, np.nan)))
        estimated = np.zeros(lon.shape, dtype=bool)
        if 'POSITION_QC' in float_data:
            flags = np.atleast_1d(ArgoHelpers.decode_qc_flags(float_data['POSITION_QC']))
            estimated |= flags == INTERPOLATED_POSITION
        if 'POSITION_ESTIMATED' in float_data:
            estimated |= np.atleast_1d(float_data['POSITION_ESTIMATED']).astype(bool)
        indices = list(range(len(lon)))
        if indices and position == 'first':
            indices = indices[:1]
        elif indices and position == 'last':
            indices = indices[-1:]

        for i in indices:
            records.append({
                'WMOID': wmoid,
                'JULD': ArgoHelpers.parse_juld(juld[i]),
                'LONGITUDE': float(lon[i]),
                'LATITUDE': float(lat[i]),
                'ESTIMATED': bool(estimated[i]),
            })

    return pd.DataFrame(records, columns=['WMOID', 'JULD', 'LONGITUDE', 'LATITUDE', 'ESTIMATED'])


def good_profile_values(values, pres, qc, qc_flags: Sequence[int] = (1, 2)) -> Tuple[np.ndarray, np.ndarray]:
    """Values and pressures that are finite and carry an accepted QC flag"""
    values = np.asarray(values, dtype=float)
    pres = np.asarray(pres, dtype=float)
    flags = ArgoHelpers.decode_qc_flags(qc)
    if not (values.shape == pres.shape == flags.shape):
        raise ValueError("values, pressure and QC flags must have the same shape")

    idx = np.isfinite(values) & np.isfinite(pres) & np.isin(flags, list(qc_flags))
    return values[idx], pres[idx]

