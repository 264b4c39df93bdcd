# src/bgcargo/data/variables.py
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

import netCDF4 as nc

from .catalog import CatalogHandle
from .download_resolver import DownloadOptions, DownloadResolver
from .index_store import FileKind

logger = logging.getLogger(__name__)

PRESSURE_VARIABLE = 'PRES'


def _as_list(variables: Union[str, Sequence[str]]) -> List[str]:
    if isinstance(variables, str):
        return [variables]
    return list(variables)


def combine_variables(base_vars: Sequence[str], new_vars: Union[str, Sequence[str]]) -> List[str]:
    """Append every new variable together with its associated variables.

    For a tracer ``X`` these are ``X_QC``, ``X_dPRES`` (not defined for
    pressure itself), ``X_ADJUSTED``, ``X_ADJUSTED_QC``, ``X_ADJUSTED_ERROR``
    and the profile-level ``PROFILE_X_QC``.
    """
    all_vars = list(base_vars)
    for var in _as_list(new_vars):
        all_vars.append(var)
        all_vars.append(f'{var}_QC')
        if var != PRESSURE_VARIABLE:
            all_vars.append(f'{var}_dPRES')
        all_vars.append(f'{var}_ADJUSTED')
        all_vars.append(f'{var}_ADJUSTED_QC')
        all_vars.append(f'{var}_ADJUSTED_ERROR')
        all_vars.append(f'PROFILE_{var}_QC')
    return all_vars


def read_variable_names(file_path: Union[str, Path]) -> set:
    with nc.Dataset(file_path, 'r') as ds:
        return set(ds.variables.keys())


def _local_files(handle: CatalogHandle, wmoids: Iterable[int], kind: FileKind) -> Dict[int, Path]:
    resolver = DownloadResolver(handle)
    result = resolver.resolve(wmoids, DownloadOptions.from_config(handle.settings, kind=kind))
    return {wmoid: resolver.local_file(wmoid, kind) for wmoid in sorted(result.good)}


def float_variable_availability(handle: CatalogHandle, wmoids: Iterable[int],
                                variables: Union[str, Sequence[str]],
                                kind: Union[FileKind, str] = FileKind.SPROF) -> Dict[int, List[str]]:
    """Requested variables present in each float's file, keyed by WMO ID"""
    variables = _as_list(variables)
    availability = {}
    for wmoid, path in _local_files(handle, wmoids, FileKind(kind)).items():
        present = read_variable_names(path)
        availability[wmoid] = [v for v in variables if v in present]
    return availability


def check_float_variables(handle: CatalogHandle, wmoids: Iterable[int],
                          variables: Union[str, Sequence[str]],
                          warn: Optional[str] = None,
                          kind: Union[FileKind, str] = FileKind.SPROF) -> List[str]:
    """Variables from the request that are available for all of the floats.

    A variable missing from any single float is dropped. If ``warn`` is
    given, it is logged together with each missing variable name, once per
    float that lacks it. Floats whose files cannot be obtained are skipped.
    """
    wmoids = list(wmoids)
    if not wmoids:
        logger.warning("No floats specified!")
        return []

    variables = _as_list(variables)
    missing = set()
    for wmoid, path in _local_files(handle, wmoids, FileKind(kind)).items():
        present = read_variable_names(path)
        for var in variables:
            if var not in present:
                if warn:
                    logger.warning(f"{warn}: {var}")
                missing.add(var)

    return [v for v in variables if v not in missing]
