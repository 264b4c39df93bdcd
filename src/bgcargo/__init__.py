# src/bgcargo/__init__.py
"""Toolkit for Biogeochemical Argo float data and seawater properties"""

__version__ = '1.0.0'

from .config import Config, config
from .data import (CatalogHandle, DownloadOptions, FileKind, check_float_variables,
                   combine_variables, download_multi_floats, download_traj_files,
                   load_float_data, resolve)
from .exceptions import (ArgoToolkitError, FetchError, ParseError, ShapeMismatchError,
                         UnknownFloatError)
