# src/bgcargo/data/__init__.py
from .catalog import CatalogHandle
from .download_resolver import (DownloadOptions, DownloadResolver, ResolutionResult,
                                download_multi_floats, download_traj_files, resolve)
from .float_loader import good_profile_values, load_float_data, trajectory_positions
from .index_store import FileKind, FloatRecord, parse_index
from .variables import check_float_variables, combine_variables, float_variable_availability
