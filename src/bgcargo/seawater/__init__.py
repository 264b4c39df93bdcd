# src/bgcargo/seawater/__init__.py
from .arsol import Arsol
from .broadcast import broadcast_to_data
from .specvol import SSO, specvol_anom

__all__ = ['Arsol', 'SSO', 'broadcast_to_data', 'specvol_anom']
