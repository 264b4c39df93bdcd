# src/bgcargo/utils/helpers.py
import numpy as np
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional


class ArgoHelpers:
    """Helper functions for Argo data processing"""

    @staticmethod
    def parse_juld(juld: float, ref_date: datetime = datetime(1950, 1, 1)) -> Optional[datetime]:
        """Convert Julian date to datetime object"""
        try:
            if np.isnan(juld):
                return None
            return ref_date + timedelta(days=float(juld))
        except (ValueError, TypeError):
            return None

    @staticmethod
    def parse_update_time(value: str) -> Optional[datetime]:
        """Parse a YYYYMMDDHHMISS index timestamp (UTC)"""
        value = value.strip()
        if not value:
            return None
        return datetime.strptime(value, '%Y%m%d%H%M%S').replace(tzinfo=timezone.utc)

    @staticmethod
    def format_id_listing(wmoids: Iterable[int], per_line: int = 10) -> str:
        """Lay out float IDs in lines of at most per_line entries"""
        ids = [str(w) for w in sorted(wmoids)]
        lines = [' '.join(ids[i:i + per_line]) for i in range(0, len(ids), per_line)]
        return '\n'.join(lines)

    @staticmethod
    def decode_qc_flags(qc) -> np.ndarray:
        """Convert NetCDF character QC flags to integers, missing flags become -1"""
        qc = np.asarray(qc)
        if qc.dtype.kind in ('i', 'u'):
            return qc.astype(int)
        if qc.dtype.kind == 'f':
            return np.where(np.isnan(qc), -1, qc).astype(int)

        flat = qc.ravel()
        decoded = np.full(flat.shape, -1, dtype=int)
        for i, flag in enumerate(flat):
            if isinstance(flag, bytes):
                flag = flag.decode('ascii', errors='ignore')
            flag = str(flag).strip()
            if flag.isdigit():
                decoded[i] = int(flag)
        return decoded.reshape(qc.shape)
