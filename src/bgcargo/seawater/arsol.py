# src/bgcargo/seawater/arsol.py
import gsw
import numpy as np

from .broadcast import broadcast_to_data, data_shape, restore_shape

# Hamme and Emerson (2004), Table 4
A0 = 2.79150
A1 = 3.17609
A2 = 4.13116
A3 = 4.90379
B0 = -6.96233e-3
B1 = -7.66670e-3
B2 = -1.16888e-2


def Arsol(SA, CT, p, long, lat):
    """Solubility of argon in seawater [umol/kg].

    Argon concentration at equilibrium with air at an absolute pressure of
    101325 Pa (sea pressure 0 dbar) including saturated water vapour, using
    the solubility coefficients of Hamme and Emerson (2004).

    SA (g/kg) and CT (deg C) must have the same shape; p (dbar), long and lat
    (decimal degrees) may be scalars, rows, columns or full arrays. The
    result has the shape of SA.
    """
    SA_in = SA
    SA, CT, shape = data_shape(SA, CT, 'Arsol')
    p = broadcast_to_data(p, shape, 'Arsol', 'p')
    lat = broadcast_to_data(lat, shape, 'Arsol', 'lat')
    long = broadcast_to_data(long, shape, 'Arsol', 'long')
    long = np.where(long < 0, long + 360, long)

    # Practical Salinity: the solubility of non-electrolytes depends on the
    # major ions related to chlorinity
    x = gsw.SP_from_SA(SA, p, long, lat)
    pt = gsw.pt_from_CT(SA, CT)
    y = np.log((298.15 - pt) / (273.15 + pt))

    solubility = np.exp(A0 + y * (A1 + y * (A2 + A3 * y)) + x * (B0 + y * (B1 + B2 * y)))
    return restore_shape(solubility, SA_in)
