# src/bgcargo/seawater/specvol.py
"""
Specific volume anomaly from the 75-term polynomial expression for specific
volume of Roquet et al. (2015).

The constant terms (v000 to v004) and the pressure terms to the 5th and 6th
power cancel in the difference and are not evaluated.
"""
import numpy as np

from ..exceptions import ShapeMismatchError
from .broadcast import broadcast_to_data, data_shape, restore_shape

# Standard Ocean Reference Salinity [g/kg]
SSO = 35.16504

SFAC = 0.0248826675584615            # 1/(40*(35.16504/35))
OFFSET = 5.971840214030754e-1        # deltaS*sfac, deltaS = 24

v010 = -1.5649734675e-5
v011 = 1.8505765429e-5
v012 = -1.1736386731e-6
v013 = -3.6527006553e-7
v014 = 3.1454099902e-7
v020 = 2.7762106484e-5
v021 = -1.1716606853e-5
v022 = 2.1305028740e-6
v023 = 2.8695905159e-7
v030 = -1.6521159259e-5
v031 = 7.9279656173e-6
v032 = -4.6132540037e-7
v040 = 6.9111322702e-6
v041 = -3.4102187482e-6
v042 = -6.3352916514e-8
v050 = -8.0539615540e-7
v051 = 5.0736766814e-7
v060 = 2.0543094268e-7
v100 = -3.1038981976e-4
v101 = 2.4262468747e-5
v102 = -5.8484432984e-7
v103 = 3.6310188515e-7
v104 = -1.1147125423e-7
v110 = 3.5009599764e-5
v111 = -9.5677088156e-6
v112 = -5.5699154557e-6
v113 = -2.7295696237e-7
v120 = -3.7435842344e-5
v121 = -2.3678308361e-7
v122 = 3.9137387080e-7
v130 = 2.4141479483e-5
v131 = -3.4558773655e-6
v132 = 7.7618888092e-9
v140 = -8.7595873154e-6
v141 = 1.2956717783e-6
v150 = -3.3052758900e-7
v200 = 6.6928067038e-4
v201 = -3.4792460974e-5
v202 = -4.8122251597e-6
v203 = 1.6746303780e-8
v210 = -4.3592678561e-5
v211 = 1.1100834765e-5
v212 = 5.4620748834e-6
v220 = 3.5907822760e-5
v221 = 2.9283346295e-6
v222 = -6.5731104067e-7
v230 = -1.4353633048e-5
v231 = 3.1655306078e-7
v240 = 4.3703680598e-6
v300 = -8.5047933937e-4
v301 = 3.7470777305e-5
v302 = 4.9263106998e-6
v310 = 3.4532461828e-5
v311 = -9.8447117844e-6
v312 = -1.3544185627e-6
v320 = -1.8698584187e-5
v321 = -4.8826139200e-7
v330 = 2.2863324556e-6
v400 = 5.8086069943e-4
v401 = -1.7322218612e-5
v402 = -1.7811974727e-6
v410 = -1.1959409788e-5
v411 = 2.5909225260e-6
v420 = 3.8595339244e-6
v500 = -2.1092370507e-4
v501 = 3.0927427253e-6
v510 = 1.3864594581e-6
v600 = 3.1932457305e-5


def _xy_parts(xs, ys):
    """Salinity/temperature polynomials multiplying z**0 .. z**3"""
    part_0 = (xs * (v100 + xs * (v200 + xs * (v300 + xs * (v400 + xs * (v500 + v600 * xs)))))
              + ys * (v010 + xs * (v110 + xs * (v210 + xs * (v310 + xs * (v410 + v510 * xs))))
                      + ys * (v020 + xs * (v120 + xs * (v220 + xs * (v320 + v420 * xs)))
                              + ys * (v030 + xs * (v130 + xs * (v230 + v330 * xs))
                                      + ys * (v040 + xs * (v140 + v240 * xs)
                                              + ys * (v050 + v150 * xs + v060 * ys))))))

    part_1 = (xs * (v101 + xs * (v201 + xs * (v301 + xs * (v401 + v501 * xs))))
              + ys * (v011 + xs * (v111 + xs * (v211 + xs * (v311 + v411 * xs)))
                      + ys * (v021 + xs * (v121 + xs * (v221 + v321 * xs))
                              + ys * (v031 + xs * (v131 + v231 * xs)
                                      + ys * (v041 + v141 * xs + v051 * ys)))))

    part_2 = (xs * (v102 + xs * (v202 + xs * (v302 + v402 * xs)))
              + ys * (v012 + xs * (v112 + xs * (v212 + v312 * xs))
                      + ys * (v022 + xs * (v122 + v222 * xs)
                              + ys * (v032 + v132 * xs + v042 * ys))))

    part_3 = xs * (v103 + v203 * xs) + ys * (v013 + v113 * xs + v023 * ys)
    return part_0, part_1, part_2, part_3


def specvol_anom(SA, CT, p, SA_ref=None, CT_ref=None):
    """Specific volume anomaly [m^3/kg].

    Difference between the specific volume at (SA, CT, p) and at the
    reference state (SA_ref, CT_ref, p). Without a reference state the
    standard one, SA_ref = SSO and CT_ref = 0 deg C, is used.

    SA & CT need to have the same shape, SA_ref & CT_ref must be scalars and
    p may be a scalar, row, column or full array.
    """
    if (SA_ref is None) != (CT_ref is None):
        raise ValueError("specvol_anom: SA_ref and CT_ref must be given together")
    if SA_ref is None:
        SA_ref, CT_ref = SSO, 0.0
    if np.ndim(SA_ref) != 0 or np.ndim(CT_ref) != 0:
        raise ShapeMismatchError("specvol_anom: SA_ref and CT_ref must be scalars (single values)")

    SA_in = SA
    SA, CT, shape = data_shape(SA, CT, 'specvol_anom')
    p = broadcast_to_data(p, shape, 'specvol_anom', 'p')

    SA = np.maximum(SA, 0)

    xs = np.sqrt(SFAC * SA + OFFSET)
    ys = CT * 0.025
    z = p * 1e-4

    xs_ref = np.sqrt(SFAC * float(SA_ref) + OFFSET)
    ys_ref = float(CT_ref) * 0.025

    part_0, part_1, part_2, part_3 = _xy_parts(xs, ys)
    ref_0, ref_1, ref_2, ref_3 = _xy_parts(xs_ref, ys_ref)
    part_4_diff = v104 * (xs - xs_ref) + v014 * (ys - ys_ref)

    anom = (part_0 - ref_0
            + z * (part_1 - ref_1
                   + z * (part_2 - ref_2
                          + z * (part_3 - ref_3
                                 + z * part_4_diff))))
    return restore_shape(anom, SA_in)
