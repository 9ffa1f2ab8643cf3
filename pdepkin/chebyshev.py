"""
Chebyshev polynomial rate-coefficient surfaces k(T, P).

The solver fits log10 k on a reduced inverse temperature and a reduced
log pressure, both mapped onto [-1, 1]:

    Tr = (2/T - 1/Tmin - 1/Tmax) / (1/Tmax - 1/Tmin)
    Pr = (2 log P - log Pmin - log Pmax) / (log Pmax - log Pmin)
    log10 k = sum_t sum_p alpha[t, p] * phi_t(Tr) * phi_p(Pr)
"""

from typing import Dict

import numpy as np
from numpy.polynomial import chebyshev


class ChebyshevSurface:
    """Bivariate Chebyshev approximation of a pressure-dependent rate coefficient.

    Temperatures are in K, pressures in bar. The coefficient matrix has one
    row per temperature order and one column per pressure order.
    """

    def __init__(self, Tmin: float, Tmax: float, Pmin: float, Pmax: float, coeffs):
        coeffs = np.array(coeffs, dtype=float)
        if coeffs.ndim != 2 or coeffs.size == 0:
            raise ValueError(f"Chebyshev coefficients must be a non-empty matrix, got shape {coeffs.shape}")
        if not np.all(np.isfinite(coeffs)) or np.any(coeffs == 0.0):
            raise ValueError("Chebyshev coefficients must all be finite and non-zero")
        if not (0 < Tmin < Tmax):
            raise ValueError(f"Invalid temperature range of fit: {Tmin} - {Tmax} K")
        if not (0 < Pmin < Pmax):
            raise ValueError(f"Invalid pressure range of fit: {Pmin} - {Pmax} bar")
        self.Tmin = float(Tmin)
        self.Tmax = float(Tmax)
        self.Pmin = float(Pmin)
        self.Pmax = float(Pmax)
        self.coeffs = coeffs

    @property
    def degree_T(self) -> int:
        return self.coeffs.shape[0]

    @property
    def degree_P(self) -> int:
        return self.coeffs.shape[1]

    def reduced_temperature(self, T):
        return (2.0 / T - 1.0 / self.Tmin - 1.0 / self.Tmax) / (1.0 / self.Tmax - 1.0 / self.Tmin)

    def reduced_pressure(self, P):
        log_min, log_max = np.log10(self.Pmin), np.log10(self.Pmax)
        return (2.0 * np.log10(P) - log_min - log_max) / (log_max - log_min)

    def get_rate_coefficient(self, T, P):
        """Evaluate k(T, P). Accepts scalars or broadcastable arrays."""
        Tr = self.reduced_temperature(np.asarray(T, dtype=float))
        Pr = self.reduced_pressure(np.asarray(P, dtype=float))
        log_k = chebyshev.chebval2d(Tr, Pr, self.coeffs)
        return 10.0 ** log_k

    def is_within_range(self, T, P) -> bool:
        return self.Tmin <= T <= self.Tmax and self.Pmin <= P <= self.Pmax

    def to_dict(self) -> Dict:
        return {
            'Tmin_K': self.Tmin,
            'Tmax_K': self.Tmax,
            'Pmin_bar': self.Pmin,
            'Pmax_bar': self.Pmax,
            'coefficients': self.coeffs.tolist(),
        }

    def __repr__(self):
        return (f"ChebyshevSurface(T=[{self.Tmin}, {self.Tmax}] K, P=[{self.Pmin}, {self.Pmax}] bar, "
                f"order={self.degree_T}x{self.degree_P})")
