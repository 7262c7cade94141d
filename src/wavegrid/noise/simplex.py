"""Seeded simplex noise for smooth procedural motion.

Provides scalar 2D/3D sampling for single lookups and numpy-vectorised
variants that evaluate the same formula over whole arrays of coordinates,
which is how the per-frame displacement pass samples the grid.
"""

import math
import random
from typing import Optional

import numpy as np
from numpy.typing import ArrayLike, NDArray


# Skew/unskew factors
F2 = 0.5 * (math.sqrt(3.0) - 1.0)
G2 = (3.0 - math.sqrt(3.0)) / 6.0
F3 = 1.0 / 3.0
G3 = 1.0 / 6.0

# Squared kernel radius. 0.5 keeps every corner's falloff inside its
# simplex so the field has no seams at cell boundaries.
RADIUS_SQ = 0.5

# Empirical normalisation to [-1, 1]
NORM_2D = 70.0
NORM_3D = 68.0

GRAD3 = (
    (1, 1, 0), (-1, 1, 0), (1, -1, 0), (-1, -1, 0),
    (1, 0, 1), (-1, 0, 1), (1, 0, -1), (-1, 0, -1),
    (0, 1, 1), (0, -1, 1), (0, 1, -1), (0, -1, -1),
)


class SimplexNoise:
    """Deterministic simplex noise field.

    The permutation table is generated once from ``seed`` and never
    touched again, so two instances with the same seed return identical
    values for identical inputs.

    Args:
        seed: Seed for the permutation table. Random if None.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed if seed is not None else random.randint(0, 65535)

        rng = random.Random(self.seed)
        p = list(range(256))
        rng.shuffle(p)

        # Doubled to avoid index wrapping
        self._perm = tuple(p + p)
        self._perm_mod12 = tuple(v % 12 for v in self._perm)

        self._perm_np = np.array(self._perm, dtype=np.int64)
        self._perm_mod12_np = np.array(self._perm_mod12, dtype=np.int64)
        self._grad_np = np.array(GRAD3, dtype=np.float64)

    # ------------------------------------------------------------------
    # Scalar API
    # ------------------------------------------------------------------

    def noise2d(self, xin: float, yin: float) -> float:
        """Sample 2D noise at (x, y). Returns a value in [-1, 1]."""
        perm = self._perm
        pm12 = self._perm_mod12

        s = (xin + yin) * F2
        i = math.floor(xin + s)
        j = math.floor(yin + s)
        t = (i + j) * G2
        x0 = xin - (i - t)
        y0 = yin - (j - t)

        if x0 > y0:
            i1, j1 = 1, 0
        else:
            i1, j1 = 0, 1

        x1 = x0 - i1 + G2
        y1 = y0 - j1 + G2
        x2 = x0 - 1.0 + 2.0 * G2
        y2 = y0 - 1.0 + 2.0 * G2

        ii = i & 255
        jj = j & 255
        gi0 = pm12[ii + perm[jj]]
        gi1 = pm12[ii + i1 + perm[jj + j1]]
        gi2 = pm12[ii + 1 + perm[jj + 1]]

        n = 0.0

        t0 = RADIUS_SQ - x0 * x0 - y0 * y0
        if t0 > 0:
            g = GRAD3[gi0]
            t0 *= t0
            n += t0 * t0 * (g[0] * x0 + g[1] * y0)

        t1 = RADIUS_SQ - x1 * x1 - y1 * y1
        if t1 > 0:
            g = GRAD3[gi1]
            t1 *= t1
            n += t1 * t1 * (g[0] * x1 + g[1] * y1)

        t2 = RADIUS_SQ - x2 * x2 - y2 * y2
        if t2 > 0:
            g = GRAD3[gi2]
            t2 *= t2
            n += t2 * t2 * (g[0] * x2 + g[1] * y2)

        return max(-1.0, min(1.0, NORM_2D * n))

    def noise3d(self, xin: float, yin: float, zin: float) -> float:
        """Sample 3D noise at (x, y, z). Returns a value in [-1, 1]."""
        perm = self._perm
        pm12 = self._perm_mod12

        s = (xin + yin + zin) * F3
        i = math.floor(xin + s)
        j = math.floor(yin + s)
        k = math.floor(zin + s)
        t = (i + j + k) * G3
        x0 = xin - (i - t)
        y0 = yin - (j - t)
        z0 = zin - (k - t)

        # Which of the six tetrahedra we're in
        if x0 >= y0:
            if y0 >= z0:
                i1, j1, k1, i2, j2, k2 = 1, 0, 0, 1, 1, 0
            elif x0 >= z0:
                i1, j1, k1, i2, j2, k2 = 1, 0, 0, 1, 0, 1
            else:
                i1, j1, k1, i2, j2, k2 = 0, 0, 1, 1, 0, 1
        else:
            if y0 < z0:
                i1, j1, k1, i2, j2, k2 = 0, 0, 1, 0, 1, 1
            elif x0 < z0:
                i1, j1, k1, i2, j2, k2 = 0, 1, 0, 0, 1, 1
            else:
                i1, j1, k1, i2, j2, k2 = 0, 1, 0, 1, 1, 0

        x1 = x0 - i1 + G3
        y1 = y0 - j1 + G3
        z1 = z0 - k1 + G3
        x2 = x0 - i2 + 2.0 * G3
        y2 = y0 - j2 + 2.0 * G3
        z2 = z0 - k2 + 2.0 * G3
        x3 = x0 - 1.0 + 3.0 * G3
        y3 = y0 - 1.0 + 3.0 * G3
        z3 = z0 - 1.0 + 3.0 * G3

        ii = i & 255
        jj = j & 255
        kk = k & 255
        gi0 = pm12[ii + perm[jj + perm[kk]]]
        gi1 = pm12[ii + i1 + perm[jj + j1 + perm[kk + k1]]]
        gi2 = pm12[ii + i2 + perm[jj + j2 + perm[kk + k2]]]
        gi3 = pm12[ii + 1 + perm[jj + 1 + perm[kk + 1]]]

        n = 0.0
        for gi, cx, cy, cz in (
            (gi0, x0, y0, z0),
            (gi1, x1, y1, z1),
            (gi2, x2, y2, z2),
            (gi3, x3, y3, z3),
        ):
            tc = RADIUS_SQ - cx * cx - cy * cy - cz * cz
            if tc > 0:
                g = GRAD3[gi]
                tc *= tc
                n += tc * tc * (g[0] * cx + g[1] * cy + g[2] * cz)

        return max(-1.0, min(1.0, NORM_3D * n))

    # ------------------------------------------------------------------
    # Vectorised API
    # ------------------------------------------------------------------

    def noise2d_array(self, x: ArrayLike, y: ArrayLike) -> NDArray[np.float64]:
        """Sample 2D noise element-wise over broadcast arrays."""
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)

        s = (x + y) * F2
        i = np.floor(x + s)
        j = np.floor(y + s)
        t = (i + j) * G2
        x0 = x - (i - t)
        y0 = y - (j - t)

        i1 = (x0 > y0).astype(np.int64)
        j1 = 1 - i1

        x1 = x0 - i1 + G2
        y1 = y0 - j1 + G2
        x2 = x0 - 1.0 + 2.0 * G2
        y2 = y0 - 1.0 + 2.0 * G2

        perm = self._perm_np
        pm12 = self._perm_mod12_np
        ii = i.astype(np.int64) & 255
        jj = j.astype(np.int64) & 255
        gi0 = pm12[ii + perm[jj]]
        gi1 = pm12[ii + i1 + perm[jj + j1]]
        gi2 = pm12[ii + 1 + perm[jj + 1]]

        n = (
            self._corner2(gi0, x0, y0)
            + self._corner2(gi1, x1, y1)
            + self._corner2(gi2, x2, y2)
        )
        return np.clip(NORM_2D * n, -1.0, 1.0)

    def noise3d_array(
        self, x: ArrayLike, y: ArrayLike, z: ArrayLike
    ) -> NDArray[np.float64]:
        """Sample 3D noise element-wise over broadcast arrays."""
        x, y, z = np.broadcast_arrays(
            np.asarray(x, dtype=np.float64),
            np.asarray(y, dtype=np.float64),
            np.asarray(z, dtype=np.float64),
        )

        s = (x + y + z) * F3
        i = np.floor(x + s)
        j = np.floor(y + s)
        k = np.floor(z + s)
        t = (i + j + k) * G3
        x0 = x - (i - t)
        y0 = y - (j - t)
        z0 = z - (k - t)

        # Same tetrahedron selection as noise3d, as boolean masks
        i1 = ((x0 >= y0) & (x0 >= z0)).astype(np.int64)
        j1 = ((y0 > x0) & (y0 >= z0)).astype(np.int64)
        k1 = ((z0 > x0) & (z0 > y0)).astype(np.int64)
        i2 = ((x0 >= y0) | (x0 >= z0)).astype(np.int64)
        j2 = ((x0 < y0) | (y0 >= z0)).astype(np.int64)
        k2 = ((y0 < z0) | (x0 < z0)).astype(np.int64)

        x1 = x0 - i1 + G3
        y1 = y0 - j1 + G3
        z1 = z0 - k1 + G3
        x2 = x0 - i2 + 2.0 * G3
        y2 = y0 - j2 + 2.0 * G3
        z2 = z0 - k2 + 2.0 * G3
        x3 = x0 - 1.0 + 3.0 * G3
        y3 = y0 - 1.0 + 3.0 * G3
        z3 = z0 - 1.0 + 3.0 * G3

        perm = self._perm_np
        pm12 = self._perm_mod12_np
        ii = i.astype(np.int64) & 255
        jj = j.astype(np.int64) & 255
        kk = k.astype(np.int64) & 255
        gi0 = pm12[ii + perm[jj + perm[kk]]]
        gi1 = pm12[ii + i1 + perm[jj + j1 + perm[kk + k1]]]
        gi2 = pm12[ii + i2 + perm[jj + j2 + perm[kk + k2]]]
        gi3 = pm12[ii + 1 + perm[jj + 1 + perm[kk + 1]]]

        n = (
            self._corner3(gi0, x0, y0, z0)
            + self._corner3(gi1, x1, y1, z1)
            + self._corner3(gi2, x2, y2, z2)
            + self._corner3(gi3, x3, y3, z3)
        )
        return np.clip(NORM_3D * n, -1.0, 1.0)

    def _corner2(self, gi, x, y):
        t = RADIUS_SQ - x * x - y * y
        g = self._grad_np[gi]
        t2 = t * t
        contrib = t2 * t2 * (g[..., 0] * x + g[..., 1] * y)
        return np.where(t > 0, contrib, 0.0)

    def _corner3(self, gi, x, y, z):
        t = RADIUS_SQ - x * x - y * y - z * z
        g = self._grad_np[gi]
        t2 = t * t
        contrib = t2 * t2 * (g[..., 0] * x + g[..., 1] * y + g[..., 2] * z)
        return np.where(t > 0, contrib, 0.0)


class ZeroNoise(SimplexNoise):
    """Noise field that is flat zero everywhere.

    Used to isolate the spring physics from displacement.
    """

    def __init__(self):
        super().__init__(seed=0)

    def noise2d(self, xin: float, yin: float) -> float:
        return 0.0

    def noise3d(self, xin: float, yin: float, zin: float) -> float:
        return 0.0

    def noise2d_array(self, x: ArrayLike, y: ArrayLike) -> NDArray[np.float64]:
        return np.zeros(np.broadcast(np.asarray(x), np.asarray(y)).shape)

    def noise3d_array(
        self, x: ArrayLike, y: ArrayLike, z: ArrayLike
    ) -> NDArray[np.float64]:
        return np.zeros(
            np.broadcast(np.asarray(x), np.asarray(y), np.asarray(z)).shape
        )
