"""JIT accelerated helpers using numba."""

import numba as nb
import numpy as np


@nb.njit(cache=True)
def accelerations_jit(positions, gms):
    n = gms.shape[0]
    acc = np.zeros((n, 3), dtype=np.float64)
    for i in range(n):
        for j in range(i + 1, n):
            dx = positions[j, 0] - positions[i, 0]
            dy = positions[j, 1] - positions[i, 1]
            dz = positions[j, 2] - positions[i, 2]
            dist_sq = dx * dx + dy * dy + dz * dz
            inv_dist3 = 1.0 / (dist_sq * np.sqrt(dist_sq))
            # equal and opposite pull, scaled by the other body's gm
            acc[i, 0] += gms[j] * dx * inv_dist3
            acc[i, 1] += gms[j] * dy * inv_dist3
            acc[i, 2] += gms[j] * dz * inv_dist3
            acc[j, 0] -= gms[i] * dx * inv_dist3
            acc[j, 1] -= gms[i] * dy * inv_dist3
            acc[j, 2] -= gms[i] * dz * inv_dist3
    return acc
