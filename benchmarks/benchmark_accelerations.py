import time
import numpy as np

from eclipsesim.integrators import compute_accelerations
from eclipsesim.jit import accelerations_jit


def compute_accelerations_python(positions, gms):
    n = len(gms)
    acc = np.zeros((n, 3), dtype=np.float64)
    for i in range(n):
        r_vec = positions - positions[i]
        dist_sq = np.einsum("ij,ij->i", r_vec, r_vec)
        dist_sq[i] = np.inf
        factors = gms / (dist_sq * np.sqrt(dist_sq))
        acc[i] = np.sum(r_vec * factors[:, None], axis=0)
    return acc


if __name__ == "__main__":
    np.random.seed(0)
    N = 1500  # >1k bodies
    positions = np.random.random((N, 3)) * 1e8
    gms = np.random.random(N) * 1e5 + 1.0

    # warm up JIT
    accelerations_jit(positions, gms)

    t0 = time.time()
    baseline = compute_accelerations_python(positions, gms)
    t1 = time.time()
    vectorised = compute_accelerations(positions, gms)
    t2 = time.time()
    compiled = accelerations_jit(positions, gms)
    t3 = time.time()

    assert np.allclose(baseline, vectorised)
    assert np.allclose(baseline, compiled)
    print(f"Python loop: {t1 - t0:.3f}s")
    print(f"NumPy      : {t2 - t1:.3f}s")
    print(f"Numba      : {t3 - t2:.3f}s")
    if t3 - t2 > 0:
        print(f"Speedup     : {(t1 - t0) / (t3 - t2):.1f}x")
