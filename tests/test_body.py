import numpy as np
import pytest

from eclipsesim import Body


def test_body_pads_short_vectors():
    b = Body("Probe", 1.0, [1.0, 2.0], [3.0], 1.0)
    assert np.allclose(b.pos, [1.0, 2.0, 0.0])
    assert np.allclose(b.vel, [3.0, 0.0, 0.0])


@pytest.mark.parametrize("gm, radius", [(0.0, 1.0), (-1.0, 1.0), (1.0, 0.0), (1.0, -5.0)])
def test_body_rejects_non_positive_constants(gm, radius):
    with pytest.raises(ValueError, match="Probe"):
        Body("Probe", gm, [0, 0, 0], [0, 0, 0], radius)


def test_distance_from():
    a = Body("A", 1.0, [0.0, 0.0, 0.0], [0, 0, 0], 1.0)
    b = Body("B", 1.0, [3.0, 4.0, 12.0], [0, 0, 0], 1.0)
    assert b.distance_from(a) == 13.0
    assert a.distance_from(b) == 13.0


def test_copy_is_independent():
    a = Body("A", 2.0, [1.0, 2.0, 3.0], [4.0, 5.0, 6.0], 7.0)
    c = a.copy()
    c.pos[0] = 100.0
    c.vel = c.vel * 2
    assert a.pos[0] == 1.0
    assert np.allclose(a.vel, [4.0, 5.0, 6.0])
    assert (c.name, c.gm, c.radius) == ("A", 2.0, 7.0)


def test_repr_mentions_name():
    assert "Moon" in repr(Body("Moon", 4902.8, [0, 0, 0], [0, 0, 0], 1737.0))
