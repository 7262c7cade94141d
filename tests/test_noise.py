"""Tests for the simplex noise field."""

from __future__ import annotations

import numpy as np
import pytest

from wavegrid.noise.simplex import SimplexNoise, ZeroNoise


@pytest.fixture()
def noise() -> SimplexNoise:
    return SimplexNoise(seed=1234)


class TestDeterminism:
    """Same seed, same field."""

    def test_same_seed_same_values(self) -> None:
        a = SimplexNoise(seed=42)
        b = SimplexNoise(seed=42)
        for x, y, z in [(0.1, 0.2, 0.3), (10.5, -3.25, 7.0), (-100.0, 55.5, 0.0)]:
            assert a.noise3d(x, y, z) == b.noise3d(x, y, z)
            assert a.noise2d(x, y) == b.noise2d(x, y)

    def test_different_seeds_differ(self) -> None:
        a = SimplexNoise(seed=1)
        b = SimplexNoise(seed=2)
        samples = [(i * 0.37, i * 0.53, i * 0.11) for i in range(20)]
        assert any(a.noise3d(*p) != b.noise3d(*p) for p in samples)

    def test_repeated_calls_are_pure(self, noise: SimplexNoise) -> None:
        first = noise.noise3d(1.23, 4.56, 7.89)
        for _ in range(5):
            assert noise.noise3d(1.23, 4.56, 7.89) == first

    def test_seed_is_kept(self) -> None:
        assert SimplexNoise(seed=99).seed == 99


class TestRange:
    """Samples stay within [-1, 1]."""

    def test_scalar_2d_range(self, noise: SimplexNoise) -> None:
        rng = np.random.default_rng(0)
        for x, y in rng.uniform(-500, 500, size=(500, 2)):
            assert -1.0 <= noise.noise2d(x, y) <= 1.0

    def test_vectorised_3d_range(self, noise: SimplexNoise) -> None:
        rng = np.random.default_rng(1)
        pts = rng.uniform(-500, 500, size=(3, 5000))
        values = noise.noise3d_array(*pts)
        assert values.shape == (5000,)
        assert np.all(values >= -1.0)
        assert np.all(values <= 1.0)

    def test_field_is_not_flat(self, noise: SimplexNoise) -> None:
        xs = np.linspace(0, 20, 200)
        values = noise.noise3d_array(xs, xs * 0.7, 0.5)
        assert values.std() > 0.05


class TestVectorisedMatchesScalar:
    """The numpy path evaluates the same formula as the scalar path."""

    def test_noise2d(self, noise: SimplexNoise) -> None:
        rng = np.random.default_rng(2)
        xs, ys = rng.uniform(-50, 50, size=(2, 300))
        vector = noise.noise2d_array(xs, ys)
        scalar = [noise.noise2d(x, y) for x, y in zip(xs, ys)]
        assert vector == pytest.approx(scalar, abs=1e-12)

    def test_noise3d(self, noise: SimplexNoise) -> None:
        rng = np.random.default_rng(3)
        xs, ys, zs = rng.uniform(-50, 50, size=(3, 300))
        vector = noise.noise3d_array(xs, ys, zs)
        scalar = [noise.noise3d(x, y, z) for x, y, z in zip(xs, ys, zs)]
        assert vector == pytest.approx(scalar, abs=1e-12)

    def test_noise3d_on_lattice_points(self, noise: SimplexNoise) -> None:
        # Integer inputs hit the tie-breaking branches of corner selection
        coords = [(0.0, 0.0, 0.0), (1.0, 1.0, 1.0), (2.0, 1.0, 1.0), (1.0, 2.0, 2.0)]
        for x, y, z in coords:
            assert noise.noise3d_array(x, y, z) == pytest.approx(noise.noise3d(x, y, z))

    def test_broadcasts_scalar_time(self, noise: SimplexNoise) -> None:
        xs = np.array([0.5, 1.5, 2.5])
        out = noise.noise3d_array(xs, xs, 0.25)
        assert out.shape == (3,)


class TestContinuity:
    """Nearby inputs produce nearby outputs."""

    @pytest.mark.parametrize("boundary", [0.0, 1.0, 2.0, 17.0])
    def test_no_jump_across_cell_boundary(self, noise: SimplexNoise, boundary: float) -> None:
        eps = 1e-6
        below = noise.noise3d(boundary - eps, 0.3, 0.7)
        above = noise.noise3d(boundary + eps, 0.3, 0.7)
        assert abs(above - below) < 1e-3

    def test_small_time_step_small_change(self, noise: SimplexNoise) -> None:
        xs = np.linspace(0, 10, 100)
        a = noise.noise3d_array(xs, xs, 1.0)
        b = noise.noise3d_array(xs, xs, 1.0 + 1e-5)
        assert np.max(np.abs(a - b)) < 1e-3


class TestZeroNoise:
    def test_all_zero(self) -> None:
        zero = ZeroNoise()
        assert zero.noise2d(1.0, 2.0) == 0.0
        assert zero.noise3d(1.0, 2.0, 3.0) == 0.0
        out = zero.noise3d_array(np.ones(4), np.ones(4), 0.5)
        assert out.shape == (4,)
        assert not out.any()
