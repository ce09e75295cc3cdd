
import numpy as np
import pytest

from hdivfe.quadrature import (
    quadrature_rule, GaussLegendreQuadrature, StroudQuadrature,
    TensorProductQuadrature
)
from hdivfe.mesh.geometry import (
    Edge1D, Triangle2D, Quadrilateral2D, Tetrahedron3D, Hexahedron3D
)

from quadrature_data import *


def monomial(bcs, alpha):
    return np.prod(bcs**np.array(alpha), axis=-1)


class TestGaussLegendreQuadrature:
    @pytest.mark.parametrize("data", interval_data)
    def test_exactness(self, data):
        qf = GaussLegendreQuadrature(data['q'])
        bcs, ws = qf.get_quadrature_points_and_weights()
        val = np.dot(ws, monomial(bcs, data['alpha']))
        np.testing.assert_allclose(val, data['exact'], atol=1e-14)

    @pytest.mark.parametrize("data", npoints_data)
    def test_number_of_points(self, data):
        qf = GaussLegendreQuadrature(data['q'])
        assert len(qf) == data['NQ']
        assert qf.get_quadrature_points_and_weights()[0].shape == (data['NQ'], 1)


class TestStroudQuadrature:
    @pytest.mark.parametrize("data", triangle_data)
    def test_triangle(self, data):
        qf = StroudQuadrature(2, data['q'])
        bcs, ws = qf.get_quadrature_points_and_weights()
        np.testing.assert_allclose(np.sum(ws), 1.0, atol=1e-14)
        val = np.dot(ws, monomial(bcs, data['alpha']))
        np.testing.assert_allclose(val, data['exact'], atol=1e-14)

    @pytest.mark.parametrize("data", tetrahedron_data)
    def test_tetrahedron(self, data):
        qf = StroudQuadrature(3, data['q'])
        bcs, ws = qf.get_quadrature_points_and_weights()
        val = np.dot(ws, monomial(bcs, data['alpha']))
        np.testing.assert_allclose(val, data['exact'], atol=1e-14)

    def test_points_inside(self):
        bcs, _ = StroudQuadrature(3, 5).get_quadrature_points_and_weights()
        assert np.all(bcs > 0.0)
        assert np.all(np.sum(bcs, axis=-1) < 1.0)


class TestTensorProductQuadrature:
    @pytest.mark.parametrize("data", tensor_data)
    def test_exactness(self, data):
        qf = TensorProductQuadrature(data['dim'], data['q'])
        bcs, ws = qf.get_quadrature_points_and_weights()
        assert bcs.shape[-1] == data['dim']
        val = np.dot(ws, monomial(bcs, data['alpha']))
        np.testing.assert_allclose(val, data['exact'], atol=1e-14)


class TestQuadratureRule:
    @pytest.mark.parametrize("geometry, cls", [
        (Edge1D, GaussLegendreQuadrature),
        (Triangle2D, StroudQuadrature),
        (Quadrilateral2D, TensorProductQuadrature),
        (Tetrahedron3D, StroudQuadrature),
        (Hexahedron3D, TensorProductQuadrature)])
    def test_dispatch(self, geometry, cls):
        qf = quadrature_rule(2, geometry)
        assert isinstance(qf, cls)
        bcs, ws = qf.get_quadrature_points_and_weights()
        assert bcs.shape == (ws.shape[0], geometry.dim)
        np.testing.assert_allclose(np.sum(ws), 1.0, atol=1e-14)

    def test_order_zero_is_midpoint(self):
        bcs, ws = quadrature_rule(0, Triangle2D).get_quadrature_points_and_weights()
        np.testing.assert_allclose(bcs, [[1/3, 1/3]], atol=1e-14)
        np.testing.assert_allclose(ws, [1.0])

    def test_negative_order(self):
        with pytest.raises(ValueError):
            quadrature_rule(-1, Triangle2D)
