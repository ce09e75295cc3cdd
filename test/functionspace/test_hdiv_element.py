
import numpy as np
import pytest

from hdivfe.mesh import Triangle2D, Quadrilateral2D
from hdivfe.functionspace import (
    HDivRT0, HDivBDM2, ON_CELLS, ON_FACES, ON_BFACES
)

from hdiv_data import *


class TestHDivElement:
    @pytest.mark.parametrize("data", element_data)
    def test_counters(self, data):
        fetype = data['fetype']
        geo = data['geometry']
        assert fetype.is_defined(geo)
        assert fetype.ncomponents == geo.dim
        assert fetype.ndofs(ON_CELLS, geo) == data['ldof']
        assert fetype.ndofs(ON_FACES, geo) == data['fdof']
        assert fetype.ndofs(ON_BFACES, geo) == data['fdof']
        assert fetype.order(geo) == data['order']
        assert fetype.dofmap_pattern(ON_CELLS, geo) == data['pattern'][0]
        assert fetype.dofmap_pattern(ON_FACES, geo) == data['pattern'][1]
        assert fetype.interior_offset(geo) == data['offset']

    @pytest.mark.parametrize("data", undefined_data)
    def test_undefined(self, data):
        fetype = data['fetype']
        geo = data['geometry']
        assert not fetype.is_defined(geo)
        with pytest.raises(ValueError, match="not defined"):
            fetype.ndofs(ON_CELLS, geo)
        with pytest.raises(ValueError, match="not defined"):
            fetype.basis(ON_CELLS, geo)
        with pytest.raises(ValueError, match="not defined"):
            fetype.coefficients(geo)

    def test_unsupported_edim(self):
        with pytest.raises(ValueError):
            HDivRT0(1)
        with pytest.raises(ValueError):
            HDivBDM2(3)

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            HDivRT0(2).ndofs('edge', Triangle2D)

    def test_equality(self):
        assert HDivRT0(2) == HDivRT0(2)
        assert HDivRT0(2) != HDivRT0(3)
        assert HDivRT0(2) != HDivBDM2(2)
        assert len({HDivRT0(2), HDivRT0(2), HDivBDM2(2)}) == 2
        assert repr(HDivBDM2(2)) == "HDivBDM2{2}"

    @pytest.mark.parametrize("data", element_data)
    def test_basis_shape(self, data):
        fetype = data['fetype']
        geo = data['geometry']
        xref = np.full((5, geo.dim), 0.2)
        phi = fetype.basis(ON_CELLS, geo)(xref)
        assert phi.shape == (5, data['ldof'], geo.dim)
        fxref = np.full((5, geo.dim - 1), 0.3)
        fphi = fetype.basis(ON_FACES, geo)(fxref)
        assert fphi.shape == (5, data['fdof'], 1)

    @pytest.mark.parametrize("data", element_data)
    def test_reference_moments(self, data):
        """Flux moment `k` of basis function `l` through local face `j` is
        one if `l` is face dof `k` of face `j` and zero otherwise."""
        fetype = data['fetype']
        geo = data['geometry']
        mesh = reference_mesh(geo)
        qf = mesh.quadrature_formula(4, 'face')
        bcs, ws = qf.get_quadrature_points_and_weights()
        ps = mesh.ref_to_point(bcs, 'face') # (NF, NQ, TD)
        n = mesh.face_normal()*mesh.entity_measure('face')[:, None]
        phi = fetype.basis(ON_CELLS, geo)(ps) # (NF, NQ, ldof, TD)
        Q = fetype.face_moments(bcs)
        M = np.einsum('q, fqld, fd, qk->lfk', ws, phi, n, Q)
        M = M[:, mesh.cell_to_face()[0], :].reshape(data['ldof'], -1)
        expected = np.eye(data['ldof'])[:, :data['offset']]
        np.testing.assert_allclose(M, expected, atol=1e-13)

    @pytest.mark.parametrize("data", element_data)
    def test_div_basis(self, data):
        fetype = data['fetype']
        geo = data['geometry']
        rng = np.random.default_rng(0)
        xref = rng.uniform(0.05, 0.3, size=(6, geo.dim))
        basis = fetype.basis(ON_CELLS, geo)
        h = 1e-6
        div = np.zeros((6, data['ldof']))
        for d in range(geo.dim):
            e = np.zeros(geo.dim)
            e[d] = h
            div += (basis(xref + e)[..., d] - basis(xref - e)[..., d])/(2*h)
        np.testing.assert_allclose(fetype.div_basis(geo)(xref), div, atol=1e-6)

    @pytest.mark.parametrize("data", element_data)
    def test_face_basis_is_dual(self, data):
        fetype = data['fetype']
        geo = data['geometry']
        mesh = reference_mesh(geo)
        bcs, ws = mesh.quadrature_formula(4, 'face').get_quadrature_points_and_weights()
        fphi = fetype.basis(ON_FACES, geo)(bcs)[..., 0]
        Q = fetype.face_moments(bcs)
        M = np.einsum('q, qj, qk->jk', ws, fphi, Q)
        np.testing.assert_allclose(M, np.eye(data['fdof']), atol=1e-13)


class TestCoefficients:
    def test_rt0(self):
        coef = HDivRT0(2).coefficients(Triangle2D)
        signs = np.array([[1, -1, 1], [-1, -1, 1]])
        flips = np.array([[False, True, False], [True, False, True]])
        c = coef(signs, flips)
        assert c.shape == (2, 3, 2)
        np.testing.assert_array_equal(c[..., 0], signs)
        np.testing.assert_array_equal(c[..., 1], signs)

    def test_bdm2(self):
        coef = HDivBDM2().coefficients(Triangle2D)
        signs = np.array([1, -1, -1])
        flips = np.array([True, False, True])
        c = coef(signs, flips)
        assert c.shape == (12, 2)
        expected = [1, -1, 1, -1, -1, -1, -1, 1, -1, 1, 1, 1]
        np.testing.assert_array_equal(c[:, 0], expected)
        np.testing.assert_array_equal(c[:, 1], expected)

    def test_shape_mismatch(self):
        coef = HDivBDM2().coefficients(Triangle2D)
        with pytest.raises(ValueError):
            coef(np.ones(3), np.zeros(2, dtype=np.bool_))

    def test_quad_rt0(self):
        coef = HDivRT0(2).coefficients(Quadrilateral2D)
        c = coef(np.array([1, 1, -1, -1]), np.zeros(4, dtype=np.bool_))
        np.testing.assert_array_equal(c[:, 0], [1, 1, -1, -1])
