
import numpy as np
import pytest

from hdivfe.mesh import TriangleMesh, QuadrangleMesh, TetrahedronMesh, L2GTransformer

from mesh_data import *


class TestHomogeneousMeshInterfaces:
    @pytest.mark.parametrize("data", from_box_data)
    def test_from_box(self, data):
        mesh = data['mesh']()
        assert mesh.number_of_nodes() == data['NN']
        assert mesh.number_of_faces() == data['NF']
        assert mesh.number_of_cells() == data['NC']
        assert len(mesh.boundary_face_index()) == data['NBF']
        np.testing.assert_allclose(np.sum(mesh.entity_measure('cell')), data['volume'])

    @pytest.mark.parametrize("data", from_box_data)
    def test_topology(self, data):
        mesh = data['mesh']()
        NF = mesh.number_of_faces()
        face2cell = mesh.face_to_cell()
        cell2face = mesh.cell_to_face()
        np.testing.assert_array_equal(cell2face[face2cell[:, 0], face2cell[:, 2]], np.arange(NF))
        np.testing.assert_array_equal(cell2face[face2cell[:, 1], face2cell[:, 3]], np.arange(NF))
        # every face is shared by at most two cells
        count = np.bincount(cell2face.reshape(-1), minlength=NF)
        np.testing.assert_array_equal(count, np.where(mesh.boundary_face_flag(), 1, 2))
        np.testing.assert_array_equal(mesh.faceregion, mesh.boundary_face_flag().astype(np.int_))

    @pytest.mark.parametrize("data", from_box_data)
    def test_face_sign(self, data):
        mesh = data['mesh']()
        face2cell = mesh.face_to_cell()
        sign = mesh.cell_to_face_sign()
        assert set(np.unique(sign)) <= {-1, 1}
        isInFace = ~mesh.boundary_face_flag()
        s0 = sign[face2cell[:, 0], face2cell[:, 2]]
        s1 = sign[face2cell[:, 1], face2cell[:, 3]]
        np.testing.assert_array_equal(s0[isInFace], -s1[isInFace])

    @pytest.mark.parametrize("data", from_box_data)
    def test_face_flip(self, data):
        mesh = data['mesh']()
        face2cell = mesh.face_to_cell()
        flip = mesh.cell_to_face_flip()
        # faces keep the vertex order of the first cell they are found in
        assert not np.any(flip[face2cell[:, 0], face2cell[:, 2]])

    @pytest.mark.parametrize("data", from_box_data)
    def test_outward_flux_of_constant(self, data):
        # the signed normals of the faces of a cell sum up to zero
        mesh = data['mesh']()
        n = mesh.face_normal()*mesh.entity_measure('face')[:, None]
        sign = mesh.cell_to_face_sign()
        total = np.einsum('cf, cfd->cd', sign, n[mesh.cell_to_face()])
        np.testing.assert_allclose(total, 0.0, atol=1e-13)

    @pytest.mark.parametrize("data", one_triangle_data)
    def test_from_one_triangle(self, data):
        mesh = TriangleMesh.from_one_triangle(meshtype=data['meshtype'])
        np.testing.assert_array_equal(mesh.entity('face'), data['face'])
        np.testing.assert_array_equal(mesh.cell_to_face(), data['cell2face'])
        np.testing.assert_allclose(mesh.face_normal(), data['face_normal'], atol=1e-15)
        np.testing.assert_allclose(mesh.entity_measure('face'), data['face_measure'])
        np.testing.assert_allclose(mesh.entity_measure('cell'), data['cell_measure'])
        np.testing.assert_array_equal(mesh.cell_to_face_sign(), [[1, 1, 1]])

    def test_from_one_tetrahedron(self):
        mesh = TetrahedronMesh.from_one_tetrahedron()
        assert mesh.number_of_vertices_of_cells() == 4
        assert mesh.number_of_faces() == 4
        assert mesh.boundary_face_index().shape == (4, )
        np.testing.assert_allclose(mesh.entity_measure('cell'), [1/6])
        sign = mesh.cell_to_face_sign()
        n = mesh.face_normal()[mesh.cell_to_face()[0]]
        fm = mesh.entity_measure('face')[mesh.cell_to_face()[0]]
        flux = np.einsum('f, f, fd->d', sign[0], fm, n)
        np.testing.assert_allclose(flux, 0.0, atol=1e-14)

        with pytest.raises(ValueError):
            TetrahedronMesh.from_one_tetrahedron(meshtype='equ')

    def test_ref_to_point(self):
        mesh = QuadrangleMesh.from_box([0, 2, 0, 1], nx=1, ny=1)
        xref = np.array([[0.5, 0.5], [1.0, 0.0]])
        ps = mesh.ref_to_point(xref)
        np.testing.assert_allclose(ps, [[[1.0, 0.5], [2.0, 0.0]]])
        J = mesh.jacobian_matrix(xref)
        np.testing.assert_allclose(J[0, 0], [[2.0, 0.0], [0.0, 1.0]])

    def test_wrong_cell_shape(self):
        node = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
        with pytest.raises(ValueError):
            QuadrangleMesh(node, np.array([[0, 1, 2]]))
        with pytest.raises(ValueError):
            TriangleMesh(node, np.array([[0, 1, 2]]), cellregion=np.array([1, 2]))

    def test_threshold(self):
        mesh = TriangleMesh.from_box(nx=2, ny=2, threshold=lambda p: p[:, 0] > 0.5)
        assert mesh.number_of_cells() == 4
        assert mesh.number_of_nodes() == 6


class TestL2GTransformer:
    @pytest.mark.parametrize("data", locate_data)
    def test_eval_and_inverse(self, data):
        mesh = data['mesh']()
        trafo = L2GTransformer(mesh.geometry, mesh)
        xref = mesh.geometry.barycenter()
        for cell in range(mesh.number_of_cells()):
            trafo.update(cell)
            x = trafo.eval(xref)
            np.testing.assert_allclose(x, mesh.entity_barycenter('cell', cell), atol=1e-14)
            np.testing.assert_allclose(trafo.inverse(x), xref, atol=1e-12)
            J = trafo.jacobian(xref[None, :])
            np.testing.assert_allclose(J[0], mesh.jacobian_matrix(xref[None, :], index=[cell])[0, 0])

    def test_wrong_geometry(self):
        mesh = TriangleMesh.from_box(nx=1, ny=1)
        qmesh = QuadrangleMesh.from_box(nx=1, ny=1)
        with pytest.raises(ValueError):
            L2GTransformer(qmesh.geometry, mesh)
