
from typing import Union, Optional, Tuple

import numpy as np

from ..typing import TensorLike, Index, _S
from .. import logger
from .geometry import ReferenceGeometry
from .utils import flocc


##################################################
### Mesh Base
##################################################

class HomogeneousMesh():
    """
    Base class for meshes whose cells all share one reference geometry.

    The mesh stores nodes and cells and derives the face topology once at
    construction. It answers the queries needed by finite element spaces,
    interpolation and point evaluation: cell-face incidence, face normals,
    orientation signs of the faces relative to the cells, measures, regions
    and the reference-to-physical maps.

    Attributes:
        geometry : ReferenceGeometry
            Reference geometry of all cells (class attribute).
        node : Tensor
            Node coordinates (NN, GD).
        cell : Tensor
            Cell-to-node connectivity (NC, NV).
        face : Tensor
            Face-to-node connectivity (NF, NVF), oriented like the local face
            of the first cell the face was found in.
        face2cell : Tensor
            (NF, 4) array `[c0, c1, j0, j1]`; c0 == c1 marks boundary faces.
        cell2face : Tensor
            (NC, NFC) global face index of every local face.
    """
    geometry: ReferenceGeometry

    def __init__(self, node: TensorLike, cell: TensorLike,
                 cellregion: Optional[TensorLike]=None) -> None:
        self.node = np.asarray(node, dtype=np.float64)
        self.cell = np.asarray(cell, dtype=np.int_)
        self.itype = self.cell.dtype
        self.ftype = self.node.dtype

        geo = self.geometry
        if self.cell.ndim != 2 or self.cell.shape[1] != geo.number_of_nodes():
            raise ValueError(f"{type(self).__name__} expects cells with "
                             f"{geo.number_of_nodes()} nodes, but got cell array "
                             f"of shape {self.cell.shape}.")
        if self.node.shape[-1] != geo.dim:
            raise ValueError(f"{type(self).__name__} expects {geo.dim}D nodes, "
                             f"but got nodes of shape {self.node.shape}.")

        self.localFace = geo.localFace
        self.construct()

        NC = self.number_of_cells()
        if cellregion is None:
            cellregion = np.ones(NC, dtype=self.itype)
        self.cellregion = np.asarray(cellregion, dtype=self.itype)
        if self.cellregion.shape != (NC, ):
            raise ValueError(f"cellregion must have shape ({NC}, ), "
                             f"but got {self.cellregion.shape}.")
        self.faceregion = np.zeros(self.number_of_faces(), dtype=self.itype)
        self.faceregion[self.boundary_face_flag()] = 1

        self._cell_measure = None

    def construct(self) -> None:
        """Build the face entities and the cell-face incidence."""
        cell = self.cell
        localFace = self.localFace
        NVF = localFace.shape[-1]
        NC = self.number_of_cells()
        NFC = self.number_of_faces_of_cells()

        totalFace = cell[..., localFace].reshape(-1, NVF)
        i0, i1, j = flocc(np.sort(totalFace, axis=1))

        self.face = totalFace[i0, :]
        self.cell2face = j.reshape(NC, NFC).astype(self.itype)
        self.face2cell = np.stack(
            [i0//NFC, i1//NFC, i0%NFC, i1%NFC], axis=-1
        ).astype(self.itype)

        NN = self.number_of_nodes()
        NF = i0.shape[0]
        logger.info(f"Mesh toplogy relation constructed, with {NC} cells, {NF} "
                    f"faces, {NN} nodes.")

    ### counters
    def geo_dimension(self) -> int:
        return self.node.shape[-1]

    def top_dimension(self) -> int:
        return self.geometry.dim

    def number_of_nodes(self) -> int: return self.node.shape[0]
    def number_of_faces(self) -> int: return self.face.shape[0]
    def number_of_cells(self) -> int: return self.cell.shape[0]
    def number_of_faces_of_cells(self) -> int: return self.localFace.shape[0]
    def number_of_vertices_of_cells(self) -> int: return self.cell.shape[1]

    def entity(self, etype: Union[int, str], index: Optional[Index]=None) -> TensorLike:
        """Get entities in mesh structure.

        Parameters:
            etype (int | str): The topological dimension of the entity, or name\
            'cell' | 'face' | 'edge' | 'node'.
            index (int | slice | Tensor): The index of the entity.
        """
        TD = self.top_dimension()
        if etype in ('node', 0):
            entity = self.node
        elif etype in ('cell', TD):
            entity = self.cell
        elif etype in ('face', TD-1) or (TD == 2 and etype == 'edge'):
            entity = self.face
        else:
            raise ValueError(f"Unsupported entity type {etype} for a {TD}D mesh.")
        return entity if index is None else entity[index]

    def unique_cell_geometries(self) -> Tuple[ReferenceGeometry, ...]:
        return (self.geometry, )

    def cell_geometry(self, index: int) -> ReferenceGeometry:
        return self.geometry

    ### topology
    def face_to_cell(self, index: Index=_S) -> TensorLike:
        return self.face2cell[index]

    def cell_to_face(self, index: Index=_S) -> TensorLike:
        return self.cell2face[index]

    def cell_to_cell(self) -> TensorLike:
        """Neighbour across every local face; boundary faces point to the cell itself."""
        NC = self.number_of_cells()
        NFC = self.number_of_faces_of_cells()
        face2cell = self.face2cell
        cell2cell = np.zeros((NC, NFC), dtype=self.itype)
        cell2cell[face2cell[:, 0], face2cell[:, 2]] = face2cell[:, 1]
        cell2cell[face2cell[:, 1], face2cell[:, 3]] = face2cell[:, 0]
        return cell2cell

    def boundary_face_flag(self) -> TensorLike:
        return self.face2cell[:, 0] == self.face2cell[:, 1]

    def boundary_face_index(self) -> TensorLike:
        return np.nonzero(self.boundary_face_flag())[0]

    def cell_to_face_sign(self) -> TensorLike:
        """Orientation of the global face normals relative to the cells.

        Returns:
            Tensor: (NC, NFC) array with +1 where the normal of the face points
            out of the cell and -1 where it points inside.
        """
        n = self.face_normal()
        fb = self.entity_barycenter('face')
        cb = self.entity_barycenter('cell')
        c2f = self.cell2face
        d = fb[c2f] - cb[:, None, :]
        flag = np.einsum('cfd, cfd->cf', n[c2f], d) > 0.0
        return np.where(flag, 1, -1).astype(self.itype)

    def cell_to_face_flip(self) -> TensorLike:
        """Return True where a cell runs through its local face starting from a
        different vertex than the global face, shaped (NC, NFC).

        In 2D this means the local edge parameter is `1 - t` of the global one.
        """
        cell = self.cell
        face = self.face
        lnode = cell[:, self.localFace[:, 0]]
        return lnode != face[self.cell2face, 0]

    ### geometry
    def entity_barycenter(self, etype: Union[int, str], index: Optional[Index]=None) -> TensorLike:
        node = self.node
        if etype in ('node', 0):
            return node if index is None else node[index]
        entity = self.entity(etype, index)
        return np.mean(node[entity], axis=-2)

    def face_normal(self, index: Index=_S, unit: bool=True) -> TensorLike:
        """Normal vectors of the faces, oriented by the face vertex order."""
        node = self.node
        face = self.face[index]
        GD = self.geo_dimension()
        if GD == 2:
            t = node[face[:, 1]] - node[face[:, 0]]
            n = np.stack([t[:, 1], -t[:, 0]], axis=-1)
        elif face.shape[-1] == 3:
            n = np.cross(node[face[:, 1]] - node[face[:, 0]],
                         node[face[:, 2]] - node[face[:, 0]])
        else:
            n = 0.5*np.cross(node[face[:, 2]] - node[face[:, 0]],
                             node[face[:, 3]] - node[face[:, 1]])
        if unit:
            n = n/np.linalg.norm(n, axis=-1, keepdims=True)
        return n

    def entity_measure(self, etype: Union[int, str], index: Optional[Index]=None) -> TensorLike:
        """Measure of cells or faces.

        Faces are assumed to be flat, which holds for all meshes made of
        simplices and for parallelepiped quadrilateral and hexahedral cells.
        """
        index = _S if index is None else index
        TD = self.top_dimension()
        if etype in ('cell', TD):
            if self._cell_measure is None:
                self._cell_measure = self._compute_cell_measure()
            return self._cell_measure[index]
        elif etype in ('face', TD-1) or (TD == 2 and etype == 'edge'):
            if TD == 2:
                node = self.node
                face = self.face[index]
                return np.linalg.norm(node[face[:, 1]] - node[face[:, 0]], axis=-1)
            n = self.face_normal(index=index, unit=False)
            m = np.linalg.norm(n, axis=-1)
            if self.geometry.face.is_simplex:
                m = m/2.0
            return m
        elif etype in ('node', 0):
            return np.zeros(1, dtype=self.ftype)
        raise ValueError(f"Unsupported entity type {etype}.")

    def _compute_cell_measure(self) -> TensorLike:
        qf = self.quadrature_formula(2, 'cell')
        bcs, ws = qf.get_quadrature_points_and_weights()
        J = self.jacobian_matrix(bcs)
        detJ = np.abs(np.linalg.det(J))
        return np.einsum('q, cq->c', ws, detJ)*self.geometry.volume()

    def ref_to_point(self, xref: TensorLike, etype: Union[int, str]='cell',
                     index: Index=_S) -> TensorLike:
        """Map reference coordinates to physical points.

        Parameters:
            xref (Tensor): reference coordinates (..., TD) of the cell or
                (..., TD-1) of the face.
            etype (str): 'cell' or 'face'.

        Returns:
            Tensor: physical points (NE, ..., GD).
        """
        TD = self.top_dimension()
        if etype in ('cell', TD):
            geo = self.geometry
        else:
            geo = self.geometry.face
        phi = geo.shape_function(xref)
        entity = self.entity(etype, index)
        return np.einsum('...v, evd->e...d', phi, self.node[entity])

    def jacobian_matrix(self, xref: TensorLike, index: Index=_S) -> TensorLike:
        """Jacobian of the reference-to-physical map, shaped (NC, ..., GD, TD)."""
        gphi = self.geometry.grad_shape_function(xref)
        cell = self.cell[index]
        return np.einsum('...vt, cvd->c...dt', gphi, self.node[cell])

    def quadrature_formula(self, q: int, etype: Union[int, str]='cell'):
        from ..quadrature import quadrature_rule
        TD = self.top_dimension()
        if etype in ('cell', TD):
            return quadrature_rule(q, self.geometry)
        elif etype in ('face', TD-1) or (TD == 2 and etype == 'edge'):
            return quadrature_rule(q, self.geometry.face)
        raise ValueError(f"Unsupported entity type {etype}.")

    @classmethod
    def _box_nodes(cls, box, n):
        """Tensor grid nodes of a box, numbered with the x index running slowest."""
        GD = len(n)
        axes = [np.linspace(box[2*i], box[2*i+1], n[i]+1) for i in range(GD)]
        grids = np.meshgrid(*axes, indexing='ij')
        node = np.stack([g.reshape(-1) for g in grids], axis=-1)
        idx = np.arange(node.shape[0]).reshape(tuple(k+1 for k in n))
        return node, idx

    @staticmethod
    def _remove_cells(node, cell, threshold):
        if threshold is None:
            return node, cell
        NN = node.shape[0]
        bc = np.sum(node[cell, :], axis=1)/cell.shape[1]
        isDelCell = threshold(bc)
        cell = cell[~isDelCell]
        isValidNode = np.zeros(NN, dtype=np.bool_)
        isValidNode[cell] = True
        node = node[isValidNode]
        idxMap = np.zeros(NN, dtype=cell.dtype)
        idxMap[isValidNode] = np.arange(isValidNode.sum())
        return node, idxMap[cell]
