"""
Reference element geometries.

Every geometry knows its reference nodes, its local faces and the nodal
(multi)linear shape functions used for the local-to-global maps. The local
faces are numbered such that face `j` of the reference cell is the face on
which the lowest order H(div) basis function `j` has unit outward flux.
"""
from typing import Optional

import numpy as np

from ..typing import TensorLike


class ReferenceGeometry():
    """Immutable descriptor of a reference element shape.

    Parameters:
        name (str): name of the geometry, e.g. 'Triangle2D'.
        dim (int): topological dimension.
        node (array): reference node coordinates, shaped (NV, dim).
        localFace (array): local node indices of every face, shaped (NFC, NVF).
        face (ReferenceGeometry | None): geometry of the faces.
        is_simplex (bool): True for edges, triangles and tetrahedra.
    """
    def __init__(self, name: str, dim: int, node, localFace,
                 face: Optional['ReferenceGeometry'], is_simplex: bool) -> None:
        self.name = name
        self.dim = dim
        self.node = np.array(node, dtype=np.float64).reshape(-1, dim)
        self.localFace = np.array(localFace, dtype=np.int_)
        self.face = face
        self.is_simplex = is_simplex
        self.node.setflags(write=False)
        self.localFace.setflags(write=False)

    def __repr__(self) -> str:
        return self.name

    def number_of_nodes(self) -> int:
        return self.node.shape[0]

    def number_of_faces(self) -> int:
        return self.localFace.shape[0]

    def volume(self) -> float:
        """Measure of the reference element."""
        if self.is_simplex:
            return 1.0/np.prod(np.arange(1, self.dim+1))
        return 1.0

    def barycenter(self) -> TensorLike:
        return self.node.mean(axis=0)

    def shape_function(self, xref: TensorLike) -> TensorLike:
        """Nodal (multi)linear shape functions.

        Parameters:
            xref (Tensor): reference coordinates shaped (..., dim).

        Returns:
            Tensor: values shaped (..., NV).
        """
        xref = np.asarray(xref, dtype=np.float64)
        if self.is_simplex:
            lam0 = 1.0 - np.sum(xref, axis=-1, keepdims=True)
            return np.concatenate([lam0, xref], axis=-1)
        # tensor product shape: factor x_d for node coordinate 1, 1 - x_d otherwise
        node = self.node
        f = np.where(node == 1.0, xref[..., None, :], 1.0 - xref[..., None, :])
        return np.prod(f, axis=-1)

    def grad_shape_function(self, xref: TensorLike) -> TensorLike:
        """Reference gradients of the nodal shape functions, shaped (..., NV, dim)."""
        xref = np.asarray(xref, dtype=np.float64)
        NV = self.number_of_nodes()
        TD = self.dim
        if self.is_simplex:
            g = np.zeros((NV, TD), dtype=np.float64)
            g[0, :] = -1.0
            g[1:, :] = np.eye(TD)
            return np.broadcast_to(g, xref.shape[:-1] + (NV, TD)).copy()
        node = self.node
        f = np.where(node == 1.0, xref[..., None, :], 1.0 - xref[..., None, :])
        df = np.where(node == 1.0, 1.0, -1.0)
        gphi = np.zeros(xref.shape[:-1] + (NV, TD), dtype=np.float64)
        for d in range(TD):
            others = [i for i in range(TD) if i != d]
            gphi[..., d] = df[:, d]*np.prod(f[..., others], axis=-1)
        return gphi

    def violations(self, xref: TensorLike) -> TensorLike:
        """Signed distances of `xref` to the constraints of the element.

        All entries are non-positive exactly when `xref` lies in the closed
        reference element. Simplices give `-lambda_i`, tensor cells give
        `-x_d` followed by `x_d - 1`.
        """
        xref = np.asarray(xref, dtype=np.float64)
        if self.is_simplex:
            return -np.concatenate([[1.0 - np.sum(xref)], xref])
        return np.concatenate([-xref, xref - 1.0])


Edge1D = ReferenceGeometry(
    'Edge1D', 1,
    node=[[0.0], [1.0]],
    localFace=[[0], [1]],
    face=None, is_simplex=True)

Triangle2D = ReferenceGeometry(
    'Triangle2D', 2,
    node=[[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]],
    localFace=[[0, 1], [1, 2], [2, 0]],
    face=Edge1D, is_simplex=True)

Quadrilateral2D = ReferenceGeometry(
    'Quadrilateral2D', 2,
    node=[[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]],
    localFace=[[0, 1], [1, 2], [2, 3], [3, 0]],
    face=Edge1D, is_simplex=False)

Tetrahedron3D = ReferenceGeometry(
    'Tetrahedron3D', 3,
    node=[[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]],
    localFace=[[0, 2, 1], [0, 1, 3], [1, 2, 3], [0, 3, 2]],
    face=Triangle2D, is_simplex=True)

Hexahedron3D = ReferenceGeometry(
    'Hexahedron3D', 3,
    node=[[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0],
          [0.0, 0.0, 1.0], [1.0, 0.0, 1.0], [1.0, 1.0, 1.0], [0.0, 1.0, 1.0]],
    localFace=[[0, 3, 2, 1], [0, 1, 5, 4], [1, 2, 6, 5],
               [2, 3, 7, 6], [0, 4, 7, 3], [4, 5, 6, 7]],
    face=Quadrilateral2D, is_simplex=False)

