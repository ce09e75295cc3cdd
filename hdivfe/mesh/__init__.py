
from .geometry import (
    ReferenceGeometry, Edge1D, Triangle2D, Quadrilateral2D,
    Tetrahedron3D, Hexahedron3D
)
from .mesh_base import HomogeneousMesh
from .triangle_mesh import TriangleMesh
from .quadrangle_mesh import QuadrangleMesh
from .tetrahedron_mesh import TetrahedronMesh
from .hexahedron_mesh import HexahedronMesh
from .transform import L2GTransformer
from .cell_finder import CellFinder, PointNotFoundError
