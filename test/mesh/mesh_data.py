
import numpy as np

from hdivfe.mesh import TriangleMesh, QuadrangleMesh, TetrahedronMesh, HexahedronMesh


from_box_data = [
    {"mesh": lambda: TriangleMesh.from_box(nx=2, ny=2),
     "NN": 9, "NF": 16, "NC": 8, "NBF": 8, "volume": 1.0},
    {"mesh": lambda: QuadrangleMesh.from_box(nx=2, ny=3),
     "NN": 12, "NF": 17, "NC": 6, "NBF": 10, "volume": 1.0},
    {"mesh": lambda: TetrahedronMesh.from_box(nx=1, ny=1, nz=1),
     "NN": 8, "NF": 18, "NC": 6, "NBF": 12, "volume": 1.0},
    {"mesh": lambda: HexahedronMesh.from_box(nx=2, ny=1, nz=1),
     "NN": 12, "NF": 11, "NC": 2, "NBF": 10, "volume": 1.0},
    {"mesh": lambda: TriangleMesh.from_box([0, 2, 0, 1], nx=3, ny=2),
     "NN": 12, "NF": 23, "NC": 12, "NBF": 10, "volume": 2.0},
]

one_triangle_data = [
    {
        "meshtype": "iso",
        "face": np.array([[0, 1], [2, 0], [1, 2]], dtype=np.int_),
        "cell2face": np.array([[0, 2, 1]], dtype=np.int_),
        "face_normal": np.array([[0.0, -1.0], [-1.0, 0.0],
                                 [np.sqrt(0.5), np.sqrt(0.5)]]),
        "face_measure": np.array([1.0, 1.0, np.sqrt(2.0)]),
        "cell_measure": np.array([0.5]),
    },
]

locate_data = [
    {"mesh": lambda: TriangleMesh.from_box(nx=4, ny=4),
     "points": np.array([[0.1, 0.1], [0.9, 0.35], [0.5, 0.5], [1.0, 1.0]])},
    {"mesh": lambda: QuadrangleMesh.from_box([0, 2, 0, 1], nx=4, ny=3),
     "points": np.array([[0.1, 0.9], [1.9, 0.05], [1.0, 0.5]])},
    {"mesh": lambda: TetrahedronMesh.from_box(nx=2, ny=2, nz=2),
     "points": np.array([[0.1, 0.2, 0.3], [0.9, 0.8, 0.1], [0.5, 0.5, 0.5]])},
    {"mesh": lambda: HexahedronMesh.from_box(nx=2, ny=2, nz=2),
     "points": np.array([[0.1, 0.2, 0.3], [0.99, 0.6, 0.01]])},
]
