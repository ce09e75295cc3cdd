
from .quadrature import Quadrature

from .gauss_legendre import GaussLegendreQuadrature
from .stroud_quadrature import StroudQuadrature
from .tensor_product import TensorProductQuadrature


def quadrature_rule(q: int, geometry) -> Quadrature:
    """Return a quadrature of order `q` on the reference `geometry`.

    Parameters:
        q (int): the polynomial degree integrated exactly, `q >= 0`.
        geometry (ReferenceGeometry): one of the geometries in `hdivfe.mesh.geometry`.

    Returns:
        Quadrature: points in reference coordinates and weights summing to one.
    """
    if q < 0:
        raise ValueError(f"quadrature order must be non-negative, but got {q}.")
    TD = geometry.dim
    if TD == 1:
        return GaussLegendreQuadrature(q)
    if geometry.is_simplex:
        return StroudQuadrature(TD, q)
    return TensorProductQuadrature(TD, q)
