"""

Notes
-----
The decorators in this module attach a `coordtype` attribute to a callable.
Callers inspect it to decide which kind of coordinates they have to pass:
'cartesian' callables receive physical points shaped (NQ, GD) and are
evaluated vectorised, 'barycentric' callables receive reference coordinates.
"""
from functools import wraps


def cartesian(func):
    @wraps(func)
    def add_attribute(*args, **kwargs):
        return func(*args, **kwargs)
    add_attribute.__dict__['coordtype'] = 'cartesian'
    return add_attribute


def barycentric(func):
    @wraps(func)
    def add_attribute(*args, **kwargs):
        return func(*args, **kwargs)
    add_attribute.__dict__['coordtype'] = 'barycentric'
    return add_attribute
