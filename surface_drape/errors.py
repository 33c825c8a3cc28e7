"""
Exceptions raised by Surface Drape.

All of them derive from DrapeError so callers can catch the whole
family in one place. Points outside the mesh extent are not errors:
they are returned as break markers.
"""


class DrapeError(Exception):
    """Base class for all engine failures."""
    pass


class InvalidFunctionContract(DrapeError):
    """Raised when an implicit function does not honour the 3xN -> N contract."""
    pass


class EmptyMesh(DrapeError):
    """Raised when intersection is requested on a mesh without faces."""
    pass


class InvalidMesh(DrapeError):
    """Raised when mesh faces or vertices are malformed."""
    pass


class InvalidInputLine(DrapeError):
    """Raised when an input line has inconsistent or non-numeric coordinates."""
    pass


class MeshLoadError(DrapeError):
    """Raised when loading a mesh from disk fails."""
    pass
