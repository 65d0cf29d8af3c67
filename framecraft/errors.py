# framecraft/errors.py
"""Exception taxonomy for the analysis engine.

Geometry and property errors abort the whole analysis. A singular system is
recovered into an instability report by the analysis entry point, and material
data errors only affect the section check of the member that raised them.
"""


class FramecraftError(Exception):
    """Base class for all engine errors."""
    pass


class GeometryError(FramecraftError, ValueError):
    """Raised for degenerate member geometry (zero length, i == j)."""

    def __init__(self, message: str, member_id: int = None):
        super().__init__(message)
        self.member_id = member_id


class MissingPropertyError(FramecraftError, ValueError):
    """Raised when a required numeric field is absent or invalid."""

    def __init__(self, message: str, member_id: int = None, node_id: int = None):
        super().__init__(message)
        self.member_id = member_id
        self.node_id = node_id


class SingularSystemError(FramecraftError, RuntimeError):
    """Raised when the reduced stiffness system cannot be resolved."""

    def __init__(self, message: str, dof: int = None):
        super().__init__(message)
        self.dof = dof


class MaterialDataError(FramecraftError, ValueError):
    """Raised for unrecognized or incomplete strength data."""
    pass
