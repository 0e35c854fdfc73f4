"""Errors raised while declaring or rendering a grid."""


class GridException(Exception):
    """Raised when the grid helpers are used in the wrong order."""
    pass


class GridArgumentError(GridException, ValueError):
    """Raised when a grid helper receives an invalid argument."""
    pass
