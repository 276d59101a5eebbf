"""Exceptions raised by pygctp.

Configuration errors surface from constructors and are never defaulted
away. Projection errors describe a single point that could not be
transformed; the public transform methods catch them and return NaN, so
they only escape from the low level solvers in ``pygctp.projlib``.
"""


class GctpError(Exception):
    """Base exception for all pygctp errors."""

    pass


class ConfigurationError(GctpError, ValueError):
    """Raised when projection or search parameters are inconsistent."""

    pass


class NonInvertibleTransformError(ConfigurationError):
    """Raised when an affine transform has no inverse."""

    def __init__(self, message="Affine transform is not invertible"):
        super().__init__(message)


class UnsupportedProjectionError(ConfigurationError):
    """Raised for projection system codes with no implementation."""

    pass


class AngleFormatError(ConfigurationError):
    """Raised when a packed DDDMMMSSS.SS angle has an illegal field."""

    code = 1116


class UnitsError(ConfigurationError):
    """Raised when axis units cannot be converted to projection units."""

    pass


class ProjectionError(GctpError):
    """A point that has no image under a forward or inverse projection.

    Parameters
    ----------
    code : int
        GCTP error number of the failing routine.
    message : str
        Short description of the failure.
    where : str, optional
        Name of the routine that failed, e.g. ``'ortho-for'``.
    """

    def __init__(self, code, message, where=None):
        self.code = code
        self.where = where
        if where is not None:
            message = '[%s] %s' % (where, message)
        super().__init__(message)


class ConvergenceError(ProjectionError):
    """Raised when an iterative solver exhausts its iteration cap."""

    pass


class InBreakError(ProjectionError):
    """Raised when an inverse point falls in the gap of an interrupted projection."""

    pass
