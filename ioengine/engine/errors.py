"""Typed engine errors.

Shape and divisor problems are ``ValueError`` subclasses, so callers that
only know about ``ValueError`` keep working. Failures are deterministic for a
given input; nothing here is worth retrying.
"""

import numpy as np


class IOEngineError(Exception):
    """Base class for every error raised by the engine."""


class DimensionMismatchError(IOEngineError, ValueError):
    """Array sizes are incompatible with the expected sector count."""


class DegenerateInputError(IOEngineError, ValueError):
    """A divisor vector contains a zero, or an input is not finite."""


class SingularMatrixError(IOEngineError, np.linalg.LinAlgError):
    """LU factorisation of I - A (or I - F) hit a zero pivot."""


class NumericalInstabilityError(IOEngineError, ArithmeticError):
    """A solve produced NaN or Inf from finite, well-shaped input."""
