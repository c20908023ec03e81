# stochastic_paths/errors.py
"""
Error taxonomy for path simulation.

Every exception derives from SimulationError and from the builtin a caller
would naturally catch (ValueError for bad inputs, ArithmeticError for a broken
covariance embedding, RuntimeError for pool failures).
"""


class SimulationError(Exception):
    """Base class for all stochastic_paths errors."""


class InvalidParameter(SimulationError, ValueError):
    """A constructor argument is outside its admissible domain."""


class MissingConfiguration(SimulationError, ValueError):
    """An operation needs a value the model was built without (m, lam)."""


class NumericalDegeneracy(SimulationError, ArithmeticError):
    """The circulant embedding has a materially negative eigenvalue."""

    def __init__(self, message, min_eigenvalue=None):
        super().__init__(message)
        self.min_eigenvalue = min_eigenvalue


class EnsembleFailure(SimulationError, RuntimeError):
    """A worker failed while building an ensemble; nothing partial is returned."""

    def __init__(self, message, batch_index=None):
        super().__init__(message)
        self.batch_index = batch_index


__all__ = [
    "SimulationError",
    "InvalidParameter",
    "MissingConfiguration",
    "NumericalDegeneracy",
    "EnsembleFailure",
]
