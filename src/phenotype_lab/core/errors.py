"""Exception hierarchy for phenotype-lab.

All failures are fatal to the current evaluation run and surface to the caller.
"""


class PhenotypeLabError(Exception):
    """Base class for all phenotype-lab errors."""


class ConfigurationError(PhenotypeLabError, ValueError):
    """Invalid input or parameter (empty matrix, negative NMF input, bad rank, ...)."""


class NumericInstabilityError(PhenotypeLabError, FloatingPointError):
    """Iterative computation produced NaN or Inf."""
