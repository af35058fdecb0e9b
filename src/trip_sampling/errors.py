"""Exception types raised by the sampling and estimation routines.

All of them derive from :class:`SamplingError` (itself a ``ValueError``) so a
caller can abort a whole run with a single ``except`` clause or skip an
individual (design, seed) row.
"""
from __future__ import annotations


class SamplingError(ValueError):
    """Base class for sampling/estimation failures."""


class InsufficientPopulation(SamplingError):
    """A requested sample is larger than the population (or stratum) it is drawn from."""


class InvalidAllocation(SamplingError):
    """Per-stratum counts cannot be reconciled to a usable allocation plan."""


class ConfigurationError(SamplingError):
    """Bad caller input: unknown stratum label, missing seed or column, bad target."""
