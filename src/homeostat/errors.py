"""
Custom exception classes, reporting hooks and validation utilities for homeostat.

This module provides:
1. Hierarchical exception classes for model-assembly errors
2. Injectable error reporters (raise, log, or collect)
3. Validation utilities for numeric parameters

Exception Hierarchy:
====================
HomeostatError (base)
├── ComponentError - Misuse of a channel, compartment or mechanism
└── ConfigurationError - Invalid configuration parameters

All errors raised here describe an invalid model assembly (a controller bound
to a compartment, an unbound controller stepped, an unsupported solver order,
a non-positive time constant). None of them are transient, so nothing in the
package retries after reporting one.

Usage Examples:
===============
    # Default: fail fast
    controller = IntegralController(config)

    # Collect every error while validating a model
    collector = ErrorCollector()
    controller = IntegralController(config, on_error=collector)
    controller.integrate(dt=0.05)
    assert collector.errors
"""

from __future__ import annotations

import logging
import math
from typing import Callable, List

logger = logging.getLogger(__name__)


# =============================================================================
# Exception Hierarchy
# =============================================================================

class HomeostatError(Exception):
    """Base exception for all homeostat-specific errors.

    All custom exceptions in homeostat inherit from this class, enabling
    code to catch homeostat errors specifically:

        try:
            stepper.init()
        except HomeostatError as e:
            logger.error(f"Model assembly failed: {e}")
    """


class ComponentError(HomeostatError):
    """Error in a model component (channel, compartment or mechanism).

    Raised when a component is wired up or driven in a way its contract does
    not allow.

    Args:
        component_name: Name of the component (e.g., "IntegralController")
        message: Description of the error

    Example:
        raise ComponentError("IntegralController", "cannot connect to a compartment")
    """

    def __init__(self, component_name: str, message: str):
        super().__init__(f"[{component_name}] {message}")
        self.component_name = component_name


class ConfigurationError(HomeostatError):
    """Invalid configuration parameters.

    Raised when configuration values are out of valid range or incompatible
    with each other.

    Example:
        raise ConfigurationError("tau_g must be positive, got -10.0")
    """


# =============================================================================
# Error Reporters
# =============================================================================

ErrorReporter = Callable[[HomeostatError], None]
"""Hook invoked with every error a component reports."""


def raise_error(error: HomeostatError) -> None:
    """Default reporter: raise immediately."""
    raise error


def log_error(error: HomeostatError) -> None:
    """Reporter that logs the error and lets the caller short-circuit."""
    logger.error(str(error))


class ErrorCollector:
    """Reporter that records errors instead of raising them.

    Useful when validating a whole model assembly in one pass: every component
    reports into the same collector and the caller inspects ``errors`` at the
    end.
    """

    def __init__(self) -> None:
        self.errors: List[HomeostatError] = []

    def __call__(self, error: HomeostatError) -> None:
        logger.debug("Collected error: %s", error)
        self.errors.append(error)

    def __len__(self) -> int:
        return len(self.errors)

    def raise_first(self) -> None:
        """Raise the first collected error, if any."""
        if self.errors:
            raise self.errors[0]

    def clear(self) -> None:
        self.errors.clear()


# =============================================================================
# Validation Utilities
# =============================================================================

def validate_positive(
    value: float,
    name: str,
    allow_zero: bool = False,
) -> None:
    """Validate that a value is positive.

    Useful for time constants, areas, and other parameters that must be
    positive. Infinity passes (an infinite time constant is a valid way of
    switching a process off).

    Args:
        value: Value to check
        name: Parameter name for error messages
        allow_zero: Whether zero is acceptable (default: False)

    Raises:
        ConfigurationError: If value not positive (NaN is never positive)

    Example:
        >>> validate_positive(tau_g, "tau_g")
        >>> validate_positive(gbar, "gbar", allow_zero=True)
    """
    if math.isnan(value):
        raise ConfigurationError(f"{name} must be a number, got {value}")

    if allow_zero:
        if value < 0:
            raise ConfigurationError(f"{name} must be non-negative, got {value}")
    else:
        if value <= 0:
            raise ConfigurationError(
                f"{name} must be positive, got {value}. "
                f"Perhaps you meant to set it to inf?"
            )


def validate_finite(value: float, name: str) -> None:
    """Validate that a value is a finite number.

    Raises:
        ConfigurationError: If value is NaN or infinite
    """
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be finite, got {value}")


__all__ = [
    # Exception classes
    "HomeostatError",
    "ComponentError",
    "ConfigurationError",
    # Reporters
    "ErrorReporter",
    "raise_error",
    "log_error",
    "ErrorCollector",
    # Validation utilities
    "validate_positive",
    "validate_finite",
]
