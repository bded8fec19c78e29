"""
Exceptions raised by the clustering engine and its collaborators.

The engine never terminates the process: every fatal condition is raised as a
``KMeansError`` carrying an error ``kind`` and a diagnostic ``payload`` so a
caller embedding the engine can survive a single failed run.
"""

from typing import Any, Dict, Optional

import numpy as np


def format_vector(v) -> str:
    """Short printable form of a vector, two decimals per component."""
    return "[" + ", ".join(f"{float(x):0.2f}" for x in np.asarray(v).ravel()) + "]"


class KMeansError(Exception):
    """Base class for all clustering errors."""

    kind = "error"

    def __init__(self, message: str, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.payload = payload or {}

    def describe(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        for key, value in self.payload.items():
            if isinstance(value, np.ndarray):
                value = format_vector(value)
            lines.append(f"  {key}: {value}")
        return "\n".join(lines)


class NumericError(KMeansError):
    """A distance or movement computation produced an impossible value.

    Almost always caused by non-finite values reaching the numeric core.
    """

    kind = "numeric"


class PreconditionError(KMeansError, ValueError):
    """The inputs violate a requirement checked before clustering starts."""

    kind = "precondition"


class ParseError(KMeansError):
    """A line of input could not be turned into a row of values."""

    kind = "parse"
