# src/fecap_core/parameters/__init__.py
from .parameters import ParameterSet, PARAMETER_UNITS
from .exceptions import ParameterError, InvalidParameterError

__all__ = [
    "ParameterSet",
    "PARAMETER_UNITS",
    "ParameterError",
    "InvalidParameterError",
]
