# src/fecap_core/checkpoint.py
"""
YAML checkpoints of a device's turning-point history.

A checkpoint stores only what cannot be recomputed: the ordered (voltage, direction)
pairs of the stack, the current direction of travel and the previous voltage sample.
Turning-point polarizations are derived again on load. The device parameters are stored
alongside so that a checkpoint is never restored into a different device.

    format_version: 1
    direction: UP
    previous_voltage: -3.0
    turning_points:
      - [-3.0, DOWN]
    parameters: {thickness: 5.0e-09, ...}
"""
import logging
import math
from pathlib import Path
from typing import Any, Dict, Optional, Union

import cerberus
import yaml

from .hysteresis.exceptions import CheckpointError, HistoryStateError
from .hysteresis.history import HistoryManager
from .parameters import ParameterSet, PARAMETER_UNITS

logger = logging.getLogger(__name__)

CHECKPOINT_FORMAT_VERSION = 1

_direction_rule = {"type": "string", "allowed": ["UP", "DOWN"]}

_schema = {
    "format_version": {"type": "integer", "required": True, "allowed": [CHECKPOINT_FORMAT_VERSION]},
    "direction": dict(_direction_rule, required=True),
    "previous_voltage": {"type": "number", "required": True},
    "turning_points": {
        "type": "list",
        "required": True,
        "schema": {"type": "list", "items": [{"type": "number"}, _direction_rule]},
    },
    "parameters": {
        "type": "dict",
        "required": False,
        "keysrules": {"type": "string", "allowed": list(PARAMETER_UNITS)},
        "valuesrules": {"type": "number"},
    },
}


def history_to_document(history: HistoryManager, parameters: Optional[ParameterSet] = None) -> Dict[str, Any]:
    """The serializable checkpoint mapping for `history`."""
    document: Dict[str, Any] = {
        "format_version": CHECKPOINT_FORMAT_VERSION,
        "direction": history.direction.name,
        "previous_voltage": float(history.previous_voltage),
        "turning_points": [[float(voltage), direction.name] for voltage, direction in history.to_pairs()],
    }
    if parameters is not None:
        document["parameters"] = {k: float(v) for k, v in parameters.to_dict().items()}
    return document


def restore_history_from_document(
    history: HistoryManager,
    document: Any,
    parameters: Optional[ParameterSet] = None,
    source_file: Optional[Path] = None,
) -> None:
    """
    Validates a checkpoint mapping and restores it into `history`.

    Raises:
        CheckpointError: if the mapping is malformed, describes an invalid history, or
                         was written for different device parameters.
    """
    if not isinstance(document, dict):
        raise CheckpointError(details="The root of a checkpoint must be a mapping.", file_path=source_file)
    validator = cerberus.Validator(_schema)
    if not validator.validate(document):
        error_lines = "\n".join(f"  - Field '{k}': {v}" for k, v in sorted(validator.errors.items()))
        raise CheckpointError(
            details=f"Checkpoint does not match the expected format:\n{error_lines}", file_path=source_file
        )

    stored_parameters = document.get("parameters")
    if parameters is not None and stored_parameters is not None:
        current = parameters.to_dict()
        mismatched = sorted(
            name for name, value in stored_parameters.items()
            if not math.isclose(float(value), float(current[name]), rel_tol=1e-12, abs_tol=0.0)
        )
        if mismatched:
            raise CheckpointError(
                details=f"Checkpoint was written for different device parameters: {', '.join(mismatched)}.",
                file_path=source_file,
            )

    try:
        history.restore(
            [(voltage, direction) for voltage, direction in document["turning_points"]],
            document["direction"],
            document["previous_voltage"],
        )
    except HistoryStateError as e:
        raise CheckpointError(details=str(e), file_path=source_file) from e


def save_history(history: HistoryManager, path: Union[str, Path], parameters: Optional[ParameterSet] = None) -> Path:
    """Writes `history` to a YAML checkpoint file and returns the resolved path."""
    target = Path(path).resolve()
    document = history_to_document(history, parameters)
    try:
        with target.open("w", encoding="utf-8") as f:
            yaml.safe_dump(document, f, sort_keys=False)
    except OSError as e:
        raise CheckpointError(details=f"Could not write checkpoint: {e}", file_path=target) from e
    logger.info(f"Saved history checkpoint with {len(history)} turning point(s) to {target}")
    return target


def load_history(history: HistoryManager, path: Union[str, Path], parameters: Optional[ParameterSet] = None) -> None:
    """Replaces the state of `history` with the checkpoint stored at `path`."""
    source = Path(path).resolve()
    if not source.is_file():
        raise CheckpointError(details=f"Checkpoint file not found at path: {source}", file_path=source)
    try:
        with source.open("r", encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except PermissionError as e:
        raise CheckpointError(details=f"Permission denied when trying to read file: {e}", file_path=source) from e
    except yaml.YAMLError as e:
        raise CheckpointError(details=f"Invalid YAML syntax: {e}", file_path=source) from e
    restore_history_from_document(history, document, parameters, source_file=source)
    logger.info(f"Restored history checkpoint with {len(history)} turning point(s) from {source}")
