# tests/conftest.py
import math

import numpy as np
import pytest

from fecap_core.parameters import ParameterSet
from fecap_core.hysteresis import BranchFunction, HistoryManager
from fecap_core.simulation import FerroelectricCapacitor, SolverConfig


# Gentle device: Vc = Ec * tFE = 1 V, a modest tanh slope, visible dielectric term.
@pytest.fixture
def params():
    return ParameterSet(
        thickness=10e-9,
        coercive_field=1e8,
        relative_permittivity=30.0,
        saturation_charge=0.2,
        slope_factor=3.0,
    )

# The steep reference device used for the 0 -> 3 -> -3 -> 3 V scenario.
@pytest.fixture
def scenario_params():
    return ParameterSet(
        thickness=5e-9,
        coercive_field=1e8,
        relative_permittivity=300.0,
        saturation_charge=5e-6,
        slope_factor=1e6,
    )

@pytest.fixture
def branch(params):
    return BranchFunction(params)

@pytest.fixture
def history(branch):
    return HistoryManager(branch)

@pytest.fixture
def device(params):
    return FerroelectricCapacitor(params)

@pytest.fixture
def solver_config():
    return SolverConfig()


def waveform(waypoints, step=0.1):
    """
    Piecewise-linear voltage samples through `waypoints`, excluding the first one.
    Every waypoint appears exactly, so reversals happen at the waypoint voltages.
    """
    samples = []
    for start, stop in zip(waypoints[:-1], waypoints[1:]):
        n = max(1, int(math.ceil(abs(stop - start) / step - 1e-9)))
        samples.extend(np.linspace(start, stop, n + 1)[1:].tolist())
    return samples


def drive(target, waypoints, step=0.1):
    """Feeds a waveform to a HistoryManager (`update`) or a device (`evaluate_at_voltage`)."""
    apply = target.update if isinstance(target, HistoryManager) else target.evaluate_at_voltage
    results = [apply(v) for v in waveform(waypoints, step)]
    return results
