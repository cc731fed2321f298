# --- src/fecap_core/constants.py ---
import logging

logger = logging.getLogger(__name__)

# --- Physical Constants ---

#: Vacuum permittivity used when a ParameterSet does not override it.
#: Value: CODATA 2018, in F/m.
VACUUM_PERMITTIVITY_F_PER_M: float = 8.8541878128e-12

# --- Numerical Constants for the Hysteresis Engine ---

#: Two turning points whose canonical branch values differ by less than this fraction of
#: the saturation charge are treated as lying on a numerically saturated (flat) part of
#: the tanh branch. Their segment is then the branch shifted through the most recent
#: turning point instead of the ill-conditioned linear rescaling.
BRANCH_DEGENERACY_RTOL: float = 1.0e-12

# --- Default Solver Settings ---

DEFAULT_MAX_ITERATIONS: int = 50
#: Absolute charge tolerance, C/m^2.
DEFAULT_ABS_CHARGE_TOL: float = 1.0e-15
DEFAULT_REL_CHARGE_TOL: float = 1.0e-9
#: Voltage step below which Newton-Raphson is considered stalled at the root, V.
DEFAULT_VOLTAGE_TOL: float = 1.0e-12
#: Newton steps longer than this fraction of the coercive voltage are halved.
DEFAULT_DAMPING_FRACTION: float = 0.5
#: Widest interval, in V, that the bisection fallback searches for a sign change.
DEFAULT_MAX_BRACKET_SPAN: float = 1.0e3

logger.debug("Defined core constants: VACUUM_PERMITTIVITY_F_PER_M, BRANCH_DEGENERACY_RTOL, solver defaults")
