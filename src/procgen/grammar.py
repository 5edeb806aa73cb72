"""
Parameter specifications for landscape generation.

This module defines:
- ParameterSpec: Validation and extraction of tunable parameters
- PLANNER_PARAMETERS: Placement planner constants
- SCENE_PARAMETERS: Scene manager / viewport constants
"""

from typing import Dict, Any, Tuple, List


class ParameterSpec:
    """
    Specification for tunable parameters with validation and clamping.

    Each parameter has:
    - min_val: Minimum allowed value
    - max_val: Maximum allowed value
    - default: Default value if not specified
    """

    def __init__(self, params: Dict[str, Tuple[float, float, float]]):
        """
        Initialize parameter specification.

        Args:
            params: Dict mapping param_name -> (min_val, max_val, default)
        """
        self.params = params

    def validate(self, values: Dict[str, float]) -> bool:
        """Check if all parameters are present and in valid ranges."""

        for param_name, (min_val, max_val, _) in self.params.items():
            if param_name not in values:
                return False

            value = values[param_name]
            if not (min_val <= value <= max_val):
                return False

        return True

    def extract_params(self, values: Dict[str, Any]) -> Dict[str, float]:
        """Extract known parameters, clamped to range, with defaults for the rest."""

        result = {}
        for param_name, (min_val, max_val, default) in self.params.items():
            if param_name in values and values[param_name] is not None:
                value = values[param_name]
                value = max(min_val, min(max_val, value))
                # Keep integral parameters integral
                if isinstance(default, int) and not isinstance(default, bool):
                    value = int(value)
                result[param_name] = value
            else:
                result[param_name] = default

        return result

    def defaults(self) -> Dict[str, float]:
        """Default value of every parameter."""
        return {name: default for name, (_, _, default) in self.params.items()}

    def get_param_names(self) -> List[str]:
        """Get list of parameter names."""
        return list(self.params.keys())

    def get_param_ranges(self) -> Dict[str, Tuple[float, float]]:
        """Get parameter ranges (min, max) for each parameter."""
        return {name: (min_val, max_val) for name, (min_val, max_val, _) in self.params.items()}


PLANNER_PARAMETERS = ParameterSpec({
    "xstep": (1, 100, 5),
    "sample_frequency": (0.001, 1.0, 0.03),
    "peak_threshold": (0.0, 1.0, 0.3),
    "locmax_radius": (0, 10, 2),
    "candidate_step": (1, 200, 30),
    "envelope_height": (0.0, 2000.0, 480.0),
    "peak_y_offset": (0.0, 2000.0, 300.0),
    "jitter": (0.0, 5000.0, 500.0),
    "min_distance": (0.0, 1000.0, 10.0),
    "footprint": (0.0, 5000.0, 200.0),
    "ridge_interval": (10, 100000, 1000),
    "filler_probability": (0.0, 1.0, 0.01),
    "filler_jitter": (0.0, 5000.0, 700.0),
    "filler_max_count": (0, 20, 4),
    "craft_probability": (0.0, 1.0, 0.2),
    "craft_spacing": (0.0, 10000.0, 400.0),
})

SCENE_PARAMETERS = ParameterSpec({
    "window_width": (1, 100000, 3000),
    "window_height": (1, 100000, 800),
    "chunk_width": (16, 100000, 512),
    "evict_multiplier": (1, 1000, 10),
    "render_margin": (0.0, 100000.0, 100.0),
    "zoom": (0.01, 100.0, 1.142),
    "reflection_offset": (0.0, 1e9, 10000.0),
    "nan_sentinel": (-1e9, 1e9, -1000.0),
})
