"""
Render service - simulated model responses and their paced, incremental reveal.
"""

from .models import (
    ModelId,
    DEFAULT_MODEL,
    PacingProfile,
    ModelProfile,
    resolve_model,
    is_known_model,
    get_model_profile,
    list_model_profiles
)
from .responses import build_response
from .response_simulator import ResponseSimulator, pause_multiplier

__all__ = [
    'ModelId',
    'DEFAULT_MODEL',
    'PacingProfile',
    'ModelProfile',
    'resolve_model',
    'is_known_model',
    'get_model_profile',
    'list_model_profiles',
    'build_response',
    'ResponseSimulator',
    'pause_multiplier'
]
