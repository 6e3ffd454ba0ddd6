"""
Model catalog: the closed set of selectable assistant models and their pacing profiles.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Union


class ModelId(str, Enum):
    """Selectable assistant models"""
    GPT_4 = "gpt-4"
    CLAUDE = "claude"
    PERPLEXITY = "perplexity"


DEFAULT_MODEL = ModelId.GPT_4


@dataclass(frozen=True)
class PacingProfile:
    """Delay range per revealed character, in streaming time units (milliseconds)"""
    min_delay: float
    max_delay: float


@dataclass(frozen=True)
class ModelProfile:
    """Display metadata and pacing for one model"""
    model_id: ModelId
    name: str
    description: str
    icon: str
    pacing: PacingProfile


GPT_4_PROFILE = ModelProfile(
    model_id=ModelId.GPT_4,
    name="GPT-4",
    description="Most capable, thoughtful responses",
    icon="🤖",
    pacing=PacingProfile(min_delay=30, max_delay=60)
)

CLAUDE_PROFILE = ModelProfile(
    model_id=ModelId.CLAUDE,
    name="Claude",
    description="Conversational, friendly analysis",
    icon="🧠",
    pacing=PacingProfile(min_delay=20, max_delay=45)
)

PERPLEXITY_PROFILE = ModelProfile(
    model_id=ModelId.PERPLEXITY,
    name="Perplexity",
    description="Fast, research-focused answers",
    icon="🔍",
    pacing=PacingProfile(min_delay=10, max_delay=25)
)


def resolve_model(model_id: Union[str, ModelId]) -> ModelId:
    """
    Map a model identifier to a catalog member

    Unknown identifiers resolve to DEFAULT_MODEL. This is the single place that
    decides how unknown models are handled, for the store and the simulator alike.
    """
    if model_id == ModelId.GPT_4.value:
        return ModelId.GPT_4
    elif model_id == ModelId.CLAUDE.value:
        return ModelId.CLAUDE
    elif model_id == ModelId.PERPLEXITY.value:
        return ModelId.PERPLEXITY
    else:
        return DEFAULT_MODEL


def is_known_model(model_id: Union[str, ModelId]) -> bool:
    return any(model_id == member.value for member in ModelId)


def get_model_profile(model_id: Union[str, ModelId]) -> ModelProfile:
    model = resolve_model(model_id)
    if model is ModelId.CLAUDE:
        return CLAUDE_PROFILE
    elif model is ModelId.PERPLEXITY:
        return PERPLEXITY_PROFILE
    else:
        return GPT_4_PROFILE


def list_model_profiles() -> List[ModelProfile]:
    return [GPT_4_PROFILE, CLAUDE_PROFILE, PERPLEXITY_PROFILE]
