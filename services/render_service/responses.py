"""
Canned assistant responses used by the simulated models.
"""

from typing import List, Union

from services.mention_service.mention_parser import extract_mentions
from services.render_service.models import ModelId, resolve_model


def _mentioned_paths(prompt: str) -> List[str]:
    paths: List[str] = []
    for mention in extract_mentions(prompt):
        if mention.path not in paths:
            paths.append(mention.path)
    return paths


def _join_mentions(paths: List[str]) -> str:
    mentions = [f"@{path}" for path in paths]
    if len(mentions) == 1:
        return mentions[0]
    return ", ".join(mentions[:-1]) + " and " + mentions[-1]


def build_response(model_id: Union[str, ModelId], prompt: str) -> str:
    """
    Build the full response a model would give to a prompt

    Files mentioned in the prompt are mentioned back, so the reply gets
    previews too. Deterministic for a given (model, prompt) pair.
    """
    model = resolve_model(model_id)
    paths = _mentioned_paths(prompt)

    if model is ModelId.CLAUDE:
        looked_at = f"I took a look at {_join_mentions(paths)}. " if paths else ""
        return (
            f"Happy to help with that! {looked_at}"
            "I'd start by looking at how the pieces fit together, "
            "then we can dig into the details. What would you like to focus on first?"
        )
    elif model is ModelId.PERPLEXITY:
        sources = _join_mentions(paths) if paths else "workspace index"
        return (
            "Here's a quick summary.\n\n"
            "Key points:\n"
            "- The workspace is indexed for semantic search.\n"
            "- Mentioned files can be previewed inline.\n\n"
            f"Sources: {sources}"
        )
    else:
        about = f" about {_join_mentions(paths)}" if paths else ""
        return (
            f"I've reviewed your request{about}. Here's how I would approach it:\n\n"
            "1. Identify the relevant files.\n"
            "2. Analyze their structure and dependencies.\n"
            "3. Summarize the key findings.\n\n"
            "Let me know if you'd like me to go deeper on any of these steps!"
        )
