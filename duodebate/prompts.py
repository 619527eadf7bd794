"""User-turn prompt construction for the PROPOSER and CHALLENGER."""

from config.config_loader import PromptsConfig


def build_proposer_prompt(
    prompts: PromptsConfig,
    task_prompt: str,
    feedback: str,
    iteration: int,
) -> str:
    """Build the PROPOSER's user prompt.

    Iteration 0 asks for an initial draft; later iterations carry the
    original request and the CHALLENGER's latest feedback.
    """
    if iteration == 0:
        return prompts.initial.format(prompt=task_prompt)
    return prompts.refine.format(prompt=task_prompt, feedback=feedback)


def build_challenger_prompt(
    prompts: PromptsConfig,
    task_prompt: str,
    current_draft: str,
) -> str:
    return prompts.challenge.format(prompt=task_prompt, draft=current_draft)
