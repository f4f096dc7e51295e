"""
benchmcp prompts

Workflow prompts rendered from the markdown templates shipped in
``benchmcp/prompt_templates``.
"""

import logging
from importlib import resources as importlib_resources
from string import Template

from ..common.constants import STATUS_STABLE
from ..common.errors import NotFoundError
from .factories import PromptArgument

logger = logging.getLogger(__name__)

TEMPLATE_PACKAGE = "benchmcp.prompt_templates"


def read_template(name: str) -> str:
    """Text of ``prompt_templates/<name>.md``"""
    try:
        return importlib_resources.files(TEMPLATE_PACKAGE).joinpath(f"{name}.md").read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise NotFoundError(f"Prompt template {name!r} not found.") from e


def _modeling_workflow(host, arguments):
    if not arguments.get("format"):
        project = host.active_project()
        arguments["format"] = project.format.id if project and project.format else "bedrock_block"
    return Template(read_template("modeling_workflow")).safe_substitute(arguments)


def register_prompts(prompts):
    """Register the workflow prompts on a ``PromptRegistry``"""
    prompts.create(
        "modeling_workflow",
        "Step-by-step workflow for building a block model with the editor tools.",
        arguments=[
            PromptArgument("subject", "What to model, e.g. 'a wooden chair'.", required=True),
            PromptArgument("format", "Project format; defaults to the active project's format."),
        ],
        render=_modeling_workflow,
        status=STATUS_STABLE,
    )
    prompts.create(
        "texture_workflow",
        "Review the textures of the active project.",
        arguments=[PromptArgument("style", "Art style to aim for.", default="pixel art")],
        template=read_template("texture_workflow"),
        status=STATUS_STABLE,
    )
    logger.info("Registered prompts: modeling_workflow, texture_workflow")
