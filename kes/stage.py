"""
Resolves the variables of a deployment stage from stage.yml.

stage.yml is rendered against the variable store, parsed (with !include)
and its `default` section is overlaid by the selected stage's section.
"""

import logging
import os
from typing import Any, Dict, Mapping, Optional

import yaml

from . import renderer, yaml_loader
from .errors import MalformedDocumentError

logger = logging.getLogger(__name__)

PHASE = "stage"


def stage_section(document: Dict[str, Any], name: str, path: Optional[str]) -> Dict[str, Any]:
    section = document.get(name) or {}
    if not isinstance(section, dict):
        raise MalformedDocumentError(PHASE, path, ValueError(f"stage section {name} must be a mapping"))
    return section


def merge_stage(document: Optional[Dict[str, Any]], stage: Optional[str],
                path: Optional[str] = None) -> Dict[str, Any]:
    """Shallow merge the `stage` section over `default`"""
    if not document:
        return {}

    variables = dict(stage_section(document, "default", path))
    if stage:
        if stage in document:
            variables.update(stage_section(document, stage, path))
        else:
            logger.warning("Stage %s is not defined in the stage file, using default", stage)
    return variables


def resolve_stage(stage_file: Optional[str], envs: Mapping[str, str],
                  stage: Optional[str] = None) -> Dict[str, Any]:
    """Return the effective stage variables. A missing stage file is not an error."""
    if not stage_file:
        return {}

    try:
        with open(stage_file, encoding="utf-8") as f:
            text = f.read()
    except FileNotFoundError:
        logger.info("%s was not found. Skipping stage", stage_file)
        return {}

    rendered = renderer.render(text, envs, phase=PHASE, path=stage_file)
    try:
        document = yaml_loader.load_with_includes(rendered, os.path.dirname(stage_file))
    except yaml.YAMLError as e:
        raise MalformedDocumentError(PHASE, stage_file, e) from e

    if document is not None and not isinstance(document, dict):
        raise MalformedDocumentError(PHASE, stage_file, ValueError("stage file must be a mapping"))

    variables = merge_stage(document, stage, stage_file)
    logger.debug("Resolved %d stage variable(s) for stage %s", len(variables), stage or "default")
    return variables
