"""
Reads config.yml and turns it into the configuration object used to render
the CloudFormation template.

The stages run in this order:

1. stage.yml is resolved into the stage variables
2. config.yml is rendered against the stage variables and the .env values
3. the result is parsed, which splices in any !include'd files
4. the parsed document is dumped and rendered again, so template tags in
   included files are resolved too
5. the second render is parsed into the final document
6. stack and stage overrides are applied and stage variables fill the gaps
7. lambda defaults and API Gateway resources are added
"""

import logging
import os
from typing import Any, Dict, Mapping, Optional

import yaml

from . import renderer, yaml_loader
from .api_gateway import configure_api_gateway
from .envs import load_envs
from .errors import MalformedDocumentError
from .lambdas import configure_lambdas
from .stage import resolve_stage

logger = logging.getLogger(__name__)

FIRST_PASS = "config (first pass)"
SECOND_PASS = "config (second pass)"


def render_context(stage_variables: Mapping[str, Any], envs: Mapping[str, str]) -> Dict[str, Any]:
    """Stage variables overlaid by the .env values"""
    context = dict(stage_variables)
    context.update(envs)
    return context


def parse_document(text: str, phase: str, path: str, base_dir: Optional[str] = None) -> Dict[str, Any]:
    try:
        if base_dir is None:
            document = yaml_loader.load_plain(text)
        else:
            document = yaml_loader.load_with_includes(text, base_dir)
    except yaml.YAMLError as e:
        raise MalformedDocumentError(phase, path, e) from e

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise MalformedDocumentError(phase, path, ValueError("config must be a mapping"))
    return document


def first_pass(text: str, context: Mapping[str, Any], path: str) -> Dict[str, Any]:
    rendered = renderer.render(text, context, phase=FIRST_PASS, path=path)
    return parse_document(rendered, FIRST_PASS, path, base_dir=os.path.dirname(path))


def second_pass(document: Dict[str, Any], context: Mapping[str, Any], path: str) -> Dict[str, Any]:
    rendered = renderer.render(yaml_loader.dump(document), context, phase=SECOND_PASS, path=path)
    return parse_document(rendered, SECOND_PASS, path)


def apply_overrides(document: Dict[str, Any], stack: Optional[str], stage: Optional[str],
                    stage_variables: Mapping[str, Any]) -> Dict[str, Any]:
    config = dict(document)
    if stack:
        config["stackName"] = stack
    if stage:
        config["stage"] = stage

    # stage variables only fill keys the config does not declare
    for key, value in stage_variables.items():
        config.setdefault(key, value)
    return config


class Config:
    """
    Parses a kes configuration.

    Example:
        config = Config("mystack", "dev", ".kes/config.yml", ".kes/stage.yml", ".kes/.env").parse()
    """

    def __init__(self, stack: Optional[str], stage: Optional[str], config_file: str,
                 stage_file: Optional[str] = None, env_file: Optional[str] = None,
                 envs: Optional[Mapping[str, str]] = None):
        self.stack = stack
        self.stage = stage
        self.config_file = config_file
        self.stage_file = stage_file
        self.envs = envs if envs is not None else load_envs(env_file)

    def parse_stage(self) -> Dict[str, Any]:
        return resolve_stage(self.stage_file, self.envs, self.stage)

    def parse_config(self, stage_variables: Mapping[str, Any]) -> Dict[str, Any]:
        with open(self.config_file, encoding="utf-8") as f:
            text = f.read()

        context = render_context(stage_variables, self.envs)

        logger.debug("Rendering %s (first pass)", self.config_file)
        document = first_pass(text, context, self.config_file)

        logger.debug("Rendering %s (second pass)", self.config_file)
        document = second_pass(document, context, self.config_file)

        config = apply_overrides(document, self.stack, self.stage, stage_variables)
        config = configure_lambdas(config)
        return configure_api_gateway(config)

    def parse(self) -> Dict[str, Any]:
        """Resolve stage.yml, then config.yml, and return the configuration object"""
        return self.parse_config(self.parse_stage())
