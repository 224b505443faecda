"""
Renders cloudformation.template.yml against a resolved configuration and
writes the deployable CloudFormation template.
"""

import logging
import os
from typing import Any, Dict, Optional

import yaml

from . import renderer, yaml_loader
from .errors import MalformedDocumentError

logger = logging.getLogger(__name__)

PHASE = "cloudformation"
TEMPLATE_FILE = "cloudformation.template.yml"
OUTPUT_FILE = "cloudformation.yml"


def render_template(cf_file: str, config: Dict[str, Any]) -> str:
    """Return the rendered template text after checking that it is valid YAML"""
    with open(cf_file, encoding="utf-8") as f:
        source = f.read()

    body = renderer.render(source, config, phase=PHASE, path=cf_file)
    try:
        template = yaml_loader.load_cfn(body)
    except yaml.YAMLError as e:
        raise MalformedDocumentError(PHASE, cf_file, e) from e

    resources = (template or {}).get("Resources") or {}
    logger.debug("Rendered %s with %d resource(s)", cf_file, len(resources))
    return body


def compile_template(cf_file: str, config: Dict[str, Any], output: Optional[str] = None) -> str:
    """Render the template and write it to `output` when given"""
    body = render_template(cf_file, config)

    if output:
        directory = os.path.dirname(output)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            f.write(body)
        logger.info("Generated %s for stack %s", output, config.get("stackName"))

    return body
