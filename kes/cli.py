#!/usr/bin/env python3
"""
kes command line

Usage:
    kes cf compile [options]     render cloudformation.yml from the kes folder
    kes cf validate [options]    compile, then validate with CloudFormation
    kes config [options]         print the resolved configuration as YAML
"""

import argparse
import logging
import os
import sys
from typing import Dict, List, Optional

from . import yaml_loader
from .compile_template import OUTPUT_FILE, TEMPLATE_FILE, compile_template
from .config import Config
from .errors import KesError
from .log import setup_logging
from .validate import TemplateValidator

logger = logging.getLogger("kes")

DEFAULT_FOLDER = ".kes"
DEFAULT_REGION = "us-east-1"


def resolve_paths(args: argparse.Namespace) -> Dict[str, str]:
    """Explicit paths win; everything else is looked up inside the kes folder"""
    folder = args.kes_folder
    return {
        "config": args.config or os.path.join(folder, "config.yml"),
        "stage": args.stage_file or os.path.join(folder, "stage.yml"),
        "env": args.env_file or os.path.join(folder, ".env"),
        "cf": args.cf_file or os.path.join(folder, TEMPLATE_FILE),
        "output": args.output or os.path.join(folder, OUTPUT_FILE),
    }


def resolve_region(args: argparse.Namespace) -> str:
    return (
        args.region
        or os.environ.get("AWS_DEFAULT_REGION")
        or os.environ.get("AWS_REGION")
        or DEFAULT_REGION
    )


def add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-k", "--kes-folder", default=DEFAULT_FOLDER, help="Path to config folder (default: .kes)")
    parser.add_argument("-c", "--config", help="Path to config file")
    parser.add_argument("--stage-file", help="Path to stage file")
    parser.add_argument("--env-file", help="Path to env file")
    parser.add_argument("--cf-file", help="Path to the CloudFormation base template")
    parser.add_argument("-o", "--output", help="Path of the compiled template")
    parser.add_argument("--stack", help="Stack name, defaults to the config value")
    parser.add_argument("-d", "--deployment", "--stage", dest="stage", help="Deployment (stage) name")
    parser.add_argument("-r", "--region", help="AWS region")
    parser.add_argument("-p", "--profile", help="AWS profile name to use for authentication")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kes", description="Build CloudFormation templates from kes configuration")
    commands = parser.add_subparsers(dest="command", required=True)

    cf = commands.add_parser("cf", help="CloudFormation operations")
    cf.add_argument("operation", choices=["compile", "validate"], help="compile or validate the template")
    add_common_options(cf)

    config = commands.add_parser("config", help="Print the resolved configuration")
    add_common_options(config)
    return parser


def load_config(paths: Dict[str, str], args: argparse.Namespace) -> dict:
    return Config(args.stack, args.stage, paths["config"], paths["stage"], paths["env"]).parse()


def run(args: argparse.Namespace) -> int:
    paths = resolve_paths(args)
    config = load_config(paths, args)

    if args.command == "config":
        sys.stdout.write(yaml_loader.dump(config))
        return 0

    body = compile_template(paths["cf"], config, paths["output"])
    if args.operation == "validate":
        validator = TemplateValidator(region=resolve_region(args), profile=args.profile)
        result = validator.validate(body)
        logger.info("Template %s is valid", paths["output"])
        if result["Capabilities"]:
            logger.info("Required capabilities: %s", ", ".join(result["Capabilities"]))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        return run(args)
    except (KesError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
