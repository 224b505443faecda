"""
Defaults and validation for the `lambdas` section of config.yml.
"""

import logging
from typing import Any, Dict, List, Optional

from .errors import KesError, LambdaConfigError

logger = logging.getLogger(__name__)

DEFAULT_MEMORY = 1024
DEFAULT_TIMEOUT = 300
SOURCE_FIELDS = ("source", "s3Source")


def validate_lambda(entry: Dict[str, Any]) -> None:
    """Raise LambdaConfigError unless name, handler and exactly one source are set"""
    if not isinstance(entry, dict):
        raise LambdaConfigError(None, f"expected a mapping, got {entry!r}")

    name = entry.get("name")
    if not name:
        raise LambdaConfigError(None, "name is required")
    if not entry.get("handler"):
        raise LambdaConfigError(name, "handler is required")

    sources = [field for field in SOURCE_FIELDS if entry.get(field)]
    if len(sources) != 1:
        raise LambdaConfigError(name, "exactly one of source or s3Source is required")


def normalize_envs(envs: Any) -> List[Dict[str, Any]]:
    """`envs` may be a list of {name, value} or a mapping of name to value"""
    if envs is None:
        return []
    if isinstance(envs, dict):
        return [{"name": key, "value": value} for key, value in envs.items()]
    return list(envs)


def full_name(stack_name: Optional[str], stage: Optional[str], name: str) -> str:
    parts = [str(part) for part in (stack_name, stage, name) if part]
    return "-".join(parts)


def configure_lambda(entry: Dict[str, Any], stack_name: Optional[str],
                     stage: Optional[str]) -> Dict[str, Any]:
    validate_lambda(entry)
    configured = dict(entry)
    configured.setdefault("memory", DEFAULT_MEMORY)
    configured.setdefault("timeout", DEFAULT_TIMEOUT)
    configured["envs"] = normalize_envs(configured.get("envs"))

    if "services" in configured:
        configured["services"] = [
            dict(service, lambdaName=configured["name"]) for service in configured["services"] or []
        ]

    configured["fullName"] = full_name(stack_name, stage, configured["name"])
    return configured


def configure_lambdas(config: Dict[str, Any]) -> Dict[str, Any]:
    """Return `config` with every lambda entry defaulted. A config without lambdas is returned as is."""
    lambdas = config.get("lambdas")
    if not lambdas:
        return config
    if not config.get("stackName"):
        raise KesError("stackName is required when lambdas are declared")

    configured = [
        configure_lambda(entry, config.get("stackName"), config.get("stage")) for entry in lambdas
    ]

    seen = set()
    for entry in configured:
        if entry["name"] in seen:
            raise LambdaConfigError(entry["name"], "name is used by more than one lambda")
        seen.add(entry["name"])

    logger.debug("Configured %d lambda(s)", len(configured))
    return dict(config, lambdas=configured)
