"""
Loads the variable store from a local .env file.
"""

import logging
import os
from types import MappingProxyType
from typing import Mapping, Optional

from dotenv import dotenv_values

logger = logging.getLogger(__name__)


def load_envs(env_file: Optional[str]) -> Mapping[str, str]:
    """Read `env_file` into a read-only mapping. A missing file gives an empty store."""
    if not env_file or not os.path.exists(env_file):
        logger.debug("No env file at %s", env_file)
        return MappingProxyType({})

    values = dotenv_values(env_file)
    envs = {key: value for key, value in values.items() if value is not None}
    logger.debug("Loaded %d variable(s) from %s", len(envs), env_file)
    return MappingProxyType(envs)
