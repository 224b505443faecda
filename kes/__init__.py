"""Build CloudFormation templates from layered kes configuration."""

from .config import Config
from .errors import KesError

__version__ = "0.1.0"

__all__ = ["Config", "KesError"]
