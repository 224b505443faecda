"""
Exceptions raised while resolving, compiling and validating a kes stack.
"""

from typing import Optional


class KesError(Exception):
    """Base class for every error the kes command reports to the user"""


class MalformedDocumentError(KesError):
    """A rendered template did not parse as YAML"""

    def __init__(self, phase: str, path: Optional[str], cause: Exception):
        self.phase = phase
        self.path = path
        self.cause = cause
        where = f" ({path})" if path else ""
        super().__init__(f"Invalid YAML during {phase}{where}: {cause}")


class TemplateRenderError(KesError):
    """The template engine rejected the template text"""

    def __init__(self, phase: str, path: Optional[str], cause: Exception):
        self.phase = phase
        self.path = path
        self.cause = cause
        where = f" ({path})" if path else ""
        super().__init__(f"Template rendering failed during {phase}{where}: {cause}")


class UndeclaredApiError(KesError):
    """A route references an api that is missing from the top level `apis` list"""

    def __init__(self, api: str):
        self.api = api
        super().__init__(f"{api} is not defined in apis")


class LambdaConfigError(KesError):
    """A lambda entry is missing required fields or declares a broken route"""

    def __init__(self, lambda_name: Optional[str], message: str):
        self.lambda_name = lambda_name
        label = lambda_name if lambda_name else "<unnamed>"
        super().__init__(f"lambda {label}: {message}")


class TemplateValidationError(KesError):
    """CloudFormation rejected the compiled template"""


class AwsCredentialsError(KesError):
    """No AWS credentials could be found for a remote call"""


class AwsRequestError(KesError):
    """A call to AWS failed for a reason other than template validation"""
