"""
Validates a compiled template with the CloudFormation ValidateTemplate API.
"""

import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError, ProfileNotFound

from .errors import AwsCredentialsError, AwsRequestError, TemplateValidationError

logger = logging.getLogger(__name__)

# ValidateTemplate rejects inline bodies above this size
MAX_TEMPLATE_BODY = 51200


class TemplateValidator:
    """Sends template bodies to CloudFormation for validation"""

    def __init__(self, region: str = 'us-east-1', profile: Optional[str] = None, client: Any = None):
        self.region = region
        if client is None:
            try:
                session = boto3.Session(profile_name=profile) if profile else boto3.Session()
            except ProfileNotFound as e:
                raise AwsCredentialsError(str(e)) from e
            client = session.client('cloudformation', region_name=region)
        self.cf_client = client

    def validate(self, body: str) -> Dict[str, List[str]]:
        """Return the template's parameter keys and required capabilities"""
        if len(body.encode('utf-8')) > MAX_TEMPLATE_BODY:
            raise TemplateValidationError(
                f"Template body is larger than {MAX_TEMPLATE_BODY} bytes and cannot be validated inline"
            )

        try:
            response = self.cf_client.validate_template(TemplateBody=body)
        except NoCredentialsError as e:
            raise AwsCredentialsError(
                "AWS credentials not found. Please configure AWS CLI or set environment variables."
            ) from e
        except ClientError as e:
            if e.response['Error']['Code'] == 'ValidationError':
                raise TemplateValidationError(e.response['Error']['Message']) from e
            raise AwsRequestError(f"ValidateTemplate failed: {e}") from e
        except BotoCoreError as e:
            raise AwsRequestError(f"ValidateTemplate failed: {e}") from e

        result = {
            'Parameters': [p['ParameterKey'] for p in response.get('Parameters', [])],
            'Capabilities': response.get('Capabilities', []),
        }
        logger.debug("Template declares %d parameter(s)", len(result['Parameters']))
        return result
