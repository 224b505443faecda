"""
Tests for compiling cloudformation.template.yml
"""

import pytest
import yaml

from kes.compile_template import compile_template
from kes.config import Config
from kes.errors import MalformedDocumentError
from kes.yaml_loader import load_cfn

CONFIG = """
stackName: mystack
lambdas:
  - name: hello
    handler: index.handler
    source: src/hello
    apiGateway:
      - api: backend
        path: /hello/{name}
        method: get
        cors: true
apis:
  - name: backend
tags:
  color: orange
"""

TEMPLATE = """AWSTemplateFormatVersion: '2010-09-09'
Description: 'stack: {{stackName}} | deployed by kes'
Resources:
{{#each lambdas}}
  {{name}}LambdaFunction:
    Type: AWS::Lambda::Function
    Properties:
      FunctionName: {{fullName}}
      Handler: {{handler}}
      MemorySize: {{memory}}
      Timeout: {{timeout}}
      Role: !GetAtt LambdaRole.Arn
{{/each}}
{{#each apiResources}}
  {{name}}:
    Type: AWS::ApiGateway::Resource
    Properties:
      PathPart: '{{pathPart}}'
      RestApiId: !Ref {{api}}RestApi
{{/each}}
{{#each apiMethods}}
  {{name}}:
    Type: AWS::ApiGateway::Method
    Properties:
      HttpMethod: {{method}}
      ResourceId: !Ref {{resource}}
{{/each}}
Outputs:
  Tags:
    Value: '{{#each tags}}{{@key}}={{this}};{{/each}}'
"""


def write(temp_dir, name, content):
    path = temp_dir / name
    path.write_text(content)
    return str(path)


def test_compile_writes_template(tmp_path):
    config = Config(None, 'dev', write(tmp_path, 'config.yml', CONFIG), envs={}).parse()
    cf_file = write(tmp_path, 'cloudformation.template.yml', TEMPLATE)
    output = str(tmp_path / 'out' / 'cloudformation.yml')

    body = compile_template(cf_file, config, output)

    with open(output) as f:
        assert f.read() == body

    template = load_cfn(body)
    resources = template['Resources']
    assert template['Description'] == 'stack: mystack | deployed by kes'
    assert resources['helloLambdaFunction']['Properties']['FunctionName'] == 'mystack-dev-hello'
    assert resources['helloLambdaFunction']['Properties']['MemorySize'] == 1024
    assert resources['helloLambdaFunction']['Properties']['Role'] == {'GetAtt': 'LambdaRole.Arn'}
    assert resources['ApiGateWayResourceHelloNameVar']['Properties']['PathPart'] == '{name}'
    assert resources['ApiGateWayResourceHelloNameVar']['Properties']['RestApiId'] == {'Ref': 'backendRestApi'}
    assert resources['ApiGatewayMethodHelloNameVarGet']['Properties']['HttpMethod'] == 'GET'
    assert template['Outputs']['Tags']['Value'] == 'color=orange;'


def test_compile_without_output(tmp_path):
    cf_file = write(tmp_path, 'cloudformation.template.yml', "Description: '{{stackName}}'\n")

    body = compile_template(cf_file, {'stackName': 's'})

    assert yaml.safe_load(body) == {'Description': 's'}
    assert not (tmp_path / 'cloudformation.yml').exists()


def test_invalid_rendered_template(tmp_path):
    cf_file = write(tmp_path, 'cloudformation.template.yml', "Description: '{{stackName}}'\n")

    with pytest.raises(MalformedDocumentError) as excinfo:
        compile_template(cf_file, {'stackName': "it's"})

    assert excinfo.value.phase == 'cloudformation'
