"""
YAML loading for kes files.

`!include <path>` splices another YAML file in place, resolved relative to the
file holding the directive. Included files may include further files.
CloudFormation short-form tags are accepted when reading a compiled template.
"""

import os
from typing import Any, Optional

import yaml


class IncludeLoader(yaml.SafeLoader):
    """SafeLoader with the !include directive"""

    base_dir = "."


def include_constructor(loader: IncludeLoader, node: yaml.Node) -> Any:
    relative = loader.construct_scalar(node)
    path = os.path.join(loader.base_dir, relative)
    with open(path, encoding="utf-8") as f:
        return yaml.load(f, Loader=include_loader(os.path.dirname(path)))


yaml.add_constructor("!include", include_constructor, Loader=IncludeLoader)


def include_loader(base_dir: str) -> type:
    """Loader class resolving !include paths against `base_dir`"""
    return type("IncludeLoader", (IncludeLoader,), {"base_dir": base_dir or "."})


def load_with_includes(text: str, base_dir: str) -> Any:
    return yaml.load(text, Loader=include_loader(base_dir))


def load_plain(text: str) -> Any:
    return yaml.safe_load(text)


def dump(document: Any) -> str:
    """Serialize back to block-style YAML, keeping key order and long lines intact"""
    return yaml.dump(
        document,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=float("inf"),
    )


class CfnLoader(yaml.SafeLoader):
    """SafeLoader that tolerates CloudFormation intrinsic function tags"""

    pass


def cfn_constructor(loader: yaml.Loader, node: yaml.Node) -> Any:
    if isinstance(node, yaml.ScalarNode):
        return {node.tag[1:]: loader.construct_scalar(node)}
    elif isinstance(node, yaml.SequenceNode):
        return {node.tag[1:]: loader.construct_sequence(node, deep=True)}
    elif isinstance(node, yaml.MappingNode):
        return {node.tag[1:]: loader.construct_mapping(node, deep=True)}
    return ""


for tag in ["!Ref", "!Sub", "!GetAtt", "!GetAZs", "!ImportValue", "!If", "!Join",
            "!Select", "!Split", "!Equals", "!And", "!Or", "!Not", "!FindInMap",
            "!Base64", "!Cidr", "!Condition"]:
    yaml.add_constructor(tag, cfn_constructor, Loader=CfnLoader)


def load_cfn(text: str) -> Optional[dict]:
    return yaml.load(text, Loader=CfnLoader)
