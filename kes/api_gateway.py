"""
Builds the API Gateway resources and methods from the routes declared on lambdas.

Every segment of a route path gets its own resource and routes sharing a
leading path share those resources. For example /foo, /foo/bar and /foo/baz
create three resources: Foo, FooBar and FooBaz, where FooBar and FooBaz are
children of Foo.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .errors import KesError, LambdaConfigError, UndeclaredApiError

logger = logging.getLogger(__name__)

RESOURCE_PREFIX = "ApiGateWayResource"
METHOD_PREFIX = "ApiGatewayMethod"


@dataclass
class Route:
    api: str
    path: str
    method: str
    cors: bool = False

    @classmethod
    def from_dict(cls, lambda_name: str, entry: Dict[str, Any]) -> "Route":
        missing = [field for field in ("api", "path", "method") if not entry.get(field)]
        if missing:
            raise LambdaConfigError(lambda_name, f"apiGateway route is missing {', '.join(missing)}")
        if not path_segments(str(entry["path"])):
            raise LambdaConfigError(lambda_name, f"apiGateway path {entry['path']!r} has no segments")
        return cls(
            api=str(entry["api"]),
            path=str(entry["path"]),
            method=str(entry["method"]),
            cors=bool(entry.get("cors", False)),
        )


def upper_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def segment_name(segment: str) -> str:
    """
    Name of a path segment inside resource names.
    A variable such as {short_name} becomes ShortNameVar.
    """
    if segment.startswith("{"):
        parts = segment.strip("{}").split("_")
        return "".join(upper_first(part) for part in parts if part) + "Var"
    return upper_first(segment)


def path_segments(path: str) -> List[str]:
    # leading, trailing and doubled slashes do not create resources
    return [segment for segment in path.split("/") if segment]


def root_parent(api: str) -> List[str]:
    return ["Fn::GetAtt:", f"- {api}RestApi", "- RootResourceId"]


def resource_name(key: str) -> str:
    return f"{RESOURCE_PREFIX}{key}"


def method_name(key: str, method: str) -> str:
    return f"{METHOD_PREFIX}{key}{method.capitalize()}"


class ApiGatewayBuilder:
    """Accumulates resources, methods and options while routes are added"""

    def __init__(self, apis: List[Dict[str, Any]]):
        self.resources: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        self.options: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        self.methods: List[Dict[str, Any]] = []
        self.dependencies: "OrderedDict[str, List[Dict[str, str]]]" = OrderedDict()

        for api in apis:
            if not isinstance(api, dict) or not api.get("name"):
                raise KesError(f"apis entries require a name, got {api!r}")
            self.dependencies[api["name"]] = []

    def dependency_list(self, api: str) -> Optional[List[Dict[str, str]]]:
        return self.dependencies.get(api)

    def add_route(self, lambda_name: str, route: Route) -> None:
        dependencies = self.dependency_list(route.api)
        if dependencies is None:
            raise UndeclaredApiError(route.api)

        names: List[str] = []
        for index, segment in enumerate(path_segments(route.path)):
            names.append(segment_name(segment))
            key = "".join(names)

            if index == 0:
                parents = root_parent(route.api)
            else:
                parents = [f"Ref: {resource_name(''.join(names[:index]))}"]

            # keyed on the joined names so shared prefixes share one resource
            self.resources[key] = {
                "name": resource_name(key),
                "pathPart": segment,
                "parents": parents,
                "api": route.api,
            }

        leaf = "".join(names)
        name = method_name(leaf, route.method)
        self.methods.append({
            "name": name,
            "method": route.method.upper(),
            "cors": route.cors,
            "resource": resource_name(leaf),
            "lambda": lambda_name,
            "api": route.api,
        })
        dependencies.append({"name": name})

        if route.cors and leaf not in self.options:
            self.options[leaf] = {
                "name": f"{METHOD_PREFIX}{leaf}Options",
                "resource": resource_name(leaf),
                "api": route.api,
            }

    def output(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "apiMethods": list(self.methods),
            "apiResources": list(self.resources.values()),
            "apiMethodsOptions": list(self.options.values()),
            "apiDependencies": [
                {"name": api, "methods": methods} for api, methods in self.dependencies.items()
            ],
        }


def declared_routes(config: Dict[str, Any]):
    for entry in config.get("lambdas") or []:
        routes = entry.get("apiGateway") or []
        if not isinstance(routes, list):
            raise LambdaConfigError(entry["name"], "apiGateway must be a list of routes")
        for route in routes:
            if not isinstance(route, dict):
                raise LambdaConfigError(entry["name"], f"apiGateway route must be a mapping, got {route!r}")
            yield entry["name"], Route.from_dict(entry["name"], route)


def configure_api_gateway(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Add apiMethods, apiResources, apiMethodsOptions and apiDependencies to
    `config`. Without apis and routes the config is returned unchanged.
    """
    routes = list(declared_routes(config))
    apis = config.get("apis") or []
    if not apis and not routes:
        return config

    builder = ApiGatewayBuilder(apis)
    for lambda_name, route in routes:
        builder.add_route(lambda_name, route)

    output = builder.output()
    logger.debug(
        "Synthesized %d resource(s), %d method(s) and %d options method(s)",
        len(output["apiResources"]), len(output["apiMethods"]), len(output["apiMethodsOptions"]),
    )
    return dict(config, **output)
