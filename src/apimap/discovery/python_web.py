"""
FastAPI / Flask discovery backend.

Parses each module with ``ast``. Router objects (``FastAPI()``, ``APIRouter()``,
``Flask()``, ``Blueprint()``) assigned at module level become controller
records; functions decorated with ``@router.get(...)`` or
``@app.route(..., methods=[...])`` become endpoints under the router prefix.
"""

import ast
from dataclasses import dataclass
from pathlib import PurePath
from typing import Dict, List, Optional

from loguru import logger

from apimap.discovery.base import (
    DiscoveredRoute,
    DiscoveryBackend,
    DiscoveryContext,
    DiscoveryReport,
    ensure_leading_slash,
    iter_source_files,
    read_source,
    relative_source,
)
from apimap.exceptions import DiscoveryError
from apimap.schemas.route_index import HttpMethod, RouteIndex, RouteKind


# Constructor name -> keyword holding the router prefix
ROUTER_FACTORIES = {
    "FastAPI": "root_path",
    "APIRouter": "prefix",
    "Flask": None,
    "Blueprint": "url_prefix",
}

METHOD_DECORATORS = {m.value.lower(): m for m in HttpMethod}


@dataclass
class Router:
    variable: str
    factory: str
    prefix: str
    line: int


def _call_name(node: ast.AST) -> Optional[str]:
    """Name of the called object: ``APIRouter`` for ``fastapi.APIRouter(...)``"""
    if not isinstance(node, ast.Call):
        return None
    func = node.func
    if isinstance(func, ast.Name):
        return func.id
    if isinstance(func, ast.Attribute):
        return func.attr
    return None


def _string_value(node: Optional[ast.AST]) -> Optional[str]:
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return node.value
    return None


def _keyword(call: ast.Call, name: str) -> Optional[ast.AST]:
    for keyword in call.keywords:
        if keyword.arg == name:
            return keyword.value
    return None


def find_routers(tree: ast.Module) -> Dict[str, Router]:
    """Module-level ``name = Factory(...)`` assignments, keyed by variable name"""
    routers: Dict[str, Router] = {}

    for node in tree.body:
        if isinstance(node, ast.Assign):
            targets, value = node.targets, node.value
        elif isinstance(node, ast.AnnAssign) and node.value is not None:
            targets, value = [node.target], node.value
        else:
            continue

        factory = _call_name(value)
        if factory not in ROUTER_FACTORIES:
            continue

        prefix_keyword = ROUTER_FACTORIES[factory]
        prefix = _string_value(_keyword(value, prefix_keyword)) if prefix_keyword else None

        for target in targets:
            if isinstance(target, ast.Name):
                routers[target.id] = Router(
                    variable=target.id,
                    factory=factory,
                    prefix=prefix or "",
                    line=node.lineno
                )

    return routers


def _route_methods(call: ast.Call) -> List[HttpMethod]:
    """HTTP methods from a ``route(..., methods=[...])`` call; GET when absent"""
    methods_node = _keyword(call, "methods")
    if not isinstance(methods_node, (ast.List, ast.Tuple, ast.Set)):
        return [HttpMethod.GET]

    methods = []
    for element in methods_node.elts:
        value = _string_value(element)
        if value and value.lower() in METHOD_DECORATORS:
            methods.append(METHOD_DECORATORS[value.lower()])
    return methods


def _decorator_routes(decorator: ast.AST, routers: Dict[str, Router]):
    """Yield (router, method, template) for one decorator."""
    if not isinstance(decorator, ast.Call) or not isinstance(decorator.func, ast.Attribute):
        return

    owner = decorator.func.value
    if not isinstance(owner, ast.Name) or owner.id not in routers:
        return

    router = routers[owner.id]
    attribute = decorator.func.attr.lower()
    template = _string_value(decorator.args[0]) if decorator.args else None
    if template is None:
        template = _string_value(_keyword(decorator, "path")) or _string_value(_keyword(decorator, "rule"))

    if attribute in METHOD_DECORATORS:
        yield router, METHOD_DECORATORS[attribute], template
    elif attribute in ("route", "api_route"):
        for method in _route_methods(decorator):
            yield router, method, template


def join_prefix(prefix: str, template: Optional[str]) -> str:
    """
    Prefix a route template the way routers do: plain concatenation.

    Unlike ASP.NET, a leading "/" on the template does not discard the prefix.
    """
    template = template or ""
    if not prefix:
        return ensure_leading_slash(template)
    if not template:
        return ensure_leading_slash(prefix)
    return ensure_leading_slash(f"{prefix.rstrip('/')}/{template.lstrip('/')}")


def module_name(file: str) -> str:
    """Dotted module name for a relative source path (``app/api.py`` -> ``app.api``)"""
    parts = list(PurePath(file).with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts = parts[:-1]
    return ".".join(parts) or "__main__"


def parse_python_module(source: str, file: str) -> List[DiscoveredRoute]:
    """
    Extract router and endpoint records from one module.

    Args:
        source: Python source text
        file: Source path relative to the repository root

    Returns:
        Controller records followed by endpoints, in source order

    Raises:
        SyntaxError: Source does not parse
    """
    tree = ast.parse(source, filename=file)
    routers = find_routers(tree)
    if not routers:
        return []

    module = module_name(file)

    def controller_name(router: Router) -> str:
        return f"{module}.{router.variable}"

    controllers = [
        DiscoveredRoute(
            kind=RouteKind.CONTROLLER,
            path=ensure_leading_slash(router.prefix) if router.prefix else "",
            file=file,
            line=router.line,
            controller=controller_name(router),
        )
        for router in sorted(routers.values(), key=lambda r: r.line)
    ]

    endpoints = []
    for node in ast.walk(tree):
        if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            continue

        # Decorated functions report the first decorator line
        line = min([d.lineno for d in node.decorator_list] + [node.lineno])
        for decorator in node.decorator_list:
            for router, method, template in _decorator_routes(decorator, routers):
                endpoints.append(DiscoveredRoute(
                    kind=RouteKind.ENDPOINT,
                    http_method=method,
                    path=join_prefix(router.prefix, template),
                    file=file,
                    line=line,
                    controller=controller_name(router),
                    action=node.name,
                ))

    endpoints.sort(key=lambda r: r.line)
    return controllers + endpoints


class PythonWebDiscoveryBackend(DiscoveryBackend):
    """Discovery backend for FastAPI and Flask applications."""

    @property
    def name(self) -> str:
        return "Python (FastAPI/Flask)"

    @property
    def language(self) -> str:
        return "python"

    @property
    def framework(self) -> str:
        return "python"

    def discover(self, context: DiscoveryContext) -> RouteIndex:
        root = context.repository_root
        context.report("Discovering Python web routes...")

        report = DiscoveryReport()
        controllers: List[DiscoveredRoute] = []
        endpoints: List[DiscoveredRoute] = []

        for source_file in iter_source_files(root, (".py",)):
            context.check_cancelled()
            file = relative_source(source_file, root)
            try:
                found = parse_python_module(read_source(source_file), file)
            except (DiscoveryError, SyntaxError, ValueError) as e:
                report.skip(context, file, e)
                continue

            report.scanned += 1
            if not found:
                continue

            module_endpoints = [r for r in found if r.kind is RouteKind.ENDPOINT]
            context.report(f"  {file}: {len(module_endpoints)} route(s)")
            controllers.extend(r for r in found if r.kind is RouteKind.CONTROLLER)
            endpoints.extend(module_endpoints)

        routes = controllers + endpoints
        context.report(f"Discovered {len(routes)} route(s).")
        logger.success(
            f"Python discovery: {len(routes)} routes from {report.scanned} file(s), "
            f"{len(report.skipped)} skipped"
        )
        return self.build_index(context, routes)
