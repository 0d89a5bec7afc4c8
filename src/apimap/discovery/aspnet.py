"""
ASP.NET Web API discovery backend.

Scans C# sources for controller classes and HTTP method attributes without a
compiler: attribute lists, class and method declarations are recognized line
by line, and brace depth tracks which class a method belongs to. Each
``.csproj`` directory is one sub-project; a project that cannot be read is
reported and skipped.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from loguru import logger

from apimap.discovery.base import (
    DiscoveredRoute,
    DiscoveryBackend,
    DiscoveryContext,
    DiscoveryReport,
    combine_routes,
    ensure_leading_slash,
    iter_source_files,
    read_source,
    relative_source,
)
from apimap.exceptions import DiscoveryError
from apimap.schemas.route_index import HttpMethod, RouteIndex, RouteKind
from apimap.search.matching import strip_controller_suffix


CONTROLLER_BASE_TYPES = frozenset({"Controller", "ControllerBase"})
CONTROLLER_ATTRIBUTES = frozenset({"ApiController"})
ROUTE_ATTRIBUTES = frozenset({"Route"})

HTTP_METHOD_ATTRIBUTES = {
    "HttpGet": HttpMethod.GET,
    "HttpPost": HttpMethod.POST,
    "HttpPut": HttpMethod.PUT,
    "HttpDelete": HttpMethod.DELETE,
    "HttpPatch": HttpMethod.PATCH,
    "HttpHead": HttpMethod.HEAD,
    "HttpOptions": HttpMethod.OPTIONS,
}

_STRING_LITERAL = r'@?"((?:[^"\\]|\\.|"")*)"'

_ATTRIBUTE = re.compile(r"^\s*(?:[\w.]+\.)?(?P<name>\w+?)(?:Attribute)?\s*(?:\((?P<args>.*)\))?\s*$", re.S)
_NAMED_TEMPLATE = re.compile(r"(?:\btemplate\s*:|\bTemplate\s*=)\s*" + _STRING_LITERAL)
_POSITIONAL_TEMPLATE = re.compile(r"^\s*" + _STRING_LITERAL)

_CLASS_DECL = re.compile(
    r"\bclass\s+(?P<name>\w+)\s*(?:<[^>{]*>)?\s*(?::\s*(?P<bases>[^{]+))?"
)
_METHOD_DECL = re.compile(
    r"^\s*(?P<modifiers>(?:(?:public|private|protected|internal|static|virtual|override|"
    r"async|sealed|new|abstract|extern|unsafe|partial)\s+)+)"
    r"[\w<>\[\],.?\s]*?\b(?P<name>\w+)\s*(?:<[^>()]*>)?\s*\("
)
_TOKEN_CONTROLLER = re.compile(r"\[controller\]", re.IGNORECASE)
_TOKEN_ACTION = re.compile(r"\[action\]", re.IGNORECASE)


@dataclass
class Attribute:
    name: str
    template: Optional[str] = None


@dataclass
class ParsedMethod:
    name: str
    line: int
    is_public: bool
    attributes: List[Attribute] = field(default_factory=list)


@dataclass
class ParsedClass:
    name: str
    file: Path
    line: int
    bases: List[str] = field(default_factory=list)
    attributes: List[Attribute] = field(default_factory=list)
    methods: List[ParsedMethod] = field(default_factory=list)

    def has_attribute(self, names) -> bool:
        return any(a.name in names for a in self.attributes)

    @property
    def route_prefix(self) -> Optional[str]:
        for attribute in self.attributes:
            if attribute.name in ROUTE_ATTRIBUTES and attribute.template is not None:
                return attribute.template
        return None


def _unescape(literal: str, verbatim: bool) -> str:
    if verbatim:
        return literal.replace('""', '"')
    return literal.replace('\\"', '"').replace("\\\\", "\\")


def parse_attribute(text: str) -> Optional[Attribute]:
    """
    Parse one attribute, e.g. ``HttpGet("{id}", Name = "x")``.

    Returns:
        Attribute with its route template, or None if unrecognizable
    """
    match = _ATTRIBUTE.match(text)
    if not match:
        return None

    args = match.group("args") or ""
    template = None

    named = _NAMED_TEMPLATE.search(args)
    positional = _POSITIONAL_TEMPLATE.match(args)
    chosen = named or positional
    if chosen:
        verbatim = chosen.group(0).lstrip().split('"', 1)[0].endswith("@")
        template = _unescape(chosen.group(1), verbatim)

    return Attribute(name=match.group("name"), template=template)


def _scan_bracket(text: str, start: int) -> int:
    """Index just past the ``]`` closing the ``[`` at ``start``, or -1."""
    depth = 0
    in_string = False
    i = start
    while i < len(text):
        ch = text[i]
        if in_string:
            if ch == "\\":
                i += 1
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return -1


def _split_top_level(text: str) -> List[str]:
    """Split on commas outside parentheses and string literals."""
    parts, current = [], []
    depth = 0
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return [p for p in parts if p.strip()]


def split_attribute_lists(line: str) -> Tuple[List[Attribute], str]:
    """
    Peel leading ``[...]`` attribute lists off a line.

    Returns:
        (attributes, remaining code)
    """
    attributes: List[Attribute] = []
    rest = line.lstrip()

    while rest.startswith("["):
        end = _scan_bracket(rest, 0)
        if end < 0:
            break
        inner = rest[1:end - 1]
        # Assembly/return targets such as [assembly: X] are not route attributes
        if not re.match(r"^\s*\w+\s*:(?!:)", inner):
            for part in _split_top_level(inner):
                attribute = parse_attribute(part)
                if attribute:
                    attributes.append(attribute)
        rest = rest[end:].lstrip()

    return attributes, rest


def _strip_code(line: str, in_comment: bool) -> Tuple[str, bool]:
    """Remove string literals and comments; track open block comments."""
    out = []
    i = 0
    in_string = False
    while i < len(line):
        ch = line[i]
        nxt = line[i + 1] if i + 1 < len(line) else ""
        if in_comment:
            if ch == "*" and nxt == "/":
                in_comment = False
                i += 2
                continue
            i += 1
            continue
        if in_string:
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                in_string = False
                out.append('"')
            i += 1
            continue
        if ch == "/" and nxt == "/":
            break
        if ch == "/" and nxt == "*":
            in_comment = True
            i += 2
            continue
        if ch == '"':
            in_string = True
            out.append('"')
            i += 1
            continue
        out.append(ch)
        i += 1
    return "".join(out), in_comment


def _without_comments(line: str, in_comment: bool) -> Tuple[str, bool]:
    """Remove comments but keep string literals intact."""
    out = []
    i = 0
    in_string = False
    while i < len(line):
        ch = line[i]
        nxt = line[i + 1] if i + 1 < len(line) else ""
        if in_comment:
            if ch == "*" and nxt == "/":
                in_comment = False
                i += 2
            else:
                i += 1
            continue
        if in_string:
            out.append(ch)
            if ch == "\\" and nxt:
                out.append(nxt)
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue
        if ch == "/" and nxt == "/":
            break
        if ch == "/" and nxt == "*":
            in_comment = True
            i += 2
            continue
        if ch == '"':
            in_string = True
        out.append(ch)
        i += 1
    return "".join(out), in_comment


def parse_csharp_source(source: str, file: Path) -> List[ParsedClass]:
    """
    Extract classes, their attributes and public-method attributes.

    Args:
        source: C# source text
        file: Path the source was read from

    Returns:
        Parsed classes in declaration order (nested classes included)
    """
    classes: List[ParsedClass] = []
    stack: List[Tuple[ParsedClass, int]] = []  # (class, brace depth of its body)
    pending: List[Attribute] = []
    pending_line: Optional[int] = None
    awaiting_body: Optional[ParsedClass] = None
    depth = 0
    in_comment = False
    in_code_comment = False

    for line_number, raw_line in enumerate(source.splitlines(), start=1):
        line, in_comment = _without_comments(raw_line, in_comment)
        code, in_code_comment = _strip_code(raw_line, in_code_comment)

        if line.strip():
            attributes, rest = split_attribute_lists(line)
            if attributes:
                if not pending:
                    pending_line = line_number
                pending.extend(attributes)

            if rest:
                start_line = pending_line if pending else line_number
                class_match = _CLASS_DECL.search(rest)
                method_match = _METHOD_DECL.match(rest) if not class_match else None

                if class_match:
                    base_list = re.split(r"\bwhere\b", class_match.group("bases") or "")[0]
                    bases = [
                        b.strip().split("<", 1)[0].split(".")[-1].strip()
                        for b in base_list.split(",")
                    ]
                    parsed = ParsedClass(
                        name=class_match.group("name"),
                        file=file,
                        line=start_line,
                        bases=[b for b in bases if b],
                        attributes=list(pending),
                    )
                    classes.append(parsed)
                    awaiting_body = parsed
                elif method_match and stack and depth == stack[-1][1]:
                    modifiers = method_match.group("modifiers").split()
                    stack[-1][0].methods.append(ParsedMethod(
                        name=method_match.group("name"),
                        line=start_line,
                        is_public="public" in modifiers,
                        attributes=list(pending),
                    ))

                pending = []
                pending_line = None

        for ch in code:
            if ch == "{":
                depth += 1
                if awaiting_body is not None:
                    stack.append((awaiting_body, depth))
                    awaiting_body = None
            elif ch == "}":
                if stack and stack[-1][1] == depth:
                    stack.pop()
                depth = max(depth - 1, 0)

    return classes


def find_controllers(classes: List[ParsedClass]) -> List[ParsedClass]:
    """
    Classes deriving (transitively) from Controller/ControllerBase or marked [ApiController].

    Every qualifying declaration is kept, so same-named controllers in other
    namespaces and each part of a partial class yield their own routes.
    Base classes are resolved by simple name.
    """
    by_name: Dict[str, ParsedClass] = {}
    for cls in classes:
        by_name.setdefault(cls.name, cls)

    def derives_from_controller(cls: ParsedClass, seen: set) -> bool:
        for base in cls.bases:
            if base in CONTROLLER_BASE_TYPES:
                return True
            parent = by_name.get(base)
            if parent is not None and parent.name not in seen:
                seen.add(parent.name)
                if derives_from_controller(parent, seen):
                    return True
        return False

    controllers: List[ParsedClass] = []
    declared = set()
    for cls in classes:
        key = (cls.file, cls.line)
        if key in declared:
            continue
        if cls.has_attribute(CONTROLLER_ATTRIBUTES) or derives_from_controller(cls, {cls.name}):
            declared.add(key)
            controllers.append(cls)

    return controllers


def _substitute_tokens(template: str, controller: str, action: Optional[str]) -> str:
    template = _TOKEN_CONTROLLER.sub(lambda _: strip_controller_suffix(controller), template)
    if action is not None:
        template = _TOKEN_ACTION.sub(lambda _: action, template)
    return template


def controller_routes(cls: ParsedClass, repository_root: Path) -> List[DiscoveredRoute]:
    """Controller record followed by one endpoint per HTTP method attribute."""
    file = relative_source(cls.file, repository_root)
    prefix = cls.route_prefix

    controller_path = ""
    if prefix:
        controller_path = ensure_leading_slash(_substitute_tokens(prefix, cls.name, None))

    routes = [DiscoveredRoute(
        kind=RouteKind.CONTROLLER,
        path=controller_path,
        file=file,
        line=cls.line,
        controller=cls.name,
    )]

    for method in cls.methods:
        if not method.is_public:
            continue

        method_route = next(
            (a.template for a in method.attributes
             if a.name in ROUTE_ATTRIBUTES and a.template is not None),
            None
        )

        for attribute in method.attributes:
            http_method = HTTP_METHOD_ATTRIBUTES.get(attribute.name)
            if http_method is None:
                continue

            template = attribute.template if attribute.template is not None else method_route
            path = combine_routes(
                _substitute_tokens(prefix or "", cls.name, method.name),
                _substitute_tokens(template or "", cls.name, method.name),
            )
            routes.append(DiscoveredRoute(
                kind=RouteKind.ENDPOINT,
                http_method=http_method,
                path=path,
                file=file,
                line=method.line,
                controller=cls.name,
                action=method.name,
            ))

    return routes


class AspNetDiscoveryBackend(DiscoveryBackend):
    """Discovery backend for ASP.NET Web API projects."""

    @property
    def name(self) -> str:
        return "ASP.NET Web API"

    @property
    def language(self) -> str:
        return "csharp"

    @property
    def framework(self) -> str:
        return "aspnet"

    def discover(self, context: DiscoveryContext) -> RouteIndex:
        root = context.repository_root
        context.report("Discovering ASP.NET routes...")

        project_files = list(iter_source_files(root, (".csproj",)))
        if not project_files:
            context.report("No .sln or .csproj files found.")
            return self.build_index(context, [])

        project_dirs = sorted({p.parent for p in project_files})
        report = DiscoveryReport()
        routes: List[DiscoveredRoute] = []

        for project_dir in project_dirs:
            context.check_cancelled()
            name = relative_source(project_dir, root) if project_dir != root else project_dir.name
            try:
                project_routes = self._scan_project(context, project_dir, project_dirs)
            except DiscoveryError as e:
                report.skip(context, name, e)
                continue
            report.scanned += 1
            routes.extend(project_routes)

        context.report(f"Discovered {len(routes)} route(s).")
        logger.success(
            f"ASP.NET discovery: {len(routes)} routes from {report.scanned} project(s), "
            f"{len(report.skipped)} skipped"
        )
        return self.build_index(context, routes)

    def _scan_project(
        self,
        context: DiscoveryContext,
        project_dir: Path,
        project_dirs: List[Path]
    ) -> List[DiscoveredRoute]:
        """
        Scan one project directory, excluding nested projects.

        Raises:
            DiscoveryError: A source file cannot be listed or read
        """
        if not project_dir.is_dir():
            raise DiscoveryError(f"Project directory missing: {project_dir}")

        context.report(f"  Scanning: {project_dir.name}")
        nested = {d for d in project_dirs if d != project_dir and project_dir in d.parents}

        classes: List[ParsedClass] = []
        for source_file in iter_source_files(project_dir, (".cs",)):
            context.check_cancelled()
            if any(d in source_file.parents for d in nested):
                continue
            classes.extend(parse_csharp_source(read_source(source_file), source_file))

        controllers = find_controllers(classes)
        context.report(f"    Found {len(controllers)} controller(s)")

        per_controller = [
            controller_routes(cls, context.repository_root)
            for cls in controllers
        ]

        # All controller records first, then their endpoints
        routes = [group[0] for group in per_controller]
        for cls, group in zip(controllers, per_controller):
            endpoints = group[1:]
            if endpoints:
                context.report(f"      {cls.name}: {len(endpoints)} route(s)")
            routes.extend(endpoints)

        return routes
