"""
Request Template Compiler

Renders request templates against an environment. The template language is a
small Handlebars subset:

    {{ name }}                         substitution
    {{#if name}} ... {{else}} ... {{/if}}
    {{#unless name}} ... {{/unless}}
    \\{{                               literal "{{"

Text outside markers is copied byte for byte. Compilation is all-or-nothing:
an undefined variable in a rendered substitution fails the whole template.
"""

import functools
import re
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Tuple, Union

from ..core.exceptions import CompilationError
from ..core.models import Environment

_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_.\-]*\Z")
_BLOCK_HELPERS = ("if", "unless")

Variables = Union[Environment, Mapping[str, str]]


@dataclass(frozen=True)
class _Text:
    value: str


@dataclass(frozen=True)
class _Variable:
    name: str
    line: int
    column: int


@dataclass(frozen=True)
class _Block:
    helper: str
    name: str
    body: Tuple["_Node", ...]
    alternate: Tuple["_Node", ...]
    line: int
    column: int


_Node = Union[_Text, _Variable, _Block]


@dataclass
class _OpenBlock:
    helper: str
    name: str
    line: int
    column: int
    body: List[_Node] = field(default_factory=list)
    alternate: Optional[List[_Node]] = None

    @property
    def target(self) -> List[_Node]:
        return self.body if self.alternate is None else self.alternate


def _position(template: str, offset: int) -> Tuple[int, int]:
    """1-based (line, column) of ``offset``."""
    line = template.count("\n", 0, offset) + 1
    column = offset - (template.rfind("\n", 0, offset) + 1) + 1
    return line, column


@functools.lru_cache(maxsize=256)
def _parse(template: str) -> Tuple[_Node, ...]:
    root: List[_Node] = []
    stack: List[_OpenBlock] = []
    pending: List[str] = []
    pos = 0

    def target() -> List[_Node]:
        return stack[-1].target if stack else root

    def flush() -> None:
        text = "".join(pending)
        pending.clear()
        if text:
            target().append(_Text(text))

    while True:
        start = template.find("{{", pos)
        if start == -1:
            pending.append(template[pos:])
            break

        if start > pos and template[start - 1] == "\\":
            pending.append(template[pos : start - 1])
            pending.append("{{")
            pos = start + 2
            continue

        pending.append(template[pos:start])
        line, column = _position(template, start)

        end = template.find("}}", start + 2)
        if end == -1:
            raise CompilationError("Unterminated '{{'", line=line, column=column)

        flush()
        content = template[start + 2 : end].strip()
        pos = end + 2

        if not content:
            raise CompilationError("Empty marker", line=line, column=column)

        if content.startswith("#"):
            helper, _, name = content[1:].partition(" ")
            name = name.strip()
            if helper not in _BLOCK_HELPERS:
                raise CompilationError(
                    f"Unknown block helper '#{helper}'", line=line, column=column
                )
            if not _NAME_RE.match(name):
                raise CompilationError(
                    f"Invalid variable name '{name}' in '#{helper}'",
                    variable=name or None,
                    line=line,
                    column=column,
                )
            stack.append(_OpenBlock(helper, name, line, column))

        elif content == "else":
            if not stack:
                raise CompilationError(
                    "'else' outside of a block", line=line, column=column
                )
            if stack[-1].alternate is not None:
                raise CompilationError(
                    f"Duplicate 'else' in '#{stack[-1].helper}'", line=line, column=column
                )
            stack[-1].alternate = []

        elif content.startswith("/"):
            helper = content[1:].strip()
            if not stack:
                raise CompilationError(
                    f"Unexpected closing '/{helper}'", line=line, column=column
                )
            block = stack.pop()
            if helper != block.helper:
                raise CompilationError(
                    f"Closing '/{helper}' does not match '#{block.helper}' opened at "
                    f"line {block.line}",
                    line=line,
                    column=column,
                )
            target().append(
                _Block(
                    helper=block.helper,
                    name=block.name,
                    body=tuple(block.body),
                    alternate=tuple(block.alternate or ()),
                    line=block.line,
                    column=block.column,
                )
            )

        else:
            if not _NAME_RE.match(content):
                raise CompilationError(
                    f"Invalid variable name '{content}'", line=line, column=column
                )
            target().append(_Variable(content, line, column))

    flush()

    if stack:
        block = stack[-1]
        raise CompilationError(
            f"Unclosed '#{block.helper} {block.name}'",
            variable=block.name,
            line=block.line,
            column=block.column,
        )

    return tuple(root)


class TemplateCompiler:
    """Compiles request templates into literal request text."""

    def compile(self, template: str, environment: Variables) -> str:
        """
        Render a template against an environment.

        Args:
            template: Template text
            environment: Environment (or plain mapping) resolving the markers

        Returns:
            Compiled literal text

        Raises:
            CompilationError: On bad syntax or an undefined variable
        """
        nodes = _parse(template)
        output: List[str] = []
        self._render(nodes, environment, output)
        return "".join(output)

    def _render(
        self, nodes: Tuple[_Node, ...], environment: Variables, output: List[str]
    ) -> None:
        for node in nodes:
            if isinstance(node, _Text):
                output.append(node.value)
            elif isinstance(node, _Variable):
                value = _resolve(environment, node.name)
                if value is None:
                    raise CompilationError(
                        f"Undefined variable '{node.name}'",
                        variable=node.name,
                        line=node.line,
                        column=node.column,
                    )
                output.append(value)
            else:
                truthy = bool(_resolve(environment, node.name))
                if node.helper == "unless":
                    truthy = not truthy
                self._render(node.body if truthy else node.alternate, environment, output)

    def validate(self, template: str) -> None:
        """Check template syntax without resolving any variable."""
        _parse(template)


def _resolve(environment: Variables, name: str) -> Optional[str]:
    if isinstance(environment, Environment):
        return environment.resolve(name)
    return environment.get(name)


_compiler = TemplateCompiler()


def compile_template(template: str, environment: Variables) -> str:
    """Compile ``template`` with the shared compiler."""
    return _compiler.compile(template, environment)
