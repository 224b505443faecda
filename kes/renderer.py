"""
Handlebars rendering of kes templates.

The rendered output is YAML, not HTML, so values are inserted verbatim:
every escaped `{{expr}}` is turned into the raw `{{{expr}}}` form before the
template is compiled. Block tags (`#`, `/`, `^`, `else`), comments and partials
are left as written.

Sequences render the way Handlebars prints arrays, joined with commas.
"""

import re
from typing import Any, Mapping, Optional

from pybars import Compiler, PybarsError
from pymeta.runtime import ParseError

from .errors import TemplateRenderError

ESCAPED_EXPRESSION = re.compile(r"(?<!\{)\{\{(?![{#/^!>&])(?!\s*else\s*\}\})(.*?)\}\}(?!\})")
COMMENT = re.compile(r"\{\{!--.*?--\}\}|\{\{![^}]*\}\}", re.S)
BLOCK_TAG = re.compile(r"\{\{\s*([#^/])\s*([^\s}]+)")
STANDALONE_TAIL = re.compile(r"(?:^|\n)[ \t]*\{\{\s*(?:[#/^!][^}]*|else\s*)\}\}[ \t]*$")

_compiler = Compiler()


class JoinedList(list):
    """A list that prints as its comma separated items"""

    def __str__(self) -> str:
        return ",".join("" if item is None else str(item) for item in self)


def prepare(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: prepare(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return JoinedList(prepare(item) for item in value)
    return value


def unescape_expressions(source: str) -> str:
    return ESCAPED_EXPRESSION.sub(r"{{{\1}}}", source)


def check_blocks(source: str) -> None:
    """Raise ValueError when block tags are unbalanced"""
    stripped = COMMENT.sub(lambda m: "\n" * m.group(0).count("\n"), source)
    opened = []
    for match in BLOCK_TAG.finditer(stripped):
        kind, name = match.groups()
        line = stripped.count("\n", 0, match.start()) + 1
        if kind != "/":
            opened.append((name, line))
        elif not opened:
            raise ValueError(f"{{{{/{name}}}}} on line {line} closes no open block")
        elif opened[-1][0] != name:
            raise ValueError(
                f"{{{{/{name}}}}} on line {line} does not close {{{{#{opened[-1][0]}}}}} "
                f"from line {opened[-1][1]}"
            )
        else:
            opened.pop()
    if opened:
        name, line = opened[-1]
        raise ValueError(f"{{{{#{name}}}}} on line {line} is never closed")


def render(source: str, context: Mapping[str, Any], phase: str = "render",
           path: Optional[str] = None) -> str:
    """Render `source` against `context` without HTML escaping"""
    try:
        check_blocks(source)
    except ValueError as e:
        raise TemplateRenderError(phase, path, e) from e

    # pybars eats the newline before a closing tag that ends the text.
    # A standalone tag on the last line swallows the added newline itself.
    trim = not source.endswith("\n") and not STANDALONE_TAIL.search(source)
    if not source.endswith("\n"):
        source += "\n"

    try:
        template = _compiler.compile(unescape_expressions(source))
        output = str(template(prepare(dict(context))))
    except (PybarsError, ParseError) as e:
        raise TemplateRenderError(phase, path, e) from e

    if trim and output.endswith("\n"):
        output = output[:-1]
    return output
