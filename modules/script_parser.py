"""
Script parser - Tokenize command lines and build typed commands

A script line looks like:

    text="fie foo fum", y=20%, font=Arial, fontsize=48
    ----  -----------   ----------------------------
     ^         ^                     ^
  keyword   primary               options

Blank lines and lines starting with '#' are ignored.
"""

import re
from dataclasses import dataclass, field
from typing import ClassVar, Dict, Iterator, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict

from utils.exceptions import (
    MalformedCommandSyntaxError,
    UnknownDirectiveError,
    UnknownOptionError,
)


IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
VARIABLE_RE = re.compile(r"\{\$(\w+)\}")


@dataclass
class ScriptLine:
    """One tokenized line: keyword, quoted primary argument, ordered options"""
    lineno: int
    keyword: str
    primary: str
    options: List[Tuple[str, str]] = field(default_factory=list)


def iter_script_lines(script: str) -> Iterator[Tuple[int, str]]:
    """Yield (1-based line number, line) for every non-blank, non-comment line"""
    for lineno, line in enumerate(script.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        yield lineno, line


def _read_quoted(text: str, start: int) -> Tuple[str, int]:
    """
    Read a double-quoted string beginning at text[start] == '"'.
    A backslash takes the next character literally.

    Returns:
        (content, index just past the closing quote)
    """
    out = []
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == '"':
            return "".join(out), i + 1
        if ch == "\\" and i + 1 < len(text):
            i += 1
            ch = text[i]
        out.append(ch)
        i += 1
    raise MalformedCommandSyntaxError("Missing closing '\"'")


def _split_top_level(text: str) -> List[str]:
    """Split on commas that are not inside quotes or parentheses"""
    parts, current = [], []
    depth, quoted = 0, False
    for ch in text:
        if ch == '"':
            quoted = not quoted
        elif not quoted and ch == "(":
            depth += 1
        elif not quoted and ch == ")":
            depth = max(0, depth - 1)
        elif ch == "," and not quoted and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return parts


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def tokenize_line(line: str, lineno: int = 0) -> ScriptLine:
    """
    Split one line into keyword, primary argument and options

    Raises:
        MalformedCommandSyntaxError: missing '=', missing or unterminated quote,
            or an option without '='
    """
    eq = line.find("=")
    if eq <= 0:
        raise MalformedCommandSyntaxError("Syntax error -- missing '='", lineno)
    keyword = line[:eq].strip()
    rest = line[eq + 1:].lstrip()
    if not rest.startswith('"'):
        raise MalformedCommandSyntaxError("Syntax error -- missing '\"'", lineno)

    try:
        primary, end = _read_quoted(rest, 0)
    except MalformedCommandSyntaxError as e:
        e.line = lineno
        raise

    remainder = rest[end:].strip()
    options: List[Tuple[str, str]] = []
    if remainder:
        if not remainder.startswith(","):
            raise MalformedCommandSyntaxError(
                f"Syntax error -- expected ',' after the quoted argument, got {remainder!r}", lineno
            )
        for piece in _split_top_level(remainder[1:]):
            if not piece.strip():
                continue
            if "=" not in piece:
                raise MalformedCommandSyntaxError(f"Syntax error -- option {piece.strip()!r} has no '='", lineno)
            key, value = piece.split("=", 1)
            options.append((key.strip(), _unquote(value)))

    return ScriptLine(lineno=lineno, keyword=keyword, primary=primary, options=options)


def substitute(text: str, variables: Mapping[str, str]) -> str:
    """
    Replace every {$name} with its value in a single pass

    Substituted values are not expanded again; unknown names stay as written.
    """
    def _value(match: re.Match) -> str:
        name = match.group(1)
        return str(variables[name]) if name in variables else match.group(0)

    return VARIABLE_RE.sub(_value, text)


# ============================================================================
# Commands
# ============================================================================

class Command(BaseModel):
    """Base of all typed commands; subclasses declare their legal options"""
    model_config = ConfigDict(frozen=True)

    keyword: ClassVar[str] = ""
    primary_field: ClassVar[str] = ""
    option_keys: ClassVar[Tuple[str, ...]] = ()

    line: int = 0


class TemplateCommand(Command):
    """template="1920x1200" or template="background.jpg", bg=white"""
    keyword: ClassVar[str] = "template"
    primary_field: ClassVar[str] = "source"
    option_keys: ClassVar[Tuple[str, ...]] = ("bg",)

    source: str
    bg: Optional[str] = None


class ImageCommand(Command):
    """image="photo.jpg", bbox=(0 0 50% 50%), align=top, opacity=50, border=black"""
    keyword: ClassVar[str] = "image"
    primary_field: ClassVar[str] = "path"
    option_keys: ClassVar[Tuple[str, ...]] = ("align", "opacity", "bbox", "border")

    path: str
    align: Optional[str] = None
    opacity: Optional[str] = None
    bbox: Optional[str] = None
    border: Optional[str] = None


class TextCommand(Command):
    """text="Hello", align=left, x=10%, y=20%, font=Arial, fontsize=48, color=red, maxwidth=80%, linespc=1.2"""
    keyword: ClassVar[str] = "text"
    primary_field: ClassVar[str] = "text"
    option_keys: ClassVar[Tuple[str, ...]] = (
        "align", "x", "y", "font", "fontsize", "color", "maxwidth", "linespc",
    )

    text: str
    align: Optional[str] = None
    x: Optional[str] = None
    y: Optional[str] = None
    font: Optional[str] = None
    fontsize: Optional[str] = None
    color: Optional[str] = None
    maxwidth: Optional[str] = None
    linespc: Optional[str] = None


class PolyCommand(Command):
    """poly="10% 10%  90% 10%  50% 90%", fill=gray, border=black, thickness=3"""
    keyword: ClassVar[str] = "poly"
    primary_field: ClassVar[str] = "points"
    option_keys: ClassVar[Tuple[str, ...]] = ("fill", "border", "thickness")

    points: str
    fill: Optional[str] = None
    border: Optional[str] = None
    thickness: Optional[str] = None


class OutputCommand(Command):
    """output="result.jpg" """
    keyword: ClassVar[str] = "output"
    primary_field: ClassVar[str] = "path"

    path: str


class AssignCommand(Command):
    """name="value" """
    name: str
    value: str


COMMANDS: Dict[str, Type[Command]] = {
    cls.keyword: cls
    for cls in (TemplateCommand, ImageCommand, TextCommand, PolyCommand, OutputCommand)
}


def build_command(line: ScriptLine, variables: Mapping[str, str]) -> Command:
    """
    Turn a tokenized line into a typed command, substituting variables in the
    primary argument and every option value

    Raises:
        UnknownDirectiveError: keyword is neither a command nor a variable name
        UnknownOptionError: option key not accepted by the command
    """
    primary = substitute(line.primary, variables)
    cls = COMMANDS.get(line.keyword)

    if cls is None:
        if not IDENTIFIER_RE.match(line.keyword):
            raise UnknownDirectiveError(line.keyword, line=line.lineno)
        if line.options:
            raise UnknownDirectiveError(
                line.keyword,
                f"Unknown command {line.keyword!r} (a variable assignment takes no options)",
                line=line.lineno,
            )
        return AssignCommand(name=line.keyword, value=primary, line=line.lineno)

    fields = {cls.primary_field: primary, "line": line.lineno}
    for key, value in line.options:
        if key not in cls.option_keys:
            raise UnknownOptionError(line.keyword, key, line=line.lineno)
        fields[key] = substitute(value, variables)
    return cls(**fields)
