"""
Script Interpreter - Execute a composition script command by command
"""

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from loguru import logger

from config import settings as default_settings
from modules.colors import Color, resolve_color
from modules.document import Document
from modules.fonts import FontLibrary
from modules.layout import LayoutDefaults, LayoutState
from modules.opacity import apply_opacity
from modules.placement import IMAGE_ALIGNMENTS, TEXT_ALIGNMENTS, BoundingBox, parse_alignment, place
from modules.script_parser import (
    AssignCommand,
    Command,
    ImageCommand,
    OutputCommand,
    PolyCommand,
    TemplateCommand,
    TextCommand,
    build_command,
    iter_script_lines,
    tokenize_line,
)
from modules.text_layout import place_text
from modules import units
from utils.exceptions import (
    ComposerError,
    MalformedCommandSyntaxError,
    MissingFileError,
    OddCoordinateCountError,
    PathOutsideWorkspaceError,
)
from utils.image_utils import image_format, load_image


_SIZE_RE = re.compile(r"^\s*(\S+?)\s*x\s*(\S+)\s*$", re.IGNORECASE)


class InterpreterState(str, Enum):
    AWAITING_COMMAND = "awaiting_command"
    EXECUTING_COMMAND = "executing_command"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RenderResult:
    """Outcome of a finished run"""
    document: Document
    output_path: Optional[Path] = None
    variables: Dict[str, str] = field(default_factory=dict)
    commands_executed: int = 0


def _parse_float(value: str, what: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise MalformedCommandSyntaxError(f"{what} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise MalformedCommandSyntaxError(f"{what} must be a finite number, got {value!r}")
    return number


class ScriptInterpreter:
    """
    Runs one script against its own Document and LayoutState

    Every run owns its state; create a new interpreter per script execution.
    """

    def __init__(
        self,
        variables: Optional[Mapping[str, str]] = None,
        base_dir: Optional[Path] = None,
        fonts: Optional[FontLibrary] = None,
        settings=None,
        allowed_dirs: Optional[Sequence[Path]] = None,
    ):
        """
        Args:
            variables: Initial variable table (e.g. request parameters)
            base_dir: Directory relative file names are resolved against
            fonts: Font library (default: configured font directories)
            settings: Settings object (default: config.settings)
            allowed_dirs: If given, every file a script reads or writes must lie
                inside one of these directories
        """
        self.settings = settings or default_settings
        self.variables: Dict[str, str] = {k: str(v) for k, v in (variables or {}).items()}
        self.base_dir = Path(base_dir) if base_dir else Path.cwd()
        self.fonts = fonts or FontLibrary(self.settings.font_dirs)
        self.allowed_dirs = [Path(d).resolve() for d in allowed_dirs] if allowed_dirs is not None else None
        self.state = InterpreterState.AWAITING_COMMAND
        self.output_path: Optional[Path] = None
        self.commands_executed = 0

        document = Document.blank(
            self.settings.DEFAULT_WIDTH,
            self.settings.DEFAULT_HEIGHT,
            resolve_color(self.settings.DEFAULT_BACKGROUND),
            self.settings.DPI,
        )
        self.layout = LayoutState(document, LayoutDefaults.from_settings(self.settings))

        self._handlers: Dict[type, Callable[[Command], None]] = {
            TemplateCommand: self._template,
            ImageCommand: self._image,
            TextCommand: self._text,
            PolyCommand: self._poly,
            OutputCommand: self._output,
            AssignCommand: self._assign,
        }

    @property
    def document(self) -> Document:
        return self.layout.document

    # ------------------------------------------------------------------
    # Driving
    # ------------------------------------------------------------------

    def run(self, script: str) -> RenderResult:
        """
        Execute a whole script

        Args:
            script: Script source text

        Returns:
            RenderResult once an output command ran or the input ended

        Raises:
            ComposerError: first failing line, with its line number set
        """
        logger.info(f"▶️ Running script ({len(script.splitlines())} lines)")

        for lineno, line in iter_script_lines(script):
            self.execute_line(line, lineno)
            if self.state is InterpreterState.DONE:
                break

        self.state = InterpreterState.DONE
        logger.info(
            f"✅ Script finished: {self.commands_executed} command(s), "
            f"output={self.output_path or 'none'}"
        )
        return RenderResult(
            document=self.document,
            output_path=self.output_path,
            variables=dict(self.variables),
            commands_executed=self.commands_executed,
        )

    def run_file(self, script_path: Union[str, Path]) -> RenderResult:
        """Execute a script file; relative paths resolve against its directory"""
        script_path = Path(script_path)
        if not script_path.is_file():
            raise MissingFileError(script_path)
        self.base_dir = script_path.parent
        return self.run(script_path.read_text(encoding="utf-8-sig"))

    def execute_line(self, line: str, lineno: int = 0) -> None:
        """Tokenize, build and execute a single line"""
        if self.state in (InterpreterState.DONE, InterpreterState.FAILED):
            raise RuntimeError(f"Interpreter is {self.state.value}, create a new one")

        self.state = InterpreterState.EXECUTING_COMMAND
        self.layout.reset_transient()
        try:
            command = build_command(tokenize_line(line, lineno), self.variables)
            self.execute(command)
        except ComposerError as e:
            if e.line is None:
                e.line = lineno
            self.state = InterpreterState.FAILED
            logger.error(f"❌ Line {e.line}: {e.message}")
            raise

        if self.state is InterpreterState.EXECUTING_COMMAND:
            self.state = InterpreterState.AWAITING_COMMAND

    def execute(self, command: Command) -> None:
        handler = self._handlers[type(command)]
        logger.debug(f"Line {command.line}: {command.__class__.__name__}")
        handler(command)
        self.commands_executed += 1

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _path(self, name: str) -> Path:
        path = Path(name)
        if not path.is_absolute():
            path = self.base_dir / path
        if self.allowed_dirs is not None:
            resolved = path.resolve()
            if not any(resolved.is_relative_to(root) for root in self.allowed_dirs):
                raise PathOutsideWorkspaceError(name)
        return path

    def _color(self, spec: Optional[str]) -> Optional[Color]:
        """Resolve a color option; empty or "none" disables it"""
        if not spec or spec.strip().lower() == "none":
            return None
        return resolve_color(spec)

    @staticmethod
    def _document_size(source: str) -> Optional[Tuple[units.Measurement, units.Measurement]]:
        """Parse "WxH" (each side a measurement), None if source is a file name"""
        match = _SIZE_RE.match(source)
        if match is None or image_format(source) is not None:
            return None
        try:
            return units.Measurement.parse(match.group(1)), units.Measurement.parse(match.group(2))
        except MalformedCommandSyntaxError:
            return None

    def _coordinates(self, text: str) -> List[Tuple[float, float]]:
        tokens = units.split_measurements(text.strip().strip("()\""))
        if len(tokens) % 2:
            raise OddCoordinateCountError(len(tokens))
        values = [
            self.layout.vertical(token) if i % 2 else self.layout.horizontal(token)
            for i, token in enumerate(tokens)
        ]
        return list(zip(values[0::2], values[1::2]))

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _template(self, cmd: TemplateCommand) -> None:
        size = self._document_size(cmd.source)
        if size is not None:
            # A brand-new image has no extent yet, so percentages cannot resolve
            width, height = (round(side.to_pixels(None, self.settings.DPI)) for side in size)
            if width < 1 or height < 1:
                raise MalformedCommandSyntaxError(f"Document size must be positive, got {cmd.source!r}")
            document = Document.blank(
                width, height,
                resolve_color(self.settings.DEFAULT_BACKGROUND),
                self.settings.DPI,
            )
        else:
            document = Document.from_file(self._path(cmd.source), self.settings.DPI)

        self.layout.reset(document)
        if cmd.bg:
            document.fill(resolve_color(cmd.bg))
        logger.info(f"🖼️ Template {cmd.source!r} -> {document!r}")

    def _image(self, cmd: ImageCommand) -> None:
        image = load_image(self._path(cmd.path))

        layout = self.layout
        transient = layout.transient
        if cmd.align:
            transient.image_align = parse_alignment(cmd.align, IMAGE_ALIGNMENTS)
        if cmd.opacity:
            transient.opacity = _parse_float(cmd.opacity, "opacity")
        if cmd.border:
            transient.border = self._color(cmd.border)
        if cmd.bbox:
            corners = self._coordinates(cmd.bbox)
            if len(corners) != 2:
                raise MalformedCommandSyntaxError(f"bbox needs four values, got {cmd.bbox!r}")
            (x0, y0), (x1, y1) = corners
            layout.bbox = BoundingBox(x0, y0, x1, y1)

        box = layout.bbox
        rect = place(image.width, image.height, box, transient.image_align)
        apply_opacity(image, transient.opacity)
        layout.document.blit(image, rect)
        if transient.border is not None:
            layout.document.rectangle(box, transient.border)

        logger.debug(
            f"Image {cmd.path!r} {image.width}x{image.height} into {box.as_tuple()} "
            f"-> ({rect.x:.0f}, {rect.y:.0f}, {rect.w:.0f}x{rect.h:.0f})"
        )
        layout.advance_after_image(rect)

    def _text(self, cmd: TextCommand) -> None:
        layout = self.layout
        cursor = layout.cursor

        if cmd.align:
            cursor.align = parse_alignment(cmd.align, TEXT_ALIGNMENTS)
        if cmd.x:
            cursor.xp = layout.horizontal(cmd.x)
        if cmd.y:
            cursor.yp = layout.vertical(cmd.y)
        if cmd.font:
            cursor.font_name = cmd.font
        if cmd.fontsize:
            size = layout.vertical(cmd.fontsize)
            if size <= 0:
                raise MalformedCommandSyntaxError(f"fontsize must be positive, got {cmd.fontsize!r}")
            cursor.size = size
        if cmd.color:
            cursor.color = resolve_color(cmd.color)
        if cmd.linespc:
            cursor.linespc = _parse_float(cmd.linespc, "linespc")
        if cmd.maxwidth:
            layout.transient.max_width = layout.horizontal(cmd.maxwidth)

        font = self.fonts.load(cursor.font_name)
        placement = place_text(
            cmd.text,
            font,
            cursor.size,
            (cursor.xp, cursor.yp),
            cursor.align,
            layout.transient.max_width,
        )
        layout.document.text(font, placement, cmd.text, cursor.color)
        logger.debug(
            f"Text {cmd.text[:30]!r} size {placement.size:.1f} at ({placement.x:.0f}, {placement.y:.0f})"
        )
        layout.advance_line(placement.size)

    def _poly(self, cmd: PolyCommand) -> None:
        points = self._coordinates(cmd.points)
        if len(points) < 3:
            raise MalformedCommandSyntaxError(f"A polygon needs at least 3 points, got {len(points)}")

        fill = self._color(cmd.fill)
        border = self._color(cmd.border or self.settings.DEFAULT_POLY_BORDER)
        thickness = self.settings.DEFAULT_POLY_THICKNESS
        if cmd.thickness:
            thickness = int(_parse_float(cmd.thickness, "thickness"))

        self.document.polygon(points, fill, border, thickness)
        logger.debug(f"Polygon with {len(points)} points, thickness {thickness}")

    def _output(self, cmd: OutputCommand) -> None:
        path = self.document.save(self._path(cmd.path), self.settings.JPEG_QUALITY)
        self.output_path = path
        self.state = InterpreterState.DONE

    def _assign(self, cmd: AssignCommand) -> None:
        self.variables[cmd.name] = cmd.value
        logger.debug(f"Variable {cmd.name} = {cmd.value!r}")


def render_script(
    script: str,
    variables: Optional[Mapping[str, str]] = None,
    base_dir: Optional[Path] = None,
    **kwargs,
) -> RenderResult:
    """Convenience wrapper: run a script with a fresh interpreter"""
    return ScriptInterpreter(variables=variables, base_dir=base_dir, **kwargs).run(script)
