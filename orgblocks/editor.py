"""Org document editor hosting the block completion backend."""

import re
import textwrap
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.application import run_in_terminal
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.filters import completion_is_selected
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.lexers import PygmentsLexer
from prompt_toolkit.keys import Keys
from prompt_toolkit.styles import Style as PromptStyle
from pygments.lexers import get_lexer_by_name, get_lexer_for_filename
from pygments.util import ClassNotFound
from rich.console import Console

from .backend import OrgBlockBackend, OrgBlockCompleter
from .config import Config
from .errors import NoSpecialEnvironmentError
from .expander import EditStyle
from .tables import OrgTables

# Block types that can be edited in a dedicated buffer
SPECIAL_KINDS = ("src", "example", "export")

_BEGIN_RE = re.compile(r"^[ \t]*#\+begin_(\S+)(?:[ \t]+(.*?))?[ \t]*$", re.IGNORECASE)
_END_RE = re.compile(r"^[ \t]*#\+end_(\S+)[ \t]*$", re.IGNORECASE)


@dataclass
class BlockRegion:
    """Offsets of a ``#+begin_X`` ... ``#+end_X`` block in a text."""
    kind: str
    args: str
    body_start: int  # First character after the begin line
    body_end: int    # Start of the end line

    @property
    def language(self) -> str:
        return self.args.split()[0] if self.args else ""


def find_enclosing_block(text: str, cursor: int) -> Optional[BlockRegion]:
    """Return the innermost block containing *cursor*, markers included."""
    open_blocks = []
    offset = 0
    for line in text.splitlines(keepends=True):
        content = line.rstrip("\r\n")
        line_end = offset + len(content)

        begin = _BEGIN_RE.match(content)
        end = _END_RE.match(content)
        if begin:
            open_blocks.append((begin.group(1).lower(), begin.group(2) or "", offset,
                                offset + len(line)))
        elif end and open_blocks and open_blocks[-1][0] == end.group(1).lower():
            kind, args, start, body_start = open_blocks.pop()
            if start <= cursor <= line_end:
                return BlockRegion(kind, args, body_start, offset)

        offset += len(line)
    return None


def lexer_for_language(lang: str, tables: Optional[OrgTables] = None) -> Optional[PygmentsLexer]:
    """Pick a pygments lexer for a src block language."""
    if not lang:
        return None
    try:
        return PygmentsLexer(type(get_lexer_by_name(lang)))
    except ClassNotFound:
        pass

    ext = tables.tangle_lang_exts.get(lang) if tables else None
    if not ext:
        return None
    try:
        return PygmentsLexer(type(get_lexer_for_filename(f"block.{ext}")))
    except ClassNotFound:
        return None


def _prompt_in_thread(session: PromptSession, *args, **kwargs):
    """Run a nested prompt on its own thread and event loop, blocking the caller."""
    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(session.prompt, *args, **kwargs).result()


class OrgEditor:
    """Multiline editor for one Org document with ``<`` block completion."""

    def __init__(self, path, config: Config, tables: Optional[OrgTables] = None,
                 input=None, output=None, complete_while_typing: bool = True):
        self.path = Path(path)
        self.config = config
        self.tables = tables if tables is not None else config.tables
        self.console = Console()
        self.backend = OrgBlockBackend(config, self, self.tables)
        self.completer = OrgBlockCompleter(self.backend)
        self._input = input
        self._output = output
        self.session = self._setup_session(complete_while_typing)

    def _setup_session(self, complete_while_typing: bool) -> PromptSession:
        """Configure prompt_toolkit session."""
        style = PromptStyle.from_dict({
            'bottom-toolbar': 'noreverse bg:#222222 #aaaaaa',
        })
        return PromptSession(
            multiline=True,
            completer=self.completer,
            complete_while_typing=complete_while_typing,
            validate_while_typing=False,
            key_bindings=self._key_bindings(),
            bottom_toolbar=self._toolbar,
            style=style,
            input=self._input,
            output=self._output,
        )

    def _toolbar(self):
        mode = "Org" if self.in_org_mode() else "Text"
        return f" {self.path.name} ({mode})  <TAB>/<ENTER> pick  C-c ' edit block  M-<ENTER> save"

    def _key_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        @kb.add("enter", filter=completion_is_selected)
        async def _(event):
            buffer = event.current_buffer
            selection = buffer.complete_state.current_completion.text
            # Put back what was typed; expansion deletes it by its own length.
            buffer.cancel_completion()
            await self.accept_completion(selection)

        @kb.add("c-c", "<")
        def _(event):
            self.backend.interactive_begin()

        @kb.add("c-c", "'")
        async def _(event):
            await run_in_terminal(self._edit_special_or_report)

        return kb

    async def accept_completion(self, selection: str) -> None:
        """Expand *selection*, leaving the terminal to any follow-up prompt."""
        if self.config.edit_style is EditStyle.INLINE:
            self.backend.post_completion(selection)
        else:
            await run_in_terminal(lambda: self.backend.post_completion(selection))

    def _edit_special_or_report(self) -> None:
        try:
            self.edit_special()
        except NoSpecialEnvironmentError as e:
            self.console.print(f"[yellow]{e}[/]")

    # Host interface used by OrgBlockBackend

    def in_org_mode(self) -> bool:
        return self.config.force_org_mode or self.path.suffix.lower() == ".org"

    def current_buffer(self) -> Buffer:
        return self.session.default_buffer

    def begin_backend(self, backend: OrgBlockBackend) -> None:
        self.completer.backend = backend
        self.current_buffer().start_completion(select_first=False)

    def ask(self, question: str) -> bool:
        session = self._confirm_session(question)
        try:
            return bool(_prompt_in_thread(session))
        except (KeyboardInterrupt, EOFError):
            return False

    def _confirm_session(self, question: str) -> PromptSession:
        """Yes/no session on the editor's own input and output."""
        bindings = KeyBindings()

        @bindings.add("y")
        @bindings.add("Y")
        def _(event):
            event.app.current_buffer.text = "y"
            event.app.exit(result=True)

        @bindings.add("n")
        @bindings.add("N")
        def _(event):
            event.app.current_buffer.text = "n"
            event.app.exit(result=False)

        @bindings.add(Keys.Any)
        def _(event):
            pass  # Only y or n

        return PromptSession(
            question + " (y/n) ",
            key_bindings=bindings,
            input=self._input,
            output=self._output,
        )

    def edit_special(self) -> None:
        """Edit the block under the cursor in a nested editor.

        Raises:
            NoSpecialEnvironmentError: If the cursor is not in a src,
                example or export block.
        """
        buffer = self.current_buffer()
        text = buffer.text
        region = find_enclosing_block(text, buffer.cursor_position)
        if region is None or region.kind not in SPECIAL_KINDS:
            raise NoSpecialEnvironmentError()

        indent = " " * self.config.content_indentation
        body = text[region.body_start:region.body_end]
        if body.endswith("\n"):
            body = body[:-1]
        body = textwrap.dedent(body)

        lexer = lexer_for_language(region.language, self.tables) if region.kind == "src" else None
        new_body = self._edit_body(body, lexer, f"{region.kind} {region.args}".strip())
        new_body = textwrap.indent(new_body.rstrip("\n"), indent) + "\n"

        buffer.text = text[:region.body_start] + new_body + text[region.body_end:]
        buffer.cursor_position = region.body_start + len(new_body) - 1

    def _edit_body(self, body: str, lexer: Optional[PygmentsLexer], title: str) -> str:
        session = PromptSession(
            multiline=True,
            lexer=lexer,
            bottom_toolbar=f" Editing {title}  M-<ENTER> done",
            input=self._input,
            output=self._output,
        )
        try:
            return _prompt_in_thread(session, "", default=body)
        except (KeyboardInterrupt, EOFError):
            return body

    def run(self) -> Optional[str]:
        """Edit the document; write it back when submitted.

        Returns:
            The saved text, or None if editing was abandoned.
        """
        original = self.path.read_text(encoding="utf-8") if self.path.exists() else ""
        try:
            text = self.session.prompt("", default=original)
        except (KeyboardInterrupt, EOFError):
            return None

        self.path.write_text(text, encoding="utf-8")
        return text
