"""Completion backend for ``<`` block templates.

The host drives the backend through four commands: begin an interactive
completion, ask for the prefix at point, list candidates, and expand the
accepted one. ``OrgBlockCompleter`` plugs the same backend into
prompt_toolkit's completion machinery.
"""

from enum import Enum
from typing import Any, Iterable, Optional, Protocol

from prompt_toolkit.buffer import Buffer
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from .candidates import candidates
from .config import Config
from .errors import OrgBlocksError
from .expander import BlockSkeleton, enter_edit_context, expand
from .logging import get_logger
from .tables import OrgTables
from .trigger import PrefixMatch, match_prefix


class Command(Enum):
    """Commands a host may send to the backend."""

    INTERACTIVE_BEGIN = "interactive-begin"
    PREFIX = "prefix-query"
    CANDIDATES = "candidates-query"
    POST_COMPLETION = "post-completion"


class BlockHost(Protocol):
    """What the backend needs from the editor hosting it."""

    def in_org_mode(self) -> bool: ...

    def current_buffer(self) -> Buffer: ...

    def begin_backend(self, backend: "OrgBlockBackend") -> None: ...

    def edit_special(self) -> None: ...

    def ask(self, question: str) -> bool: ...


class OrgBlockBackend:
    """Block template completion source."""

    def __init__(self, config: Config, host: BlockHost, tables: Optional[OrgTables] = None):
        self.config = config
        self.host = host
        self.tables = tables if tables is not None else config.tables

    def interactive_begin(self) -> None:
        """Make this backend the active completion source."""
        self.host.begin_backend(self)

    def prefix(self, document: Document) -> Optional[PrefixMatch]:
        """Return the typed prefix at the cursor, or None if not applicable."""
        if not self.host.in_org_mode():
            return None
        return match_prefix(document.current_line_before_cursor, self.config.begin_line_only)

    def candidates(self, prefix: str) -> list[str]:
        """List identifiers starting with *prefix*."""
        tables = self.tables
        return candidates(
            prefix,
            languages=lambda: tables.load_languages,
            templates=lambda: tables.structure_templates,
            lang_exts=lambda: tables.tangle_lang_exts,
        )

    def is_template(self, name: str) -> bool:
        return self.tables.is_template(name)

    def post_completion(self, selection: str, typed_prefix: Optional[str] = None) -> BlockSkeleton:
        """Expand *selection* in the host's buffer.

        Args:
            selection: Accepted candidate.
            typed_prefix: What was typed after ``<``. Read back from the
                buffer when omitted.

        Returns:
            The inserted skeleton.
        """
        buffer = self.host.current_buffer()
        if typed_prefix is None:
            match = match_prefix(buffer.document.current_line_before_cursor, begin_line_only=False)
            if match is None:
                raise OrgBlocksError("No completion trigger before the cursor")
            typed_prefix = match.prefix

        skeleton = expand(
            buffer,
            selection,
            typed_prefix,
            templates=self.tables.structure_templates.values(),
            header_lookup=self.tables.header_args,
            explicit_lang_defaults=self.config.explicit_lang_defaults,
            indentation=self.config.content_indentation,
        )
        get_logger().log_expansion(selection, typed_prefix, skeleton.begin, skeleton.end)

        enter_edit_context(self.config.edit_style, self.host.edit_special, self.host.ask)
        return skeleton

    def dispatch(self, command: Any, *args: Any) -> Any:
        """Run *command* (a Command or its tag) with *args*.

        Unknown commands return None so hosts can probe for support.
        """
        try:
            command = Command(command)
        except ValueError:
            return None

        if command is Command.INTERACTIVE_BEGIN:
            return self.interactive_begin()
        if command is Command.PREFIX:
            document = args[0] if args else self.host.current_buffer().document
            return self.prefix(document)
        if command is Command.CANDIDATES:
            return self.candidates(*args)
        if command is Command.POST_COMPLETION:
            return self.post_completion(*args)
        return None

    __call__ = dispatch


class OrgBlockCompleter(Completer):
    """prompt_toolkit completer backed by an OrgBlockBackend."""

    def __init__(self, backend: OrgBlockBackend):
        self.backend = backend

    def get_completions(self, document, complete_event) -> Iterable[Completion]:
        """Get completions for the current input.

        Only offered right after ``<``; duplicates from different tables
        are yielded as-is.
        """
        match = self.backend.prefix(document)
        if match is None:
            return

        for name in self.backend.candidates(match.prefix):
            kind = "template" if self.backend.is_template(name) else "language"
            yield Completion(
                name,
                start_position=-len(match.prefix),
                display=name,
                display_meta=kind,
            )
