"""Expansion of an accepted candidate into a begin/end block skeleton."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

from prompt_toolkit.buffer import Buffer

from .errors import NoSpecialEnvironmentError
from .header_args import HeaderLookup, header_defaults
from .logging import get_logger

EDIT_PROMPT = "Edit block in a dedicated buffer?"


class EditStyle(Enum):
    """What to do once the skeleton is in place."""

    INLINE = "inline"  # Leave the cursor in the block
    PROMPT = "prompt"  # Ask before opening the block editor
    AUTO = "auto"      # Always open the block editor


@dataclass
class BlockSkeleton:
    """Opening and closing marker lines of a block."""
    begin: str
    end: str


def make_skeleton(selection: str, templates: Iterable[str], header_suffix: str = "") -> BlockSkeleton:
    """Build the marker lines for *selection*.

    Template names expand to their own block type; anything else is a
    language and becomes a src block. Multi-word templates close on their
    first word only (``export html`` -> ``#+end_export``).
    """
    if selection in templates:
        return BlockSkeleton(
            begin=f"#+begin_{selection}",
            end=f"#+end_{selection.split()[0]}",
        )
    return BlockSkeleton(
        begin=f"#+begin_src {selection}{header_suffix}",
        end="#+end_src",
    )


def wrap_point(buffer: Buffer, skeleton: BlockSkeleton, indentation: int = 2) -> None:
    """Insert *skeleton* around the cursor, leaving it on the blank line."""
    buffer.insert_text(skeleton.begin + "\n" + " " * indentation)
    point = buffer.cursor_position
    buffer.insert_text("\n" + skeleton.end)
    buffer.cursor_position = point


def expand(
    buffer: Buffer,
    selection: str,
    typed_prefix: str,
    *,
    templates: Iterable[str],
    header_lookup: HeaderLookup,
    explicit_lang_defaults: bool = True,
    indentation: int = 2,
) -> BlockSkeleton:
    """Replace the typed ``<prefix`` with the block skeleton for *selection*.

    Args:
        buffer: Buffer with the cursor right after the typed prefix.
        selection: Accepted candidate.
        typed_prefix: Text the user typed after the trigger. Its length,
            not the selection's, decides how much is deleted.
        templates: Known template names.
        header_lookup: Per-language default header args lookup.
        explicit_lang_defaults: Append header defaults to src blocks.
        indentation: Spaces on the blank line inside the block.

    Returns:
        The skeleton that was inserted.
    """
    templates = list(templates)
    buffer.delete_before_cursor(count=min(1 + len(typed_prefix), buffer.cursor_position))

    suffix = ""
    if explicit_lang_defaults and selection not in templates:
        suffix = header_defaults(selection, header_lookup)

    skeleton = make_skeleton(selection, templates, suffix)
    wrap_point(buffer, skeleton, indentation)
    return skeleton


def enter_edit_context(
    style: EditStyle,
    edit_special: Callable[[], None],
    ask: Callable[[str], bool],
) -> bool:
    """Open the dedicated block editor according to *style*.

    A block type without a special environment is not an error here: the
    skeleton simply stays inline. Any other failure propagates.

    Returns:
        True if the block editor actually ran.
    """
    if style is EditStyle.INLINE:
        return False
    if style is EditStyle.PROMPT and not ask(EDIT_PROMPT):
        return False

    try:
        edit_special()
    except NoSpecialEnvironmentError as e:
        get_logger().log_edit_context(style.value, False, str(e))
        return False
    except Exception as e:
        get_logger().log_error(f"{style.value} edit failed: {e}")
        raise

    get_logger().log_edit_context(style.value, True)
    return True
