"""Detection of the ``<prefix`` completion trigger."""

import re
from typing import NamedTuple, Optional

TRIGGER = "<"

# Greedy ".*" so the rightmost "<" reaching the cursor wins.
_ANYWHERE = re.compile(r".*" + re.escape(TRIGGER) + r"(\S*)\Z", re.DOTALL)
_LINE_START = re.compile(re.escape(TRIGGER) + r"(\S*)\Z")


class PrefixMatch(NamedTuple):
    """Prefix captured after the trigger.

    ``force`` asks the host to complete even when the prefix is empty.
    """
    prefix: str
    force: bool = True


def match_prefix(text_before_cursor: str, begin_line_only: bool = True) -> Optional[PrefixMatch]:
    """Find the trigger and partial keyword just before the cursor.

    Args:
        text_before_cursor: Current line up to the cursor.
        begin_line_only: Require the trigger to be the first character
            of the line.

    Returns:
        PrefixMatch with the captured text, or None if not applicable.
    """
    if begin_line_only:
        m = _LINE_START.match(text_before_cursor)
    else:
        m = _ANYWHERE.match(text_before_cursor)
    if m is None:
        return None
    return PrefixMatch(m.group(1))
