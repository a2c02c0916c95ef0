"""Tests for the completion backend and its prompt_toolkit adapter."""

import pytest
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.completion import CompleteEvent
from prompt_toolkit.document import Document

from orgblocks.backend import Command, OrgBlockBackend, OrgBlockCompleter
from orgblocks.config import Config
from orgblocks.errors import NoSpecialEnvironmentError, OrgBlocksError
from orgblocks.expander import EditStyle


class FakeHost:
    """In-memory host recording what the backend asks of it."""

    def __init__(self, text="", org=True, edit_error=None, answer=True):
        self.buffer = Buffer(document=Document(text, len(text)))
        self.org = org
        self.edit_error = edit_error
        self.answer = answer
        self.begun = []
        self.edits = 0
        self.questions = []

    def in_org_mode(self):
        return self.org

    def current_buffer(self):
        return self.buffer

    def begin_backend(self, backend):
        self.begun.append(backend)

    def edit_special(self):
        self.edits += 1
        if self.edit_error:
            raise self.edit_error

    def ask(self, question):
        self.questions.append(question)
        return self.answer


def make_backend(host, **settings):
    config = Config(**settings)
    return OrgBlockBackend(config, host)


def test_interactive_begin_registers_backend():
    host = FakeHost()
    backend = make_backend(host)
    backend.dispatch(Command.INTERACTIVE_BEGIN)
    assert host.begun == [backend]


def test_prefix_only_in_org_mode():
    assert make_backend(FakeHost(org=False)).prefix(Document("<py")) is None
    assert make_backend(FakeHost()).prefix(Document("<py")).prefix == "py"


def test_prefix_uses_current_line():
    backend = make_backend(FakeHost())
    assert backend.prefix(Document("* Heading\n<qu")).prefix == "qu"
    assert backend.prefix(Document("* Heading <qu")) is None


def test_prefix_anywhere_setting():
    backend = make_backend(FakeHost(), begin_line_only=False)
    assert backend.prefix(Document("text <py")).prefix == "py"


def test_settings_are_read_at_use():
    backend = make_backend(FakeHost())
    assert backend.prefix(Document("x <py")) is None
    backend.config.begin_line_only = False
    assert backend.prefix(Document("x <py")).prefix == "py"


def test_candidates_follow_table_changes():
    backend = make_backend(FakeHost())
    assert "haskell" not in backend.candidates("h")
    backend.tables.set_language_loaded("haskell")
    assert "haskell" in backend.candidates("h")


def test_dispatch_by_tag():
    host = FakeHost("<qu")
    backend = make_backend(host, edit_style=EditStyle.INLINE)

    assert backend("prefix-query").prefix == "qu"
    assert backend("candidates-query", "qu") == ["quote"]
    backend("post-completion", "quote")
    assert host.buffer.text == "#+begin_quote\n  \n#+end_quote"


def test_unknown_command_returns_none():
    assert make_backend(FakeHost())("annotation", "quote") is None


def test_post_completion_auto_absorbs_missing_environment():
    host = FakeHost("<qu", edit_error=NoSpecialEnvironmentError())
    backend = make_backend(host, edit_style=EditStyle.AUTO)

    skeleton = backend.post_completion("quote")

    assert skeleton.begin == "#+begin_quote"
    assert host.edits == 1
    assert host.buffer.text == "#+begin_quote\n  \n#+end_quote"


def test_post_completion_propagates_other_errors():
    host = FakeHost("<py", edit_error=ValueError("bad block"))
    backend = make_backend(host, edit_style=EditStyle.AUTO)

    with pytest.raises(ValueError):
        backend.post_completion("python")
    assert host.buffer.text.startswith("#+begin_src python")


def test_post_completion_prompt_declined():
    host = FakeHost("<py", answer=False)
    backend = make_backend(host, edit_style=EditStyle.PROMPT)

    backend.post_completion("python")

    assert len(host.questions) == 1
    assert host.edits == 0


def test_post_completion_appends_header_defaults():
    host = FakeHost("<py")
    backend = make_backend(host, edit_style=EditStyle.INLINE)
    backend.tables.set_header_args("python", [(":exports", "both"), (":results", "output")])

    backend.post_completion("python")

    assert host.buffer.document.lines[0] == "#+begin_src python :exports both :results output"


def test_post_completion_uses_typed_prefix_not_selection():
    host = FakeHost("abc\n<py")
    backend = make_backend(host, edit_style=EditStyle.INLINE, explicit_lang_defaults=False)

    backend.post_completion("python", "py")

    assert host.buffer.text == "abc\n#+begin_src python\n  \n#+end_src"


def test_post_completion_without_trigger():
    backend = make_backend(FakeHost("no trigger"), edit_style=EditStyle.INLINE)
    with pytest.raises(OrgBlocksError):
        backend.post_completion("quote")


class TestCompleter:

    def complete(self, text, **settings):
        completer = OrgBlockCompleter(make_backend(FakeHost(), **settings))
        return list(completer.get_completions(Document(text), CompleteEvent()))

    def test_yields_candidates(self):
        completions = self.complete("<qu")
        assert [c.text for c in completions] == ["quote"]
        assert completions[0].start_position == -2
        assert completions[0].display_meta_text == "template"

    def test_language_meta(self):
        completions = self.complete("<pyt")
        assert [c.text for c in completions] == ["python"]
        assert completions[0].display_meta_text == "language"

    def test_empty_prefix_keeps_duplicates(self):
        texts = [c.text for c in self.complete("<")]
        assert texts.count("emacs-lisp") == 2
        assert all(c.start_position == 0 for c in self.complete("<"))

    def test_no_trigger(self):
        assert self.complete("qu") == []
        assert self.complete("x <qu") == []
