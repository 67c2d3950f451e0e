from typing import Callable, List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.clipboard import Clipboard
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.styles import Style

Callback = Callable[[], None]

PROMPT_STYLE = Style.from_dict({
    "prompt.index": "ansicyan bold",
    "prompt":       "ansibrightblack",
    "bottom-toolbar": "noreverse bg:#1e293b #94a3b8",
    "toolbar.link":   "bg:#1e293b #2dd4bf bold",
    "toolbar.copied": "bg:#0d9488 #ffffff bold",
})


# ========== Key bindings ==========
class KeyBindingManager:
    """Submit, copy and clear keys for the URL prompt."""

    SUBMIT_KEYS = (("enter", "Enter"), ("c-j", "Ctrl+J"))
    COPY_KEYS = (("c-y", "Ctrl+Y"),)
    CLEAR_KEYS = (("c-k", "Ctrl+K"),)

    def __init__(self, accept_callback: Callback, clear_callback: Callback, copy_callback: Callback):
        self.bindings = KeyBindings()
        self.submit_labels: List[str] = []
        self.copy_labels: List[str] = []
        self.clear_labels: List[str] = []

        for key, label in self.SUBMIT_KEYS:
            self._bind(key, accept_callback)
            self.submit_labels.append(label)
        for key, label in self.COPY_KEYS:
            self._bind(key, copy_callback)
            self.copy_labels.append(label)
        for key, label in self.CLEAR_KEYS:
            self._bind(key, clear_callback)
            self.clear_labels.append(label)

    def _bind(self, key: str, callback: Callback):
        @self.bindings.add(key)
        def _(event):
            callback()


# ========== Prompt session ==========
class SessionFactory:
    @staticmethod
    def build_session(
        bindings: KeyBindings,
        bottom_toolbar=None,
        clipboard: Optional[Clipboard] = None,
    ) -> PromptSession:
        return PromptSession(
            key_bindings=bindings,
            multiline=False,
            bottom_toolbar=bottom_toolbar,
            clipboard=clipboard,
            style=PROMPT_STYLE,
        )

    @staticmethod
    def make_prompt_fragments(counter: int) -> FormattedText:
        return FormattedText([
            ("class:prompt.index", f"[{counter}] "),
            ("class:prompt", "URL > "),
        ])

    @staticmethod
    def make_toolbar_fragments(short_url: str, copied: bool, copy_hint: str, clear_hint: str) -> FormattedText:
        if not short_url:
            return FormattedText([("", " Paste a long URL to shorten it ")])
        if copied:
            return FormattedText([
                ("class:toolbar.link", f" {short_url} "),
                ("class:toolbar.copied", " Copied! "),
            ])
        return FormattedText([
            ("class:toolbar.link", f" {short_url} "),
            ("", f" {copy_hint}: copy  {clear_hint}: clear "),
        ])
