import logging
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

from insta_short.state import WorkflowState

# ========== UI Theme ==========
custom_theme = Theme({
    "ok":   "bold green",
    "warn": "bold yellow",
    "err":  "bold red",
    "info": "bold cyan",
    "link": "bold #2dd4bf",
})
console = Console(theme=custom_theme)


def setup_logging(debug: bool = False):
    """Route log records through the shared console."""
    handler = RichHandler(console=console, show_path=debug, rich_tracebacks=True, markup=False)
    logger = logging.getLogger("insta_short")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False


def info_panel(title: str, msg: str, style: str = "cyan"):
    console.print(Panel.fit(Text(msg, no_wrap=False), title=title, border_style=style))


def warn_panel(title: str, msg: str):
    info_panel(title, msg, style="yellow")


def error_panel(title: str, msg: str):
    info_panel(title, msg, style="red")


def result_panel(short_url: str, copied: bool = False):
    body = Text(short_url, style="link")
    if copied:
        body.append("\nCopied to clipboard!", style="ok")
    console.print(Panel.fit(body, title="Short link", border_style="green"))


def show_state(state: WorkflowState):
    if state.error:
        error_panel("Could not shorten", state.error)
    elif state.short_url:
        result_panel(state.short_url, copied=state.copied)
