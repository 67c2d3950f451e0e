#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import asyncio
import logging
import signal
import click
import pyperclip
from typing import Optional

from prompt_toolkit.application.current import get_app, get_app_or_none
from prompt_toolkit.clipboard import Clipboard
from prompt_toolkit.clipboard.pyperclip import PyperclipClipboard
from prompt_toolkit.patch_stdout import patch_stdout

from rich.panel import Panel
from rich.text import Text

from insta_short.client import HttpClient
from insta_short.config_store import ConfigStore
from insta_short.display import console, error_panel, info_panel, result_panel, setup_logging, show_state, warn_panel
from insta_short.errors import ConfigError
from insta_short.key_manager import KeyBindingManager, SessionFactory
from insta_short.state import WorkflowState
from insta_short.utils import DEFAULT_API_URL, DEFAULT_TIMEOUT, Config
from insta_short.workflow import ShortenWorkflow

logger = logging.getLogger(__name__)


# ========== Application Orchestrator ==========
class App:
    def __init__(self, cfg: Config, clipboard: Optional[Clipboard] = None, transport=None):
        self.cfg = cfg
        self.http = HttpClient(cfg, transport=transport)
        self.clipboard = clipboard or PyperclipClipboard()
        self.workflow = ShortenWorkflow(self.http, self.clipboard, copy_window=cfg.copy_window)
        self.workflow.subscribe(self._on_state)

        def accept():
            app = get_app()
            buf = app.current_buffer
            app.exit(result=buf.text)

        def clear():
            self.workflow.clear()
            get_app().current_buffer.reset()

        self.kbm = KeyBindingManager(accept_callback=accept, clear_callback=clear, copy_callback=self._copy)
        # built on first run, it needs a real terminal
        self.session = None
        self.counter = 1

    async def run(self):
        if self.session is None:
            self.session = SessionFactory.build_session(
                self.kbm.bindings, bottom_toolbar=self._toolbar, clipboard=self.clipboard
            )
        self._print_banner()

        try:
            while True:
                try:
                    with patch_stdout():
                        text = await self.session.prompt_async(
                            SessionFactory.make_prompt_fragments(self.counter),
                            default=self.workflow.state.long_url,
                        )
                    await self._handle_submit(text)
                    self.counter += 1
                except KeyboardInterrupt:
                    console.print("[warn] Input cancelled. (Ctrl+C)[/warn]")
                    self.workflow.set_input("")
                    continue
                except EOFError:
                    console.print("\n[info]Exited. (Ctrl+D)[/info]")
                    break
                except Exception as e:
                    logger.debug("Unexpected error in prompt loop", exc_info=True)
                    console.print(Panel.fit(Text(repr(e), no_wrap=False), title="Unexpected error !", border_style="red"))
                    self.counter += 1
                    continue
        finally:
            await self.workflow.close()

    async def run_once(self, url: str, copy: bool = False) -> WorkflowState:
        try:
            state = await self.workflow.submit(url)
            if state.short_url:
                if copy:
                    self._copy()
                result_panel(state.short_url, copied=self.workflow.state.copied)
            else:
                show_state(state)
            return state
        finally:
            await self.workflow.close()

    # ========== Internal helpers ==========
    async def _handle_submit(self, text: str):
        with console.status("[info]Shortening...[/info]", spinner="dots"):
            state = await self.workflow.submit(text)
        show_state(state)

    def _copy(self):
        try:
            self.workflow.copy_result()
        except pyperclip.PyperclipException as e:
            warn_panel("Clipboard unavailable", str(e))

    def _on_state(self, state: WorkflowState):
        app = get_app_or_none()
        if app is not None and app.is_running:
            app.invalidate()

    def _toolbar(self):
        state = self.workflow.state
        return SessionFactory.make_toolbar_fragments(
            state.short_url,
            state.copied,
            copy_hint="/".join(self.kbm.copy_labels),
            clear_hint="/".join(self.kbm.clear_labels),
        )

    def _print_banner(self):
        submit_hint = "/".join(self.kbm.submit_labels) or "Enter"
        console.rule("[info]Insta Short[/info]")
        console.print(Panel.fit(
                Text(
                        "Descriptions:\n"
                        f" - Shorten: {submit_hint}\n"
                        f" - Copy last link: {'/'.join(self.kbm.copy_labels)}\n"
                        f" - Clear: {'/'.join(self.kbm.clear_labels)}\n"
                        " - Cancel input: Ctrl+C\n"
                        " - Exit: Ctrl+D\n\n"
                        "Paste a long URL and get a short link back.",
                        no_wrap=False
                ),
                title="Help", border_style="cyan"
        ))
        console.print(f"[info]Shortening service: [/info]{self.cfg.api_url}")
        if not self.cfg.verify_tls:
            console.print("[warn] Disable tls verification ! (--insecure)[/warn]")


def _load_config(ctx) -> Config:
    args = ctx.obj["args"]
    try:
        cfg = Config.init_from_args(args, store=ConfigStore())
    except ConfigError as e:
        raise click.UsageError(str(e), ctx=ctx)
    return cfg


def _build_app(ctx) -> App:
    return App(_load_config(ctx), clipboard=ctx.obj.get("clipboard"), transport=ctx.obj.get("transport"))


# ========== CLI with Click ==========

@click.group()
@click.option("--api-url", help=f"Shortening service endpoint. [default: {DEFAULT_API_URL}]")
@click.option("--api-key", envvar="INSTA_SHORT_API_KEY", show_envvar=True,
              help="Shortening service API key, once saved with `config`, anytime use in ~/.insta-short.toml")
@click.option("--timeout", type=float, help=f"Max seconds to wait for the service. [default: {DEFAULT_TIMEOUT}]")
@click.option("--insecure", is_flag=True, help="Whether disable tls.")
@click.option("--debug", "-d", is_flag=True, help="Start with debug mode.")
@click.pass_context
def cli(ctx, api_url, api_key, timeout, insecure, debug):
    """
    insta-short: Paste a long URL, get a short link back.
    """
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    setup_logging(debug)
    # Simulate argparse.Namespace for Config.init_from_args
    class Args:
        pass
    args = Args()
    args.api_url = api_url
    args.api_key = api_key
    args.timeout = timeout
    args.insecure = insecure
    args.debug = debug
    ctx.ensure_object(dict)
    ctx.obj["args"] = args


@cli.command("run")
@click.pass_context
def run_cmd(ctx):
    """Start the interactive shortener."""
    app = _build_app(ctx)
    asyncio.run(app.run())


@cli.command("shorten")
@click.argument("url")
@click.option("--copy", "-c", is_flag=True, help="Copy the short link to the clipboard.")
@click.pass_context
def shorten_cmd(ctx, url, copy):
    """Shorten URL once and print the short link."""
    app = _build_app(ctx)
    state = asyncio.run(app.run_once(url, copy=copy))
    if not state.short_url:
        ctx.exit(1)


@cli.command("config")
@click.option("--api-key", "new_api_key", help="API key to save.")
@click.option("--api-url", "new_api_url", help="Service endpoint to save.")
@click.option("--timeout", "new_timeout", type=float, help="Request timeout to save.")
@click.option("--show", is_flag=True, help="Print the saved settings.")
def config_cmd(new_api_key, new_api_url, new_timeout, show):
    """Save settings to the config file."""
    store = ConfigStore()
    try:
        if new_api_key or new_api_url or new_timeout is not None:
            if new_timeout is not None and new_timeout <= 0:
                raise click.BadParameter("must be positive", param_hint="--timeout")
            store.save(api_key=new_api_key, api_url=new_api_url, timeout=new_timeout)
            console.print(f"[ok]Saved settings to {store.path}[/ok]")
        elif not show:
            error_panel("Nothing to save", "Pass --api-key, --api-url or --timeout, or --show.")
            raise click.exceptions.Exit(1)

        if show:
            data = store.load()
            if "api_key" in data:
                key = data["api_key"]
                data["api_key"] = key[:4] + "*" * max(len(key) - 4, 0)
            lines = "\n".join(f"{k} = {v}" for k, v in data.items()) or "(empty)"
            info_panel(str(store.path), lines)
    except ConfigError as e:
        raise click.ClickException(str(e))


def main():
    cli(prog_name="insta-short")

if __name__ == "__main__":
    main()
