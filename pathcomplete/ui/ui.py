from __future__ import annotations

import logging
from typing import List

from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import Input, Footer, Header, Static, ListView
from textual.widgets import TextArea  # type: ignore
from textual.binding import Binding
from pathcomplete.ui.autocomplete import AutocompleteProvider, AutocompleteInput, AutocompletePopup

log = logging.getLogger(__name__)

HELP_LINES = [
    "Available commands:",
    "  /exit, /quit: Exit the session",
    "  /help: Show this help message",
    "  /clear: Clear the output pane",
    "Type a prefixed word (for example @src/ma) and press TAB or Enter",
    "to list its completions.",
]


class CompleterUI(App):
    """Output pane at the top, a completing input at the bottom."""

    CSS = """
    Screen {
        layout: vertical;
    }

    Header {
        dock: top;
    }
    Footer {
        dock: bottom;
    }

    #main {
        layout: vertical;
        height: 1fr;
    }

    #output {
        height: 1fr;
        border: tall $accent;
        padding: 1 1;
    }

    #query {
        height: 3;
    }

    #status {
        height: auto;
        color: $text 50%;
        padding: 0 1;
        border-top: tall $accent 10%;
        text-style: italic;
    }
    """

    BINDINGS = [
        Binding("escape", "hide_autocomplete", "Hide Autocomplete"),
        Binding("tab", "select_suggestion", "Select Suggestion", priority=True),
        Binding("up", "move_up", "Move Up", show=False),
        Binding("down", "move_down", "Move Down", show=False),
    ]

    def __init__(self, name: str, provider: AutocompleteProvider, default_prefix: str = ""):
        super().__init__()
        self.title = name
        self.provider = provider
        self.default_prefix = default_prefix
        self.popup = AutocompletePopup(self.provider)
        self._output_text: str = ""
        self.output_widget: TextArea | None = None
        prefixes = " ".join(repr(p) for p in self.provider.get_mention_prefix())
        self.status = Static(f"Ready. Type {prefixes} for suggestions.", id="status")
        self.autocomplete_input = AutocompleteInput(provider=self.provider, id="query",
                                                    placeholder="Type a word to complete and press Enter..")

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Container(id="main"):
            yield TextArea(id="output", read_only=True)
            yield self.autocomplete_input
            yield self.popup
            yield self.status
        yield Footer()

    def on_mount(self) -> None:
        self.output_widget = self.query_one("#output", TextArea)
        if self._output_text:
            self.output_widget.text = self._output_text
        self.query_one("#query", Input).focus()

    def console_clear(self) -> None:
        self._output_text = ""
        if self.output_widget is not None:
            self.output_widget.text = self._output_text

    def console_out(self, line: str) -> None:
        self._output_text += line + "\n"
        if self.output_widget is not None:
            self.output_widget.text = self._output_text

    def handle_command(self, line: str) -> bool:
        command = line.strip().lower()
        if command in ("/exit", "/quit"):
            self.exit()
            return True
        if command == "/help":
            for help_line in HELP_LINES:
                self.console_out(help_line)
            return True
        if command == "/clear":
            self.console_clear()
            return True
        return False

    def completions_for(self, line: str) -> List[str]:
        """Complete the last whitespace separated token of ``line``.

        Tokens without a known prefix go to ``default_prefix``. So does a
        prefixed token nothing else completes, so ``/usr/b`` is still tried
        as an absolute path after no command matched.
        """
        token = line.split()[-1] if line.split() else ""
        if not self.default_prefix:
            return self.provider.get_suggestions(token)
        if any(token.startswith(p) for p in self.provider.get_mention_prefix()):
            results = self.provider.get_suggestions(token)
            if results or token.startswith(self.default_prefix):
                return results
        return self.provider.get_suggestions(self.default_prefix + token)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        query = event.value.strip()
        if not query:
            return
        if self.handle_command(query):
            event.input.value = ""
            return

        self.console_out("> " + query)
        try:
            results = self.completions_for(query)
        except Exception as e:
            log.exception("Completion failed for %r", query)
            self.console_out(f"Error: {e}")
            return
        if results:
            for result in results:
                self.console_out("  " + result)
        else:
            self.console_out("No completions.")
        self.status.update(f"{len(results)} completion(s) for '{query}'")

    def on_autocomplete_input_autocomplete_selected(self, event: AutocompleteInput.AutocompleteSelected) -> None:
        if event.suggestion.startswith("SHOW:"):
            query = event.suggestion[5:]
            suggestions = self.popup.show_suggestions(query)
            self.status.update(f"{len(suggestions)} suggestion(s) for '{query}'")
        elif event.suggestion == "HIDE":
            self.popup.hide()
            self.status.update("Autocomplete hidden")

    def action_hide_autocomplete(self) -> None:
        self.popup.hide()
        self.autocomplete_input._hide_autocomplete()

    def action_select_suggestion(self) -> None:
        if self.popup.visible:
            suggestion = self.popup.get_selected_suggestion()
            if suggestion:
                self.autocomplete_input.insert_suggestion(suggestion)
                self.status.update(f"Selected: {suggestion}")

    def action_move_up(self) -> None:
        if self.popup.visible:
            self.popup.suggestions_list.action_cursor_up()
            suggestion = self.popup.get_selected_suggestion()
            if suggestion:
                self.autocomplete_input.preview_suggestion(suggestion)

    def action_move_down(self) -> None:
        if self.popup.visible:
            self.popup.suggestions_list.action_cursor_down()
            suggestion = self.popup.get_selected_suggestion()
            if suggestion:
                self.autocomplete_input.preview_suggestion(suggestion)

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        if event.list_view == self.popup.suggestions_list:
            suggestion = self.popup.get_selected_suggestion()
            if suggestion:
                self.autocomplete_input.insert_suggestion(suggestion)
                self.status.update(f"Selected: {suggestion}")
