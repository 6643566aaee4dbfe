from abc import ABC, abstractmethod
from textual.app import ComposeResult
from textual.containers import Container
from textual.widgets import Input, Static, ListView, ListItem, Label
from textual.message import Message
from typing import List, Optional


class AutocompleteProvider(ABC):
    """Abstract base class for autocomplete providers."""

    @abstractmethod
    def get_mention_prefix(self) -> List[str]:
        """Return the list of prefixes that start a completable token."""
        pass

    @abstractmethod
    def get_suggestions(self, query: str) -> List[str]:
        """Return a list of suggestions for the given query, prefix included."""
        pass


def find_token(text: str, cursor_pos: int, prefixes: List[str]) -> Optional[tuple]:
    """Locate the prefixed word around the cursor.

    A token starts at the beginning of a whitespace separated word. Returns
    (start, end) of the token, prefix included, or None when the word under
    the cursor does not start with one of ``prefixes``.
    """
    start = cursor_pos
    while start > 0 and not text[start - 1].isspace():
        start -= 1
    if start >= len(text) or text[start] not in prefixes:
        return None

    end = start
    while end < len(text) and not text[end].isspace():
        end += 1
    return start, end


class AutocompleteInput(Input):
    """Input widget that reports prefixed tokens under the cursor."""

    class AutocompleteSelected(Message):
        """Message sent to show or hide the suggestion popup."""
        def __init__(self, suggestion: str) -> None:
            self.suggestion = suggestion
            super().__init__()

    def __init__(self, provider: AutocompleteProvider, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.provider = provider
        self.autocomplete_active = False
        self.current_mention_start = -1
        self.current_query = ""

    def on_input_changed(self, event: Input.Changed) -> None:
        span = find_token(self.value, self.cursor_position, self.provider.get_mention_prefix())
        if span is None:
            self._hide_autocomplete()
            return
        start, end = span
        self.current_mention_start = start
        self.current_query = self.value[start:end]
        self.autocomplete_active = True
        self.post_message(self.AutocompleteSelected(f"SHOW:{self.current_query}"))

    def _hide_autocomplete(self):
        if self.autocomplete_active:
            self.autocomplete_active = False
            self.post_message(self.AutocompleteSelected("HIDE"))

    def _replace_token(self, suggestion: str) -> None:
        text = self.value
        start = self.current_mention_start
        end = start + len(self.current_query)
        self.value = text[:start] + suggestion + text[end:]
        self.cursor_position = start + len(suggestion)

    def insert_suggestion(self, suggestion: str) -> None:
        """Insert the selected suggestion into the input."""
        if not self.autocomplete_active:
            return
        self._replace_token(suggestion)
        self._hide_autocomplete()

    def preview_suggestion(self, suggestion: str) -> None:
        """Preview the suggestion without closing the popup.

        Updates the tracked query so the next preview replaces this one.
        """
        if not self.autocomplete_active:
            return
        self._replace_token(suggestion)
        self.current_query = suggestion


class SuggestionItem(ListItem):
    def __init__(self, value: str) -> None:
        super().__init__(Label(value))
        self.value = value


class AutocompletePopup(Container):
    """Popup container for autocomplete suggestions."""

    def __init__(self, provider: AutocompleteProvider, limit: int = 50):
        super().__init__()
        self.provider = provider
        self.limit = limit
        self.suggestions_list = ListView()
        self.visible = False

    def compose(self) -> ComposeResult:
        with Container(id="autocomplete-container"):
            yield Static("Suggestions:", classes="popup-title")
            yield self.suggestions_list

    def show_suggestions(self, query: str) -> List[str]:
        """Show autocomplete suggestions for the given query."""
        suggestions = self.provider.get_suggestions(query)[: self.limit]

        self.suggestions_list.clear()
        for suggestion in suggestions:
            self.suggestions_list.append(SuggestionItem(suggestion))

        self.visible = True
        self.add_class("visible")
        return suggestions

    def hide(self) -> None:
        self.visible = False
        self.remove_class("visible")
        self.suggestions_list.clear()

    def get_selected_suggestion(self) -> Optional[str]:
        item = self.suggestions_list.highlighted_child
        if isinstance(item, SuggestionItem):
            return item.value
        return None
