from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from pathcomplete.config import CompletionOptions
from pathcomplete.path import complete_path
from pathcomplete.sources import FileSystemSource
from pathcomplete.ui.autocomplete import AutocompleteProvider

log = logging.getLogger(__name__)


class PathSuggester(AutocompleteProvider):
    """Suggest completions for ``<prefix><word>`` tokens through complete_path.

    ``source`` is any object with a ``list(path, segment, is_intermediate)``
    method and, optionally, ``is_dir(path)``.
    """

    def __init__(self, source, prefix: str = "@", options: Optional[CompletionOptions] = None,
                 starting_path: str = ""):
        self.source = source
        self.prefix = prefix
        self.starting_path = starting_path
        self.options = options if options is not None else CompletionOptions()
        if getattr(source, "path_sep", None) and source.path_sep != self.options.path_sep:
            self.options = self.options.merged(path_sep=source.path_sep)

    def get_mention_prefix(self) -> List[str]:
        return [self.prefix]

    def complete(self, word: str) -> List[str]:
        if isinstance(self.source, FileSystemSource) and not self.starting_path:
            return self.source.complete_typed(word, self.options)
        return complete_path(
            word=word,
            starting_path=self.starting_path,
            list_func=self.source.list,
            is_dir_func=getattr(self.source, "is_dir", None),
            options=self.options,
        )

    def get_suggestions(self, query: str) -> List[str]:
        if not query.startswith(self.prefix):
            return []
        word = query[len(self.prefix):]
        return [self.prefix + item for item in self.complete(word)]


class CommandSuggester(AutocompleteProvider):
    """Prefix filter over a fixed set of commands, e.g. ``/help``."""

    def __init__(self, prefix: str, commands: Iterable[str]):
        self.commands = sorted(commands)
        self.prefix = prefix

    def get_suggestions(self, query: str) -> List[str]:
        if not query.startswith(self.prefix):
            return []
        word = query[len(self.prefix):].lower()
        return [self.prefix + c for c in self.commands if c.lower().startswith(word)]

    def get_mention_prefix(self) -> List[str]:
        return [self.prefix]


class CompositeAutocompleteProvider(AutocompleteProvider):
    def __init__(self, providers: List[AutocompleteProvider]):
        self.providers = providers
        prefixes = []
        for provider in self.providers:
            prefixes.extend(provider.get_mention_prefix())
        self.prefixes = prefixes

    def get_suggestions(self, query: str) -> List[str]:
        suggestions = []
        # select the provider based on the prefix associated with the provider
        for provider in self.providers:
            if any(query.startswith(p) for p in provider.get_mention_prefix()):
                suggestions.extend(provider.get_suggestions(query))
        return suggestions

    def get_mention_prefix(self) -> List[str]:
        return self.prefixes
