from .ui import CompleterUI
from .pathcompleter import PathSuggester, CommandSuggester, CompositeAutocompleteProvider

__all__ = [
    "CompleterUI",
    "PathSuggester",
    "CommandSuggester",
    "CompositeAutocompleteProvider",
]
