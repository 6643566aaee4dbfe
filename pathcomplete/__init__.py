from .config import (
    CompletionOptions,
    ConfigManager,
)
from .errors import (
    PathCompleteError,
    ConfigError,
    MissingCollaboratorError,
)
from .path import complete_path, split_word, join_path, Lister, ContainerPredicate, Filter
from .sources import (
    FileSystemSource,
    MappingSource,
    ModuleSource,
    complete_file,
    complete_key,
    complete_module,
)

__version__ = "0.1.0"

__all__ = [
    "CompletionOptions",
    "ConfigManager",
    "PathCompleteError",
    "ConfigError",
    "MissingCollaboratorError",
    "complete_path",
    "split_word",
    "join_path",
    "Lister",
    "ContainerPredicate",
    "Filter",
    "FileSystemSource",
    "MappingSource",
    "ModuleSource",
    "complete_file",
    "complete_key",
    "complete_module",
]
