from __future__ import annotations

import logging
import os
import pkgutil
import sys
from typing import Any, Iterable, List, Mapping, Optional

from pathcomplete.path import OptionsLike, complete_path, resolve_options

log = logging.getLogger(__name__)


class FileSystemSource:
    """Lists directory entries below ``root``.

    Paths handed to :meth:`list` and :meth:`is_dir` are relative to ``root``
    unless absolute. Unreadable directories list as empty.
    """

    path_sep = "/"

    def __init__(self, root: Optional[str] = None, include_hidden: bool = True):
        if root is None:
            root = os.getcwd()
        self.root = os.path.abspath(os.path.expanduser(os.path.expandvars(root)))
        self.include_hidden = include_hidden

    def _resolve(self, path: str) -> str:
        if not path:
            return self.root
        if os.path.isabs(path):
            return path
        return os.path.join(self.root, path)

    def list(self, path: str, segment: str, is_intermediate: bool) -> List[str]:
        full = self._resolve(path)
        try:
            with os.scandir(full) as it:
                entries = list(it)
        except OSError as e:
            log.debug("Cannot list %s: %s", full, e)
            return []

        names = []
        for entry in entries:
            if not self.include_hidden and entry.name.startswith(".") and not segment.startswith("."):
                continue
            if is_intermediate and not entry.is_dir():
                continue
            names.append(entry.name)
        names.sort()
        return names

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(self._resolve(path))

    def complete(self, word: str, starting_path: str = "", options: OptionsLike = None, **overrides: Any) -> List[str]:
        return complete_path(
            word=word,
            starting_path=starting_path,
            list_func=self.list,
            is_dir_func=self.is_dir,
            options=options,
            **overrides,
        )

    def complete_typed(self, word: str, options: OptionsLike = None, **overrides: Any) -> List[str]:
        """Complete ``word`` as the user typed it.

        ``~/...`` is completed from the home directory and ``/...`` from the
        filesystem root; results keep that leading form.
        """
        sep = resolve_options(options, **overrides).path_sep
        home = "~" + sep
        if word.startswith(home):
            overrides["result_prefix"] = home
            return self.complete(word[len(home):], os.path.expanduser("~"), options, **overrides)
        if word.startswith(sep):
            overrides["result_prefix"] = sep
            return self.complete(word[len(sep):], sep, options, **overrides)
        return self.complete(word, "", options, **overrides)


class MappingSource:
    """Lists keys of a nested mapping, e.g. a configuration tree.

    Nested mappings are returned with a trailing separator so they never need
    a container check. Only containers are listed at intermediate levels.
    """

    def __init__(self, tree: Mapping[str, Any], path_sep: str = "/"):
        self.tree = tree
        self.path_sep = path_sep

    def node(self, path: str) -> Optional[Any]:
        """Return the value at ``path``, or None if it does not resolve."""
        node: Any = self.tree
        for key in path.split(self.path_sep):
            if key == "":
                continue
            if not isinstance(node, Mapping) or key not in node:
                return None
            node = node[key]
        return node

    def list(self, path: str, segment: str, is_intermediate: bool) -> List[str]:
        node = self.node(path)
        if not isinstance(node, Mapping):
            return []
        names = []
        for key, value in node.items():
            if isinstance(value, Mapping):
                names.append(f"{key}{self.path_sep}")
            elif not is_intermediate:
                names.append(str(key))
        return names

    def is_dir(self, path: str) -> bool:
        return isinstance(self.node(path), Mapping)

    def complete(self, word: str, starting_path: str = "", options: OptionsLike = None, **overrides: Any) -> List[str]:
        overrides["path_sep"] = self.path_sep
        return complete_path(
            word=word,
            starting_path=starting_path,
            list_func=self.list,
            is_dir_func=self.is_dir,
            options=options,
            **overrides,
        )


class ModuleSource:
    """Lists Python modules and packages found on ``search_path``.

    Directories are scanned with :func:`pkgutil.iter_modules`, nothing is
    imported. Packages are returned as ``name.``. The first directory that
    provides a name wins, as with the import system.
    """

    path_sep = "."

    def __init__(self, search_path: Optional[Iterable[str]] = None):
        self.search_path = list(sys.path if search_path is None else search_path)

    def _package_dirs(self, path: str) -> List[str]:
        parts = [p for p in path.split(self.path_sep) if p]
        dirs = []
        for base in self.search_path:
            base = base or os.getcwd()
            candidate = os.path.join(base, *parts)
            if os.path.isdir(candidate):
                dirs.append(candidate)
        return dirs

    def list(self, path: str, segment: str, is_intermediate: bool) -> List[str]:
        seen = set()
        names = []
        for info in pkgutil.iter_modules(self._package_dirs(path)):
            if info.name in seen:
                continue
            seen.add(info.name)
            if info.ispkg:
                names.append(info.name + self.path_sep)
            elif not is_intermediate:
                names.append(info.name)
        return names

    def complete(self, word: str, options: OptionsLike = None, **overrides: Any) -> List[str]:
        overrides["path_sep"] = self.path_sep
        return complete_path(word=word, list_func=self.list, options=options, **overrides)


def complete_file(word: str, root: Optional[str] = None, options: OptionsLike = None, **overrides: Any) -> List[str]:
    """Complete a filesystem path typed relative to ``root``.

    Absolute words and words starting with ``~/`` are completed from ``/``
    and the home directory, keeping the form the user typed.
    """
    return FileSystemSource(root).complete_typed(word, options, **overrides)


def complete_key(word: str, tree: Mapping[str, Any], path_sep: str = "/", options: OptionsLike = None, **overrides: Any) -> List[str]:
    """Complete a key path in a nested mapping."""
    return MappingSource(tree, path_sep).complete(word, options=options, **overrides)


def complete_module(word: str, search_path: Optional[Iterable[str]] = None, options: OptionsLike = None, **overrides: Any) -> List[str]:
    """Complete a dotted Python module name."""
    return ModuleSource(search_path).complete(word, options=options, **overrides)
