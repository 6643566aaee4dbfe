"""Complete path-like words one segment at a time.

The engine splits the word into segments and walks the hierarchy level by
level through a caller-supplied lister. Walking level by level (rather than
globbing the whole word) is what makes case-insensitive matching work on a
case-sensitive tree: ``foo/s`` may have to be searched in ``foo/``, ``Foo/``
and ``FOO/`` at the same time.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple, Union

from typing_extensions import Protocol

from pathcomplete.config import CompletionOptions, build_options
from pathcomplete.errors import ConfigError, MissingCollaboratorError

log = logging.getLogger(__name__)


class Lister(Protocol):
    def __call__(self, path: str, segment: str, is_intermediate: bool) -> Iterable[str]:
        ...


class ContainerPredicate(Protocol):
    def __call__(self, path: str) -> bool:
        ...


class Filter(Protocol):
    def __call__(self, path: str) -> bool:
        ...


OptionsLike = Union[CompletionOptions, Mapping[str, Any], None]


def split_word(word: str, path_sep: str = "/") -> Tuple[List[str], str]:
    """Split ``word`` into (intermediate segments, leaf).

    Trailing empty tokens from the split are dropped, then a single empty
    token is added back when the word ends with the separator, so ``a/b/``
    lists everything inside ``a/b``.
    """
    segments = word.split(path_sep) if word else []
    while segments and segments[-1] == "":
        segments.pop()
    if not segments:
        segments = [""]
    if word.endswith(path_sep):
        segments.append("")

    leaf = segments.pop()
    if not segments:
        segments = [""]
    return segments, leaf


def join_path(dir: str, entry: str, path_sep: str = "/") -> str:
    """Join an entry to its directory without doubling the separator."""
    if dir == "" or dir.endswith(path_sep):
        return dir + entry
    return dir + path_sep + entry


def _normalizer(options: CompletionOptions) -> Callable[[str], str]:
    def norm(s: str) -> str:
        if options.map_case:
            s = s.replace("_", "-")
        if options.ci:
            s = s.lower()
        return s
    return norm


def prefix_matcher(segment: str, options: CompletionOptions) -> Callable[[str], bool]:
    """Match entries starting with ``segment``."""
    norm = _normalizer(options)
    prefix = norm(segment)
    return lambda entry: norm(entry).startswith(prefix)


def exact_matcher(segment: str, options: CompletionOptions) -> Callable[[str], bool]:
    """Match entries equal to ``segment``, optionally followed by one separator."""
    norm = _normalizer(options)
    target = norm(segment)
    with_sep = norm(segment + options.path_sep)
    return lambda entry: norm(entry) in (target, with_sep)


def intermediate_matcher(segment: str, options: CompletionOptions) -> Callable[[str], bool]:
    if options.exp_im_path and len(segment) <= options.exp_im_path_max_len:
        return prefix_matcher(segment, options)
    return exact_matcher(segment, options)


def resolve_options(options: OptionsLike = None, **overrides: Any) -> CompletionOptions:
    """Turn ``options`` plus keyword overrides into validated CompletionOptions."""
    if options is None:
        options = CompletionOptions()
    elif isinstance(options, Mapping):
        options = build_options(options)
    elif not isinstance(options, CompletionOptions):
        raise ConfigError(f"options must be CompletionOptions or a mapping, not {type(options).__name__}")
    if overrides:
        options = options.merged(**overrides)
    return options


def _check_collaborators(list_func, is_dir_func, filter_func) -> None:
    if list_func is None:
        raise MissingCollaboratorError("list_func is required")
    if not callable(list_func):
        raise MissingCollaboratorError("list_func must be callable")
    if is_dir_func is not None and not callable(is_dir_func):
        raise MissingCollaboratorError("is_dir_func must be callable")
    if filter_func is not None and not callable(filter_func):
        raise MissingCollaboratorError("filter_func must be callable")


def complete_path(
    word: str = "",
    starting_path: str = "",
    list_func: Optional[Lister] = None,
    is_dir_func: Optional[ContainerPredicate] = None,
    filter_func: Optional[Filter] = None,
    options: OptionsLike = None,
    **overrides: Any,
) -> List[str]:
    """Complete a path-like ``word`` relative to ``starting_path``.

    Args:
        word: What the user has typed so far.
        starting_path: Root the word is relative to. Results are trimmed of it.
        list_func: ``list_func(path, segment, is_intermediate)`` returns the
            entry names directly under ``path``. Required. ``path`` is ``""``
            for the root. Names ending in the separator are containers.
        is_dir_func: ``is_dir_func(path)`` tells whether an untrimmed result
            path is a container. Not called for names already ending in the
            separator; when omitted only self-declared containers get one.
        filter_func: ``filter_func(path)`` returns False to drop a match. It
            sees the untrimmed path.
        options: CompletionOptions or a mapping of its fields.
        **overrides: Individual option fields, e.g. ``ci=True``.

    Returns:
        The completions in discovery order. Duplicates are kept. No match at
        any level gives an empty list.

    Raises:
        MissingCollaboratorError: list_func missing, or a collaborator is not callable.
        ConfigError: invalid options.
    """
    _check_collaborators(list_func, is_dir_func, filter_func)
    opts = resolve_options(options, **overrides)
    sep = opts.path_sep
    word = word or ""
    starting_path = starting_path or ""

    intermediate_dirs, leaf = split_word(word, sep)
    log.debug("starting_path=%r intermediate_dirs=%r leaf=%r", starting_path, intermediate_dirs, leaf)

    # Several real paths can match one segment (Foo/, foo/, FOO/ for "f" when
    # case-insensitive), so every level narrows a list of candidates.
    candidate_paths: List[str] = []
    last = len(intermediate_dirs) - 1
    for i, intdir in enumerate(intermediate_dirs):
        dirs = [starting_path] if i == 0 else candidate_paths

        if i == last and intdir == "":
            candidate_paths = dirs
            break

        matches = intermediate_matcher(intdir, opts)
        new_candidate_paths: List[str] = []
        for dir in dirs:
            for entry in list_func(dir, intdir, True) or ():
                if matches(entry):
                    new_candidate_paths.append(join_path(dir, entry, sep))
        log.debug("level %d %r: candidate_paths=%r", i, intdir, new_candidate_paths)
        if not new_candidate_paths:
            return []
        candidate_paths = new_candidate_paths

    cut_chars = 0
    if starting_path:
        cut_chars = len(starting_path)
        if not starting_path.endswith(sep):
            cut_chars += len(sep)

    matches = prefix_matcher(leaf, opts)
    res: List[str] = []
    for dir in candidate_paths:
        for entry in list_func(dir, leaf, False) or ():
            if not matches(entry):
                continue
            p0 = join_path(dir, entry, sep)
            if filter_func is not None and not filter_func(p0):
                continue

            p = p0[cut_chars:]
            if opts.result_prefix:
                p = opts.result_prefix + p
            if not p.endswith(sep) and is_dir_func is not None and is_dir_func(p0):
                p += sep
            res.append(p)

    log.debug("completions for %r: %r", word, res)
    return res
