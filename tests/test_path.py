"""Tests for the level-by-level path completion engine."""

from __future__ import annotations

import pytest

from pathcomplete import (
    CompletionOptions,
    ConfigError,
    MissingCollaboratorError,
    complete_path,
    join_path,
    split_word,
)

TREE = {
    "home": {
        "ujang": {"bin": {"myscript": None}, "Documents": {}},
        "budi": {},
    },
    "etc": {"hosts": None, "my_conf.d": {"a.conf": None}},
    "Foo": {"sub": None, "Surya": None},
    "foo": {"sri": None},
    "FOO": {"SUPER": None},
    "bar": None,
}


class TreeLister:
    """Lists a nested dict; records every call."""

    def __init__(self, tree, sep="/", self_declare=False):
        self.tree = tree
        self.sep = sep
        self.self_declare = self_declare
        self.calls = []

    def node(self, path):
        node = self.tree
        for part in path.split(self.sep):
            if part == "":
                continue
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def __call__(self, path, segment, is_intermediate):
        self.calls.append((path, segment, is_intermediate))
        node = self.node(path)
        if not isinstance(node, dict):
            return []
        if self.self_declare:
            return [k + self.sep if isinstance(v, dict) else k for k, v in node.items()]
        return list(node)

    def is_dir(self, path):
        return isinstance(self.node(path), dict)


def _complete(word="", starting_path="", **kwargs):
    lister = TreeLister(TREE)
    return complete_path(word, starting_path, lister, lister.is_dir, **kwargs)


# ---------------------------------------------------------------------------
# segmenting
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "word, expected",
    [
        ("", ([""], "")),
        ("a", ([""], "a")),
        ("a/b", (["a"], "b")),
        ("a/b/c", (["a", "b"], "c")),
        ("a/", (["a"], "")),
        ("a//", (["a"], "")),
        ("a//b", (["a", ""], "b")),
        ("/a", ([""], "a")),
        ("/", ([""], "")),
        ("//", ([""], "")),
    ],
)
def test_split_word(word, expected):
    assert split_word(word, "/") == expected


def test_split_word_multichar_separator():
    assert split_word("Foo::Bar::", "::") == (["Foo", "Bar"], "")
    assert split_word("Foo::Ba", "::") == (["Foo"], "Ba")


def test_join_path_never_doubles_separator():
    assert join_path("", "a") == "a"
    assert join_path("x", "a") == "x/a"
    assert join_path("x/", "a") == "x/a"
    assert join_path("x", "a", "::") == "x::a"
    assert join_path("x::", "a", "::") == "x::a"


# ---------------------------------------------------------------------------
# basic completion
# ---------------------------------------------------------------------------


def test_empty_word_lists_everything_under_root():
    assert _complete("") == ["home/", "etc/", "Foo/", "foo/", "FOO/", "bar"]


def test_leaf_is_prefix_matched():
    assert _complete("b") == ["bar"]
    assert _complete("ho") == ["home/"]


def test_trailing_separator_lists_container_contents():
    assert _complete("home/") == ["home/ujang/", "home/budi/"]


def test_nested_completion():
    assert _complete("home/ujang/b") == ["home/ujang/bin/"]
    assert _complete("home/ujang/bin/") == ["home/ujang/bin/myscript"]


def test_doubled_separator_collapses_to_container():
    assert _complete("home//u") == ["home/ujang/"]


def test_no_match_returns_empty_list():
    assert _complete("zzz") == []


# ---------------------------------------------------------------------------
# case folding
# ---------------------------------------------------------------------------


def test_case_sensitive_by_default():
    assert _complete("f") == ["foo/"]


def test_case_insensitive_matches_every_case_variant():
    assert _complete("f", ci=True) == ["Foo/", "foo/", "FOO/"]


def test_case_insensitive_descends_into_all_candidates():
    assert _complete("foo/s", ci=True) == ["Foo/sub", "Foo/Surya", "foo/sri", "FOO/SUPER"]


def test_case_sensitive_descends_into_exact_candidate_only():
    assert _complete("foo/s") == ["foo/sri"]


def test_prefix_law_holds_for_every_result():
    results = _complete("foo/s", ci=True)
    assert results
    for r in results:
        assert r.rsplit("/", 1)[-1].lower().startswith("s")


# ---------------------------------------------------------------------------
# dash / underscore mapping
# ---------------------------------------------------------------------------


def test_map_case_treats_dash_as_underscore():
    lister = lambda path, seg, im: ["my_file", "other"]
    assert complete_path("my-f", list_func=lister, map_case=True) == ["my_file"]
    assert complete_path("my-f", list_func=lister) == []


def test_map_case_applies_to_intermediate_segments():
    assert _complete("etc/my-c", map_case=True) == ["etc/my_conf.d/"]
    assert _complete("etc/my-conf.d/", map_case=True) == ["etc/my_conf.d/a.conf"]
    assert _complete("etc/my-conf.d/") == []


def test_map_case_combined_with_ci():
    lister = lambda path, seg, im: ["My_File"]
    assert complete_path("my-f", list_func=lister, map_case=True, ci=True) == ["My_File"]


# ---------------------------------------------------------------------------
# intermediate path expansion
# ---------------------------------------------------------------------------


def test_expand_intermediate_paths():
    assert _complete("h/u/b/my", exp_im_path=True) == ["home/ujang/bin/myscript"]


def test_without_expansion_intermediate_segments_must_be_exact():
    assert _complete("h/u/b/my") == []


def test_expansion_bound():
    tree = {"abcdef": {"x": None}, "abc": {"y": None}}
    lister = TreeLister(tree)
    kwargs = dict(list_func=lister, is_dir_func=lister.is_dir, exp_im_path=True, exp_im_path_max_len=2)
    assert complete_path("ab/", **kwargs) == ["abcdef/x", "abc/y"]
    assert complete_path("abc/", **kwargs) == ["abc/y"]


def test_exact_match_accepts_self_declared_container():
    lister = TreeLister({"abc": {"y": None}, "abcd": {"z": None}}, self_declare=True)
    assert complete_path("abc/", list_func=lister) == ["abc/y"]
    assert ("abc/", "", False) in lister.calls


def test_expansion_uses_max_len_zero():
    assert _complete("h/", exp_im_path=True, exp_im_path_max_len=0) == []


# ---------------------------------------------------------------------------
# short circuit
# ---------------------------------------------------------------------------


def test_zero_matches_at_intermediate_level_aborts():
    lister = TreeLister(TREE)
    assert complete_path("home/zzz/a", list_func=lister, is_dir_func=lister.is_dir) == []
    assert all(is_intermediate for _, _, is_intermediate in lister.calls)


def test_short_circuit_even_with_many_candidates():
    assert _complete("f/zzz/", ci=True, exp_im_path=True) == []


def test_lister_returning_none_contributes_nothing():
    assert complete_path("a/b", list_func=lambda path, seg, im: None) == []


# ---------------------------------------------------------------------------
# starting path and trimming
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("starting_path", ["home/ujang", "home/ujang/"])
def test_results_are_relative_to_starting_path(starting_path):
    results = _complete("", starting_path)
    assert results == ["bin/", "Documents/"]
    assert not any(r.startswith("home/ujang/") for r in results)


def test_starting_path_with_intermediate_segments():
    assert _complete("bin/", "home/ujang") == ["bin/myscript"]


def test_starting_path_is_listed_first():
    lister = TreeLister(TREE)
    complete_path("b", "home/ujang", lister, lister.is_dir)
    assert lister.calls[0] == ("home/ujang", "b", False)


def test_result_prefix_is_prepended_after_trimming():
    assert _complete("b", "home/ujang", result_prefix="~/") == ["~/bin/"]


def test_multichar_separator():
    tree = {"Foo": {"Bar": {"Baz": None}, "Qux": None}}
    lister = TreeLister(tree, sep="::")
    results = complete_path("Foo::B", list_func=lister, is_dir_func=lister.is_dir, path_sep="::")
    assert results == ["Foo::Bar::"]
    results = complete_path("Ba", "Foo", lister, lister.is_dir, path_sep="::")
    assert results == ["Bar::"]


# ---------------------------------------------------------------------------
# container predicate and filter
# ---------------------------------------------------------------------------


def test_is_dir_receives_untrimmed_path():
    lister = TreeLister(TREE)
    seen = []

    def is_dir(path):
        seen.append(path)
        return lister.is_dir(path)

    assert complete_path("b", "home/ujang", lister, is_dir, result_prefix="~/") == ["~/bin/"]
    assert seen == ["home/ujang/bin"]


def test_self_declared_container_skips_is_dir_and_is_not_doubled():
    lister = TreeLister(TREE, self_declare=True)

    def is_dir(path):
        raise AssertionError(f"is_dir called for {path}")

    assert complete_path("home/", list_func=lister, is_dir_func=is_dir) == ["home/ujang/", "home/budi/"]


def test_container_suffix_appended_exactly_once():
    lister = TreeLister(TREE, self_declare=True)
    results = complete_path("home/u", list_func=lister, is_dir_func=lister.is_dir)
    assert results == ["home/ujang/"]


def test_without_is_dir_only_self_declared_containers_get_separator():
    plain = TreeLister(TREE)
    assert complete_path("ho", list_func=plain) == ["home"]
    declaring = TreeLister(TREE, self_declare=True)
    assert complete_path("ho", list_func=declaring) == ["home/"]


def test_filter_sees_untrimmed_path_after_prefix_matching():
    seen = []

    def keep(path):
        seen.append(path)
        return not path.endswith("budi")

    assert _complete("", "home", filter_func=keep) == ["ujang/"]
    assert seen == ["home/ujang", "home/budi"]

    seen.clear()
    assert _complete("u", "home", filter_func=keep) == ["ujang/"]
    assert seen == ["home/ujang"]


def test_duplicates_are_not_removed():
    lister = lambda path, seg, im: ["a", "a"]
    assert complete_path("", list_func=lister) == ["a", "a"]


# ---------------------------------------------------------------------------
# options handling
# ---------------------------------------------------------------------------


def test_options_object_and_overrides():
    opts = CompletionOptions(ci=True)
    assert _complete("f", options=opts) == ["Foo/", "foo/", "FOO/"]
    assert _complete("f", options=opts, ci=False) == ["foo/"]


def test_options_mapping():
    assert _complete("h/u/", options={"exp_im_path": True}) == ["home/ujang/bin/", "home/ujang/Documents/"]


# ---------------------------------------------------------------------------
# errors
# ---------------------------------------------------------------------------


def test_missing_lister_is_a_configuration_error():
    with pytest.raises(MissingCollaboratorError):
        complete_path("a")


def test_non_callable_collaborators_are_rejected():
    with pytest.raises(MissingCollaboratorError):
        complete_path("a", list_func=["a"])
    with pytest.raises(MissingCollaboratorError):
        complete_path("a", list_func=lambda *a: [], is_dir_func=True)
    with pytest.raises(MissingCollaboratorError):
        complete_path("a", list_func=lambda *a: [], filter_func="x")


def test_missing_collaborator_error_is_a_config_error():
    assert issubclass(MissingCollaboratorError, ConfigError)
    assert issubclass(ConfigError, ValueError)


def test_empty_separator_is_rejected_before_listing():
    lister = TreeLister(TREE)
    with pytest.raises(ConfigError):
        complete_path("a", list_func=lister, path_sep="")
    assert lister.calls == []


def test_unknown_option_is_rejected():
    with pytest.raises(ConfigError):
        _complete("a", options={"case_insensitive": True})


def test_bad_options_type_is_rejected():
    with pytest.raises(ConfigError):
        _complete("a", options=["ci"])


def test_lister_failure_propagates():
    def lister(path, segment, is_intermediate):
        if path == "home":
            raise PermissionError(path)
        return ["home"]

    with pytest.raises(PermissionError):
        complete_path("home/u", list_func=lister)
