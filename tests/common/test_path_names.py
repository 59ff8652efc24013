from pathlib import Path

from pinmap.common.path.names import duplicate_names, file_name_of


def test_file_name_of_posix_and_windows():
    assert file_name_of("a/b/c.txt") == "c.txt"
    assert file_name_of("a\\b\\c.txt") == "c.txt"
    assert file_name_of("mixed/dir\\c.txt") == "c.txt"
    assert file_name_of(Path("x") / "y.json") == "y.json"


def test_file_name_of_edge_cases():
    assert file_name_of("plain.txt") == "plain.txt"
    assert file_name_of("dir/") == ""
    assert file_name_of("") == ""


def test_duplicate_names_first_seen_order():
    paths = ["a/x.txt", "b/y.txt", "c/x.txt", "d/y.txt", "e/z.txt"]
    assert duplicate_names(paths) == ["x.txt", "y.txt"]
    assert duplicate_names(["a/1", "a/2"]) == []
