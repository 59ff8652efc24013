from pinmap.common.naming.natural_sort import natural_key, natural_sorted, sort_mapping


def test_numeric_runs_compare_by_value():
    names = ["file10.txt", "file2.txt", "file1.txt"]
    assert natural_sorted(names) == ["file1.txt", "file2.txt", "file10.txt"]


def test_case_insensitive_with_lowercase_first_tiebreak():
    assert natural_sorted(["B.txt", "a.txt", "A.txt"]) == ["a.txt", "A.txt", "B.txt"]


def test_digits_before_letters():
    assert natural_sorted(["a.json", "1.json", "10.json", "2.json"]) == [
        "1.json", "2.json", "10.json", "a.json",
    ]


def test_leading_zeros_keep_a_total_order():
    out = natural_sorted(["img01.png", "img1.png", "img001.png"])
    assert sorted(out, key=natural_key) == out
    assert len(out) == 3


def test_sort_mapping_returns_new_ordered_dict():
    src = {"file10.txt": "c", "file2.txt": "b", "file1.txt": "a"}
    out = sort_mapping(src)
    assert list(out) == ["file1.txt", "file2.txt", "file10.txt"]
    assert out is not src
    assert list(src) == ["file10.txt", "file2.txt", "file1.txt"]


def test_non_decimal_digits_sort_as_text():
    # Ethiopic numerals are digits but not decimal digits
    assert natural_sorted(["file1፩", "file2", "file1"]) == ["file1", "file1፩", "file2"]


def test_other_decimal_scripts_compare_by_value():
    assert natural_sorted(["x١٠", "x٢"]) == ["x٢", "x١٠"]
