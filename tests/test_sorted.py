import enum
import io

import pytest

from derivekit.sorted import (
    SortedError,
    check,
    check_source,
    compare_paths,
    sorted_enum,
)


class Io:
    __match_args__ = ("error",)

    def __init__(self, error):
        self.error = error


class Fmt:
    __match_args__ = ("error",)

    def __init__(self, error):
        self.error = error


class Error:
    Io = Io
    Fmt = Fmt


class Conference(enum.Enum):
    RustBeltRust = 1
    RustConf = 2
    RustFest = 3
    RustLatam = 4
    RustRush = 5


def region(conference):
    # sorted
    match conference:
        case Conference.RustFest:
            return "Europe"
        case Conference.RustLatam:
            return "Latin America"
        case _:
            return "elsewhere"


def fmt_unqualified(error):
    # sorted
    match error:
        case Io(e):
            return str(e)
        case Fmt(e):
            return str(e)


def fmt_qualified(error):
    # sorted
    match error:
        case Error.Io(e):
            return str(e)
        case Error.Fmt(e):
            return str(e)


def sum_slices(data):
    # sorted
    match data:
        case []:
            return 0
        case [a]:
            return a
        case [a, b]:
            return a + b
        case _other:
            return None


def test_sorted_enum_returns_class_unchanged():
    result = sorted_enum(Conference)
    assert result is Conference
    assert result.RustConf.value == 2
    assert list(result.__members__) == [
        "RustBeltRust",
        "RustConf",
        "RustFest",
        "RustLatam",
        "RustRush",
    ]


def test_sorted_enum_rejects_non_enum():
    class Record:
        kind: int
        message: str

    with pytest.raises(SortedError) as info:
        sorted_enum(Record)
    assert info.value.messages == ("expected enum or match expression",)


def test_sorted_enum_out_of_order():
    class Failure(enum.Enum):
        ThatFailed = 1
        ThisFailed = 2
        SomethingFailed = 3
        WhoKnowsWhatFailed = 4

    with pytest.raises(SortedError) as info:
        sorted_enum(Failure)
    assert info.value.messages == ("SomethingFailed should sort before ThatFailed",)


def test_sorted_enum_variants_with_data():
    class Failure(enum.Enum):
        Fmt = ("fmt", ValueError)
        Io = ("io", io.UnsupportedOperation)
        Utf8 = ("utf8", UnicodeDecodeError)
        Var = ("var", KeyError)
        Dyn = ("dyn", Exception)

    with pytest.raises(SortedError) as info:
        sorted_enum(Failure)
    assert info.value.messages == ("Dyn should sort before Fmt",)


def test_compare_paths():
    assert compare_paths("Fmt", "Io") < 0
    assert compare_paths("Error.Io", "Error.Fmt") > 0
    assert compare_paths(("Error", "Io"), "Error.Io") == 0
    assert compare_paths("Error", "Error.Io") < 0
    assert compare_paths("Error.Io", "Error") > 0


def test_match_expression_out_of_order():
    with pytest.raises(SortedError) as info:
        check(fmt_unqualified)
    assert info.value.messages == ("Fmt should sort before Io",)


def test_pattern_path_out_of_order():
    with pytest.raises(SortedError) as info:
        check(fmt_qualified)
    assert info.value.messages == ("Error.Fmt should sort before Error.Io",)


def test_unrecognized_patterns_reported():
    with pytest.raises(SortedError) as info:
        check(sum_slices)
    assert info.value.messages == ("unsupported by sorted",) * 3


def test_underscore_last_is_accepted():
    checked = check(region)
    assert checked(Conference.RustFest) == "Europe"
    assert checked(Conference.RustLatam) == "Latin America"
    assert checked(Conference.RustConf) == "elsewhere"


def test_check_source_counts_marked_matches_only():
    source = (
        "def f(x):\n"
        "    match x:\n"
        "        case B.b: pass\n"
        "        case A.a: pass\n"
        "    # sorted\n"
        "    match x:\n"
        "        case A.a: pass\n"
        "        case B.b: pass\n"
    )
    assert check_source(source) == 1


def test_check_source_reports_line():
    source = (
        "def f(x):\n"
        "    # sorted\n"
        "    match x:\n"
        "        case A.b: pass\n"
        "        case A.a: pass\n"
    )
    with pytest.raises(SortedError) as info:
        check_source(source)
    assert [d.line for d in info.value.diagnostics] == [5]
    assert info.value.messages == ("A.a should sort before A.b",)


def test_check_source_collects_errors_from_nested_matches():
    source = (
        "def f(x, y):\n"
        "    # sorted\n"
        "    match x:\n"
        "        case Z.a:\n"
        "            # sorted\n"
        "            match y:\n"
        "                case Q: pass\n"
        "                case P: pass\n"
        "        case Y.a: pass\n"
    )
    with pytest.raises(SortedError) as info:
        check_source(source)
    assert info.value.messages == (
        "Y.a should sort before Z.a",
        "P should sort before Q",
    )


def test_check_source_literal_pattern_unsupported():
    source = "# sorted\nmatch 1:\n    case 1: pass\n"
    with pytest.raises(SortedError) as info:
        check_source(source)
    assert info.value.messages == ("unsupported by sorted",)


def test_check_rejects_non_callable():
    with pytest.raises(TypeError):
        check(42)