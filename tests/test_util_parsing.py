from yapsports.util.parsing import count, ratio, safe_float, safe_int


def test_safe_float_parses_numeric_inputs() -> None:
    assert safe_float(1) == 1.0
    assert safe_float("-2.25") == -2.25
    assert safe_float(True) is None
    assert safe_float("  ") is None
    assert safe_float("abc") is None


def test_safe_int_parses_integer_like_inputs() -> None:
    assert safe_int(1.9) == 1
    assert safe_int("+12") == 12
    assert safe_int("31.0") == 31
    assert safe_int(True) is None
    assert safe_int("") is None
    assert safe_int("x") is None


def test_count_reads_missing_and_negative_as_zero() -> None:
    assert count(None) == 0
    assert count("7") == 7
    assert count(-3) == 0
    assert count("n/a") == 0


def test_ratio_guards_zero_attempts() -> None:
    assert ratio(0, 0) == 0.0
    assert ratio(5, 10) == 0.5
