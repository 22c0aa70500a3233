from kasir.payment_modal import edit_cash_input


def test_first_digit_replaces_prefilled_total() -> None:
    value = edit_cash_input("46200", "5", "5", replace=True)
    for digit in "0000":
        value = edit_cash_input(value, digit, digit)

    assert value == "50000"


def test_digits_append_once_editing_started() -> None:
    assert edit_cash_input("5000", "0", "0") == "50000"
    assert edit_cash_input("1234567890", "1", "1") == "1234567890"


def test_backspace_edits_and_other_keys_are_ignored() -> None:
    assert edit_cash_input("46200", "backspace", None, replace=True) == "4620"
    assert edit_cash_input("", "backspace", None) == ""
    assert edit_cash_input("46200", "x", "x") is None
    assert edit_cash_input("46200", "left", None) is None
