import pytest

from kasir.config import _env_float, _env_int, _env_str


def test_env_helpers_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.delenv("KASIR_TEST_VALUE", raising=False)

    assert _env_str("KASIR_TEST_VALUE", "data/kasir.db") == "data/kasir.db"
    assert _env_float("KASIR_TEST_VALUE", 5.0) == 5.0
    assert _env_int("KASIR_TEST_VALUE", 384) == 384


def test_env_helpers_parse_overrides(monkeypatch) -> None:
    monkeypatch.setenv("KASIR_TEST_VALUE", " 0x28e9 ")

    assert _env_int("KASIR_TEST_VALUE", 0) == 0x28E9
    assert _env_str("KASIR_TEST_VALUE", "") == "0x28e9"

    monkeypatch.setenv("KASIR_TEST_VALUE", "2.5")
    assert _env_float("KASIR_TEST_VALUE", 0.0) == 2.5


def test_env_helpers_name_the_bad_variable(monkeypatch) -> None:
    monkeypatch.setenv("KASIR_TEST_VALUE", "fast")

    with pytest.raises(ValueError, match="KASIR_TEST_VALUE"):
        _env_float("KASIR_TEST_VALUE", 1.0)
    with pytest.raises(ValueError, match="KASIR_TEST_VALUE"):
        _env_int("KASIR_TEST_VALUE", 1)
