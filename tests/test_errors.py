import pytest

from paymee_gateway.errors import (
    ERROR_MESSAGES,
    GENERIC_ERROR_MESSAGE,
    get_error_message,
    get_payment_method_name,
    get_payment_name_by_type,
)


@pytest.mark.parametrize("code", [-1, 998, 999, 1000, 1001])
def test_known_codes_resolve_as_strings(code):
    assert get_error_message(code) == ERROR_MESSAGES[str(code)]
    assert get_error_message(str(code)) == ERROR_MESSAGES[str(code)]


def test_reference_code_conflict_message():
    assert get_error_message(1001) == "O código de referência informado já existe para outra venda."


@pytest.mark.parametrize("code", [0, 1, 1002, "abc", None, "1001.0"])
def test_unmapped_codes_fall_back_to_generic(code):
    assert get_error_message(code) == GENERIC_ERROR_MESSAGE


def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        ERROR_MESSAGES["1001"] = "changed"


def test_payment_type_and_method_names():
    assert get_payment_name_by_type(1) == "Bank Transfer"
    assert get_payment_name_by_type(2) == "Cash Payment"
    assert get_payment_name_by_type(9) == "Unknown"
    assert get_payment_method_name(102) == "Bank Transfer Bradesco"
    assert get_payment_method_name(105) == "Cash Payment Itaú-Unibanco Cash"
    assert get_payment_method_name(999) == "Unknown"
