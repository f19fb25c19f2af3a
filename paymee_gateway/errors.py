"""Static message tables for PayMee error codes and payment types."""

from types import MappingProxyType

GENERIC_ERROR_MESSAGE = "Ocorreu um erro, tente novamente ou contate o administrador do site."
INVALID_CREDENTIALS_MESSAGE = "Falha em suas credenciais da PayMee do Brasil!"
UNKNOWN = "Unknown"

ERROR_MESSAGES = MappingProxyType(
    {
        "-1": "Falha em validar as informações fornecidas, verifique o erro no log e tente novamente.",
        "998": "Não foi possivel recuperar a transação pelo identificador informado.",
        "999": "A situação da transação não está pendente.",
        "1000": "A transação não está com o status Pago ou não existe.",
        "1001": "O código de referência informado já existe para outra venda.",
    }
)

PAYMENT_TYPES = MappingProxyType({1: "Bank Transfer", 2: "Cash Payment"})

# Bank codes reported in paymentMethod.code; 105 is the cash channel.
PAYMENT_METHODS = MappingProxyType(
    {
        101: "Bank Transfer Banco do Brasil",
        102: "Bank Transfer Bradesco",
        103: "Bank Transfer Itaú-Unibanco",
        104: "Bank Transfer Santander Brasil",
        105: "Cash Payment Itaú-Unibanco Cash",
    }
)


def get_error_message(code) -> str:
    """Resolve a processor error code; codes are compared as strings."""

    return ERROR_MESSAGES.get(str(code).strip(), GENERIC_ERROR_MESSAGE)


def get_payment_name_by_type(value) -> str:
    return PAYMENT_TYPES.get(value, UNKNOWN)


def get_payment_method_name(value) -> str:
    return PAYMENT_METHODS.get(value, UNKNOWN)
