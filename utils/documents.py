"""
Validação e formatação de CPF/CNPJ (algoritmo oficial dos dígitos verificadores).
"""
from utils.formatters import only_digits

CNPJ_WEIGHTS_1 = [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
CNPJ_WEIGHTS_2 = [6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]


def _cpf_digit(digits: str, weight_start: int) -> int:
    total = sum(int(d) * (weight_start - i) for i, d in enumerate(digits))
    digit = 11 - (total % 11)
    return 0 if digit >= 10 else digit


def _cnpj_digit(digits: str, weights: list[int]) -> int:
    remainder = sum(int(d) * w for d, w in zip(digits, weights)) % 11
    return 0 if remainder < 2 else 11 - remainder


def validate_cpf(cpf: str) -> bool:
    cleaned = only_digits(cpf)
    if len(cleaned) != 11 or len(set(cleaned)) == 1:
        return False
    if _cpf_digit(cleaned[:9], 10) != int(cleaned[9]):
        return False
    return _cpf_digit(cleaned[:10], 11) == int(cleaned[10])


def validate_cnpj(cnpj: str) -> bool:
    cleaned = only_digits(cnpj)
    if len(cleaned) != 14 or len(set(cleaned)) == 1:
        return False
    if _cnpj_digit(cleaned[:12], CNPJ_WEIGHTS_1) != int(cleaned[12]):
        return False
    return _cnpj_digit(cleaned[:13], CNPJ_WEIGHTS_2) == int(cleaned[13])


def validate_cpf_cnpj(value: str) -> bool:
    cleaned = only_digits(value)
    if len(cleaned) == 11:
        return validate_cpf(cleaned)
    if len(cleaned) == 14:
        return validate_cnpj(cleaned)
    return False


def format_cpf_cnpj(value: str | None) -> str:
    """
    000.000.000-00 ou 00.000.000/0000-00; outros tamanhos voltam sem máscara.
    """
    cleaned = only_digits(value)
    if len(cleaned) == 11:
        return f"{cleaned[:3]}.{cleaned[3:6]}.{cleaned[6:9]}-{cleaned[9:]}"
    if len(cleaned) == 14:
        return f"{cleaned[:2]}.{cleaned[2:5]}.{cleaned[5:8]}/{cleaned[8:12]}-{cleaned[12:]}"
    return cleaned
