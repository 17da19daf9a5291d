from utils.documents import format_cpf_cnpj, validate_cnpj, validate_cpf, validate_cpf_cnpj


def test_valid_cpf_with_and_without_mask():
    assert validate_cpf("529.982.247-25")
    assert validate_cpf("52998224725")


def test_invalid_cpf():
    assert not validate_cpf("529.982.247-24")
    assert not validate_cpf("111.111.111-11")
    assert not validate_cpf("1234")


def test_valid_and_invalid_cnpj():
    assert validate_cnpj("11.222.333/0001-81")
    assert not validate_cnpj("11.222.333/0001-80")
    assert not validate_cnpj("00000000000000")


def test_validate_cpf_cnpj_dispatches_by_length():
    assert validate_cpf_cnpj("52998224725")
    assert validate_cpf_cnpj("11222333000181")
    assert not validate_cpf_cnpj("123456")


def test_format_cpf_cnpj():
    assert format_cpf_cnpj("52998224725") == "529.982.247-25"
    assert format_cpf_cnpj("11222333000181") == "11.222.333/0001-81"
    assert format_cpf_cnpj(None) == ""
