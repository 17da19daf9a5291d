from utils.text import generate_product_name, generate_slug


def test_generate_slug_strips_accents():
    assert generate_slug("Galaxy S24 Ultra") == "galaxy-s24-ultra"
    assert generate_slug("  Pêssego & Ação ") == "pessego-acao"


def test_generate_product_name_fills_placeholders():
    data = {
        "brand": "Apple",
        "model": "iPhone 15",
        "color": "Preto",
        "specs": {"ram": "6GB", "storage": "128GB"},
    }
    name = generate_product_name("{marca} {modelo}, {ram}/{armazenamento} ({cor})", data)
    assert name == "Apple iPhone 15, 6GB/128GB (Preto)"


def test_generate_product_name_prefers_specs_over_root():
    data = {"model": "Galaxy A55", "storage": "64GB", "specs": {"storage": "128GB"}}
    assert generate_product_name("{modelo} {armazenamento}", data) == "Galaxy A55 128GB"


def test_generate_product_name_cleans_empty_separators():
    data = {"model": "Galaxy A55", "specs": {"storage": "128GB"}}
    name = generate_product_name("{modelo}, {ram}/{armazenamento} - {versao} ({cor})", data)
    assert name == "Galaxy A55, 128GB"


def test_generate_product_name_missing_storage():
    data = {"model": "Redmi Note 13", "specs": {"ram": "8GB"}}
    assert generate_product_name("{modelo} {ram}/{armazenamento}", data) == "Redmi Note 13 8GB"
