"""
Slugs e geração automática do nome do produto.
"""
import re
import unicodedata

# Placeholders em português -> campos do produto
NAME_PLACEHOLDERS = {
    "marca": "brand",
    "modelo": "model",
    "sku": "sku",
    "ram": "ram",
    "armazenamento": "storage",
    "cor": "color",
    "versao": "version",
    "bateria": "battery_health",
    "serial": "serial",
    "imei1": "imei1",
    "imei2": "imei2",
    "ncm": "ncm",
    "cest": "cest",
    "peso": "weight_kg",
}

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


def generate_slug(name: str) -> str:
    """
    "Galaxy S24 Ultra" -> "galaxy-s24-ultra" (sem acentos, minúsculas).
    """
    normalized = unicodedata.normalize("NFD", (name or "").lower())
    without_accents = "".join(c for c in normalized if unicodedata.category(c) != "Mn")
    return re.sub(r"[^a-z0-9]+", "-", without_accents).strip("-")


def _lookup(data: dict, field: str):
    specs = data.get("specs") or {}
    if specs.get(field) not in (None, ""):
        return specs[field]
    return data.get(field)


def generate_product_name(template: str, data: dict) -> str:
    """
    Preenche um template como "{modelo}, {ram}/{armazenamento} - {versao}"
    com os dados do produto (specs primeiro, depois campos da raiz) e limpa
    separadores que sobraram de campos vazios.
    """

    def replace(match):
        key = match.group(1).lower()
        value = _lookup(data, NAME_PLACEHOLDERS.get(key, key))
        return str(value).strip() if value not in (None, "") else ""

    result = _PLACEHOLDER_RE.sub(replace, template or "")
    result = re.sub(r"/\s*/", "/", result)
    # Barra sem valor de um dos lados ("6GB/" ou " /128GB")
    result = re.sub(r"(^|[\s,(])/(?=\S)", r"\1", result)
    result = re.sub(r"(?<=\S)/(?=$|[\s,)])", "", result)
    result = re.sub(r"\(\s*\)", "", result)
    result = re.sub(r",\s*,", ",", result)
    result = re.sub(r"-\s*-", "-", result)
    result = re.sub(r",\s*-", " -", result)
    result = re.sub(r"\s+,", ",", result)
    result = re.sub(r"\s+", " ", result).strip()
    return result.strip(",-/ ").strip()
