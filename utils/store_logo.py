"""
Logo da loja: arquivo único em uploads/logo/, usado no menu lateral e no recibo.
"""
import base64
import logging
import mimetypes
from pathlib import Path
from typing import Iterator, Optional

from config.settings import UPLOADS_DIR

logger = logging.getLogger(__name__)

LOGO_NAME = "logo"
LOGO_EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp")


def _candidates(base: Optional[Path] = None) -> Iterator[Path]:
    folder = (base or UPLOADS_DIR) / "logo"
    for ext in LOGO_EXTENSIONS:
        yield folder / f"{LOGO_NAME}{ext}"


def get_logo_path(base: Optional[Path] = None) -> Optional[Path]:
    return next((p for p in _candidates(base) if p.exists()), None)


def save_logo(content: bytes, filename: str, base: Optional[Path] = None) -> Path:
    """
    Grava a logo enviada e apaga a anterior (pode ter outra extensão).
    Extensões desconhecidas são gravadas como .png.
    """
    ext = Path(filename or "").suffix.lower()
    if ext not in LOGO_EXTENSIONS:
        ext = ".png"
    remove_logo(base)
    target = (base or UPLOADS_DIR) / "logo" / f"{LOGO_NAME}{ext}"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
    logger.info("Logo da loja atualizada: %s", target.name)
    return target


def remove_logo(base: Optional[Path] = None) -> bool:
    removed = [p for p in _candidates(base) if p.exists()]
    for path in removed:
        path.unlink()
    return bool(removed)


def logo_data_uri(base: Optional[Path] = None) -> Optional[str]:
    """
    Logo embutida (data URI) para o HTML do recibo, que roda num iframe sem
    acesso aos arquivos locais.
    """
    path = get_logo_path(base)
    if path is None:
        return None
    mime = mimetypes.guess_type(path.name)[0] or "image/png"
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime};base64,{encoded}"
