"""Recursos de texto integrados en el panel."""

from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent


def data_path(*parts: str) -> Path:
    """Retorna la ruta a un recurso dentro de `sofia_panel/data`."""
    return BASE_DIR.joinpath(*parts)


def read_text(name: str) -> str:
    return data_path(name).read_text(encoding="utf-8")
