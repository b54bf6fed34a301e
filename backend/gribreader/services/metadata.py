from __future__ import annotations
from pathlib import Path
from typing import Dict, Any

from .grib import Grib1Error, Grib1Reader


def extract_grib_metadata(path: str) -> Dict[str, Any]:
    """
    Recorre un archivo GRIB1 sin desempaquetar datos y devuelve metadata básica:
      - nmessages: cantidad de mensajes
      - parameters: lista de (parámetro, nivel) presentes, en orden de archivo
      - size_bytes: tamaño del archivo
    Si el archivo no se puede leer devuelve {"error": ...} en vez de lanzar.
    """
    p = Path(path)
    if not p.exists():
        return {"error": f"file_not_found: {path}"}

    try:
        with open(p, "rb") as f:
            messages = Grib1Reader(f).scan()
    except Grib1Error as e:
        return {"error": f"grib_read_failed: {e.__class__.__name__}: {e}"}

    return {
        "nmessages": len(messages),
        "parameters": [
            {"parameter": m.pds.parameter, "level": m.pds.level} for m in messages
        ],
        "size_bytes": p.stat().st_size,
    }
