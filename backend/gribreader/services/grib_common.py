from __future__ import annotations
from pathlib import Path
from typing import Any, Iterable, Optional

import hashlib
import json
from werkzeug.utils import secure_filename

from ..core.config import settings


# ------------------------------
# Hashes utilitarios
# ------------------------------

def md5_file(path, chunk=1024*1024):
    """
    Devuelve el hash MD5 (hexadecimal) de un archivo.
    """
    h = hashlib.md5()
    with open(path, "rb") as f:
        for b in iter(lambda: f.read(chunk), b""):
            h.update(b)
    return h.hexdigest()

def _hash_of(payload: Any) -> str:
    s = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.blake2b(s.encode("utf-8"), digest_size=16).hexdigest()

def decode_cache_key(file_hash: str, criteria: Iterable[Any]) -> str:
    """
    Clave de cache para un decode: hash del archivo + criterios.
    El orden de los criterios no cambia el resultado, así que se ordenan.
    """
    pairs = sorted({(c.parameter, c.level) for c in criteria})
    return f"decode:{file_hash}:{_hash_of(pairs)}"


# ------------------------------
# Paths
# ------------------------------

def resolve_upload_path(filepath: str, session_id: Optional[str] = None) -> Path:
    """
    Construye el path completo de un archivo subido (opcionalmente dentro
    del subdirectorio de sesión). Rechaza rutas que escapen de UPLOAD_DIR.
    """
    if filepath in (None, "", "undefined"):
        raise ValueError("El campo 'filepath' es obligatorio.")

    root = Path(settings.UPLOAD_DIR).resolve()
    base = root / secure_filename(session_id) if session_id else root
    target = (base / filepath).resolve()
    if not target.is_relative_to(root):
        raise ValueError(f"Ruta fuera del directorio de uploads: {filepath}")
    return target
