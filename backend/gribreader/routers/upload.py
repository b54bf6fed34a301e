from fastapi import APIRouter, UploadFile, File, HTTPException, status, Form
from pathlib import Path
from werkzeug.utils import secure_filename
from typing import Optional
import logging
import os

from ..core.config import settings
from ..services.metadata import extract_grib_metadata

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["upload"])

CHUNK_SIZE = 1024 * 1024  # 1 MB

def _ext_ok(filename: str) -> bool:
    ext = Path(filename).suffix.lower()
    return ext in {e.lower() for e in settings.ALLOWED_EXTENSIONS}

def _max_size_ok(size_bytes: int) -> bool:
    return size_bytes <= settings.MAX_UPLOAD_MB * 1024 * 1024


@router.post("", status_code=201)
async def upload(files: list[UploadFile] = File(...), session_id: Optional[str] = Form(None)):
    """
    Endpoint para subir múltiples archivos GRIB1.
    Si session_id está presente, los archivos se guardan en uploads/{session_id}/
    Si un archivo ya existe, no se sobrescribe pero se devuelve en la respuesta con warning.
    Devuelve paths + inventario de mensajes de cada archivo y warnings.
    """
    if not files:
        raise HTTPException(status_code=400, detail="No se enviaron archivos.")

    # Crear subdirectorio de sesión si se proporciona session_id
    UPLOAD_DIR = Path(settings.UPLOAD_DIR)
    if session_id:
        UPLOAD_DIR = UPLOAD_DIR / secure_filename(session_id)
    os.makedirs(UPLOAD_DIR, exist_ok=True)

    warnings: list[str] = []
    saved_files: list[dict] = []
    written: list[Path] = []

    try:
        for file in files:
            if not file.filename:
                raise HTTPException(status_code=400, detail="Archivo sin nombre.")
            if not _ext_ok(file.filename):
                raise HTTPException(
                    status_code=415,
                    detail=f"Extensión no permitida: {Path(file.filename).suffix}. Solo {settings.ALLOWED_EXTENSIONS}"
                )

            unique_name = secure_filename(file.filename)
            target = UPLOAD_DIR / unique_name

            if target.exists():
                warnings.append(f"El archivo '{file.filename}' ya existe")
                saved_files.append({
                    "filepath": unique_name,  # Solo el nombre del archivo, no el path completo
                    "filename": file.filename,
                    "size_bytes": os.path.getsize(target),
                    "metadata": extract_grib_metadata(str(target)),
                })
                continue

            size = 0
            with open(target, "wb") as out:
                written.append(target)
                while True:
                    chunk = await file.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if not _max_size_ok(size):
                        raise HTTPException(
                            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                            detail=f"'{file.filename}' excede {settings.MAX_UPLOAD_MB} MB"
                        )
                    out.write(chunk)

            if size == 0:
                raise HTTPException(status_code=400, detail=f"'{file.filename}' está vacío.")

            meta = extract_grib_metadata(str(target))
            if "error" in meta:
                warnings.append(f"'{file.filename}' no se pudo leer como GRIB1: {meta['error']}")
            logger.info("Archivo GRIB guardado: %s (%d bytes)", target.name, size)

            saved_files.append({
                "filepath": unique_name,
                "filename": file.filename,
                "size_bytes": size,
                "metadata": meta,
            })

        return {"files": saved_files, "warnings": warnings}

    except Exception:
        # rollback de los que se alcanzaron a guardar en este request
        for p in written:
            try:
                p.unlink(missing_ok=True)
            except OSError:
                logger.warning("No se pudo borrar %s durante el rollback", p)
        raise

    finally:
        for f in files:
            await f.close()
