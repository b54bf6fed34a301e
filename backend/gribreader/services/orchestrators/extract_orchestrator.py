"""
Orchestrator para extraer sub-archivos GRIB1 (mensajes completos, byte a byte).
"""
import logging
from pathlib import Path
from typing import Tuple

from werkzeug.utils import secure_filename

from ...models import ExtractRequest
from ..grib import Grib1Error, Grib1Reader, SearchCriterion
from .decode_orchestrator import DecodeOrchestrator

logger = logging.getLogger(__name__)


class ExtractOrchestrator:
    """Coordina la extracción de mensajes crudos de un archivo subido."""

    @staticmethod
    def output_name(payload: ExtractRequest) -> str:
        if payload.output_name:
            name = secure_filename(payload.output_name)
            if name:
                return name
        return f"{Path(payload.filepath).stem}.subset.grb"

    @staticmethod
    def process_extract_request(payload: ExtractRequest) -> Tuple[bytes, str]:
        """
        Devuelve (bytes del sub-archivo, nombre sugerido).
        El contenido puede estar vacío si ningún mensaje coincide.
        """
        path = DecodeOrchestrator.get_filepath(payload.filepath, payload.session_id)
        criteria = [SearchCriterion.coerce(c) for c in payload.criteria]

        try:
            with open(path, "rb") as f:
                content = Grib1Reader(f).read_binary(criteria)
        except Grib1Error:
            logger.exception("Error extrayendo mensajes de %s", path.name)
            raise

        return content, ExtractOrchestrator.output_name(payload)
