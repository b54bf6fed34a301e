"""
Modelos para la extracción de sub-archivos GRIB1.
"""
from pydantic import BaseModel, Field
from typing import List, Optional

from .common import SearchCriterionModel


class ExtractRequest(BaseModel):
    """Request para extraer los mensajes que coinciden, byte a byte."""
    filepath: str
    criteria: List[SearchCriterionModel] = Field(..., min_length=1)
    output_name: Optional[str] = Field(
        default=None,
        description="Nombre del archivo descargado. Default <filepath>.subset.grb"
    )
    session_id: Optional[str] = None
