"""
Modelos comunes compartidos entre diferentes endpoints.
"""
from pydantic import BaseModel, Field


class SearchCriterionModel(BaseModel):
    """Criterio de búsqueda: parámetro (tabla 2) y valor de nivel exactos."""
    parameter: int = Field(..., ge=0, le=255, description="Indicador de parámetro, ej 33 (viento u)")
    level: int = Field(..., ge=0, le=65535, description="Valor del nivel, ej 700 (hPa)")
