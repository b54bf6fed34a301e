"""
Modelos para decodificación e inventario de mensajes GRIB1.
"""
from pydantic import BaseModel, Field, field_serializer
from typing import List, Optional
from datetime import datetime

from .common import SearchCriterionModel


class DecodeRequest(BaseModel):
    """Request para decodificar los mensajes que coinciden con los criterios."""
    filepath: str
    criteria: List[SearchCriterionModel] = Field(..., min_length=1)
    include_data: bool = Field(
        default=False,
        description="Si es True devuelve los valores desempaquetados de cada mensaje"
    )
    session_id: Optional[str] = Field(
        default=None,
        description="Identificador único de sesión para aislar archivos y cache"
    )


class InventoryRequest(BaseModel):
    """Request para listar todos los mensajes de un archivo."""
    filepath: str
    session_id: Optional[str] = None


class GridSummary(BaseModel):
    """Grid Description Section. Solo la grilla lat/lon rotada trae coordenadas."""
    data_representation_type: int
    handled: bool
    number_of_vertical_coordinate_values: int
    pvl_location: int
    number_of_lat_values: Optional[int] = None
    number_of_lon_values: Optional[int] = None
    latitude_of_first_grid_point: Optional[float] = None
    longitude_of_first_grid_point: Optional[float] = None
    latitude_of_last_grid_point: Optional[float] = None
    longitude_of_last_grid_point: Optional[float] = None
    latitude_of_southern_pole: Optional[float] = None
    longitude_of_southern_pole: Optional[float] = None


class DataSummary(BaseModel):
    """Binary Data Section: header + estadísticas de los valores."""
    data_flag: int
    binary_scale_factor: int
    reference_value: float
    bits_per_value: int
    count: int
    min: Optional[float] = None
    max: Optional[float] = None
    mean: Optional[float] = None
    values: Optional[List[float]] = None


class MessageSummary(BaseModel):
    """Un mensaje GRIB1 listo para JSON."""
    offset: int
    length: int
    center: int
    sub_center: int
    table_version: int
    parameter: int
    parameter_name: Optional[str] = None
    units: Optional[str] = None
    level_type: int
    level_type_name: Optional[str] = None
    level: int
    reference_time: Optional[datetime] = None
    forecast_time_unit: int
    p1: int
    p2: int
    time_range_indicator: int
    decimal_scale_factor: int
    has_gds: bool
    has_bitmap: bool
    grid: Optional[GridSummary] = None
    data: Optional[DataSummary] = None

    @field_serializer("reference_time", when_used="json")
    def _check_ts(self, v: Optional[datetime]) -> Optional[str]:
        return v.isoformat() if v else None


class DecodeResponse(BaseModel):
    """Respuesta de decodificación."""
    filepath: str
    messages: List[MessageSummary]
    warnings: Optional[List[str]] = []


class InventoryResponse(BaseModel):
    """Respuesta de inventario."""
    filepath: str
    size_bytes: int
    messages: List[MessageSummary]
