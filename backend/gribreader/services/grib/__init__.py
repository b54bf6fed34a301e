"""
Módulo de lectura de archivos GRIB edición 1.

Recorre los mensajes de un archivo sin índice, decodifica las secciones
PDS / GDS / BMS / BDS y desempaqueta los datos:
  - decode: mensajes decodificados que coinciden con (parámetro, nivel)
  - extract_raw: bytes crudos de esos mensajes (sub-archivo GRIB)
  - Grib1Reader: el lector, para recorridos más finos (inventario, iteración)

Solo se decodifica la grilla lat/lon rotada (tipo de representación 10).
"""

from .errors import (
    DataDecodeError,
    Grib1Error,
    GribIOError,
    InvalidMessageLengthError,
    TruncatedFileError,
    WrongHeaderError,
    WrongVersionError,
)
from .reader import Grib1Message, Grib1Reader, SearchCriterion, decode, extract_raw
from .sections import (
    BinaryData,
    Bitmap,
    GridDescription,
    ProductDefinition,
    RotatedLatLon,
    UnhandledRepresentation,
)

__all__ = [
    "decode",
    "extract_raw",
    "Grib1Reader",
    "Grib1Message",
    "SearchCriterion",
    # Secciones
    "ProductDefinition",
    "GridDescription",
    "RotatedLatLon",
    "UnhandledRepresentation",
    "Bitmap",
    "BinaryData",
    # Errores
    "Grib1Error",
    "GribIOError",
    "TruncatedFileError",
    "WrongHeaderError",
    "WrongVersionError",
    "InvalidMessageLengthError",
    "DataDecodeError",
]
