"""
Secciones de un mensaje GRIB1 y sus decodificadores.

Cada sección empieza con su propia longitud (3 bytes big-endian). Se lee la
longitud, se vuelve atrás y se lee la sección completa, así los offsets de
la documentación de WMO (FM 92 GRIB edición 1) valen tal cual sobre el bloque.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import BinaryIO, Optional, Union

import numpy as np

from ...core.constants import (
    BDS_HEADER_LENGTH,
    BITMAP_MIN_LENGTH,
    COORDINATE_SCALE,
    FLAG_HAS_BITMAP,
    FLAG_HAS_GDS,
    GDS_MIN_LENGTH,
    GDS_ROTATED_LATLON_MIN_LENGTH,
    PDS_MIN_LENGTH,
    REPRESENTATION_ROTATED_LATLON,
    SECTION_LENGTH_BYTES,
)
from .bitstream import BitReader
from .errors import DataDecodeError, GribIOError
from .primitives import (
    read_i16_be,
    read_i24_be,
    read_ibm_float,
    read_u16_be,
    read_u24_be,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductDefinition:
    """Sección 1: Product Definition Section (PDS)."""
    parameter_table_version_number: int
    identification_of_center: int
    generating_process_id_number: int
    grid_identification: int
    flag: int
    indicator_of_parameter_and_units: int
    indicator_of_type_of_level_or_layer: int
    level_or_layer_value: int
    year: int
    month: int
    day: int
    hour: int
    minute: int
    forecast_time_unit: int
    p1_period_of_time: int
    p2_period_of_time: int
    time_range_indicator: int
    number_missing_from_averages_or_accumulations: int
    century_of_initial_reference_time: int
    identification_of_sub_center: int
    decimal_scale_factor: int

    @property
    def has_gds(self) -> bool:
        return bool(self.flag & FLAG_HAS_GDS)

    @property
    def has_bitmap(self) -> bool:
        return bool(self.flag & FLAG_HAS_BITMAP)

    @property
    def parameter(self) -> int:
        return self.indicator_of_parameter_and_units

    @property
    def level(self) -> int:
        return self.level_or_layer_value

    @property
    def reference_time(self) -> Optional[datetime]:
        """Fecha de referencia; el año viene partido en siglo + año del siglo."""
        year = (self.century_of_initial_reference_time - 1) * 100 + self.year
        try:
            return datetime(year, self.month, self.day, self.hour, self.minute)
        except ValueError:
            return None


@dataclass(frozen=True)
class RotatedLatLon:
    """Grilla lat/lon rotada (tipo de representación 10). Coordenadas en grados."""
    number_of_lat_values: int
    number_of_lon_values: int
    latitude_of_first_grid_point: float
    longitude_of_first_grid_point: float
    latitude_of_last_grid_point: float
    longitude_of_last_grid_point: float
    latitude_of_southern_pole: float
    longitude_of_southern_pole: float

    @property
    def number_of_points(self) -> int:
        return self.number_of_lat_values * self.number_of_lon_values


@dataclass(frozen=True)
class UnhandledRepresentation:
    """Cualquier tipo de representación que no sabemos decodificar."""
    data_representation_type: int
    raw: bytes = field(repr=False)


DataRepresentation = Union[RotatedLatLon, UnhandledRepresentation]


@dataclass(frozen=True)
class GridDescription:
    """Sección 2: Grid Description Section (GDS)."""
    number_of_vertical_coordinate_values: int
    pvl_location: int
    data_representation_type: int
    data: DataRepresentation


@dataclass(frozen=True)
class Bitmap:
    """Sección 3: Bit Map Section. Solo el header, la máscara no se usa."""
    number_of_unused_bits_at_end_of_section3: int
    table_reference: int


@dataclass(frozen=True)
class BinaryData:
    """Sección 4: Binary Data Section (BDS)."""
    data_flag: int
    binary_scale_factor: int
    reference_value: float
    bits_per_value: int
    data: np.ndarray = field(repr=False, compare=False)


# ------------------------------
# Lectura desde el stream
# ------------------------------

def read_exact(stream: BinaryIO, size: int) -> bytes:
    """Lee exactamente `size` bytes o lanza GribIOError."""
    try:
        buf = stream.read(size)
    except OSError as e:
        raise GribIOError(f"IO Error: {e}") from e
    if len(buf) != size:
        raise GribIOError(
            f"Unexpected end of file: expected {size} bytes, got {len(buf)}"
        )
    return buf


def read_section(stream: BinaryIO) -> bytes:
    """
    Lee una sección completa (incluida su longitud) desde la posición actual.

    La longitud se espía y se retrocede, de modo que el bloque devuelto
    empieza en el byte 0 de la sección.
    """
    length = read_u24_be(read_exact(stream, SECTION_LENGTH_BYTES))
    try:
        stream.seek(-SECTION_LENGTH_BYTES, os.SEEK_CUR)
    except OSError as e:
        raise GribIOError(f"IO Error: {e}") from e
    return read_exact(stream, length)


# ------------------------------
# Decodificadores
# ------------------------------

def _require_length(block: bytes, minimum: int, section: str) -> None:
    if len(block) < minimum:
        raise DataDecodeError(
            f"{section} section too short: {len(block)} bytes, at least {minimum} needed"
        )


def decode_pds(block: bytes) -> ProductDefinition:
    _require_length(block, PDS_MIN_LENGTH, "Product definition")
    return ProductDefinition(
        parameter_table_version_number=block[3],
        identification_of_center=block[4],
        generating_process_id_number=block[5],
        grid_identification=block[6],
        flag=block[7],
        indicator_of_parameter_and_units=block[8],
        indicator_of_type_of_level_or_layer=block[9],
        level_or_layer_value=read_u16_be(block, 10),
        year=block[12],
        month=block[13],
        day=block[14],
        hour=block[15],
        minute=block[16],
        forecast_time_unit=block[17],
        p1_period_of_time=block[18],
        p2_period_of_time=block[19],
        time_range_indicator=block[20],
        number_missing_from_averages_or_accumulations=block[23],
        century_of_initial_reference_time=block[24],
        identification_of_sub_center=block[25],
        decimal_scale_factor=read_i16_be(block, 26),
    )


def _coordinate(block: bytes, offset: int) -> float:
    return read_i24_be(block, offset) * COORDINATE_SCALE


def decode_gds(block: bytes) -> GridDescription:
    """
    Decodifica el header de la GDS y, si es una grilla lat/lon rotada,
    también su contenido. Los demás tipos quedan como UnhandledRepresentation.
    """
    _require_length(block, GDS_MIN_LENGTH, "Grid description")
    representation = block[5]

    data: DataRepresentation
    if representation == REPRESENTATION_ROTATED_LATLON:
        _require_length(block, GDS_ROTATED_LATLON_MIN_LENGTH, "Rotated lat/lon grid description")
        data = RotatedLatLon(
            number_of_lat_values=read_u16_be(block, 6),
            number_of_lon_values=read_u16_be(block, 8),
            latitude_of_first_grid_point=_coordinate(block, 10),
            longitude_of_first_grid_point=_coordinate(block, 13),
            latitude_of_last_grid_point=_coordinate(block, 17),
            longitude_of_last_grid_point=_coordinate(block, 20),
            latitude_of_southern_pole=_coordinate(block, 32),
            longitude_of_southern_pole=_coordinate(block, 35),
        )
    else:
        logger.debug("Tipo de representación no soportado: %d", representation)
        data = UnhandledRepresentation(
            data_representation_type=representation, raw=bytes(block)
        )

    return GridDescription(
        number_of_vertical_coordinate_values=block[3],
        pvl_location=block[4],
        data_representation_type=representation,
        data=data,
    )


def decode_bitmap(block: bytes) -> Bitmap:
    _require_length(block, BITMAP_MIN_LENGTH, "Bitmap")
    return Bitmap(
        number_of_unused_bits_at_end_of_section3=block[3],
        table_reference=read_u16_be(block, 4),
    )


def decode_bds(block: bytes, number_of_data_points: int) -> BinaryData:
    """
    Decodifica la BDS y desempaqueta exactamente `number_of_data_points`
    valores: valor = referencia + X * 2^E.

    Lanza DataDecodeError si el bitstream se agota antes.
    """
    _require_length(block, BDS_HEADER_LENGTH, "Binary data")
    binary_scale = read_i16_be(block, 4)
    reference = read_ibm_float(block, 6)
    bits_per_value = block[10]

    reader = BitReader(block[BDS_HEADER_LENGTH:])
    try:
        packed = reader.read_array(bits_per_value, number_of_data_points)
    except ValueError as e:
        raise DataDecodeError(str(e)) from e

    values = reference + packed.astype(np.float64) * 2.0 ** binary_scale

    return BinaryData(
        data_flag=block[3],
        binary_scale_factor=binary_scale,
        reference_value=reference,
        bits_per_value=bits_per_value,
        data=values,
    )
