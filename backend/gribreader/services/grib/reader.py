"""
Lectura secuencial de mensajes GRIB1.

Un archivo GRIB es una concatenación de mensajes, cada uno con su longitud
en el header. No hay índice: se recorre el archivo mensaje a mensaje,
saltando con la longitud declarada hasta llegar al final.

Uso:
    with open("sample.grib", "rb") as f:
        msgs = decode(f, [(33, 700), (34, 700)])
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import (
    Any,
    BinaryIO,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
)

import numpy as np

from ...core.constants import GRIB_EDITION, GRIB_HEADER_LENGTH, GRIB_MAGIC
from .errors import (
    GribIOError,
    InvalidMessageLengthError,
    TruncatedFileError,
    WrongHeaderError,
    WrongVersionError,
)
from .primitives import read_u24_be
from .sections import (
    BinaryData,
    GridDescription,
    ProductDefinition,
    RotatedLatLon,
    decode_bds,
    decode_bitmap,
    decode_gds,
    decode_pds,
    read_exact,
    read_section,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchCriterion:
    """Par (parámetro, nivel) que debe coincidir exacto con la PDS."""
    parameter: int
    level: int

    def matches(self, pds: ProductDefinition) -> bool:
        return (
            pds.indicator_of_parameter_and_units == self.parameter
            and pds.level_or_layer_value == self.level
        )

    @classmethod
    def coerce(cls, value: Any) -> "SearchCriterion":
        """Acepta SearchCriterion, tuplas (param, level) o dicts/modelos con esos campos."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls(int(value["parameter"]), int(value["level"]))
        if hasattr(value, "parameter") and hasattr(value, "level"):
            return cls(int(value.parameter), int(value.level))
        parameter, level = value
        return cls(int(parameter), int(level))


@dataclass(frozen=True)
class Grib1Message:
    """Un mensaje GRIB1 decodificado."""
    length: int
    offset: int
    pds: ProductDefinition
    gds: Optional[GridDescription] = None
    bds: Optional[BinaryData] = None

    @property
    def grid(self) -> Optional[RotatedLatLon]:
        if self.gds is not None and isinstance(self.gds.data, RotatedLatLon):
            return self.gds.data
        return None

    @property
    def shape(self) -> Optional[Tuple[int, int]]:
        grid = self.grid
        if grid is None:
            return None
        return grid.number_of_lat_values, grid.number_of_lon_values

    @property
    def values(self) -> Optional[np.ndarray]:
        """Valores físicos: datos de la BDS divididos por 10^D (factor decimal)."""
        if self.bds is None:
            return None
        return self.bds.data * 10.0 ** -self.pds.decimal_scale_factor


Criteria = Iterable[Any]


def _coerce_criteria(criteria: Optional[Criteria]) -> Optional[List[SearchCriterion]]:
    if criteria is None:
        return None
    return [SearchCriterion.coerce(c) for c in criteria]


class Grib1Reader:
    """
    Lector de archivos GRIB edición 1 sobre un stream binario con seek.

    El stream lo abre y cierra quien llama; el lector solo mueve su posición,
    así que no se puede compartir el mismo stream entre dos lectores a la vez.
    """

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    # ------------------------------
    # IO
    # ------------------------------

    def _seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        try:
            return self.stream.seek(offset, whence)
        except OSError as e:
            raise GribIOError(f"IO Error: {e}") from e

    def file_size(self) -> int:
        return self._seek(0, os.SEEK_END)

    # ------------------------------
    # Un mensaje
    # ------------------------------

    def read_message(
        self,
        criteria: Optional[Sequence[SearchCriterion]],
        decode_data: bool = True,
        offset: int = 0,
    ) -> Tuple[int, Optional[Grib1Message]]:
        """
        Lee el mensaje que empieza en la posición actual del stream.

        Devuelve (longitud, mensaje). El mensaje es None si ningún criterio
        coincide; con criteria=None coinciden todos. La BDS solo se
        desempaqueta si hay coincidencia y decode_data es True.
        """
        header = read_exact(self.stream, GRIB_HEADER_LENGTH)

        if header[0:4] != GRIB_MAGIC:
            raise WrongHeaderError(header[0:4])

        length = read_u24_be(header, 4)

        version = header[7]
        if version != GRIB_EDITION:
            raise WrongVersionError(version)

        if length < GRIB_HEADER_LENGTH:
            raise InvalidMessageLengthError(length, offset)

        pds = decode_pds(read_section(self.stream))

        gds = None
        number_of_points = 0
        if pds.has_gds:
            gds = decode_gds(read_section(self.stream))
            if isinstance(gds.data, RotatedLatLon):
                number_of_points = gds.data.number_of_points

        if pds.has_bitmap:
            # La máscara no se aplica a los datos; solo se consume la sección
            decode_bitmap(read_section(self.stream))

        matched = criteria is None or any(c.matches(pds) for c in criteria)
        if not matched:
            return length, None

        bds = None
        if decode_data:
            bds = decode_bds(read_section(self.stream), number_of_points)

        return length, Grib1Message(length=length, offset=offset, pds=pds, gds=gds, bds=bds)

    # ------------------------------
    # Recorrido del archivo
    # ------------------------------

    def iter_messages(
        self,
        criteria: Optional[Criteria] = None,
        decode_data: bool = True,
    ) -> Iterator[Grib1Message]:
        """
        Recorre el archivo desde el offset 0 y va devolviendo los mensajes
        que coinciden, en orden de archivo.
        """
        search = _coerce_criteria(criteria)
        size = self.file_size()
        offset = 0
        scanned = 0

        while offset < size:
            self._seek(offset)
            length, message = self.read_message(search, decode_data=decode_data, offset=offset)
            if offset + length > size:
                raise TruncatedFileError(
                    f"Message at offset {offset} declares {length} bytes "
                    f"but the file has {size - offset} left"
                )
            scanned += 1
            logger.debug(
                "Mensaje %d en offset %d (%d bytes)%s",
                scanned, offset, length, " [match]" if message else "",
            )
            if message is not None:
                yield message
            offset += length

        logger.debug("Recorridos %d mensajes, %d bytes", scanned, offset)

    def read(self, criteria: Criteria) -> List[Grib1Message]:
        """Devuelve los mensajes que coinciden, con los datos desempaquetados."""
        result = list(self.iter_messages(criteria, decode_data=True))
        logger.info("GRIB decode: %d mensajes coinciden", len(result))
        return result

    def read_binary(self, criteria: Criteria) -> bytes:
        """
        Devuelve los bytes tal cual de los mensajes que coinciden,
        concatenados en orden de archivo (un sub-archivo GRIB válido).
        """
        out = bytearray()
        matches = 0
        for message in self.iter_messages(criteria, decode_data=False):
            # Volver al inicio del mensaje y copiarlo entero
            self._seek(message.offset)
            out += read_exact(self.stream, message.length)
            matches += 1
        logger.info("GRIB extract: %d mensajes, %d bytes", matches, len(out))
        return bytes(out)

    def scan(self) -> List[Grib1Message]:
        """Inventario: PDS/GDS de todos los mensajes, sin desempaquetar datos."""
        return list(self.iter_messages(None, decode_data=False))


def decode(stream: BinaryIO, criteria: Criteria) -> List[Grib1Message]:
    return Grib1Reader(stream).read(criteria)


def extract_raw(stream: BinaryIO, criteria: Criteria) -> bytes:
    return Grib1Reader(stream).read_binary(criteria)
