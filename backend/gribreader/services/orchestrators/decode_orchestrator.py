"""
Orchestrator para decodificación e inventario de archivos GRIB1.
Contiene la lógica de negocio de los endpoints /messages.
"""
import logging
from pathlib import Path
from typing import List, Optional

import numpy as np

from ...core.cache import DECODE_CACHE
from ...core.config import settings
from ...core.constants import LEVEL_TYPES, PARAMETER_NAMES, PARAMETER_UNITS
from ...models import (
    DataSummary,
    DecodeRequest,
    DecodeResponse,
    GridSummary,
    InventoryRequest,
    InventoryResponse,
    MessageSummary,
)
from ..grib import Grib1Error, Grib1Message, Grib1Reader, SearchCriterion, RotatedLatLon
from ..grib_common import decode_cache_key, md5_file, resolve_upload_path

logger = logging.getLogger(__name__)


class DecodeOrchestrator:
    """
    Coordina la lectura de archivos GRIB1 subidos: resuelve el path,
    decodifica (con cache) y arma la respuesta.
    """

    @staticmethod
    def get_filepath(filepath: str, session_id: Optional[str] = None) -> Path:
        """
        Construye el path completo del archivo desde el request.

        Raises: FileNotFoundError si el archivo no existe
        """
        path = resolve_upload_path(filepath, session_id)
        if not path.is_file():
            raise FileNotFoundError(f"Archivo no encontrado: {filepath}")
        return path

    @staticmethod
    def decode_file(path: Path, criteria: List[SearchCriterion]) -> List[Grib1Message]:
        """Decodifica los mensajes que coinciden. Usa DECODE_CACHE."""
        cache_key = decode_cache_key(md5_file(path), criteria)
        cached = DECODE_CACHE.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit para %s", path.name)
            return cached

        try:
            with open(path, "rb") as f:
                messages = Grib1Reader(f).read(criteria)
        except Grib1Error:
            logger.exception("Error decodificando GRIB %s", path.name)
            raise

        try:
            DECODE_CACHE[cache_key] = messages
        except ValueError:
            # Resultado más grande que la cache completa
            logger.info("Resultado de %s demasiado grande para cachear", path.name)
        return messages

    @staticmethod
    def inventory_file(path: Path) -> List[MessageSummary]:
        """PDS/GDS de todos los mensajes del archivo, sin desempaquetar datos."""
        try:
            with open(path, "rb") as f:
                messages = Grib1Reader(f).scan()
        except Grib1Error:
            logger.exception("Error leyendo inventario de %s", path.name)
            raise
        return [DecodeOrchestrator.summarize_message(m) for m in messages]

    @staticmethod
    def summarize_grid(msg: Grib1Message) -> Optional[GridSummary]:
        gds = msg.gds
        if gds is None:
            return None
        summary = GridSummary(
            data_representation_type=gds.data_representation_type,
            handled=isinstance(gds.data, RotatedLatLon),
            number_of_vertical_coordinate_values=gds.number_of_vertical_coordinate_values,
            pvl_location=gds.pvl_location,
        )
        if isinstance(gds.data, RotatedLatLon):
            grid = gds.data
            summary = summary.model_copy(update={
                "number_of_lat_values": grid.number_of_lat_values,
                "number_of_lon_values": grid.number_of_lon_values,
                "latitude_of_first_grid_point": grid.latitude_of_first_grid_point,
                "longitude_of_first_grid_point": grid.longitude_of_first_grid_point,
                "latitude_of_last_grid_point": grid.latitude_of_last_grid_point,
                "longitude_of_last_grid_point": grid.longitude_of_last_grid_point,
                "latitude_of_southern_pole": grid.latitude_of_southern_pole,
                "longitude_of_southern_pole": grid.longitude_of_southern_pole,
            })
        return summary

    @staticmethod
    def summarize_data(
        msg: Grib1Message,
        include_values: bool = False,
        max_values: Optional[int] = None,
        warnings: Optional[List[str]] = None,
    ) -> Optional[DataSummary]:
        bds = msg.bds
        if bds is None:
            return None

        values = msg.values
        summary = DataSummary(
            data_flag=bds.data_flag,
            binary_scale_factor=bds.binary_scale_factor,
            reference_value=bds.reference_value,
            bits_per_value=bds.bits_per_value,
            count=int(values.size),
        )
        if values.size:
            summary.min = float(np.min(values))
            summary.max = float(np.max(values))
            summary.mean = float(np.mean(values))

        if include_values:
            if max_values is not None and values.size > max_values:
                if warnings is not None:
                    warnings.append(
                        f"Mensaje en offset {msg.offset}: {values.size} valores "
                        f"superan el máximo de {max_values}, se omiten"
                    )
            else:
                summary.values = values.tolist()
        return summary

    @staticmethod
    def summarize_message(
        msg: Grib1Message,
        include_values: bool = False,
        max_values: Optional[int] = None,
        warnings: Optional[List[str]] = None,
    ) -> MessageSummary:
        pds = msg.pds
        return MessageSummary(
            offset=msg.offset,
            length=msg.length,
            center=pds.identification_of_center,
            sub_center=pds.identification_of_sub_center,
            table_version=pds.parameter_table_version_number,
            parameter=pds.parameter,
            parameter_name=PARAMETER_NAMES.get(pds.parameter),
            units=PARAMETER_UNITS.get(pds.parameter),
            level_type=pds.indicator_of_type_of_level_or_layer,
            level_type_name=LEVEL_TYPES.get(pds.indicator_of_type_of_level_or_layer),
            level=pds.level,
            reference_time=pds.reference_time,
            forecast_time_unit=pds.forecast_time_unit,
            p1=pds.p1_period_of_time,
            p2=pds.p2_period_of_time,
            time_range_indicator=pds.time_range_indicator,
            decimal_scale_factor=pds.decimal_scale_factor,
            has_gds=pds.has_gds,
            has_bitmap=pds.has_bitmap,
            grid=DecodeOrchestrator.summarize_grid(msg),
            data=DecodeOrchestrator.summarize_data(msg, include_values, max_values, warnings),
        )

    @staticmethod
    def process_decode_request(payload: DecodeRequest) -> DecodeResponse:
        """
        Método principal que orquesta la decodificación.

        Raises:
            ValueError: request inválido
            FileNotFoundError: el archivo no existe
            Grib1Error: el archivo no es un GRIB1 válido
        """
        path = DecodeOrchestrator.get_filepath(payload.filepath, payload.session_id)
        criteria = [SearchCriterion.coerce(c) for c in payload.criteria]

        messages = DecodeOrchestrator.decode_file(path, criteria)

        warnings: List[str] = []
        if not messages:
            warnings.append("Ningún mensaje coincide con los criterios de búsqueda")

        summaries = [
            DecodeOrchestrator.summarize_message(
                m,
                include_values=payload.include_data,
                max_values=settings.MAX_VALUES_IN_RESPONSE,
                warnings=warnings,
            )
            for m in messages
        ]
        return DecodeResponse(filepath=payload.filepath, messages=summaries, warnings=warnings)

    @staticmethod
    def process_inventory_request(payload: InventoryRequest) -> InventoryResponse:
        path = DecodeOrchestrator.get_filepath(payload.filepath, payload.session_id)
        return InventoryResponse(
            filepath=payload.filepath,
            size_bytes=path.stat().st_size,
            messages=DecodeOrchestrator.inventory_file(path),
        )
