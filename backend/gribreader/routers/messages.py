from fastapi import APIRouter, HTTPException
from fastapi.concurrency import run_in_threadpool

from ..models import DecodeRequest, DecodeResponse, InventoryRequest, InventoryResponse
from ..services.grib import Grib1Error
from ..services.orchestrators import DecodeOrchestrator

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("/decode", response_model=DecodeResponse)
async def decode_messages(payload: DecodeRequest):
    """
    Decodifica los mensajes del archivo cuyo (parámetro, nivel) coincide
    con alguno de los criterios. Los mensajes salen en orden de archivo.
    """
    try:
        # Ejecutar en threadpool (lectura de disco + desempaquetado)
        return await run_in_threadpool(
            DecodeOrchestrator.process_decode_request,
            payload
        )
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Grib1Error as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/inventory", response_model=InventoryResponse)
async def inventory(payload: InventoryRequest):
    """
    Lista todos los mensajes del archivo (PDS/GDS) sin desempaquetar datos.
    """
    try:
        return await run_in_threadpool(
            DecodeOrchestrator.process_inventory_request,
            payload
        )
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Grib1Error as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
