from fastapi import APIRouter, HTTPException, Response
from fastapi.concurrency import run_in_threadpool

from ..models import ExtractRequest
from ..services.grib import Grib1Error
from ..services.orchestrators import ExtractOrchestrator

router = APIRouter(prefix="/extract", tags=["extract"])


@router.post("")
async def extract(payload: ExtractRequest):
    """
    Devuelve un sub-archivo GRIB1 con los mensajes que coinciden,
    copiados byte a byte y en orden de archivo.
    404 si ningún mensaje coincide.
    """
    try:
        content, filename = await run_in_threadpool(
            ExtractOrchestrator.process_extract_request,
            payload
        )
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Grib1Error as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not content:
        raise HTTPException(status_code=404, detail="Ningún mensaje coincide con los criterios de búsqueda")

    return Response(
        content=content,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
