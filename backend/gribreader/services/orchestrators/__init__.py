"""
Orchestrators para coordinar lógica de negocio.
Separan concerns entre routers (HTTP) y servicios (decodificación GRIB).
"""
from .decode_orchestrator import DecodeOrchestrator
from .extract_orchestrator import ExtractOrchestrator

__all__ = [
    'DecodeOrchestrator',
    'ExtractOrchestrator',
]
