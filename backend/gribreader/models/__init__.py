"""
Modelos de dominio de la aplicación.
Divididos por responsabilidad funcional.
"""
from .common import SearchCriterionModel
from .messages import (
    DecodeRequest,
    InventoryRequest,
    GridSummary,
    DataSummary,
    MessageSummary,
    DecodeResponse,
    InventoryResponse,
)
from .extract import ExtractRequest

__all__ = [
    # Common
    'SearchCriterionModel',
    # Messages
    'DecodeRequest',
    'InventoryRequest',
    'GridSummary',
    'DataSummary',
    'MessageSummary',
    'DecodeResponse',
    'InventoryResponse',
    # Extract
    'ExtractRequest',
]
