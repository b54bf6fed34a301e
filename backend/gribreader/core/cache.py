from cachetools import LRUCache

from .config import settings

# Lo que pesa un mensaje sin datos (PDS/GDS), aproximado
_MESSAGE_OVERHEAD = 1024


def _nbytes_messages(messages) -> int:
    """Calcula el tamaño en bytes de una lista de Grib1Message decodificados."""
    n = 0
    for msg in messages:
        n += _MESSAGE_OVERHEAD
        if msg.bds is not None:
            n += msg.bds.data.nbytes
    return n


DECODE_CACHE = LRUCache(
    maxsize=settings.DECODE_CACHE_MB * 1024 * 1024,
    getsizeof=_nbytes_messages,
)
