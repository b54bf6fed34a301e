"""
Lectura de enteros empaquetados a nivel de bit (sección de datos binarios).

Los valores se guardan uno detrás del otro, big-endian, bit más
significativo primero y sin relleno entre valores, así que el cursor casi
nunca queda alineado a byte. El cursor es explícito: índice de byte más
desplazamiento de bit (0-7).
"""

from __future__ import annotations

import numpy as np

from .errors import DataDecodeError

MAX_WIDTH = 32

# 32 bits de ancho + hasta 7 de desplazamiento entran en una ventana de 5 bytes
_WINDOW_BYTES = 5


class BitReader:
    """Cursor de bits sobre un buffer de bytes."""

    def __init__(self, buffer):
        self._data = np.frombuffer(bytes(buffer), dtype=np.uint8)
        self.byte_pos = 0
        self.bit_pos = 0

    @property
    def position(self) -> int:
        """Posición absoluta del cursor en bits."""
        return self.byte_pos * 8 + self.bit_pos

    @property
    def bits_remaining(self) -> int:
        return self._data.size * 8 - self.position

    def _advance(self, nbits: int) -> None:
        pos = self.position + nbits
        self.byte_pos, self.bit_pos = pos >> 3, pos & 7

    def _check(self, width: int, count: int) -> None:
        if not 0 <= width <= MAX_WIDTH:
            raise ValueError(f"Bit width must be between 0 and {MAX_WIDTH}, got {width}")
        if count < 0:
            raise ValueError(f"Invalid value count: {count}")
        if width * count > self.bits_remaining:
            raise DataDecodeError(
                f"Tried to decode more data than we have: {count} values of "
                f"{width} bits requested, {self.bits_remaining} bits left"
            )

    def read(self, width: int) -> int:
        """Lee un entero sin signo de `width` bits y avanza el cursor."""
        self._check(width, 1)
        if width == 0:
            return 0
        start = self.position
        end = start + width
        first, last = start >> 3, (end - 1) >> 3
        chunk = int.from_bytes(self._data[first:last + 1].tobytes(), "big")
        spare = (last - first + 1) * 8 - (end - first * 8)
        self._advance(width)
        return (chunk >> spare) & ((1 << width) - 1)

    def read_array(self, width: int, count: int) -> np.ndarray:
        """
        Lee `count` enteros de `width` bits de una sola vez.

        Calcula la posición en bits de cada valor, arma una ventana de 5 bytes
        a partir del byte donde empieza y recorta los bits con shift + máscara.
        Si no alcanzan los bits lanza DataDecodeError sin mover el cursor.
        """
        self._check(width, count)
        if width == 0 or count == 0:
            return np.zeros(count, dtype=np.uint32)

        offsets = self.position + np.arange(count, dtype=np.int64) * width
        byte_idx = offsets >> 3
        shift = (offsets & 7).astype(np.uint64)

        padded = np.concatenate([self._data, np.zeros(_WINDOW_BYTES, dtype=np.uint8)])
        window = np.zeros(count, dtype=np.uint64)
        for k in range(_WINDOW_BYTES):
            window = (window << np.uint64(8)) | padded[byte_idx + k].astype(np.uint64)

        spare = np.uint64(_WINDOW_BYTES * 8 - width) - shift
        mask = np.uint64((1 << width) - 1)
        values = (window >> spare) & mask

        self._advance(width * count)
        return values.astype(np.uint32)


def unpack_bits(buffer, width: int, count: int) -> np.ndarray:
    """Desempaqueta `count` enteros de `width` bits desde el inicio del buffer."""
    return BitReader(buffer).read_array(width, count)
