"""
Conversión de bytes crudos a los tipos numéricos de GRIB1.

Los enteros con signo de GRIB1 usan signo-magnitud: el bit alto del primer
byte es solo el signo, el resto es la magnitud. No es complemento a dos.
"""

from __future__ import annotations


def read_u16_be(data, offset: int = 0) -> int:
    return (data[offset] << 8) | data[offset + 1]


def read_u24_be(data, offset: int = 0) -> int:
    return (data[offset] << 16) | (data[offset + 1] << 8) | data[offset + 2]


def read_i16_be(data, offset: int = 0) -> int:
    """Entero de 16 bits en signo-magnitud."""
    value = ((data[offset] & 0x7F) << 8) | data[offset + 1]
    if data[offset] & 0x80:
        value = -value
    return value


def read_i24_be(data, offset: int = 0) -> int:
    """Entero de 24 bits en signo-magnitud."""
    value = (
        ((data[offset] & 0x7F) << 16)
        | (data[offset + 1] << 8)
        | data[offset + 2]
    )
    if data[offset] & 0x80:
        value = -value
    return value


def read_ibm_float(data, offset: int = 0) -> float:
    """
    Float IBM de simple precisión (4 bytes).

    byte 0: bit de signo + exponente base 16 con sesgo 64.
    bytes 1-3: mantisa de 24 bits sin signo.
    valor = signo * mantisa * 2^-24 * 16^(exponente - 64)
    """
    sign = -1.0 if data[offset] & 0x80 else 1.0
    exponent = data[offset] & 0x7F
    mantissa = read_u24_be(data, offset + 1)
    return sign * mantissa * 2.0 ** -24 * 16.0 ** (exponent - 64)
