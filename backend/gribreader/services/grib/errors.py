"""
Errores que puede lanzar la lectura de archivos GRIB1.

Todos heredan de Grib1Error para que los orchestrators puedan capturarlos
en un solo except y traducirlos a una respuesta HTTP.
"""

from __future__ import annotations


class Grib1Error(Exception):
    """Error base de la lectura de archivos GRIB edición 1."""


class GribIOError(Grib1Error):
    """Falla de lectura/seek sobre el stream subyacente."""


class TruncatedFileError(GribIOError):
    """El archivo termina antes de lo que declara la longitud del mensaje."""


class WrongHeaderError(Grib1Error):
    """El mensaje no empieza con los bytes 'GRIB'."""

    def __init__(self, found: bytes = b""):
        self.found = found
        super().__init__(f"Wrong Grib1 header: {found!r}")


class WrongVersionError(Grib1Error):
    """La edición del mensaje no es 1."""

    def __init__(self, version: int):
        self.version = version
        super().__init__(
            f"Wrong Grib version {version}. Only version 1 is supported"
        )


class InvalidMessageLengthError(Grib1Error):
    """La longitud declarada no alcanza ni para el header del mensaje."""

    def __init__(self, length: int, offset: int):
        self.length = length
        self.offset = offset
        super().__init__(
            f"Invalid message length {length} at offset {offset}"
        )


class DataDecodeError(Grib1Error):
    """El bitstream de datos no tiene la cantidad de valores esperada."""
