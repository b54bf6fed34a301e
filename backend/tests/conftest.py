import pytest

import grib_builder as gb
from gribreader.core.cache import DECODE_CACHE
from gribreader.core.config import settings

# Dos mensajes (33,700) y (34,700) sobre una grilla rotada 3x2,
# más un tercero (11,500) que no se pide en los tests de búsqueda
U_RAW = [0, 1, 2, 4095, 100, 7]
V_RAW = [10, 20, 30, 40, 50, 60]
T_RAW = [300, 301, 302, 303, 304, 305]


@pytest.fixture
def two_messages() -> bytes:
    return (
        gb.message(33, 700, raw=U_RAW, width=12, ni=3, nj=2, binary_scale=-1, reference=16.0)
        + gb.message(34, 700, raw=V_RAW, width=7, ni=3, nj=2, with_bitmap=True, reference=-1.0)
    )


@pytest.fixture
def three_messages(two_messages) -> bytes:
    return two_messages + gb.message(
        11, 500, raw=T_RAW, width=9, ni=3, nj=2, decimal_scale=1
    )


@pytest.fixture
def grib_file(tmp_path, three_messages):
    path = tmp_path / "sample.grib"
    path.write_bytes(three_messages)
    return path


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    d = tmp_path / "uploads"
    d.mkdir()
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(d))
    DECODE_CACHE.clear()
    yield d
    DECODE_CACHE.clear()
