from pydantic_settings import BaseSettings
from typing import List
import os

class Settings(BaseSettings):
    APP_NAME: str = "GRIB1 Reader"
    FRONTEND_ORIGINS: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    UPLOAD_DIR: str = os.path.join(os.getcwd(), "gribreader/storage/uploads")

    # Reglas de upload
    ALLOWED_EXTENSIONS: List[str] = [".grb", ".grib", ".grb1", ".grib1"]
    MAX_UPLOAD_MB: int = 500

    # Cache de mensajes decodificados (en MB de datos desempaquetados)
    DECODE_CACHE_MB: int = 200
    # Tope de valores devueltos en JSON por mensaje
    MAX_VALUES_IN_RESPONSE: int = 1_000_000

    class Config:
        env_file = ".env"

settings = Settings()
