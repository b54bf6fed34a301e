
# Header de 8 bytes: "GRIB" + longitud total (24 bits) + edición
GRIB_MAGIC = b"GRIB"
GRIB_EDITION = 1
GRIB_HEADER_LENGTH = 8

SECTION_LENGTH_BYTES = 3
BDS_HEADER_LENGTH = 11                  # los datos empaquetados empiezan en el byte 11

# Longitud mínima de cada sección para poder leer sus campos fijos
PDS_MIN_LENGTH = 28
GDS_MIN_LENGTH = 6
GDS_ROTATED_LATLON_MIN_LENGTH = 38
BITMAP_MIN_LENGTH = 6

# Octeto 8 de la PDS
FLAG_HAS_GDS = 0x80
FLAG_HAS_BITMAP = 0x40

REPRESENTATION_ROTATED_LATLON = 10
COORDINATE_SCALE = 0.001                # milésimas de grado

# Tabla 2 de WMO (versión 3), los más comunes
PARAMETER_NAMES = {
    1: "Pressure",
    2: "Pressure reduced to MSL",
    6: "Geopotential",
    7: "Geopotential height",
    11: "Temperature",
    17: "Dew point temperature",
    33: "u-component of wind",
    34: "v-component of wind",
    39: "Vertical velocity (pressure)",
    51: "Specific humidity",
    52: "Relative humidity",
    61: "Total precipitation",
    71: "Total cloud cover",
}

PARAMETER_UNITS = {
    1: "Pa",
    2: "Pa",
    6: "m2/s2",
    7: "gpm",
    11: "K",
    17: "K",
    33: "m/s",
    34: "m/s",
    39: "Pa/s",
    51: "kg/kg",
    52: "%",
    61: "kg/m2",
    71: "%",
}

# Tabla 3 de WMO
LEVEL_TYPES = {
    1: "surface",
    100: "isobaricInhPa",
    102: "meanSea",
    103: "heightAboveSea",
    105: "heightAboveGround",
    109: "hybrid",
}
