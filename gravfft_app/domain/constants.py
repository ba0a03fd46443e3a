# """
# Physical constants shared by the spectral engines (SI units unless noted).
# """
from __future__ import annotations

NEWTON_G = 6.674e-11  # m^3 kg^-1 s^-2
YOUNGS_MODULUS = 7.0e10  # Pa
POISSONS_RATIO = 0.25
EARTH_RADIUS_M = 6371008.7714  # GRS-80 sphere
METERS_PER_DEGREE = 111195.07973436874  # 2πR / 360 on the sphere above

# Moritz (1980) IGF gravity at 45° latitude
G45_MGAL = 980619.9203
MGAL_PER_MS2 = 1.0e5

# Te values above this are read as flexural rigidity D (N·m)
RIGIDITY_THRESHOLD = 1.0e10

# Unit scales applied to the Parker kernel
EOTVOS_PER_MGAL_PER_M = 1.0e4  # 1 mGal/m = 1e4 Eötvös
MICRORADIAN = 1.0e6
