"""
Constantes de domínio do RebarCut
"""

from types import MappingProxyType

# Massa linear (kg/m) por bitola - barras métricas canadenses (RSIC)
MASS_KG_PER_M = MappingProxyType({
    "10M": 0.785,
    "15M": 1.570,
    "20M": 2.355,
    "25M": 3.925,
    "30M": 5.495,
    "35M": 7.850,
    "45M": 11.775,
    "55M": 19.625,
})

DEFAULT_STOCK_LENGTH_MM = 12000
DEFAULT_KERF_MM = 0
# Sobras abaixo deste comprimento são sucata
DEFAULT_MIN_REMNANT_MM = 300
