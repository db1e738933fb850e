"""
Exceções do RebarCut
"""


class RebarCutError(Exception):
    """Erro base do motor de otimização."""


class InvalidInputError(RebarCutError, ValueError):
    """Entrada inválida (comprimento, quantidade, modo ou configuração)."""


class CapacityError(RebarCutError):
    """Corte não cabe na barra - violaria o comprimento restante."""
