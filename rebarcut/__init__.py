"""
RebarCut - Otimização de Corte de Vergalhões

Motor de corte 1D que distribui as peças de uma lista de corte em barras
comerciais, por bitola, reportando desperdício, aproveitamento e ajustes
de batente.
"""

from .core import CutOptimizer, run_optimization
from .errors import RebarCutError, InvalidInputError, CapacityError
from .models import (
    CutItem, CutMode, ShapeType, StockBar, SkippedPiece,
    OptimizationResult, OptimizationSummary, OptimizerConfig, OptimizationRequest, ModeComparison
)

__version__ = "1.0.0"

__all__ = [
    "CutOptimizer",
    "run_optimization",
    "RebarCutError",
    "InvalidInputError",
    "CapacityError",
    "CutItem",
    "CutMode",
    "ShapeType",
    "StockBar",
    "SkippedPiece",
    "OptimizationResult",
    "OptimizationSummary",
    "OptimizerConfig",
    "OptimizationRequest",
    "ModeComparison",
]
