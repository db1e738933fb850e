"""
Modelos de dados para o motor de otimização RebarCut
"""

from typing import List, Optional, Dict, Union
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum

from .constants import DEFAULT_STOCK_LENGTH_MM, DEFAULT_KERF_MM, DEFAULT_MIN_REMNANT_MM
from .errors import CapacityError


class CutMode(str, Enum):
    """Estratégias de empacotamento disponíveis"""
    STANDARD = "standard"     # Sequencial, na ordem da lista
    OPTIMIZED = "optimized"   # First Fit Decreasing
    BEST_FIT = "best-fit"     # Best Fit Decreasing


class ShapeType(str, Enum):
    """Classificação da forma da peça"""
    STRAIGHT = "straight"
    BENT = "bent"


class CutItem(BaseModel):
    """Linha da lista de corte (uma marca de uma bitola)"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Identificador da linha")
    mark: str = Field(..., description="Marca da peça (ex.: B1001)")
    bar_size: str = Field(..., description="Bitola da barra (ex.: 15M)")
    length_mm: int = Field(..., description="Comprimento de corte (mm)")
    quantity: int = Field(..., description="Quantidade de peças")
    shape_type: Optional[Union[ShapeType, str]] = Field(None, description="Reta, dobrada ou outra forma")


class ExpandedPiece(BaseModel):
    """Uma peça individual a ser cortada"""
    model_config = ConfigDict(frozen=True)

    mark: str
    bar_size: str
    length_mm: int


class Cut(BaseModel):
    """Corte atribuído a uma barra"""
    mark: str = Field(..., description="Marca da peça")
    length_mm: int = Field(..., description="Comprimento do corte (mm)")


class StockBar(BaseModel):
    """Barra comercial consumida no plano de corte"""
    stock_length_mm: int = Field(..., description="Comprimento nominal da barra (mm)")
    cuts: List[Cut] = Field(default_factory=list, description="Cortes na ordem de execução")
    remainder_mm: int = Field(..., description="Comprimento restante (mm)")

    @classmethod
    def open(cls, stock_length_mm: int) -> "StockBar":
        return cls(stock_length_mm=stock_length_mm, remainder_mm=stock_length_mm)

    @property
    def used_mm(self) -> int:
        """Soma dos comprimentos cortados"""
        return sum(cut.length_mm for cut in self.cuts)

    def space_needed(self, length_mm: int, kerf_mm: int = 0) -> int:
        # O primeiro corte da barra não perde serra
        return length_mm + kerf_mm if self.cuts else length_mm

    def can_fit(self, length_mm: int, kerf_mm: int = 0) -> bool:
        return self.space_needed(length_mm, kerf_mm) <= self.remainder_mm

    def place(self, mark: str, length_mm: int, kerf_mm: int = 0) -> None:
        """Atribui um corte à barra, mantendo o restante >= 0"""
        needed = self.space_needed(length_mm, kerf_mm)
        if needed > self.remainder_mm:
            raise CapacityError(
                f"Corte {mark} ({length_mm}mm) não cabe: restam {self.remainder_mm}mm"
            )
        self.cuts.append(Cut(mark=mark, length_mm=length_mm))
        self.remainder_mm -= needed


class SkippedPiece(BaseModel):
    """Peça maior que a barra comercial, excluída do plano"""
    mark: str
    bar_size: str
    length_mm: int


class OptimizationResult(BaseModel):
    """Resultado por bitola"""
    bar_size: str = Field(..., description="Bitola")
    stock_length_mm: int = Field(..., description="Comprimento da barra comercial (mm)")
    bars: List[StockBar] = Field(..., description="Barras utilizadas")
    total_stock_bars: int = Field(..., description="Quantidade de barras")
    total_cuts: int = Field(..., description="Quantidade de cortes")
    total_stock_mm: int = Field(..., description="Comprimento total consumido (mm)")
    total_used_mm: int = Field(..., description="Comprimento total aproveitado (mm)")
    total_waste_mm: int = Field(..., description="Desperdício total (mm)")
    waste_kg: float = Field(..., description="Desperdício em massa (kg)")
    efficiency: float = Field(..., description="Aproveitamento percentual")
    stopper_moves: int = Field(..., description="Comprimentos distintos (ajustes de batente)")
    skipped_pieces: List[SkippedPiece] = Field(default_factory=list, description="Peças maiores que a barra")
    usable_remnant_count: int = Field(0, description="Sobras reaproveitáveis")
    scrap_count: int = Field(0, description="Sobras descartadas como sucata")
    mass_kg_per_m: float = Field(0.0, description="Massa linear usada (kg/m)")
    mass_known: bool = Field(True, description="Se a bitola consta na tabela de massas")


class OptimizationSummary(BaseModel):
    """Resumo completo de uma execução"""
    mode: CutMode = Field(..., description="Estratégia utilizada")
    stock_length_mm: int = Field(..., description="Comprimento da barra comercial (mm)")
    kerf_mm: int = Field(0, description="Espessura da serra (mm)")
    results: List[OptimizationResult] = Field(..., description="Resultados por bitola")
    total_stock_bars: int
    total_cuts: int
    total_stock_mm: int
    total_used_mm: int
    total_waste_mm: int
    total_waste_kg: float
    total_used_kg: float
    overall_efficiency: float
    total_stopper_moves: int
    skipped_pieces: List[SkippedPiece] = Field(default_factory=list)
    total_skipped: int = 0
    total_usable_remnants: int = 0
    total_scrap: int = 0
    unknown_mass_sizes: List[str] = Field(default_factory=list, description="Bitolas sem massa cadastrada")


class OptimizerConfig(BaseModel):
    """Parâmetros de uma execução"""
    stock_length_mm: int = Field(DEFAULT_STOCK_LENGTH_MM, description="Comprimento da barra comercial (mm)")
    kerf_mm: int = Field(DEFAULT_KERF_MM, description="Espessura da serra (mm)")
    min_remnant_mm: int = Field(DEFAULT_MIN_REMNANT_MM, description="Sobra mínima reaproveitável (mm)")
    mode: CutMode = Field(CutMode.STANDARD, description="Estratégia de empacotamento")


class OptimizationRequest(OptimizerConfig):
    """Requisição para otimização"""
    items: List[CutItem] = Field(..., description="Lista de corte")
    mass_table: Optional[Dict[str, float]] = Field(
        None, description="Massas (kg/m) adicionais ou substitutas por bitola"
    )


class ModeComparison(BaseModel):
    """Comparação entre as estratégias para a mesma lista"""
    summaries: List[OptimizationSummary] = Field(..., description="Um resumo por estratégia")
    recommended_mode: CutMode = Field(..., description="Estratégia com menor desperdício")
    waste_kg_saved: float = Field(..., description="Economia de massa frente ao modo standard (kg)")
    bars_saved: int = Field(..., description="Barras economizadas frente ao modo standard")
