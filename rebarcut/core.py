"""
Núcleo do RebarCut com os algoritmos de otimização de corte 1D
"""

import logging
import re
import time
from bisect import bisect_left, insort
from types import MappingProxyType
from typing import List, Dict, Tuple, Optional, Mapping, Sequence, Union

from .constants import MASS_KG_PER_M, DEFAULT_KERF_MM, DEFAULT_MIN_REMNANT_MM
from .errors import InvalidInputError
from .models import (
    CutItem, CutMode, ExpandedPiece, StockBar, SkippedPiece,
    OptimizationResult, OptimizationSummary, OptimizerConfig, ModeComparison
)

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"(\d+)")


def natural_size_key(bar_size: str) -> Tuple[list, str]:
    """Chave de ordenação natural: 10M < 15M < 100M"""
    parts = [int(token) if token.isdigit() else token.lower() for token in _DIGITS.split(bar_size)]
    return parts, bar_size


def expand_items(items: Sequence[CutItem]) -> List[ExpandedPiece]:
    """Expande cada linha em `quantity` peças, mantendo a ordem da lista"""
    expanded = []
    for item in items:
        for _ in range(item.quantity):
            expanded.append(ExpandedPiece(mark=item.mark, bar_size=item.bar_size, length_mm=item.length_mm))
    return expanded


def group_by_size(pieces: Sequence[ExpandedPiece]) -> Dict[str, List[ExpandedPiece]]:
    """Agrupa as peças por bitola, em ordem natural de bitola"""
    groups: Dict[str, List[ExpandedPiece]] = {}
    for piece in pieces:
        groups.setdefault(piece.bar_size, []).append(piece)
    return {size: groups[size] for size in sorted(groups, key=natural_size_key)}


def partition_pieces(pieces: Sequence[ExpandedPiece], stock_length_mm: int) -> Tuple[List[ExpandedPiece], List[SkippedPiece]]:
    """Separa as peças maiores que a barra comercial"""
    valid = []
    skipped = []
    for piece in pieces:
        if piece.length_mm > stock_length_mm:
            skipped.append(SkippedPiece(mark=piece.mark, bar_size=piece.bar_size, length_mm=piece.length_mm))
        else:
            valid.append(piece)
    return valid, skipped


def count_stopper_moves(bars: Sequence[StockBar]) -> int:
    """Quantidade de comprimentos distintos (cada um exige mover o batente)"""
    return len({cut.length_mm for bar in bars for cut in bar.cuts})


class _FirstFitIndex:
    """
    Árvore de segmentos com o maior restante de cada intervalo de barras.

    Encontra a primeira barra (ordem de abertura) com espaço suficiente em
    O(log n), o mesmo resultado de uma varredura linear.
    """

    def __init__(self, capacity: int):
        size = 1
        while size < max(capacity, 1):
            size *= 2
        self._size = size
        self._tree = [-1] * (2 * size)

    def update(self, position: int, remainder_mm: int) -> None:
        i = position + self._size
        self._tree[i] = remainder_mm
        i //= 2
        while i:
            self._tree[i] = max(self._tree[2 * i], self._tree[2 * i + 1])
            i //= 2

    def first_fit(self, needed_mm: int) -> Optional[int]:
        if self._tree[1] < needed_mm:
            return None
        i = 1
        while i < self._size:
            i = 2 * i if self._tree[2 * i] >= needed_mm else 2 * i + 1
        return i - self._size


class CutOptimizer:
    """
    Motor de otimização de corte de vergalhões
    """

    def __init__(
        self,
        mass_table: Optional[Mapping[str, float]] = None,
        kerf_mm: int = DEFAULT_KERF_MM,
        min_remnant_mm: int = DEFAULT_MIN_REMNANT_MM,
    ):
        """
        Inicializa o otimizador

        Args:
            mass_table: Massa linear (kg/m) por bitola; padrão RSIC
            kerf_mm: Espessura da serra em mm
            min_remnant_mm: Sobra mínima considerada reaproveitável
        """
        if kerf_mm < 0:
            raise InvalidInputError(f"Espessura da serra não pode ser negativa: {kerf_mm}")
        if min_remnant_mm < 0:
            raise InvalidInputError(f"Sobra mínima não pode ser negativa: {min_remnant_mm}")

        table = dict(MASS_KG_PER_M if mass_table is None else mass_table)
        for bar_size, mass in table.items():
            if mass < 0:
                raise InvalidInputError(f"Massa linear negativa para a bitola {bar_size}: {mass}")

        self.mass_table = MappingProxyType(table)
        self.kerf_mm = kerf_mm
        self.min_remnant_mm = min_remnant_mm
        self.algorithms = {
            CutMode.STANDARD: self._standard_cut,
            CutMode.OPTIMIZED: self._first_fit_decreasing,
            CutMode.BEST_FIT: self._best_fit_decreasing,
        }

    @classmethod
    def from_config(cls, config: OptimizerConfig, mass_table: Optional[Mapping[str, float]] = None) -> "CutOptimizer":
        return cls(mass_table=mass_table, kerf_mm=config.kerf_mm, min_remnant_mm=config.min_remnant_mm)

    def optimize(
        self,
        items: Sequence[CutItem],
        stock_length_mm: int,
        mode: Union[CutMode, str] = CutMode.STANDARD,
    ) -> OptimizationSummary:
        """
        Gera o plano de corte para a lista

        Args:
            items: Linhas da lista de corte
            stock_length_mm: Comprimento da barra comercial
            mode: Estratégia de empacotamento

        Returns:
            Resumo com os resultados por bitola
        """
        mode = self._resolve_mode(mode)
        self._validate(items, stock_length_mm)
        start_time = time.perf_counter()

        groups = group_by_size(expand_items(items))
        results = []
        for bar_size, pieces in groups.items():
            valid, skipped = partition_pieces(pieces, stock_length_mm)
            bars = self.algorithms[mode](valid, stock_length_mm)
            result = self._build_result(bar_size, stock_length_mm, bars, skipped)
            logger.debug(
                "Bitola %s: %d peças em %d barras, %d ignoradas, aproveitamento %.2f%%",
                bar_size, result.total_cuts, result.total_stock_bars, len(skipped), result.efficiency,
            )
            results.append(result)

        summary = self._summarize(mode, stock_length_mm, results)
        logger.info(
            "Otimização %s concluída: %d barras, %d cortes, %.2f%% em %.1f ms",
            mode.value, summary.total_stock_bars, summary.total_cuts,
            summary.overall_efficiency, (time.perf_counter() - start_time) * 1000,
        )
        if summary.total_skipped:
            logger.warning(
                "%d peças excedem a barra de %dmm e foram ignoradas", summary.total_skipped, stock_length_mm
            )
        return summary

    def run(self, items: Sequence[CutItem], config: OptimizerConfig) -> OptimizationSummary:
        """Executa com os parâmetros de uma configuração"""
        return self.optimize(items, config.stock_length_mm, config.mode)

    def compare_modes(self, items: Sequence[CutItem], stock_length_mm: int) -> ModeComparison:
        """Executa todas as estratégias e recomenda a de menor desperdício"""
        summaries = [self.optimize(items, stock_length_mm, mode) for mode in CutMode]
        modes = list(CutMode)
        best = min(
            summaries,
            key=lambda s: (s.total_waste_kg, s.total_waste_mm, s.total_stock_bars, modes.index(s.mode)),
        )
        standard = summaries[0]
        return ModeComparison(
            summaries=summaries,
            recommended_mode=best.mode,
            waste_kg_saved=standard.total_waste_kg - best.total_waste_kg,
            bars_saved=standard.total_stock_bars - best.total_stock_bars,
        )

    def _resolve_mode(self, mode: Union[CutMode, str]) -> CutMode:
        try:
            return CutMode(mode)
        except ValueError:
            valid = ", ".join(m.value for m in CutMode)
            raise InvalidInputError(f"Modo desconhecido: {mode!r} (use {valid})") from None

    def _validate(self, items: Sequence[CutItem], stock_length_mm: int) -> None:
        if stock_length_mm <= 0:
            raise InvalidInputError(f"Comprimento da barra deve ser positivo: {stock_length_mm}")
        for item in items:
            if item.length_mm <= 0:
                raise InvalidInputError(f"Item {item.id} ({item.mark}): comprimento deve ser positivo")
            if item.quantity < 0:
                raise InvalidInputError(f"Item {item.id} ({item.mark}): quantidade negativa")

    def _standard_cut(self, pieces: Sequence[ExpandedPiece], stock_length_mm: int) -> List[StockBar]:
        """Corte sequencial: na ordem da lista, sem voltar a barras anteriores"""
        bars = []
        current = None

        for piece in pieces:
            if current is None or not current.can_fit(piece.length_mm, self.kerf_mm):
                current = StockBar.open(stock_length_mm)
                bars.append(current)
            current.place(piece.mark, piece.length_mm, self.kerf_mm)

        return bars

    def _first_fit_decreasing(self, pieces: Sequence[ExpandedPiece], stock_length_mm: int) -> List[StockBar]:
        """First Fit Decreasing: maior primeiro, na primeira barra que couber"""
        ordered = sorted(pieces, key=lambda p: p.length_mm, reverse=True)
        bars: List[StockBar] = []
        index = _FirstFitIndex(len(ordered))

        for piece in ordered:
            # Barras no índice já têm cortes, então sempre pagam a serra
            position = index.first_fit(piece.length_mm + self.kerf_mm)
            if position is None:
                bars.append(StockBar.open(stock_length_mm))
                position = len(bars) - 1
            bar = bars[position]
            bar.place(piece.mark, piece.length_mm, self.kerf_mm)
            index.update(position, bar.remainder_mm)

        return bars

    def _best_fit_decreasing(self, pieces: Sequence[ExpandedPiece], stock_length_mm: int) -> List[StockBar]:
        """Best Fit Decreasing: maior primeiro, na barra que ficar com menor sobra"""
        ordered = sorted(pieces, key=lambda p: p.length_mm, reverse=True)
        bars: List[StockBar] = []
        # (restante, posição) ordenado; empate fica com a barra mais antiga
        open_bars: List[Tuple[int, int]] = []

        for piece in ordered:
            slot = bisect_left(open_bars, (piece.length_mm + self.kerf_mm, -1))
            if slot < len(open_bars):
                _, position = open_bars.pop(slot)
            else:
                bars.append(StockBar.open(stock_length_mm))
                position = len(bars) - 1
            bar = bars[position]
            bar.place(piece.mark, piece.length_mm, self.kerf_mm)
            insort(open_bars, (bar.remainder_mm, position))

        return bars

    def _mass_rate(self, bar_size: str) -> Tuple[float, bool]:
        mass = self.mass_table.get(bar_size)
        if mass is None:
            return 0.0, False
        return mass, True

    def _classify_remainders(self, bars: Sequence[StockBar]) -> Tuple[int, int]:
        usable = 0
        scrap = 0
        for bar in bars:
            if bar.remainder_mm >= self.min_remnant_mm and bar.remainder_mm > 0:
                usable += 1
            elif bar.remainder_mm > 0:
                scrap += 1
        return usable, scrap

    def _build_result(
        self,
        bar_size: str,
        stock_length_mm: int,
        bars: List[StockBar],
        skipped: List[SkippedPiece],
    ) -> OptimizationResult:
        """Calcula as métricas de uma bitola"""
        total_cuts = sum(len(bar.cuts) for bar in bars)
        total_stock_mm = len(bars) * stock_length_mm
        total_used_mm = sum(bar.used_mm for bar in bars)
        total_waste_mm = total_stock_mm - total_used_mm
        mass_kg_per_m, mass_known = self._mass_rate(bar_size)
        efficiency = (total_used_mm / total_stock_mm) * 100 if total_stock_mm > 0 else 0.0
        usable, scrap = self._classify_remainders(bars)

        return OptimizationResult(
            bar_size=bar_size,
            stock_length_mm=stock_length_mm,
            bars=bars,
            total_stock_bars=len(bars),
            total_cuts=total_cuts,
            total_stock_mm=total_stock_mm,
            total_used_mm=total_used_mm,
            total_waste_mm=total_waste_mm,
            waste_kg=total_waste_mm * mass_kg_per_m / 1000,
            efficiency=efficiency,
            stopper_moves=count_stopper_moves(bars),
            skipped_pieces=skipped,
            usable_remnant_count=usable,
            scrap_count=scrap,
            mass_kg_per_m=mass_kg_per_m,
            mass_known=mass_known,
        )

    def _summarize(self, mode: CutMode, stock_length_mm: int, results: List[OptimizationResult]) -> OptimizationSummary:
        """Consolida os resultados por bitola"""
        total_stock_mm = sum(r.total_stock_mm for r in results)
        total_used_mm = sum(r.total_used_mm for r in results)
        skipped = [piece for r in results for piece in r.skipped_pieces]

        return OptimizationSummary(
            mode=mode,
            stock_length_mm=stock_length_mm,
            kerf_mm=self.kerf_mm,
            results=results,
            total_stock_bars=sum(r.total_stock_bars for r in results),
            total_cuts=sum(r.total_cuts for r in results),
            total_stock_mm=total_stock_mm,
            total_used_mm=total_used_mm,
            total_waste_mm=total_stock_mm - total_used_mm,
            total_waste_kg=sum(r.waste_kg for r in results),
            # Massa aproveitada recalculada pela taxa de cada bitola
            total_used_kg=sum(r.total_used_mm * r.mass_kg_per_m / 1000 for r in results),
            overall_efficiency=(total_used_mm / total_stock_mm) * 100 if total_stock_mm > 0 else 0.0,
            total_stopper_moves=sum(r.stopper_moves for r in results),
            skipped_pieces=skipped,
            total_skipped=len(skipped),
            total_usable_remnants=sum(r.usable_remnant_count for r in results),
            total_scrap=sum(r.scrap_count for r in results),
            unknown_mass_sizes=[r.bar_size for r in results if not r.mass_known],
        )


def run_optimization(
    items: Sequence[CutItem],
    stock_length_mm: int,
    mode: Union[CutMode, str] = CutMode.STANDARD,
    *,
    kerf_mm: int = DEFAULT_KERF_MM,
    min_remnant_mm: int = DEFAULT_MIN_REMNANT_MM,
    mass_table: Optional[Mapping[str, float]] = None,
) -> OptimizationSummary:
    """Método de conveniência: otimiza uma lista com um otimizador novo"""
    optimizer = CutOptimizer(mass_table=mass_table, kerf_mm=kerf_mm, min_remnant_mm=min_remnant_mm)
    return optimizer.optimize(items, stock_length_mm, mode)
