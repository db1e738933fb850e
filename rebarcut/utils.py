"""
Utilitários para visualização, relatórios e leitura de listas do RebarCut
"""

import json
import logging
from typing import List, Dict, Optional
from pathlib import Path
import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle
import numpy as np
import pandas as pd

from .errors import InvalidInputError
from .models import CutItem, OptimizationSummary, OptimizationResult

logger = logging.getLogger(__name__)

MANIFEST_COLUMNS = ["Bitola", "Barra", "Ordem", "Marca", "Comprimento_mm", "Sobra_Barra_mm"]


class CutPlanVisualizer:
    """Classe para visualização dos planos de corte"""

    def __init__(self, summary: OptimizationSummary):
        """
        Inicializa o visualizador

        Args:
            summary: Resumo da otimização
        """
        self.summary = summary
        self.colors = plt.cm.Set3(np.linspace(0, 1, 12))

    def _length_colors(self, result: OptimizationResult) -> Dict[int, np.ndarray]:
        # Mesma cor para o mesmo comprimento: cada cor é uma posição de batente
        lengths = sorted({cut.length_mm for bar in result.bars for cut in bar.cuts})
        return {length: self.colors[i % len(self.colors)] for i, length in enumerate(lengths)}

    def plot_bars(self, save_path: Optional[str] = None, show: bool = True) -> None:
        """Plota as barras de cada bitola com seus cortes e sobras"""
        results = [r for r in self.summary.results if r.bars]
        if not results:
            logger.info("Nenhuma barra para visualizar")
            return

        heights = [max(2, 0.4 * len(r.bars) + 1) for r in results]
        fig, axes = plt.subplots(len(results), 1, figsize=(12, sum(heights)),
                                 gridspec_kw={"height_ratios": heights})
        if len(results) == 1:
            axes = [axes]

        kerf = self.summary.kerf_mm
        for ax, result in zip(axes, results):
            colors = self._length_colors(result)
            ax.set_xlim(0, result.stock_length_mm)
            ax.set_ylim(-0.5, len(result.bars) - 0.5)
            ax.invert_yaxis()
            ax.set_title(f"{result.bar_size} - Aproveitamento: {result.efficiency:.1f}%")
            ax.set_xlabel("Posição (mm)")
            ax.set_yticks(range(len(result.bars)))
            ax.set_yticklabels([f"#{i + 1}" for i in range(len(result.bars))])

            for row, bar in enumerate(result.bars):
                position = 0
                for j, cut in enumerate(bar.cuts):
                    if j:
                        position += kerf
                    ax.add_patch(Rectangle((position, row - 0.35), cut.length_mm, 0.7,
                                           facecolor=colors[cut.length_mm], edgecolor="black", linewidth=1))
                    ax.text(position + cut.length_mm / 2, row, f"{cut.mark}\n{cut.length_mm}",
                            ha="center", va="center", fontsize=7)
                    position += cut.length_mm

                if bar.remainder_mm > 0:
                    ax.add_patch(Rectangle((position, row - 0.35), result.stock_length_mm - position, 0.7,
                                           facecolor="red", alpha=0.3, hatch="//"))

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches="tight")

        if show:
            plt.show()
        plt.close(fig)

    def create_summary_chart(self, save_path: Optional[str] = None, show: bool = True) -> None:
        """Cria gráfico de resumo da otimização"""
        fig, ((ax1, ax2), (ax3, ax4)) = plt.subplots(2, 2, figsize=(14, 9))

        sizes = [r.bar_size for r in self.summary.results]
        efficiencies = np.array([r.efficiency for r in self.summary.results])
        waste_kg = np.array([r.waste_kg for r in self.summary.results])

        # Gráfico 1: Aproveitamento por bitola
        bars1 = ax1.bar(sizes, efficiencies, color="skyblue", edgecolor="navy")
        ax1.set_title("Aproveitamento por Bitola")
        ax1.set_ylabel("Aproveitamento (%)")
        ax1.set_ylim(0, 100)
        for bar, eff in zip(bars1, efficiencies):
            ax1.text(bar.get_x() + bar.get_width() / 2., bar.get_height() + 1,
                     f"{eff:.1f}%", ha="center", va="bottom")

        # Gráfico 2: Desperdício em massa
        ax2.bar(sizes, waste_kg, color="salmon", edgecolor="darkred")
        ax2.set_title("Desperdício por Bitola")
        ax2.set_ylabel("Desperdício (kg)")

        # Gráfico 3: Barras e ajustes de batente
        x = np.arange(len(sizes))
        ax3.bar(x - 0.2, [r.total_stock_bars for r in self.summary.results], 0.4, label="Barras")
        ax3.bar(x + 0.2, [r.stopper_moves for r in self.summary.results], 0.4, label="Ajustes de batente")
        ax3.set_xticks(x)
        ax3.set_xticklabels(sizes)
        ax3.legend()
        ax3.set_title("Barras x Ajustes de Batente")

        # Gráfico 4: Resumo geral
        ax4.axis("off")
        summary_text = f"""
        RESUMO DA OTIMIZAÇÃO

        Estratégia: {self.summary.mode.value}
        Barra comercial: {self.summary.stock_length_mm} mm
        Aproveitamento Total: {self.summary.overall_efficiency:.1f}%
        Desperdício Total: {self.summary.total_waste_kg:.2f} kg
        Barras Utilizadas: {self.summary.total_stock_bars}
        Peças Ignoradas: {self.summary.total_skipped}
        """
        ax4.text(0.1, 0.9, summary_text, transform=ax4.transAxes, fontsize=12,
                 verticalalignment="top", fontfamily="monospace",
                 bbox=dict(boxstyle="round,pad=0.5", facecolor="lightblue", alpha=0.8))

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches="tight")

        if show:
            plt.show()
        plt.close(fig)


class CutPlanReporter:
    """Classe para geração de relatórios"""

    def __init__(self, summary: OptimizationSummary):
        self.summary = summary

    def generate_text_report(self) -> str:
        """Gera relatório em formato texto"""
        s = self.summary
        report = []
        report.append("=" * 60)
        report.append("RELATÓRIO DE OTIMIZAÇÃO DE CORTE")
        report.append("=" * 60)
        report.append("")

        report.append("RESUMO GERAL:")
        report.append(f"  • Estratégia: {s.mode.value}")
        report.append(f"  • Barra comercial: {s.stock_length_mm} mm (serra {s.kerf_mm} mm)")
        report.append(f"  • Aproveitamento Total: {s.overall_efficiency:.1f}%")
        report.append(f"  • Desperdício Total: {s.total_waste_mm} mm / {s.total_waste_kg:.2f} kg")
        report.append(f"  • Massa Aproveitada: {s.total_used_kg:.2f} kg")
        report.append(f"  • Barras Utilizadas: {s.total_stock_bars}")
        report.append(f"  • Cortes: {s.total_cuts}")
        report.append(f"  • Ajustes de Batente: {s.total_stopper_moves}")
        report.append(f"  • Sobras Reaproveitáveis: {s.total_usable_remnants} | Sucata: {s.total_scrap}")
        report.append("")

        report.append("DETALHES POR BITOLA:")
        report.append("-" * 40)

        for result in s.results:
            mass = f"{result.waste_kg:.2f} kg" if result.mass_known else "massa desconhecida"
            report.append(f"\n{result.bar_size}:")
            report.append(f"   • Aproveitamento: {result.efficiency:.1f}%")
            report.append(f"   • Desperdício: {result.total_waste_mm} mm ({mass})")
            report.append(f"   • Barras: {result.total_stock_bars} | Cortes: {result.total_cuts}")

            for i, bar in enumerate(result.bars, 1):
                cuts = " + ".join(f"{cut.mark}:{cut.length_mm}" for cut in bar.cuts)
                report.append(f"     {i}. {cuts} (sobra {bar.remainder_mm}mm)")

        if s.skipped_pieces:
            report.append("\nPEÇAS MAIORES QUE A BARRA (NÃO CORTADAS):")
            report.append("-" * 30)
            for piece in s.skipped_pieces:
                report.append(f"  • {piece.mark} {piece.bar_size}: {piece.length_mm}mm")

        if s.unknown_mass_sizes:
            report.append(f"\nBitolas sem massa cadastrada: {', '.join(s.unknown_mass_sizes)}")

        report.append("\n" + "=" * 60)

        return "\n".join(report)

    def to_dataframe(self) -> pd.DataFrame:
        """Manifesto de corte: uma linha por corte, na ordem de execução"""
        rows = []
        for result in self.summary.results:
            for bar_number, bar in enumerate(result.bars, 1):
                for order, cut in enumerate(bar.cuts, 1):
                    rows.append({
                        "Bitola": result.bar_size,
                        "Barra": bar_number,
                        "Ordem": order,
                        "Marca": cut.mark,
                        "Comprimento_mm": cut.length_mm,
                        "Sobra_Barra_mm": bar.remainder_mm,
                    })
        return pd.DataFrame(rows, columns=MANIFEST_COLUMNS)

    def generate_csv_report(self, file_path: str) -> None:
        """Gera o manifesto de corte em CSV"""
        self.to_dataframe().to_csv(file_path, index=False, encoding="utf-8")

    def generate_json_report(self, file_path: str) -> None:
        """Gera relatório em formato JSON"""
        with open(file_path, "w", encoding="utf-8") as f:
            f.write(self.summary.model_dump_json(indent=2))


def load_items(path: str) -> List[CutItem]:
    """
    Lê uma lista de corte em JSON (lista de objetos) ou CSV

    Args:
        path: Caminho do arquivo

    Returns:
        Linhas da lista de corte
    """
    file_path = Path(path)
    if file_path.suffix.lower() == ".csv":
        frame = pd.read_csv(file_path, dtype={"id": str, "mark": str, "bar_size": str, "shape_type": str})
        # Células vazias viram NaN; o modelo usa o valor padrão
        records = [
            {key: value for key, value in row.items() if not pd.isna(value)}
            for row in frame.to_dict(orient="records")
        ]
    else:
        with open(file_path, "r", encoding="utf-8") as f:
            records = json.load(f)
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise InvalidInputError(f"Lista de corte inválida em {path}: esperada uma lista de objetos JSON")

    items = []
    for i, record in enumerate(records, 1):
        record.setdefault("id", str(i))
        items.append(CutItem(**record))
    return items


def load_mass_table(path: str) -> Dict[str, float]:
    """Lê uma tabela de massas (kg/m) em JSON: {"10M": 0.785, ...}"""
    with open(path, "r", encoding="utf-8") as f:
        table = json.load(f)
    if not isinstance(table, dict):
        raise InvalidInputError(f"Tabela de massas inválida em {path}: esperado um objeto JSON")
    return {str(size): float(mass) for size, mass in table.items()}


def export_result(summary: OptimizationSummary, output_dir: str, formats: List[str] = None) -> None:
    """
    Exporta resultado em múltiplos formatos

    Args:
        summary: Resumo da otimização
        output_dir: Diretório de saída
        formats: Lista de formatos (txt, csv, json)
    """
    if formats is None:
        formats = ["txt", "csv", "json"]

    Path(output_dir).mkdir(parents=True, exist_ok=True)

    reporter = CutPlanReporter(summary)
    base_path = Path(output_dir) / f"plano_corte_{summary.mode.value}"

    if "txt" in formats:
        with open(f"{base_path}.txt", "w", encoding="utf-8") as f:
            f.write(reporter.generate_text_report())

    if "csv" in formats:
        reporter.generate_csv_report(f"{base_path}.csv")

    if "json" in formats:
        reporter.generate_json_report(f"{base_path}.json")

    logger.info("Relatórios exportados para: %s", output_dir)


def create_visualization(summary: OptimizationSummary, output_dir: str, show: bool = False) -> None:
    """
    Cria visualizações do resultado

    Args:
        summary: Resumo da otimização
        output_dir: Diretório de saída
        show: Se deve mostrar os gráficos
    """
    Path(output_dir).mkdir(parents=True, exist_ok=True)

    visualizer = CutPlanVisualizer(summary)
    base_path = Path(output_dir) / f"visualizacao_{summary.mode.value}"

    visualizer.plot_bars(f"{base_path}_barras.png", show=show)
    visualizer.create_summary_chart(f"{base_path}_resumo.png", show=show)

    logger.info("Visualizações salvas em: %s", output_dir)
