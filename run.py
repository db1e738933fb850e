#!/usr/bin/env python3
"""
Script principal para executar o sistema RebarCut
"""

import sys
import argparse
import logging
from pathlib import Path

from rebarcut import CutOptimizer, CutItem, CutMode, InvalidInputError
from rebarcut.constants import DEFAULT_STOCK_LENGTH_MM, DEFAULT_KERF_MM, DEFAULT_MIN_REMNANT_MM
from rebarcut.models import OptimizationSummary
from rebarcut.utils import export_result, create_visualization, load_items, load_mass_table


def create_sample_data():
    """Cria uma lista de corte de exemplo"""
    return [
        CutItem(id="1", mark="B1001", bar_size="15M", length_mm=4000, quantity=6),
        CutItem(id="2", mark="B1002", bar_size="15M", length_mm=8000, quantity=3),
        CutItem(id="3", mark="B1003", bar_size="15M", length_mm=3000, quantity=5, shape_type="bent"),
        CutItem(id="4", mark="C2001", bar_size="20M", length_mm=5500, quantity=7),
        CutItem(id="5", mark="C2002", bar_size="20M", length_mm=2350, quantity=9, shape_type="bent"),
        CutItem(id="6", mark="D3001", bar_size="10M", length_mm=1800, quantity=12),
    ]


def print_summary(summary: OptimizationSummary) -> None:
    """Exibe o resumo de uma execução"""
    print(f"\n✅ Estratégia {summary.mode.value}")
    print(f"📊 Aproveitamento: {summary.overall_efficiency:.1f}%")
    print(f"🗑️  Desperdício: {summary.total_waste_mm} mm / {summary.total_waste_kg:.2f} kg")
    print(f"📦 Barras utilizadas: {summary.total_stock_bars} ({summary.total_cuts} cortes)")
    print(f"🔧 Ajustes de batente: {summary.total_stopper_moves}")

    for result in summary.results:
        print(f"  • {result.bar_size}: {result.total_stock_bars} barras, "
              f"aproveitamento {result.efficiency:.1f}%, {result.stopper_moves} ajustes")

    if summary.skipped_pieces:
        print(f"\n⚠️  {summary.total_skipped} peças maiores que a barra foram ignoradas:")
        for piece in summary.skipped_pieces[:5]:
            print(f"     • {piece.mark} {piece.bar_size} {piece.length_mm}mm")

    if summary.unknown_mass_sizes:
        print(f"\n⚠️  Bitolas sem massa cadastrada: {', '.join(summary.unknown_mass_sizes)}")


def run_demo(args):
    """Executa demonstração comparando as estratégias"""

    print("🔧 RebarCut - Demonstração do Sistema")
    print("=" * 60)

    items = create_sample_data()
    optimizer = CutOptimizer(kerf_mm=args.kerf, min_remnant_mm=args.min_remnant)

    print(f"✓ Barra comercial: {args.stock_length}mm, serra: {optimizer.kerf_mm}mm")
    print(f"✓ {len(items)} linhas na lista de corte")

    comparison = optimizer.compare_modes(items, args.stock_length)
    for summary in comparison.summaries:
        print_summary(summary)

    print(f"\n🏆 Recomendado: {comparison.recommended_mode.value} "
          f"(economia de {comparison.waste_kg_saved:.2f} kg e {comparison.bars_saved} barras)")

    return next(s for s in comparison.summaries if s.mode == comparison.recommended_mode)


def run_optimize(args):
    """Otimiza uma lista de corte lida de arquivo"""
    if not args.input:
        raise InvalidInputError("Informe a lista de corte com --input")

    items = load_items(args.input)
    mass_table = load_mass_table(args.mass_table) if args.mass_table else None
    optimizer = CutOptimizer(mass_table=mass_table, kerf_mm=args.kerf, min_remnant_mm=args.min_remnant)

    summary = optimizer.optimize(items, args.stock_length, args.mode)
    print_summary(summary)
    return summary


def run_api_server():
    """Inicia o servidor da API"""

    print("🚀 Iniciando servidor da API RebarCut...")

    import uvicorn

    print("✓ Servidor iniciado em http://localhost:8000")
    print("✓ Documentação da API: http://localhost:8000/docs")
    print("\nPressione Ctrl+C para parar o servidor")

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )


def run_tests():
    """Executa os testes do sistema"""

    print("🧪 Executando testes do RebarCut...")

    import unittest

    loader = unittest.TestLoader()
    start_dir = Path(__file__).parent / 'tests'
    suite = loader.discover(str(start_dir), pattern='test_*.py', top_level_dir=str(Path(__file__).parent))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    if result.wasSuccessful():
        print("\n✅ Todos os testes passaram!")
        return True

    print(f"\n❌ {len(result.failures) + len(result.errors)} testes falharam")
    return False


def main():
    """Função principal"""

    parser = argparse.ArgumentParser(
        description="RebarCut - Otimização de Corte de Vergalhões",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exemplos de uso:
  python run.py demo                                  # Compara as estratégias
  python run.py optimize --input lista.csv --mode optimized
  python run.py optimize --input lista.json --export saida --visualization
  python run.py api                                   # Inicia servidor da API
  python run.py test                                  # Executa testes
        """
    )

    parser.add_argument(
        'command',
        choices=['demo', 'optimize', 'api', 'test'],
        help='Comando a executar'
    )

    parser.add_argument('--input', metavar='FILE', help='Lista de corte (JSON ou CSV)')
    parser.add_argument('--mode', choices=[m.value for m in CutMode], default=CutMode.STANDARD.value,
                        help='Estratégia de empacotamento')
    parser.add_argument('--stock-length', type=int, default=DEFAULT_STOCK_LENGTH_MM,
                        help='Comprimento da barra comercial (mm)')
    parser.add_argument('--kerf', type=int, default=DEFAULT_KERF_MM, help='Espessura da serra (mm)')
    parser.add_argument('--min-remnant', type=int, default=DEFAULT_MIN_REMNANT_MM,
                        help='Sobra mínima reaproveitável (mm)')
    parser.add_argument('--mass-table', metavar='FILE', help='Tabela de massas kg/m em JSON')

    parser.add_argument(
        '--export',
        metavar='DIR',
        help='Diretório para exportar resultados'
    )

    parser.add_argument(
        '--visualization',
        action='store_true',
        help='Criar visualizações dos resultados'
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Log detalhado')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command in ('demo', 'optimize'):
            summary = run_demo(args) if args.command == 'demo' else run_optimize(args)

            if summary and args.export:
                print(f"\n📁 Exportando resultados para: {args.export}")
                export_result(summary, args.export)

                if args.visualization:
                    print("🎨 Criando visualizações...")
                    create_visualization(summary, args.export)

                print("✅ Exportação concluída!")

        elif args.command == 'api':
            run_api_server()

        elif args.command == 'test':
            success = run_tests()
            sys.exit(0 if success else 1)

    except KeyboardInterrupt:
        print("\n\n👋 Sistema interrompido pelo usuário")
    except (InvalidInputError, OSError, ValueError) as e:
        print(f"\n❌ Erro: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
