"""
Servidor FastAPI principal para o RebarCut
"""

import tempfile
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from rebarcut import CutOptimizer, InvalidInputError, __version__
from rebarcut.constants import MASS_KG_PER_M
from rebarcut.models import CutMode, OptimizationRequest, OptimizationSummary, ModeComparison
from rebarcut.utils import CutPlanReporter


# Configuração do FastAPI
app = FastAPI(
    title="RebarCut API",
    description="API para otimização de corte de vergalhões em barras comerciais",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configuração de CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def build_optimizer(request: OptimizationRequest) -> CutOptimizer:
    """Cria o otimizador da requisição, aplicando massas extras sobre a tabela padrão"""
    mass_table = dict(MASS_KG_PER_M)
    if request.mass_table:
        mass_table.update(request.mass_table)
    return CutOptimizer.from_config(request, mass_table=mass_table)


@app.get("/")
async def root():
    """Página inicial da API - redireciona para documentação"""
    return {
        "message": "RebarCut API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health")
async def health_check():
    """Verificação de saúde da API"""
    return {
        "status": "healthy",
        "service": "RebarCut API",
        "version": __version__
    }


@app.get("/modes")
async def get_modes():
    """Retorna as estratégias de empacotamento disponíveis"""
    return {
        "modes": [mode.value for mode in CutMode],
        "default": CutMode.STANDARD.value,
        "descriptions": {
            CutMode.STANDARD.value: "Sequencial na ordem da lista, sem voltar a barras anteriores",
            CutMode.OPTIMIZED.value: "First Fit Decreasing",
            CutMode.BEST_FIT.value: "Best Fit Decreasing",
        }
    }


@app.get("/mass-table")
async def get_mass_table():
    """Retorna a tabela padrão de massas (kg/m)"""
    return dict(MASS_KG_PER_M)


@app.post("/optimize", response_model=OptimizationSummary)
def optimize(request: OptimizationRequest):
    """
    Gera o plano de corte

    Args:
        request: Requisição de otimização

    Returns:
        Resumo da otimização em formato JSON
    """
    try:
        optimizer = build_optimizer(request)
        return optimizer.run(request.items, request)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/optimize/compare", response_model=ModeComparison)
def optimize_compare(request: OptimizationRequest):
    """
    Executa todas as estratégias e indica a de menor desperdício

    Args:
        request: Requisição de otimização (o modo é ignorado)

    Returns:
        Resumos por estratégia e a recomendação
    """
    try:
        optimizer = build_optimizer(request)
        return optimizer.compare_modes(request.items, request.stock_length_mm)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/report/generate")
def generate_report(request: OptimizationRequest, format: str = "all"):
    """
    Otimiza e gera relatórios em diferentes formatos

    Args:
        request: Requisição de otimização
        format: Formato do relatório (txt, csv, json, all)

    Returns:
        Relatório no formato solicitado
    """
    formats = ["txt", "csv", "json"] if format == "all" else [format]
    unknown = [f for f in formats if f not in ("txt", "csv", "json")]
    if unknown:
        raise HTTPException(status_code=400, detail=f"Formato não suportado: {', '.join(unknown)}")

    try:
        summary = build_optimizer(request).run(request.items, request)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    reporter = CutPlanReporter(summary)
    results = {}

    if "txt" in formats:
        results["txt"] = reporter.generate_text_report()

    if "json" in formats:
        results["json"] = summary.model_dump(mode="json")

    if "csv" in formats:
        with tempfile.TemporaryDirectory() as temp_dir:
            csv_path = Path(temp_dir) / "manifesto.csv"
            reporter.generate_csv_report(str(csv_path))
            results["csv"] = csv_path.read_text(encoding="utf-8")

    return {
        "formats_generated": formats,
        "results": results
    }


@app.get("/examples")
async def get_example():
    """Retorna exemplo de dados para otimização"""
    return {
        "items": [
            {"id": "1", "mark": "B1001", "bar_size": "15M", "length_mm": 4000, "quantity": 2, "shape_type": "straight"},
            {"id": "2", "mark": "B1002", "bar_size": "15M", "length_mm": 8000, "quantity": 1, "shape_type": "straight"},
            {"id": "3", "mark": "B1003", "bar_size": "15M", "length_mm": 3000, "quantity": 1, "shape_type": "bent"},
            {"id": "4", "mark": "C2001", "bar_size": "20M", "length_mm": 5500, "quantity": 4, "shape_type": "straight"}
        ],
        "stock_length_mm": 12000,
        "kerf_mm": 0,
        "min_remnant_mm": 300,
        "mode": "optimized"
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
