"""
Testes dos relatórios, visualizações e leitura de arquivos
"""

import json
import tempfile
import unittest
from pathlib import Path

import matplotlib
matplotlib.use("Agg")

import pandas as pd

from rebarcut import CutItem, InvalidInputError, run_optimization
from rebarcut.utils import (
    CutPlanReporter, MANIFEST_COLUMNS, create_visualization, export_result, load_items, load_mass_table
)


def sample_summary():
    items = [
        CutItem(id="1", mark="B1", bar_size="15M", length_mm=4000, quantity=2),
        CutItem(id="2", mark="B2", bar_size="15M", length_mm=8000, quantity=1),
        CutItem(id="3", mark="C1", bar_size="20M", length_mm=14000, quantity=1),
        CutItem(id="4", mark="C2", bar_size="20M", length_mm=5000, quantity=1),
        CutItem(id="5", mark="X1", bar_size="7X", length_mm=2000, quantity=1),
    ]
    return run_optimization(items, 12000, "optimized")


class TestReporter(unittest.TestCase):

    def setUp(self):
        self.summary = sample_summary()
        self.reporter = CutPlanReporter(self.summary)

    def test_text_report(self):
        text = self.reporter.generate_text_report()
        self.assertIn("RELATÓRIO DE OTIMIZAÇÃO DE CORTE", text)
        self.assertIn("Estratégia: optimized", text)
        self.assertIn("C1 20M: 14000mm", text)
        self.assertIn("Bitolas sem massa cadastrada: 7X", text)

    def test_manifest_has_one_row_per_cut(self):
        frame = self.reporter.to_dataframe()
        self.assertEqual(list(frame.columns), MANIFEST_COLUMNS)
        self.assertEqual(len(frame), self.summary.total_cuts)
        first = frame.iloc[0]
        self.assertEqual(first["Bitola"], "7X")
        self.assertEqual(first["Marca"], "X1")

    def test_export_files(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            export_result(self.summary, temp_dir)
            base = Path(temp_dir) / "plano_corte_optimized"

            self.assertIn("RESUMO GERAL", (base.with_suffix(".txt")).read_text(encoding="utf-8"))

            frame = pd.read_csv(base.with_suffix(".csv"))
            self.assertEqual(int(frame["Comprimento_mm"].sum()), self.summary.total_used_mm)

            data = json.loads(base.with_suffix(".json").read_text(encoding="utf-8"))
            self.assertEqual(data["total_stock_bars"], self.summary.total_stock_bars)
            self.assertEqual(data["total_skipped"], 1)

    def test_visualization_files(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            create_visualization(self.summary, temp_dir, show=False)
            names = sorted(p.name for p in Path(temp_dir).glob("*.png"))
            self.assertEqual(names, ["visualizacao_optimized_barras.png", "visualizacao_optimized_resumo.png"])


class TestLoaders(unittest.TestCase):

    def test_load_items_json(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "lista.json"
            path.write_text(json.dumps([
                {"mark": "B1", "bar_size": "15M", "length_mm": 3000, "quantity": 2},
                {"id": "x", "mark": "B2", "bar_size": "10M", "length_mm": 1500, "quantity": 1, "shape_type": "bent"},
            ]), encoding="utf-8")
            items = load_items(str(path))

        self.assertEqual([i.id for i in items], ["1", "x"])
        self.assertEqual(items[1].shape_type, "bent")

    def test_load_items_rejects_json_object(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "lista.json"
            path.write_text(json.dumps({"mark": "B1", "bar_size": "15M", "length_mm": 3000}), encoding="utf-8")
            with self.assertRaises(InvalidInputError):
                load_items(str(path))

            path.write_text(json.dumps(["B1", "B2"]), encoding="utf-8")
            with self.assertRaises(InvalidInputError):
                load_items(str(path))

    def test_load_items_csv(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "lista.csv"
            path.write_text(
                "mark,bar_size,length_mm,quantity,shape_type\n"
                "B1,15M,3000,2,\n"
                "B2,10M,1500,4,straight\n",
                encoding="utf-8",
            )
            items = load_items(str(path))

        self.assertEqual(len(items), 2)
        self.assertEqual(items[0].length_mm, 3000)
        self.assertIsNone(items[0].shape_type)
        self.assertEqual(items[1].quantity, 4)

    def test_load_mass_table(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "massas.json"
            path.write_text(json.dumps({"10M": 0.785, "#4": 0.994}), encoding="utf-8")
            self.assertEqual(load_mass_table(str(path)), {"10M": 0.785, "#4": 0.994})

            path.write_text(json.dumps([1, 2]), encoding="utf-8")
            with self.assertRaises(InvalidInputError):
                load_mass_table(str(path))


if __name__ == "__main__":
    unittest.main()
