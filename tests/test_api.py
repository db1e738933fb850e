"""
Testes da API REST
"""

import unittest

from fastapi.testclient import TestClient

from main import app


def request_body(**overrides):
    body = {
        "items": [
            {"id": "1", "mark": "B1", "bar_size": "15M", "length_mm": 4000, "quantity": 2},
            {"id": "2", "mark": "B2", "bar_size": "15M", "length_mm": 8000, "quantity": 1},
            {"id": "3", "mark": "B3", "bar_size": "15M", "length_mm": 3000, "quantity": 1},
        ],
        "stock_length_mm": 12000,
        "mode": "standard",
    }
    body.update(overrides)
    return body


class TestApi(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(app)

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_modes(self):
        data = self.client.get("/modes").json()
        self.assertEqual(data["modes"], ["standard", "optimized", "best-fit"])

    def test_optimize(self):
        response = self.client.post("/optimize", json=request_body())
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["mode"], "standard")
        self.assertEqual(data["total_stock_bars"], 2)
        self.assertEqual(data["total_waste_mm"], 5000)
        self.assertEqual(data["results"][0]["bars"][1]["remainder_mm"], 1000)

    def test_optimize_with_extra_mass(self):
        body = request_body(
            items=[{"id": "1", "mark": "A", "bar_size": "#5", "length_mm": 6000, "quantity": 1}],
            mass_table={"#5": 1.552},
        )
        data = self.client.post("/optimize", json=body).json()
        self.assertEqual(data["unknown_mass_sizes"], [])
        self.assertAlmostEqual(data["total_waste_kg"], 6000 * 1.552 / 1000)

    def test_free_text_shape_type(self):
        body = request_body(
            items=[{"id": "1", "mark": "S1", "bar_size": "10M", "length_mm": 1200, "quantity": 4, "shape_type": "stirrup"}]
        )
        response = self.client.post("/optimize", json=body)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["total_cuts"], 4)

    def test_invalid_stock_length(self):
        response = self.client.post("/optimize", json=request_body(stock_length_mm=0))
        self.assertEqual(response.status_code, 400)

    def test_unknown_mode_is_schema_error(self):
        response = self.client.post("/optimize", json=request_body(mode="genetic"))
        self.assertEqual(response.status_code, 422)

    def test_compare(self):
        response = self.client.post("/optimize/compare", json=request_body())
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual([s["mode"] for s in data["summaries"]], ["standard", "optimized", "best-fit"])
        self.assertEqual(data["recommended_mode"], "standard")

    def test_report(self):
        response = self.client.post("/report/generate", json=request_body(), params={"format": "csv"})
        self.assertEqual(response.status_code, 200)
        csv_text = response.json()["results"]["csv"]
        self.assertTrue(csv_text.startswith("Bitola,Barra,Ordem,Marca"))

    def test_report_rejects_unknown_format(self):
        response = self.client.post("/report/generate", json=request_body(), params={"format": "pdf"})
        self.assertEqual(response.status_code, 400)


if __name__ == "__main__":
    unittest.main()
