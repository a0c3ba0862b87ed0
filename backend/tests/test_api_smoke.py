"""
Smoke tests for the reconciliation API endpoints.

These verify that the endpoints respond correctly with basic happy-path
and error-path scenarios using an in-memory test database.
"""
from backend.core.config import settings


SYSTEM_POOL = [
    {"id": "s1", "description": "Mesa de reunião", "location": "Sala 1", "state": "Bom", "unit": "Escola Central"},
    {"id": "s2", "description": "Cadeira giratória", "location": "Sala 2", "state": "Regular", "unit": "Escola Central"},
    {"id": "s3", "description": "Armário de aço", "location": "Almoxarifado", "unit": "Escola Central"},
]

REGISTRY = [
    {"tag": "123", "description": "MESA", "species": "REUNIAO", "supplier": "MOVEIS SUL LTDA", "unit": "EM CENTRAL"},
    {"tag": "456", "description": "CADEIRA", "species": "GIRATORIA", "unit": "UBS NORTE"},
    {"tag": "789", "description": "Poltrona executiva", "unit": "EM CENTRAL"},
]


# ============================================================================
# GET /api/health
# ============================================================================

class TestHealth:

    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


# ============================================================================
# POST /api/reconcile/similarity
# ============================================================================

class TestSimilarity:
    """Tests for the pairwise score endpoint."""

    def test_containment(self, client):
        resp = client.post("/api/reconcile/similarity", json={"a": "Mesa", "b": "Mesa de reunião"})
        assert resp.status_code == 200
        assert resp.json()["score"] == 0.92

    def test_missing_values_score_zero(self, client):
        resp = client.post("/api/reconcile/similarity", json={"a": None, "b": "Mesa"})
        assert resp.status_code == 200
        assert resp.json()["score"] == 0.0


# ============================================================================
# POST /api/reconcile/rank
# ============================================================================

class TestRank:
    """Tests for the ranking endpoint."""

    def test_rank(self, client):
        resp = client.post("/api/reconcile/rank", json={
            "item": {"id": "s1", "description": "Mesa de reunião", "supplier": "Moveis Sul"},
            "pool": REGISTRY,
        })
        assert resp.status_code == 200
        data = resp.json()

        assert data["count"] == 3
        assert data["candidates"][0]["record"]["tag"] == "123"
        # Composite description score plus the supplier bonus
        assert 0.8 < data["top_score"] < 1.0
        assert data["best_guess"] is True

    def test_limit(self, client):
        resp = client.post("/api/reconcile/rank", json={
            "item": {"id": "s1", "description": "Mesa"},
            "pool": REGISTRY,
            "limit": 1,
        })
        data = resp.json()
        assert len(data["candidates"]) == 1
        assert data["count"] == 3

    def test_empty_pool(self, client):
        resp = client.post("/api/reconcile/rank", json={"item": {"id": "s1", "description": "Mesa"}})
        data = resp.json()
        assert data["candidates"] == []
        assert data["top_score"] == 0.0
        assert data["best_guess"] is False

    def test_missing_item(self, client):
        resp = client.post("/api/reconcile/rank", json={"pool": REGISTRY})
        assert resp.status_code == 422

    def test_stored_patterns_boost_candidates(self, create_pattern, client):
        create_pattern(system_description="Cadeira giratoria", registry_description="Poltrona executiva")

        # Reload so the pattern inserted after startup is picked up
        from backend.core.reconcile import init_reconcile
        init_reconcile()

        resp = client.post("/api/reconcile/rank", json={
            "item": {"id": "s2", "description": "Cadeira giratoria"},
            "pool": REGISTRY,
        })
        candidates = {c["record"]["tag"]: c for c in resp.json()["candidates"]}
        assert candidates["789"]["bonus_score"] > 0
        assert candidates["456"]["bonus_score"] == 0


# ============================================================================
# POST /api/reconcile/match-batch
# ============================================================================

class TestMatchBatch:
    """Tests for the batch matching endpoint."""

    def test_structured_rows(self, client):
        resp = client.post("/api/reconcile/match-batch", json={
            "pasted": [
                {"description": "Mesa de reunião", "location": "Sala 1", "state": "Bom"},
                {"description": "Extintor"},
            ],
            "pool": SYSTEM_POOL,
        })
        assert resp.status_code == 200
        data = resp.json()

        assert [r["match_type"] for r in data["results"]] == ["perfect", "not_found"]
        assert data["results"][0]["matched"]["id"] == "s1"
        assert data["consumed"] == [0]
        assert data["summary"]["total"] == 2

    def test_pasted_text(self, client):
        text = "Item\tLocalização\tEstado\nCadeira giratória\tSala 2\tRegular\nArmario de aco 2 portas\t\t\n"
        resp = client.post("/api/reconcile/match-batch", json={"pasted_text": text, "pool": SYSTEM_POOL})
        assert resp.status_code == 200
        results = resp.json()["results"]

        assert results[0]["match_type"] == "perfect"
        assert results[1]["match_type"] == "similarity"
        assert results[1]["label"] == "By similarity (92%)"

    def test_requires_input(self, client):
        resp = client.post("/api/reconcile/match-batch", json={"pool": SYSTEM_POOL})
        assert resp.status_code == 400

    def test_bad_pasted_text(self, client):
        resp = client.post("/api/reconcile/match-batch", json={"pasted_text": "Tombo\n123\n", "pool": SYSTEM_POOL})
        assert resp.status_code == 400
        assert "description" in resp.json()["detail"]


# ============================================================================
# POST /api/reconcile/preview
# ============================================================================

class TestPreview:
    """Tests for the update preview endpoint."""

    def test_preview(self, client):
        text = (
            "Item\tTombamento\n"
            "Mesa de reunião\t0123\n"
            "Cadeira giratória\t456\n"
            "\t999\n"
        )
        resp = client.post("/api/reconcile/preview", json={
            "pasted_text": text,
            "target_unit": "Escola Central",
            "pool": SYSTEM_POOL,
            "registry": REGISTRY,
        })
        assert resp.status_code == 200
        data = resp.json()

        assert [u["status"] for u in data["updates"]] == ["ok", "tag_wrong_location", "missing_description"]
        assert data["valid_count"] == 1
        assert data["updates"][0]["registry_item"]["tag"] == "123"

    def test_unit_mapping_override(self, client):
        resp = client.post("/api/reconcile/preview", json={
            "pasted_text": "Item\tTombamento\nCadeira giratória\t456\n",
            "target_unit": "Escola Central",
            "pool": SYSTEM_POOL,
            "registry": REGISTRY,
            "unit_mapping": {"Escola Central": ["UBS NORTE"]},
        })
        assert resp.json()["updates"][0]["status"] == "ok"


# ============================================================================
# POST /api/reconcile/confirm and GET /api/reconcile/patterns
# ============================================================================

class TestConfirm:
    """Tests for recording confirmed links."""

    PAYLOAD = {
        "system": {"id": "s2", "description": "Cadeira giratoria", "unit": "Escola Central"},
        "registry": {"tag": "789", "description": "Poltrona executiva"},
        "user": "ana",
    }

    def test_confirm_stores_pattern(self, client, patch_db):
        resp = client.post("/api/reconcile/confirm", json=self.PAYLOAD)
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["pattern"]["tag"] == "789"
        assert data["pattern"]["user"] == "ana"

        # Background write ran after the response
        row = patch_db.execute("SELECT tag, user FROM learned_patterns").fetchone()
        assert row["tag"] == "789"
        assert row["user"] == "ana"

    def test_user_from_header(self, client):
        payload = {k: v for k, v in self.PAYLOAD.items() if k != "user"}

        resp = client.post("/api/reconcile/confirm", json=payload, headers={"X-User": "bia"})
        assert resp.json()["pattern"]["user"] == "bia"

        resp = client.post("/api/reconcile/confirm", json=payload)
        assert resp.json()["pattern"]["user"] == "unknown"

    def test_header_user_wins_over_body(self, client, patch_db):
        resp = client.post("/api/reconcile/confirm", json=self.PAYLOAD, headers={"X-User": "bia"})
        assert resp.json()["pattern"]["user"] == "bia"

        row = patch_db.execute("SELECT user FROM learned_patterns").fetchone()
        assert row["user"] == "bia"

    def test_confirmed_pattern_listed_first(self, client):
        client.post("/api/reconcile/confirm", json=self.PAYLOAD)

        resp = client.get("/api/reconcile/patterns")
        assert resp.status_code == 200
        data = resp.json()
        assert data["count"] == 1
        assert data["patterns"][0]["tag"] == "789"

    def test_confirm_boosts_next_rank(self, client):
        client.post("/api/reconcile/confirm", json=self.PAYLOAD)

        resp = client.post("/api/reconcile/rank", json={
            "item": {"id": "s9", "description": "Cadeira giratoria"},
            "pool": REGISTRY,
        })
        candidates = {c["record"]["tag"]: c for c in resp.json()["candidates"]}
        assert candidates["789"]["bonus_score"] > 0

    def test_store_failure_keeps_pattern_in_memory(self, client, patch_db):
        patch_db.execute("DROP TABLE learned_patterns")

        resp = client.post("/api/reconcile/confirm", json=self.PAYLOAD)
        assert resp.status_code == 200

        patterns = client.get("/api/reconcile/patterns").json()["patterns"]
        assert patterns[0]["tag"] == "789"

    def test_api_key_required_when_configured(self, client, monkeypatch):
        monkeypatch.setattr(settings, "API_KEY", "secret")

        resp = client.post("/api/reconcile/confirm", json=self.PAYLOAD)
        assert resp.status_code == 401

        resp = client.post("/api/reconcile/confirm", json=self.PAYLOAD, headers={"X-API-Key": "secret"})
        assert resp.status_code == 200

    def test_patterns_limit_validated(self, client):
        assert client.get("/api/reconcile/patterns?limit=0").status_code == 422
        assert client.get("/api/reconcile/patterns?limit=301").status_code == 422


# ============================================================================
# GET /api/reconcile/status
# ============================================================================

class TestStatus:
    """Tests for the status endpoint."""

    def test_status(self, client):
        resp = client.get("/api/reconcile/status")
        assert resp.status_code == 200
        data = resp.json()

        assert data["pattern_limit"] == 300
        assert data["patterns_stored"] == 0
        assert data["store_error"] is None
        assert "Escola Central" in data["units_mapped"]

    def test_status_counts_loaded_patterns(self, create_pattern, client):
        create_pattern(tag="1")
        create_pattern(tag="2", timestamp="2026-01-09T08:00:00")

        from backend.core.reconcile import init_reconcile
        init_reconcile()

        data = client.get("/api/reconcile/status").json()
        assert data["patterns_in_memory"] == 2
        assert data["patterns_stored"] == 2

    def test_status_reports_store_error(self, client, patch_db):
        patch_db.execute("DROP TABLE learned_patterns")

        data = client.get("/api/reconcile/status").json()
        assert data["patterns_stored"] is None
        assert "learned_patterns" in data["store_error"]
