import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from talentmatch.models.models import Candidate, ExtractedDocument, ModelEvaluation, SearchResult
from talentmatch.models.settings import MatchingSettings
from talentmatch.services.matching import MatchingOrchestrator
from talentmatch.services.vector_index import InMemoryVectorIndex


@pytest.fixture
def store(candidates, react_job):
    store = MagicMock()
    store.list_candidates = AsyncMock(return_value=candidates)
    store.get_job = AsyncMock(return_value=react_job)
    store.list_jobs = AsyncMock(return_value=[react_job])
    return store


@pytest.fixture
def orchestrator(store):
    embeddings = MagicMock()
    embeddings.embed.return_value = [1.0, 0.0]
    evaluator = MagicMock()
    evaluator.evaluate.side_effect = lambda profile, job: ModelEvaluation(
        score=90 if "React" in profile else 40, feedback="ok", recommendations="• more"
    )
    reranker = MagicMock()
    reranker.rerank.side_effect = lambda cands, requirements, limit: [
        SearchResult(**c.model_dump(), score=0.5, explanation="fits") for c in cands
    ][:limit]
    return MatchingOrchestrator(
        store=store,
        embeddings=embeddings,
        index=InMemoryVectorIndex(),
        evaluator=evaluator,
        reranker=reranker,
        settings=MatchingSettings(),
    )


@pytest.fixture
def client(store, orchestrator):
    from talentmatch.main import create_app

    app = create_app()
    # no lifespan: clients are injected directly
    app.state.store = store
    app.state.orchestrator = orchestrator
    return TestClient(app)


class TestMatchingRoutes:
    """POST /api/evaluate and /api/search"""

    def test_evaluate_returns_camel_case_sorted(self, client):
        response = client.post("/api/evaluate", json={"jobId": 1})

        assert response.status_code == 200
        evaluations = response.json()["evaluations"]
        assert [e["candidateId"] for e in evaluations] == [10, 11]
        assert evaluations[0]["candidateName"] == "Ada Lovelace"
        assert evaluations[0]["score"] == 90

    def test_evaluate_without_job_id_is_400(self, client):
        response = client.post("/api/evaluate", json={})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Job ID is required"
        assert "X-Request-ID" in response.headers

    def test_evaluate_no_candidates_message(self, client, store):
        store.list_candidates = AsyncMock(return_value=[])

        response = client.post("/api/evaluate", json={"jobId": 1})

        assert response.status_code == 200
        assert response.json() == {"evaluations": [], "message": "No candidates found in the system"}

    def test_search_reports_method(self, client):
        response = client.post("/api/search", json={"query": "react", "limit": 1})

        assert response.status_code == 200
        body = response.json()
        assert body["searchMethod"] == "model-only"
        assert len(body["results"]) == 1
        assert body["results"][0]["explanation"] == "fits"

    def test_search_without_query_or_job_is_400(self, client):
        response = client.post("/api/search", json={"query": ""})

        assert response.status_code == 400

    def test_unexpected_error_is_500(self, client, orchestrator):
        orchestrator.search = AsyncMock(side_effect=RuntimeError("boom"))

        response = client.post("/api/search", json={"query": "react"})

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"


class TestCandidateRoutes:
    """/api/candidates CRUD"""

    def test_list(self, client):
        response = client.get("/api/candidates")

        assert response.status_code == 200
        assert [c["id"] for c in response.json()] == [10, 11]

    def test_missing_fields_is_400(self, client):
        response = client.post("/api/candidates", data={"name": "Ada"})

        assert response.status_code == 400
        assert response.json()["message"] == "Missing required fields"

    def test_upload_txt_resume(self, client, store, orchestrator):
        store.add_candidate = AsyncMock(side_effect=lambda fields: Candidate(id=12, **fields))

        response = client.post(
            "/api/candidates",
            data={"name": "Jane", "email": "jane@example.com", "skills": "React", "experience": "5 years"},
            files={"resume": ("jane.txt", b"Jane Doe\nFrontend Developer\nReact", "text/plain")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Application submitted successfully!"
        assert body["candidate"]["jobTitle"] == "Frontend Developer"
        assert "React" in body["candidate"]["resumeText"]
        assert orchestrator.index.get("candidate_12") is not None

    def test_resume_is_parsed_off_the_event_loop(self, client, store):
        store.add_candidate = AsyncMock(side_effect=lambda fields: Candidate(id=13, **fields))
        seen = {}

        def fake_extract(data, filename):
            try:
                asyncio.get_running_loop()
                seen["on_loop"] = True
            except RuntimeError:
                seen["on_loop"] = False
            return ExtractedDocument(text="parsed", title_guess="Backend Engineer")

        with patch("talentmatch.routers.candidates.extract_document", fake_extract):
            response = client.post(
                "/api/candidates",
                data={"name": "Jo", "email": "jo@example.com", "skills": "Go", "experience": "3 years"},
                files={"resume": ("jo.pdf", b"%PDF-1.4", "application/pdf")},
            )

        assert response.status_code == 200
        assert seen == {"on_loop": False}

    def test_unsupported_resume_type_is_400(self, client):
        response = client.post(
            "/api/candidates",
            data={"name": "Jane", "email": "jane@example.com", "skills": "React", "experience": "5 years"},
            files={"resume": ("jane.exe", b"MZ", "application/octet-stream")},
        )

        assert response.status_code == 400

    def test_update_missing_is_404(self, client, store):
        store.update_candidate = AsyncMock(return_value=None)

        response = client.put("/api/candidates", json={"id": 99, "skills": "Go"})

        assert response.status_code == 404

    def test_delete_missing_is_404(self, client, store):
        store.delete_candidate = AsyncMock(return_value=None)

        response = client.request("DELETE", "/api/candidates", json={"id": 99})

        assert response.status_code == 404
        assert response.json()["message"] == "Candidate not found"


class TestJobRoutes:
    """/api/jobs"""

    def test_get_job(self, client):
        response = client.get("/api/jobs/1")

        assert response.status_code == 200
        assert response.json()["requirements"] == "3+ years React"

    def test_get_missing_job_is_404(self, client, store):
        store.get_job = AsyncMock(return_value=None)

        assert client.get("/api/jobs/5").status_code == 404

    def test_create_job_indexes_it(self, client, store, orchestrator, react_job):
        store.add_job = AsyncMock(return_value=react_job)

        response = client.post(
            "/api/jobs",
            json={"title": "Frontend Developer", "description": "React work", "requirements": "3+ years React"},
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Job created successfully"
        assert orchestrator.index.get("job_1") is not None


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_framework_errors_pass_through_with_request_id(self, client):
        response = client.get("/api/unknown")

        assert response.status_code == 404
        assert response.json() == {"detail": "Not Found"}
        assert "X-Request-ID" in response.headers
