"""End-to-end tests for the validation and cache endpoints."""

from docgap.models.issue_models import Issue
from docgap.models.validation_models import (
    ValidationResult,
    ValidationSummary,
    ValidatorOutput,
)
from docgap.storage import ObjectStoreError

PAYLOAD = {
    "issues": [
        {
            "id": "issue-1",
            "title": "Emails fail after deploying to Vercel",
            "category": "deployment",
            "description": "Works locally but not on Vercel",
            "frequency": 12,
            "sources": ["https://stackoverflow.com/q/123"],
            "lastSeen": "2025-01-15",
            "severity": "high",
        }
    ],
    "domain": "https://resend.com",
    "sessionId": "session-1",
}


class TestValidateEndpoint:
    """Test POST /validate."""

    def test_returns_camel_case_report(self, test_client, mock_validator):
        mock_validator.run.return_value = ValidatorOutput(
            validation_results=[
                ValidationResult(
                    issue_id="issue-1",
                    issue_title="Emails fail after deploying to Vercel",
                    status="critical-gap",
                    confidence=95,
                )
            ],
            summary=ValidationSummary(total_issues=1, critical_gaps=1),
            processing_time=42,
        )

        response = test_client.post("/validate", json=PAYLOAD)

        assert response.status_code == 200
        data = response.json()
        assert data["summary"] == {
            "totalIssues": 1,
            "confirmed": 0,
            "resolved": 0,
            "potentialGaps": 0,
            "criticalGaps": 1,
        }
        assert data["validationResults"][0]["issueId"] == "issue-1"
        assert data["processingTime"] == 42
        assert "sitemapHealth" not in data
        assert "error" not in data

        request = mock_validator.run.await_args.args[0]
        assert isinstance(request.issues[0], Issue)
        assert request.issues[0].last_seen == "2025-01-15"
        assert request.session_id == "session-1"

    def test_accepts_snake_case_fields(self, test_client, mock_validator):
        mock_validator.run.return_value = ValidatorOutput()
        payload = {**PAYLOAD, "session_id": "session-2", "refresh_cache": True}
        del payload["sessionId"]

        response = test_client.post("/validate", json=payload)

        assert response.status_code == 200
        assert mock_validator.run.await_args.args[0].refresh_cache is True

    def test_rejects_invalid_payload(self, test_client, mock_validator):
        response = test_client.post("/validate", json={"issues": [], "domain": ""})

        assert response.status_code == 422
        mock_validator.run.assert_not_awaited()

    def test_pipeline_failure_returns_500(self, test_client, mock_validator):
        mock_validator.run.return_value = ValidatorOutput(
            processing_time=3, error="Issue validation failed", message="boom"
        )

        response = test_client.post("/validate", json=PAYLOAD)

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "Issue validation failed"
        assert data["message"] == "boom"
        assert data["validationResults"] == []
        assert data["summary"]["totalIssues"] == 0


class TestCacheInvalidateEndpoint:
    """Test POST /cache/invalidate."""

    def test_invalidates_normalized_domain(self, test_client, mock_validator):
        response = test_client.post("/cache/invalidate", json={"domain": "https://Resend.com/"})

        assert response.status_code == 200
        assert response.json() == {
            "domain": "resend.com",
            "invalidatedKeys": [
                "rich-content-embeddings-resend-com.json",
                "sitemap-health-resend-com.json",
            ],
        }
        mock_validator.invalidate_caches.assert_awaited_once_with("resend.com")

    def test_store_failure_returns_500(self, test_client, mock_validator):
        mock_validator.invalidate_caches.side_effect = ObjectStoreError("storage down")

        response = test_client.post("/cache/invalidate", json={"domain": "resend.com"})

        assert response.status_code == 500
        assert response.json()["detail"] == "Cache invalidation failed"
