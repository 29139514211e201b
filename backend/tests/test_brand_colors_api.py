"""
Tests for the /v1 brand color endpoints.
"""
from unittest.mock import patch

from app.schemas import BrandColorResult


def test_brand_colors_success(test_client):
    with patch("app.api.v1.resolve_brand_colors",
               return_value=BrandColorResult(primary="#112233", secondary="#0E1B29")) as mock_resolve:
        response = test_client.get("/v1/brand-colors", params={"domain": "Example.com"})

    assert response.status_code == 200
    assert response.json() == {"domain": "example.com", "primary": "#112233", "secondary": "#0E1B29"}
    assert mock_resolve.call_args[0][0] == "example.com"
    assert mock_resolve.call_args[1]["deadline"] is None


def test_brand_colors_empty_result_omits_fields(test_client):
    with patch("app.api.v1.resolve_brand_colors", return_value=BrandColorResult()):
        response = test_client.get("/v1/brand-colors", params={"domain": "offline.invalid"})

    assert response.status_code == 200
    assert response.json() == {"domain": "offline.invalid"}


def test_brand_colors_passes_deadline(test_client):
    with patch("app.api.v1.resolve_brand_colors", return_value=BrandColorResult()) as mock_resolve:
        test_client.get("/v1/brand-colors", params={"domain": "example.com", "timeout_s": 5})

    deadline = mock_resolve.call_args[1]["deadline"]
    assert deadline is not None
    assert 0 < deadline.remaining() <= 5


def test_brand_colors_requires_domain(test_client):
    assert test_client.get("/v1/brand-colors").status_code == 422
    assert test_client.get("/v1/brand-colors", params={"domain": ""}).status_code == 422


def test_metrics_endpoint(test_client):
    response = test_client.get("/v1/metrics")
    assert response.status_code == 200
    data = response.json()
    assert "counters" in data
    assert "timing_stats" in data
    assert data["uptime_seconds"] >= 0
