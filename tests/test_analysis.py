"""Simulated disease detection and crop recommendation."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest
import requests

from krishi.analysis import (
    CROP_RECOMMENDATIONS,
    DISEASE_RESULTS,
    CropForm,
    CropRecommender,
    DiseaseDetector,
)
from krishi.errors import AnalysisError
from krishi.messages import bilingual


def test_missing_image_is_rejected():
    detector = DiseaseDetector(delay_seconds=0, service_url="")
    with pytest.raises(AnalysisError) as exc:
        asyncio.run(detector.analyze(None))
    assert exc.value.status_code == 400
    assert str(exc.value) == bilingual("upload_first")


def test_oversized_image_is_rejected():
    detector = DiseaseDetector(delay_seconds=0, max_image_bytes=10, service_url="")
    with pytest.raises(AnalysisError) as exc:
        asyncio.run(detector.analyze(b"x" * 11))
    assert exc.value.status_code == 413


def test_image_at_limit_is_accepted():
    detector = DiseaseDetector(delay_seconds=0, max_image_bytes=10, service_url="")
    outcome = asyncio.run(detector.analyze(b"x" * 10))
    assert outcome["source"] == "sample"
    # no service configured, nothing to report
    assert outcome["notice"] is None


def test_disease_sample_result():
    detector = DiseaseDetector(delay_seconds=0, service_url="")
    outcome = asyncio.run(detector.analyze(b"\x89PNG fake image"))

    result = outcome["results"][0]
    assert result["disease_name"] == "Leaf Blight"
    assert result["confidence"] == 85
    assert result["severity"] == "medium"
    assert outcome["message"] == bilingual("analysis_done")
    # callers get copies, the sample stays intact
    assert outcome["results"][0] is not DISEASE_RESULTS[0]


def test_recommendations_ignore_form():
    recommender = CropRecommender(delay_seconds=0, service_url="")
    first = asyncio.run(recommender.recommend(CropForm()))
    second = asyncio.run(recommender.recommend(
        CropForm(location="Ranchi", soil_type="red", farm_size="2", budget="50000")
    ))

    names = [r["name"] for r in first["recommendations"]]
    assert names == ["Rice (Basmati)", "Wheat", "Maize"]
    assert first["recommendations"] == second["recommendations"]
    assert len(first["recommendations"]) == len(CROP_RECOMMENDATIONS)


def test_waiting_can_be_cancelled():
    detector = DiseaseDetector(delay_seconds=30, service_url="")

    async def run():
        task = asyncio.create_task(detector.analyze(b"img"))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(run())


def test_inference_service_results_are_used():
    response = MagicMock()
    response.json.return_value = {"results": [{"name": "Millet", "confidence": 77}]}
    with patch("krishi.analysis.requests.post", return_value=response) as post:
        outcome = asyncio.run(
            CropRecommender(delay_seconds=0, service_url="http://infer.local/").recommend(
                CropForm(location="Ranchi")
            )
        )

    assert outcome["source"] == "service"
    assert outcome["notice"] is None
    assert outcome["recommendations"][0]["name"] == "Millet"
    assert post.call_args[0][0] == "http://infer.local/crop-recommendation"


def test_inference_service_failure_falls_back_to_sample():
    with patch("krishi.analysis.requests.post",
               side_effect=requests.ConnectionError("down")):
        outcome = asyncio.run(
            DiseaseDetector(delay_seconds=0, service_url="http://infer.local").analyze(b"img")
        )

    assert outcome["source"] == "sample"
    assert outcome["results"][0]["disease_name"] == "Leaf Blight"
    assert outcome["notice"] == bilingual("unavailable")


def test_recommender_reports_unavailable_service():
    with patch("krishi.analysis.requests.post", side_effect=requests.Timeout("slow")):
        outcome = asyncio.run(
            CropRecommender(delay_seconds=0, service_url="http://infer.local").recommend(CropForm())
        )

    assert outcome["source"] == "sample"
    assert outcome["notice"] == bilingual("unavailable")
    assert outcome["recommendations"][0]["name"] == "Rice (Basmati)"
