"""
Disease detection and crop recommendation.

Neither runs a model. Each waits a fixed delay and returns predetermined
results, unless INFERENCE_API_URL points at an external classification /
recommendation service, in which case the input is forwarded there and
the sample results are only used as a fallback, with the "feature
unavailable" notice attached.

The wait is an asyncio.sleep, so cancelling the request cancels it.
"""

import asyncio
from typing import Dict, List, Optional

import requests
from pydantic import BaseModel

from . import config
from .errors import AnalysisError
from .messages import bilingual

SEVERITY_LABELS = {
    "low":    "कम / Low",
    "medium": "मध्यम / Medium",
    "high":   "गंभीर / High",
}

DISEASE_RESULTS = (
    {
        "disease_name": "Leaf Blight",
        "hindi_name": "पत्ती झुलसा रोग",
        "confidence": 85,
        "severity": "medium",
        "symptoms": [
            "पत्तियों पर भूरे रंग के धब्बे",
            "पत्तियों का मुरझाना",
            "पीले रंग की पत्तियां",
        ],
        "treatment": [
            "कॉपर ऑक्सीक्लोराइड का छिड़काव",
            "प्रभावित पत्तियों को हटाएं",
            "खेत में जल निकासी की व्यवस्था करें",
        ],
        "prevention": [
            "बीज उपचार करें",
            "संतुलित उर्वरक का प्रयोग",
            "फसल चक्र अपनाएं",
        ],
        "organic_remedy": [
            "नीम का तेल का छिड़काव",
            "लहसुन-मिर्च का घोल",
            "गोमूत्र का इस्तेमाल",
        ],
    },
)

CROP_RECOMMENDATIONS = (
    {
        "name": "Rice (Basmati)",
        "confidence": 92,
        "expected_yield": "4.2 tons/hectare",
        "profit_margin": "₹35,000-45,000",
        "sustainability_score": 85,
        "season": "Kharif",
        "reasons": ["High soil moisture", "Optimal pH for rice", "Good market demand",
                    "Monsoon season"],
    },
    {
        "name": "Wheat",
        "confidence": 88,
        "expected_yield": "3.8 tons/hectare",
        "profit_margin": "₹28,000-38,000",
        "sustainability_score": 78,
        "season": "Rabi",
        "reasons": ["Suitable soil composition", "Weather patterns favorable",
                    "Local market preference"],
    },
    {
        "name": "Maize",
        "confidence": 84,
        "expected_yield": "5.5 tons/hectare",
        "profit_margin": "₹32,000-42,000",
        "sustainability_score": 82,
        "season": "Kharif",
        "reasons": ["Drought resistant", "Good market price", "Low water requirement"],
    },
)

FORM_SOIL_TYPES = {
    "clay": "Clay", "sandy": "Sandy", "loamy": "Loamy",
    "red": "Red Soil", "black": "Black Soil",
}
FORM_PREVIOUS_CROPS = {
    "rice": "Rice", "wheat": "Wheat", "maize": "Maize",
    "sugarcane": "Sugarcane", "fallow": "Fallow Land",
}


class CropForm(BaseModel):
    location: str = ""
    soil_type: str = ""
    farm_size: str = ""
    budget: str = ""
    previous_crop: str = ""


def _post_to_service(base_url: str, path: str, **kwargs) -> Optional[List[Dict]]:
    """Forward to the inference service. Returns None on any failure."""
    url = f"{base_url.rstrip('/')}/{path}"
    try:
        resp = requests.post(url, timeout=config.INFERENCE_TIMEOUT, **kwargs)
        resp.raise_for_status()
        data = resp.json()
        return data.get("results", data) if isinstance(data, dict) else data
    except Exception as e:
        print(f"⚠️ Inference service error ({path}): {e}")
        return None


class DiseaseDetector:

    def __init__(
        self,
        delay_seconds: Optional[float] = None,
        max_image_bytes: Optional[int] = None,
        service_url: Optional[str] = None,
    ) -> None:
        self.delay_seconds = config.ANALYSIS_DELAY_SECONDS if delay_seconds is None else delay_seconds
        self.max_image_bytes = max_image_bytes or config.MAX_IMAGE_BYTES
        self.service_url = config.INFERENCE_API_URL if service_url is None else service_url

    def validate(self, image: Optional[bytes]) -> None:
        if not image:
            raise AnalysisError(bilingual("upload_first"), status_code=400)
        if len(image) > self.max_image_bytes:
            raise AnalysisError(bilingual("file_too_large"), status_code=413)

    async def analyze(self, image: Optional[bytes], filename: str = "leaf.jpg") -> Dict:
        self.validate(image)

        notice = None
        if self.service_url:
            results = await asyncio.to_thread(
                _post_to_service, self.service_url, "disease-detection",
                files={"image": (filename, image)},
            )
            if results is not None:
                return {"results": results, "source": "service",
                        "message": bilingual("analysis_done"), "notice": None}
            notice = bilingual("unavailable")

        await asyncio.sleep(self.delay_seconds)
        return {"results": [dict(r) for r in DISEASE_RESULTS], "source": "sample",
                "message": bilingual("analysis_done"), "notice": notice}


class CropRecommender:

    def __init__(
        self, delay_seconds: Optional[float] = None, service_url: Optional[str] = None
    ) -> None:
        self.delay_seconds = config.ANALYSIS_DELAY_SECONDS if delay_seconds is None else delay_seconds
        self.service_url = config.INFERENCE_API_URL if service_url is None else service_url

    async def recommend(self, form: CropForm) -> Dict:
        notice = None
        if self.service_url:
            results = await asyncio.to_thread(
                _post_to_service, self.service_url, "crop-recommendation", json=form.model_dump(),
            )
            if results is not None:
                return {"recommendations": results, "source": "service", "notice": None}
            notice = bilingual("unavailable")

        # the sample answer does not depend on the form
        await asyncio.sleep(self.delay_seconds)
        return {"recommendations": [dict(r) for r in CROP_RECOMMENDATIONS],
                "source": "sample", "notice": notice}
