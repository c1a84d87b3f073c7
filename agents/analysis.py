## agents/analysis.py

from typing import Optional, Sequence

from common.base_agent import BaseAgent
from common.errors import AnalysisFailed
from common.models import ImageAnalysis, ImageInput, Problem
from constants.prompts.analysis_prompts import build_analysis_prompt, build_image_analysis_prompt
from constants.types import OracleOptions, Prompt
from services.response_contract import ANALYSIS_CONTRACT, IMAGE_CONTRACT, build_model

ANALYSIS_OPTIONS: OracleOptions = {"maxOutputTokens": 1500, "temperature": 0.3}
IMAGE_OPTIONS: OracleOptions = {"maxOutputTokens": 1000, "temperature": 0.3}


def _coerce_images(images: Optional[Sequence]) -> list[ImageInput]:
    out = []
    for img in images or []:
        out.append(img if isinstance(img, ImageInput) else ImageInput.model_validate(img))
    return out


class ProblemAnalyzer(BaseAgent):
    """Raw description (+ images, + location) -> structured Problem. No heuristic fallback."""

    stage = "analysis"
    failure = AnalysisFailed

    async def analyze_problem(
        self,
        description: str,
        images: Optional[Sequence] = None,
        location: Optional[str] = None,
        *,
        session_id: Optional[str] = None,
    ) -> Problem:
        if not description or not description.strip():
            raise ValueError("description is required")
        imgs = _coerce_images(images)

        text = build_analysis_prompt(description, imgs, location, now=self._clock(), brand=self._brand)
        attached = [{"data": i.data, "media_type": i.media_type} for i in imgs if i.data]
        prompt: Prompt = {"text": text, "images": attached} if attached else text

        with self._stage_failures(session_id):
            raw = await self._ask(prompt, ANALYSIS_OPTIONS, session_id=session_id, images=len(imgs))
            data = ANALYSIS_CONTRACT.read(raw)
            data.pop("source", None)
            data["rawText"] = description.strip()
            problem = build_model(Problem, data)

        self._log(session_id).stage_result(
            self.stage,
            trades=[t.trade for t in problem.trades],
            urgency=problem.urgency,
            confidence=problem.confidence,
            needs_more_info=problem.needs_more_info,
        )
        return problem

    async def analyze_image(
        self,
        image: ImageInput,
        context: str = "",
        *,
        session_id: Optional[str] = None,
    ) -> ImageAnalysis:
        if isinstance(image, dict):
            image = ImageInput.model_validate(image)
        if not image.data:
            raise ValueError("image data is required")

        prompt: Prompt = {
            "text": build_image_analysis_prompt(context),
            "images": [{"data": image.data, "media_type": image.media_type}],
        }
        with self._stage_failures(session_id):
            raw = await self._ask(prompt, IMAGE_OPTIONS, session_id=session_id, stage="image", images=1)
            data = IMAGE_CONTRACT.read(raw)
            data.pop("source", None)
            result = build_model(ImageAnalysis, data)

        self._log(session_id).stage_result("image", urgency=result.urgency, confidence=result.confidence)
        return result
