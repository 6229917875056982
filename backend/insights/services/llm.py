# insights/services/llm.py
import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

import google.generativeai as genai
from google.api_core.exceptions import GoogleAPIError, ResourceExhausted
from pydantic import ValidationError

from insights.config import GEMINI_API_KEY, LLM_MODEL
from insights.constants import UNKNOWN_LABEL
from insights.errors import AnalysisError, ValidationFailed
from insights.models import AIAnalysisResult, Store, SurveyConfig, SurveySubmission

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """
Como consultor analítico de varejo, processe os seguintes dados de pesquisa de campo:
{context}

DIRETRIZES:
1. Analise os textos das perguntas ("campo") e as respostas para extrair padrões de ruptura (falta de produto), mau atendimento ou oportunidades.
2. Identifique pontos cegos que os gerentes de loja podem não estar vendo.
3. Seja direto e focado em ROI (retorno sobre investimento).

RETORNE OBRIGATORIAMENTE EM JSON:
{{
  "summary": "Resumo de alto impacto",
  "keyIssues": ["Problema detectado (seja específico)"],
  "recommendations": ["Ação corretiva sugerida"],
  "sentimentScore": 0-100,
  "storePerformances": [
    {{"storeName": "Nome da Loja", "status": "Crítico|Estável|Melhorando", "insight": "Dica de ouro"}}
  ]
}}
"""

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


def build_context(submissions: Sequence[SurveySubmission],
                  stores: Sequence[Store],
                  surveys: Sequence[SurveyConfig]) -> List[Dict[str, Any]]:
    """Flatten submissions into labelled records the model can read.

    Answers are keyed by question label so the prompt works for any
    questionnaire an admin builds.
    """
    store_names = {s.id: s.name for s in stores}
    survey_by_id = {s.id: s for s in surveys}
    context = []
    for sub in submissions:
        config = survey_by_id.get(sub.survey_id)
        details = []
        for qid, answer in sub.answers.items():
            q = config.question(qid) if config else None
            details.append({"campo": q.label if q else "Campo Personalizado", "valor": answer})
        context.append({
            "campanha": config.name if config else "Geral",
            "unidade": store_names.get(sub.store_id, UNKNOWN_LABEL),
            "nps_geral": sub.nps_score,
            "detalhamento": details,
            "perfil": {"genero": sub.gender, "idade": sub.age_range},
        })
    return context


def build_prompt(context: List[Dict[str, Any]]) -> str:
    return PROMPT_TEMPLATE.format(context=json.dumps(context, ensure_ascii=False))


def parse_result(text: str) -> AIAnalysisResult:
    cleaned = _FENCE.sub("", (text or "").strip())
    try:
        return AIAnalysisResult.model_validate(json.loads(cleaned))
    except (json.JSONDecodeError, ValidationError) as e:
        raise AnalysisError(f"AI response could not be read: {e}") from e


class GeminiProvider:
    def __init__(self, model: str, api_key: str = ""):
        self.model_name = model
        self.api_key = api_key
        self._configured = False

    def _model(self):
        if not self.api_key:
            raise AnalysisError("GEMINI_API_KEY is not set")
        if not self._configured:
            genai.configure(api_key=self.api_key)
            self._configured = True
        return genai.GenerativeModel(
            self.model_name,
            generation_config={"response_mime_type": "application/json"},
        )

    async def complete(self, prompt: str) -> str:
        model = self._model()
        try:
            resp = await model.generate_content_async(prompt)
        except ResourceExhausted as e:
            raise AnalysisError("AI rate limit reached. Please try again in a minute.") from e
        except GoogleAPIError as e:
            raise AnalysisError(f"AI request failed: {e}") from e
        except Exception as e:
            # Transport errors surface from several client layers
            raise AnalysisError(f"AI service unreachable: {e}") from e
        try:
            return resp.text or ""
        except ValueError as e:
            # Blocked or empty candidates
            raise AnalysisError(f"AI returned no text: {e}") from e


async def analyze(submissions: Sequence[SurveySubmission],
                  stores: Sequence[Store],
                  surveys: Sequence[SurveyConfig],
                  llm: Optional[GeminiProvider] = None) -> AIAnalysisResult:
    """Summarize submissions through the hosted model.

    Any failure surfaces as a single AnalysisError; there is no partial result.
    """
    if not submissions:
        raise ValidationFailed("Insufficient data: no submissions in the selected period")
    llm = llm or get_provider()
    prompt = build_prompt(build_context(submissions, stores, surveys))
    try:
        text = await llm.complete(prompt)
        return parse_result(text)
    except AnalysisError as e:
        logger.error("AI analysis failed: %s", e.message)
        raise


_provider: Optional[GeminiProvider] = None


def get_provider() -> GeminiProvider:
    global _provider
    if _provider is None:
        _provider = GeminiProvider(LLM_MODEL, GEMINI_API_KEY)
    return _provider


def set_provider(provider: Optional[GeminiProvider]) -> None:
    global _provider
    _provider = provider
