"""AI summarization: prompt context, response parsing and failure handling."""

import asyncio
import json

import pytest

from insights.constants import DEFAULT_STORES, default_survey
from insights.errors import AnalysisError, ValidationFailed
from insights.services import llm

from .factories import RESULT, StubProvider, make_submission


def test_context_labels_answers_and_tolerates_dangling_refs(now):
    subs = [
        make_submission("2", 6, now, answers={"q1": "Não", "q1_d": "Arroz", "extra": "x"}),
        make_submission("gone", 9, now).model_copy(update={"survey_id": "deleted"}),
    ]
    context = llm.build_context(subs, DEFAULT_STORES, [default_survey()])
    first, second = context
    assert first["unidade"] == "Centro Ravilla"
    assert first["campanha"] == "Pesquisa de Performance no PDV"
    assert first["detalhamento"][1] == {
        "campo": "Quais itens ou marcas não estavam disponíveis nas gôndolas?", "valor": "Arroz"
    }
    assert first["detalhamento"][2]["campo"] == "Campo Personalizado"
    assert first["perfil"] == {"genero": "Feminino", "idade": "25-34 anos"}
    assert (second["unidade"], second["campanha"]) == ("unknown", "Geral")


def test_prompt_embeds_context_as_json():
    prompt = llm.build_prompt([{"unidade": "Loja Ç"}])
    assert '[{"unidade": "Loja Ç"}]' in prompt
    assert '"sentimentScore": 0-100' in prompt


def test_parse_result_accepts_fenced_json():
    result = llm.parse_result("```json\n" + json.dumps(RESULT) + "\n```")
    assert result.sentiment_score == 72
    assert result.store_performances[0].status == "Crítico"


@pytest.mark.parametrize("text", ["", "not json", json.dumps({"summary": "x", "sentimentScore": 140})])
def test_parse_result_failures_are_analysis_errors(text):
    with pytest.raises(AnalysisError):
        llm.parse_result(text)


def test_analyze_returns_typed_result(now):
    stub = StubProvider(reply=json.dumps(RESULT))
    subs = [make_submission("2", 6, now, answers={"q1": "Não"})]
    result = asyncio.run(llm.analyze(subs, DEFAULT_STORES, [default_survey()], llm=stub))
    assert result.key_issues == ["Falta de arroz"]
    assert "Centro Ravilla" in stub.prompts[0]


def test_analyze_requires_data():
    with pytest.raises(ValidationFailed):
        asyncio.run(llm.analyze([], DEFAULT_STORES, [], llm=StubProvider(reply="{}")))


def test_analyze_propagates_provider_failure(now):
    stub = StubProvider(error=AnalysisError("AI request failed: 503"))
    with pytest.raises(AnalysisError):
        asyncio.run(llm.analyze([make_submission("1", 9, now)], DEFAULT_STORES, [], llm=stub))


def test_missing_api_key_is_reported_at_call_time():
    provider = llm.GeminiProvider("gemini-test", api_key="")
    with pytest.raises(AnalysisError, match="GEMINI_API_KEY"):
        asyncio.run(provider.complete("hi"))
