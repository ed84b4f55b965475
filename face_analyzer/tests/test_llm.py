import json
from unittest.mock import MagicMock, patch

import pytest

from face_analyzer.catalog.models import Service
from face_analyzer.exceptions import LLMUnavailableError, ModelOutputError
from face_analyzer.llm.config import LLMConfig
from face_analyzer.llm.groq_client import (
    detect_features,
    finalize_recommendations,
    heuristic_recommendations,
)
from face_analyzer.llm.prompts import build_final_user_message

LIP_FILLER = Service(
    name="Lip Filler",
    description="Hyaluronic acid filler for the lips.",
    problems_treated=["thin lips"],
    enhancements=["fuller lips"],
)
CHEEK_FILLER = Service(
    name="Cheek Filler",
    problems_treated=["hollow cheeks"],
    enhancements=["lifted cheekbones"],
)

ENABLED_CONFIG = LLMConfig(api_key="test-key", enabled=True)
DISABLED_CONFIG = LLMConfig(api_key="test-key", enabled=False)


def _mock_groq_response(content: str) -> MagicMock:
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


# ── Feature detection ────────────────────────────────────────────────────


@patch("face_analyzer.llm.groq_client.Groq")
def test_detect_features_returns_list(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(
        json.dumps({"detected_features": ["thin lips", "dark circles"]})
    )

    features = detect_features(b"\x89PNG", "image/png", config=ENABLED_CONFIG)

    assert features == ["thin lips", "dark circles"]
    kwargs = mock_groq_cls.return_value.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == ENABLED_CONFIG.vision_model
    assert kwargs["response_format"] == {"type": "json_object"}
    image_part = kwargs["messages"][1]["content"][1]
    assert image_part["image_url"]["url"].startswith("data:image/png;base64,")


@patch("face_analyzer.llm.groq_client.Groq")
def test_detect_features_defaults_to_jpeg(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(
        '{"detected_features": []}'
    )

    assert detect_features(b"raw", "application/octet-stream", config=ENABLED_CONFIG) == []
    kwargs = mock_groq_cls.return_value.chat.completions.create.call_args.kwargs
    assert kwargs["messages"][1]["content"][1]["image_url"]["url"].startswith("data:image/jpeg;base64,")


@patch("face_analyzer.llm.groq_client.Groq")
def test_detect_features_accepts_fenced_output(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(
        '```json\n{"detected_features": ["acne scars"]}\n```'
    )

    assert detect_features(b"img", config=ENABLED_CONFIG) == ["acne scars"]


@patch("face_analyzer.llm.groq_client.Groq")
def test_detect_features_bad_json(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(
        "not valid json{{{"
    )

    with pytest.raises(ModelOutputError) as excinfo:
        detect_features(b"img", config=ENABLED_CONFIG)
    assert excinfo.value.raw == "not valid json{{{"


@pytest.mark.parametrize("payload", [{"features": ["acne"]}, {"detected_features": "acne"},
                                     {"detected_features": ["acne", 3]}])
@patch("face_analyzer.llm.groq_client.Groq")
def test_detect_features_unexpected_structure(mock_groq_cls, payload):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(
        json.dumps(payload)
    )

    with pytest.raises(ModelOutputError, match="unexpected format"):
        detect_features(b"img", config=ENABLED_CONFIG)


def test_detect_features_disabled():
    with pytest.raises(LLMUnavailableError):
        detect_features(b"img", config=DISABLED_CONFIG)
    with pytest.raises(LLMUnavailableError):
        detect_features(b"img", config=LLMConfig(api_key="", enabled=True))


# ── Final recommendations ────────────────────────────────────────────────


@patch("face_analyzer.llm.groq_client.Groq")
def test_finalize_returns_recommendations(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(json.dumps({
        "recommendations": [{
            "service_name": "Lip Filler",
            "type": "Problem-Solving",
            "explanation": "Adds volume to thin lips.",
            "relevant_features": ["thin lips"],
        }]
    }))

    result = finalize_recommendations(["thin lips"], [LIP_FILLER], config=ENABLED_CONFIG)

    assert len(result) == 1
    assert result[0].service_name == "Lip Filler"
    assert result[0].relevant_features == ["thin lips"]
    kwargs = mock_groq_cls.return_value.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == ENABLED_CONFIG.model
    assert "- Service: Lip Filler" in kwargs["messages"][1]["content"]


@patch("face_analyzer.llm.groq_client.Groq")
def test_finalize_unexpected_structure(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(
        '{"recommendations": {"service_name": "Lip Filler"}}'
    )

    with pytest.raises(ModelOutputError, match="unexpected format"):
        finalize_recommendations(["thin lips"], [LIP_FILLER], config=ENABLED_CONFIG)


@patch("face_analyzer.llm.groq_client.Groq")
def test_finalize_missing_keys(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(
        '{"recommendations": [{"service_name": "Lip Filler"}]}'
    )

    with pytest.raises(ModelOutputError):
        finalize_recommendations(["thin lips"], [LIP_FILLER], config=ENABLED_CONFIG)


@patch("face_analyzer.llm.groq_client.Groq")
def test_finalize_disabled_uses_heuristics(mock_groq_cls):
    result = finalize_recommendations(["thin lips"], [LIP_FILLER], config=DISABLED_CONFIG)

    mock_groq_cls.assert_not_called()
    assert [r.service_name for r in result] == ["Lip Filler"]


def test_finalize_empty_services():
    assert finalize_recommendations(["thin lips"], [], config=ENABLED_CONFIG) == []


# ── Heuristic fallback and prompts ───────────────────────────────────────


def test_heuristic_problem_solving():
    [rec] = heuristic_recommendations(["thin lips", "fuller lips", "rosacea"], [LIP_FILLER])
    assert rec.type == "Problem-Solving"
    assert rec.relevant_features == ["thin lips", "fuller lips"]
    assert rec.explanation.endswith("Hyaluronic acid filler for the lips.")


def test_heuristic_enhancement_only():
    [rec] = heuristic_recommendations(["lifted cheekbones"], [CHEEK_FILLER])
    assert rec.type == "Aesthetic Enhancement"
    assert rec.relevant_features == ["lifted cheekbones"]


def test_final_prompt_marks_missing_fields():
    message = build_final_user_message(["dark circles"], [Service(name="Under Eye Filler")])
    assert '["dark circles"]' in message
    assert "  Description: N/A" in message
    assert "  Problems Treated: N/A" in message
    assert "  Enhancements: N/A" in message
