import httpx
import openai
import pytest
from langchain_core.messages import HumanMessage, SystemMessage

from core.exceptions import (
    AICreditsExhaustedError,
    AIRateLimitError,
    AIServiceError,
    ConfigurationError,
    ValidationError,
)
from generators.LessonPlanGenerator import CAPS_LESSON_PLAN_FORMAT, LessonPlanGenerator
from utils.ai_gateway import AIGateway

from conftest import FakeChatModel

GATEWAY_URL = "https://gateway.test/v1/chat/completions"


def _status_error(code: int) -> openai.APIStatusError:
    request = httpx.Request("POST", GATEWAY_URL)
    response = httpx.Response(code, request=request, json={"error": "nope"})
    return openai.APIStatusError(f"status {code}", response=response, body=None)


@pytest.mark.parametrize(
    "code, error_type, message",
    [
        (429, AIRateLimitError, "Rate limit exceeded. Please try again in a moment."),
        (402, AICreditsExhaustedError, "AI credits exhausted. Please contact support."),
        (500, AIServiceError, "AI service error: 500"),
    ],
)
def test_gateway_maps_status_codes(code, error_type, message):
    gateway = AIGateway(llm=FakeChatModel(error=_status_error(code)))

    with pytest.raises(error_type) as excinfo:
        gateway.complete([HumanMessage(content="hi")], temperature=0.7)

    assert str(excinfo.value) == message


def test_gateway_maps_connection_errors():
    error = openai.APIConnectionError(request=httpx.Request("POST", GATEWAY_URL))
    gateway = AIGateway(llm=FakeChatModel(error=error))

    with pytest.raises(AIServiceError, match="connection failed"):
        gateway.complete([HumanMessage(content="hi")], temperature=0.7)


def test_gateway_rejects_empty_completion():
    gateway = AIGateway(llm=FakeChatModel(replies=[""]))

    with pytest.raises(AIServiceError, match="No content generated"):
        gateway.complete([HumanMessage(content="hi")], temperature=0.7)


def test_gateway_without_api_key_is_not_configured():
    gateway = AIGateway(api_key="")

    with pytest.raises(ConfigurationError, match="AI service not configured"):
        gateway.complete([HumanMessage(content="hi")], temperature=0.7)


def test_gateway_builds_one_chat_model_per_setting():
    gateway = AIGateway(api_key="test-key", base_url="https://gateway.test/v1", model="test-model")

    llm = gateway.get_llm(0.3, 4000)

    assert gateway.get_llm(0.3, 4000) is llm
    assert gateway.get_llm(0.7, 4000) is not llm
    assert llm.temperature == 0.3
    assert llm.max_tokens == 4000
    assert llm.max_retries == 0


# --- lesson plans ---


@pytest.fixture
def generator(gateway):
    return LessonPlanGenerator(gateway)


def test_generate_requires_subject_grade_topic(generator, fake_llm):
    with pytest.raises(ValidationError, match="Missing required fields: subject, grade, topic"):
        generator.generate("Mathematics", "10", None)
    assert fake_llm.calls == []


def test_generate_uses_caps_format(generator, fake_llm):
    fake_llm.replies = ["SCHOOL: MTSS\nSUBJECT: Mathematics"]

    content = generator.generate("Mathematics", "10", "Functions")

    assert content.startswith("SCHOOL: MTSS")
    system, user = fake_llm.calls[0]
    assert isinstance(system, SystemMessage)
    assert CAPS_LESSON_PLAN_FORMAT in system.content
    assert "Subject: Mathematics" in user.content
    assert "Topic: Functions" in user.content


def test_extract_sends_image(generator, fake_llm):
    fake_llm.replies = ["digitised plan"]
    image = "data:image/png;base64,iVBORw0KGgo="

    assert generator.extract(image) == "digitised plan"

    user = fake_llm.calls[0][1]
    assert user.content[1] == {"type": "image_url", "image_url": {"url": image}}


def test_extract_requires_image(generator):
    with pytest.raises(ValidationError):
        generator.extract(None)


def test_edit_without_instruction_converts_to_caps(generator, fake_llm):
    fake_llm.replies = ["converted"]

    generator.edit("Old plan text")

    user = fake_llm.calls[0][1]
    assert user.content.startswith("Please convert this to proper CAPS format:")
    assert "Old plan text" in user.content


def test_edit_with_instruction_and_image(generator, fake_llm):
    fake_llm.replies = ["edited"]

    generator.edit("Old plan text", "Add a group activity", "data:image/png;base64,AAAA")

    text_part = fake_llm.calls[0][1].content[0]["text"]
    assert "Old plan text" in text_part
    assert "Add a group activity" in text_part
