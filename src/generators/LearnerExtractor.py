"""Learner extraction module.

Turns freeform admin-supplied text (pasted forms, CSV exports, narrative
lists) into candidate learner records by asking the AI gateway for strictly
JSON output.
"""

import json
import logging
import re
from typing import List

from langchain_core.prompts import ChatPromptTemplate
from pydantic import ValidationError as PydanticValidationError

from config import EXTRACTION_TEMPERATURE
from core.exceptions import MalformedResponseError, ValidationError
from schemas.extraction import ExtractionCandidate
from utils.ai_gateway import AIGateway

logger = logging.getLogger(__name__)

_CODE_FENCE_RE = re.compile(r"```(?:json)?\n?")

UNEXPECTED_SHAPE = "The AI service returned JSON that does not list learners as objects."

SYSTEM_PROMPT = """You are a document processing AI specialized in extracting learner/student registration information from various document formats.

Your task is to:
1. Parse the provided text content
2. Extract learner information including:
   - Full name (required)
   - Date of birth (YYYY-MM-DD format if possible)
   - Grade level (8-12 for high school)
   - Parent/Guardian name
   - Parent email
   - Parent phone number
3. Return structured JSON data

Be flexible with input formats - the data might come in various formats like:
- Tabular data (CSV-like)
- Form-style key-value pairs
- Narrative text
- Lists

Always try to extract as much information as possible even if some fields are missing."""

USER_PROMPT = """Extract learner registration information from the following document content. Return a JSON array of learners with the following structure:

{{
  "learners": [
    {{
      "name": "Full Name",
      "dateOfBirth": "YYYY-MM-DD or null",
      "grade": "8-12 or null",
      "parentName": "Parent Name or null",
      "parentEmail": "email@example.com or null",
      "parentPhone": "phone number or null",
      "status": "pending"
    }}
  ]
}}

Document content:
{content}

Return ONLY valid JSON, no additional text or explanation."""


def strip_code_fences(text: str) -> str:
    """Remove Markdown code fences the model sometimes wraps JSON in."""
    return _CODE_FENCE_RE.sub("", text).strip()


class LearnerExtractor:
    """Extract candidate learners from document text."""

    def __init__(self, gateway: AIGateway):
        """Initialize LearnerExtractor.

        Args:
            gateway: AI gateway used for the completion call.
        """
        self.gateway = gateway
        self.prompt = ChatPromptTemplate.from_messages(
            [
                ("system", SYSTEM_PROMPT),
                ("user", USER_PROMPT),
            ]
        )

    def parse_reply(self, reply: str) -> List[ExtractionCandidate]:
        """Parse the model reply into candidates.

        A reply without a ``learners`` key means nothing was found. Anything
        that is not JSON, or not shaped like ``{"learners": [{...}, ...]}``,
        is a malformed response.

        Raises:
            MalformedResponseError: If the reply cannot be used.
        """
        cleaned = strip_code_fences(reply)
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.error("Failed to parse AI response as JSON: %s", cleaned[:500])
            raise MalformedResponseError(reply) from e

        if not isinstance(parsed, dict):
            raise MalformedResponseError(reply, UNEXPECTED_SHAPE)
        learners = parsed.get("learners") or []
        if not isinstance(learners, list):
            raise MalformedResponseError(reply, UNEXPECTED_SHAPE)

        candidates = []
        for item in learners:
            if not isinstance(item, dict):
                raise MalformedResponseError(reply, UNEXPECTED_SHAPE)
            # Status is ours to track, whatever the model echoed back
            item = {**item, "status": "pending", "message": None}
            try:
                candidates.append(ExtractionCandidate.model_validate(item))
            except PydanticValidationError as e:
                raise MalformedResponseError(reply, UNEXPECTED_SHAPE) from e
        return candidates

    def extract(self, raw_text: str) -> List[ExtractionCandidate]:
        """Extract learners from freeform text.

        Args:
            raw_text: Pasted or uploaded document content.

        Returns:
            Candidates in document order, each with status "pending".

        Raises:
            ValidationError: If the text is empty.
            MalformedResponseError: If the model reply is not usable JSON.
            AIGatewayError subclasses: If the gateway call fails.
        """
        if not raw_text or not raw_text.strip():
            raise ValidationError("Please enter or paste learner information to process.")

        messages = self.prompt.format_messages(content=raw_text)
        reply = self.gateway.complete(messages, temperature=EXTRACTION_TEMPERATURE)
        candidates = self.parse_reply(reply)
        logger.info("Extracted %d learners from document", len(candidates))
        return candidates
