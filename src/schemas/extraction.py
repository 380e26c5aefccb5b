"""Learner extraction schemas.

Field names follow the JSON shape the extraction prompt asks the model for,
so candidates can be validated straight from the model reply and sent back to
the browser unchanged.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict

CandidateStatus = Literal["pending", "success", "error"]


class ExtractionCandidate(BaseModel):
    """A learner found in an uploaded document, not yet a child record."""

    # Models often answer "grade": 9 or a bare phone number
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    # The model may omit the name; registration then fails for this row only
    name: Optional[str] = None
    dateOfBirth: Optional[str] = None
    grade: Optional[str] = None
    parentName: Optional[str] = None
    parentEmail: Optional[str] = None
    parentPhone: Optional[str] = None
    status: CandidateStatus = "pending"
    message: Optional[str] = None


class ExtractResponse(BaseModel):
    learners: List[ExtractionCandidate]


class RegisterLearnersRequest(BaseModel):
    learners: List[ExtractionCandidate]


class RegisterLearnersResponse(BaseModel):
    learners: List[ExtractionCandidate]
    success_count: int
    error_count: int
