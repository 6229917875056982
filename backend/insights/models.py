# insights/models.py
from __future__ import annotations

from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

QuestionType = Literal["text", "boolean", "rating"]
UserRole = Literal["ADMIN", "MANAGER"]
StoreStatus = Literal["Melhorando", "Crítico", "Estável"]

AnswerValue = Union[str, int, bool, None]


class CamelModel(BaseModel):
    """Records are stored and served with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")

    def to_storage(self) -> dict:
        return self.to_record()


# ---------- Reference entities ----------

class Store(CamelModel):
    id: str
    name: str
    address: Optional[str] = None


class User(CamelModel):
    id: str
    username: str
    role: UserRole
    assigned_store_id: Optional[str] = None
    password_hash: Optional[str] = Field(default=None, exclude=True)

    def to_storage(self) -> dict:
        # password_hash is excluded from API output but must reach storage
        record = self.to_record()
        record["passwordHash"] = self.password_hash
        return record


# ---------- Survey configuration ----------

class DependsOn(CamelModel):
    question_id: str
    value: AnswerValue


class SurveyQuestion(CamelModel):
    id: str
    label: str
    type: QuestionType
    required: bool = True
    depends_on: Optional[DependsOn] = None


class SurveyConfig(CamelModel):
    id: str
    name: str
    description: str = ""
    is_active: bool = False
    questions: List[SurveyQuestion] = Field(default_factory=list)
    created_at: str

    def question(self, question_id: str) -> Optional[SurveyQuestion]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None


# ---------- Collection ----------

class FormState(CamelModel):
    """Draft held by one collection station between submissions."""
    customer_name: str = ""
    gender: str = ""
    age_range: str = ""
    store_id: str = ""
    nps_score: int = 10
    answers: Dict[str, AnswerValue] = Field(default_factory=dict)


class SurveySubmission(CamelModel):
    id: str
    survey_id: str
    store_id: str
    timestamp: str
    customer_name: str
    gender: str
    age_range: str
    nps_score: int = Field(ge=0, le=10)
    answers: Dict[str, Union[str, int]] = Field(default_factory=dict)


# ---------- Typed answers ----------

class TextAnswer(BaseModel):
    kind: Literal["text"] = "text"
    value: str


class BooleanAnswer(BaseModel):
    kind: Literal["boolean"] = "boolean"
    value: Literal["Sim", "Não"]


class RatingAnswer(BaseModel):
    kind: Literal["rating"] = "rating"
    value: int = Field(ge=1, le=5)


Answer = Annotated[Union[TextAnswer, BooleanAnswer, RatingAnswer], Field(discriminator="kind")]


# ---------- Dashboard / AI ----------

class StoreStats(CamelModel):
    store_name: str
    average_nps: float
    count: int


class StorePerformance(CamelModel):
    store_name: str
    status: StoreStatus
    insight: str


class AIAnalysisResult(CamelModel):
    summary: str
    key_issues: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    sentiment_score: float = Field(ge=0, le=100)
    store_performances: List[StorePerformance] = Field(default_factory=list)
