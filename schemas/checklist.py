from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

DesignationLiteral = Literal["solo_applicant", "applicant_one", "applicant_two"]


class GenerationResult(BaseModel):
    items_created: int = 0
    items_skipped: int = 0
    errors: list[str] = Field(default_factory=list)


class AnswerSave(BaseModel):
    value: Any
    participant_designation: Optional[DesignationLiteral] = Field(None, alias="participantDesignation")

    model_config = {"populate_by_name": True}


class ConditionalLogicResult(BaseModel):
    unlocked_subcategories: list[str] = Field(default_factory=list)
    # form field id -> answer already present in the submitted batch
    preserved_answers: dict[str, Any] = Field(default_factory=dict)


class EvaluationRequest(BaseModel):
    answers: dict[str, Any] = Field(default_factory=dict)
    item_id_to_form_field: dict[str, str] = Field(default_factory=dict, alias="itemIdToFormField")
    participant_designation: Optional[DesignationLiteral] = Field(None, alias="participantDesignation")
    materialize: bool = True

    model_config = {"populate_by_name": True}


class GroupSummary(BaseModel):
    group_index: int
    completed_questions: int = 0
    total_questions: int = 0
    has_answers: bool = False


class GroupCreate(BaseModel):
    subcategory: str


class GroupAnswerSave(BaseModel):
    value: Any
    item_type: str = Field("text", alias="itemType")

    model_config = {"populate_by_name": True}


class CategoryCompletionInfo(BaseModel):
    category_id: str
    category_name: str = ""
    completed_items: int = 0
    total_items: int = 0
    completion_percentage: int = 100
    is_complete: bool = True


class OverallCompletion(BaseModel):
    completed_items: int = 0
    total_items: int = 0
    completion_percentage: int = 0
