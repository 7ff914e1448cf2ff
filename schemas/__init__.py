from schemas.catalog import CategoryCreate, GenerationRuleCreate, RequiredItemCreate, RequiredItemUpdate
from schemas.checklist import (
    AnswerSave,
    CategoryCompletionInfo,
    ConditionalLogicResult,
    EvaluationRequest,
    GenerationResult,
    GroupAnswerSave,
    GroupCreate,
    GroupSummary,
    OverallCompletion,
)
from schemas.conditions import Condition, ValidationRules, parse_validation_rules
from schemas.project import DocumentCreate, ProjectCreate

__all__ = [
    "AnswerSave",
    "CategoryCompletionInfo",
    "CategoryCreate",
    "Condition",
    "ConditionalLogicResult",
    "DocumentCreate",
    "EvaluationRequest",
    "GenerationRuleCreate",
    "GenerationResult",
    "GroupAnswerSave",
    "GroupCreate",
    "GroupSummary",
    "OverallCompletion",
    "ProjectCreate",
    "RequiredItemCreate",
    "RequiredItemUpdate",
    "ValidationRules",
    "parse_validation_rules",
]
