from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

ItemTypeLiteral = Literal[
    "text",
    "number",
    "date",
    "document",
    "repeatable_group",
    "single_choice_dropdown",
    "multiple_choice_checkbox",
]
TargetTableLiteral = Literal["project_secondary_income_items", "project_dependent_items", "project_debt_items"]


class CategoryCreate(BaseModel):
    name: str
    display_order: Optional[int] = Field(None, alias="displayOrder")

    model_config = {"populate_by_name": True}


class RequiredItemBase(BaseModel):
    category_id: Optional[str] = Field(None, alias="categoryId")
    item_name: str = Field(..., alias="itemName")
    item_type: ItemTypeLiteral = Field("text", alias="itemType")
    scope: Literal["PROJECT", "PARTICIPANT"] = "PROJECT"
    priority: Optional[int] = None
    subcategory: Optional[str] = None
    subcategory_2: Optional[str] = Field(None, alias="subcategory2")
    subcategory_3: Optional[str] = Field(None, alias="subcategory3")
    subcategory_4: Optional[str] = Field(None, alias="subcategory4")
    subcategory_5: Optional[str] = Field(None, alias="subcategory5")
    subcategory_1_initiator: bool = Field(False, alias="subcategory1Initiator")
    subcategory_2_initiator: bool = Field(False, alias="subcategory2Initiator")
    subcategory_3_initiator: bool = Field(False, alias="subcategory3Initiator")
    subcategory_4_initiator: bool = Field(False, alias="subcategory4Initiator")
    subcategory_5_initiator: bool = Field(False, alias="subcategory5Initiator")
    project_types_applicable: Optional[list[str]] = Field(None, alias="projectTypesApplicable")
    validation_rules: Optional[dict[str, Any]] = Field(None, alias="validationRules")
    repeatable_group_target_table: Optional[TargetTableLiteral] = Field(None, alias="repeatableGroupTargetTable")

    model_config = {"populate_by_name": True}


class RequiredItemCreate(RequiredItemBase):
    id: Optional[str] = None


class RequiredItemUpdate(BaseModel):
    """Partial update; only provided fields change."""
    category_id: Optional[str] = Field(None, alias="categoryId")
    item_name: Optional[str] = Field(None, alias="itemName")
    item_type: Optional[ItemTypeLiteral] = Field(None, alias="itemType")
    scope: Optional[Literal["PROJECT", "PARTICIPANT"]] = None
    priority: Optional[int] = None
    subcategory: Optional[str] = None
    subcategory_2: Optional[str] = Field(None, alias="subcategory2")
    subcategory_3: Optional[str] = Field(None, alias="subcategory3")
    subcategory_4: Optional[str] = Field(None, alias="subcategory4")
    subcategory_5: Optional[str] = Field(None, alias="subcategory5")
    subcategory_1_initiator: Optional[bool] = Field(None, alias="subcategory1Initiator")
    subcategory_2_initiator: Optional[bool] = Field(None, alias="subcategory2Initiator")
    subcategory_3_initiator: Optional[bool] = Field(None, alias="subcategory3Initiator")
    subcategory_4_initiator: Optional[bool] = Field(None, alias="subcategory4Initiator")
    subcategory_5_initiator: Optional[bool] = Field(None, alias="subcategory5Initiator")
    project_types_applicable: Optional[list[str]] = Field(None, alias="projectTypesApplicable")
    validation_rules: Optional[dict[str, Any]] = Field(None, alias="validationRules")
    repeatable_group_target_table: Optional[TargetTableLiteral] = Field(None, alias="repeatableGroupTargetTable")

    model_config = {"populate_by_name": True}


class GenerationRuleCreate(BaseModel):
    id: Optional[str] = None
    rule_name: str = Field(..., alias="ruleName")
    rule_type: Literal["conditional"] = Field("conditional", alias="ruleType")
    condition_logic: Optional[dict[str, Any]] = Field(None, alias="conditionLogic")
    target_criteria: dict[str, Any] = Field(..., alias="targetCriteria")
    priority: Optional[int] = None
    is_active: bool = Field(True, alias="isActive")

    model_config = {"populate_by_name": True}
