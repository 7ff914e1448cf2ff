from models.catalog import ItemCategory, RequiredItem
from models.checklist import ChecklistItem, DebtItem, DependentItem, SecondaryIncomeItem
from models.generation_rule import FormGenerationRule
from models.project import Project, ProjectDocument

__all__ = [
    "ChecklistItem",
    "DebtItem",
    "DependentItem",
    "FormGenerationRule",
    "ItemCategory",
    "Project",
    "ProjectDocument",
    "RequiredItem",
    "SecondaryIncomeItem",
]
