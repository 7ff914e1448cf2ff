import enum


class ItemScope(str, enum.Enum):
    PROJECT = "PROJECT"
    PARTICIPANT = "PARTICIPANT"


class ItemType(str, enum.Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    DOCUMENT = "document"
    REPEATABLE_GROUP = "repeatable_group"
    SINGLE_CHOICE_DROPDOWN = "single_choice_dropdown"
    MULTIPLE_CHOICE_CHECKBOX = "multiple_choice_checkbox"


class ChecklistStatus(str, enum.Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"
    APPROVED = "approved"


class ParticipantDesignation(str, enum.Enum):
    SOLO_APPLICANT = "solo_applicant"
    APPLICANT_ONE = "applicant_one"
    APPLICANT_TWO = "applicant_two"


class ApplicantCount(str, enum.Enum):
    ONE_APPLICANT = "one_applicant"
    TWO_APPLICANTS = "two_applicants"
    THREE_OR_MORE_APPLICANTS = "three_or_more_applicants"


class RepeatableGroupTable(str, enum.Enum):
    SECONDARY_INCOME = "project_secondary_income_items"
    DEPENDENTS = "project_dependent_items"
    DEBTS = "project_debt_items"


# Statuses that count an answer as given
ANSWERED_STATUSES = (ChecklistStatus.SUBMITTED.value, ChecklistStatus.APPROVED.value)


class GenerationRuleAction(str, enum.Enum):
    ADD_ITEMS = "add_items"
    REMOVE_ITEMS = "remove_items"
