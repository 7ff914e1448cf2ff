from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, func

from database import Base


class FormGenerationRule(Base):
    """Brokerage-wide rule that adds or removes catalog items while a checklist is generated."""

    __tablename__ = "form_generation_rules"

    id = Column(String(64), primary_key=True, index=True)
    rule_name = Column(String(256), nullable=False)
    rule_type = Column(String(32), nullable=False, default="conditional")
    # {"project_type": "refinance", "applicant_count": "two_applicants", "has_guarantor": true}
    condition_logic = Column(JSON(none_as_null=True), nullable=True)
    # {"action": "remove_items" | "add_items", "item_categories": [...], "item_types": [...]}
    target_criteria = Column(JSON(none_as_null=True), nullable=False)
    priority = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
