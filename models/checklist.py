from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import declared_attr, relationship

from database import Base

VALUE_COLUMNS = ("text_value", "numeric_value", "boolean_value", "date_value", "json_value")


class TypedValueMixin:
    """Typed answer slots; exactly one is active for a given item_type."""

    status = Column(String(32), nullable=False, default="pending", index=True)
    text_value = Column(String, nullable=True)
    numeric_value = Column(Float, nullable=True)
    boolean_value = Column(Boolean, nullable=True)
    date_value = Column(Date, nullable=True)
    json_value = Column(JSON(none_as_null=True), nullable=True)
    document_reference_id = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class ChecklistItem(TypedValueMixin, Base):
    __tablename__ = "project_checklist_items"
    __table_args__ = (
        UniqueConstraint("project_id", "item_id", "participant_designation", name="uq_checklist_item_scope"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(String(64), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    item_id = Column(String(64), ForeignKey("required_items.id", ondelete="CASCADE"), nullable=False, index=True)
    participant_designation = Column(String(32), nullable=True)

    required_item = relationship("RequiredItem")


class RepeatableGroupRowMixin(TypedValueMixin):
    id = Column(Integer, primary_key=True, autoincrement=True)
    group_index = Column(Integer, nullable=False, index=True)
    participant_designation = Column(String(32), nullable=True)

    @declared_attr
    def project_id(cls):
        return Column(String(64), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)

    @declared_attr
    def item_id(cls):
        return Column(String(64), ForeignKey("required_items.id", ondelete="CASCADE"), nullable=False)

    @declared_attr
    def __table_args__(cls):
        return (
            UniqueConstraint(
                "project_id",
                "item_id",
                "group_index",
                "participant_designation",
                name=f"uq_{cls.__tablename__}_group_row",
            ),
        )


class SecondaryIncomeItem(RepeatableGroupRowMixin, Base):
    __tablename__ = "project_secondary_income_items"


class DependentItem(RepeatableGroupRowMixin, Base):
    __tablename__ = "project_dependent_items"


class DebtItem(RepeatableGroupRowMixin, Base):
    __tablename__ = "project_debt_items"
