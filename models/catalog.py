from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from database import Base

SUBCATEGORY_SLOTS = ("subcategory", "subcategory_2", "subcategory_3", "subcategory_4", "subcategory_5")
INITIATOR_SLOTS = (
    "subcategory_1_initiator",
    "subcategory_2_initiator",
    "subcategory_3_initiator",
    "subcategory_4_initiator",
    "subcategory_5_initiator",
)


class ItemCategory(Base):
    __tablename__ = "items_categories"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(256), nullable=False)
    display_order = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    items = relationship("RequiredItem", back_populates="category")


class RequiredItem(Base):
    __tablename__ = "required_items"

    id = Column(String(64), primary_key=True, index=True)
    category_id = Column(String(64), ForeignKey("items_categories.id", ondelete="SET NULL"), nullable=True, index=True)
    item_name = Column(String(512), nullable=False)
    item_type = Column(String(32), nullable=False, default="text")
    scope = Column(String(16), nullable=False, default="PROJECT")
    priority = Column(Integer, nullable=True)
    # Subcategory chain: the item belongs to `subcategory` and may gate up to four more
    subcategory = Column(String(128), nullable=True, index=True)
    subcategory_2 = Column(String(128), nullable=True)
    subcategory_3 = Column(String(128), nullable=True)
    subcategory_4 = Column(String(128), nullable=True)
    subcategory_5 = Column(String(128), nullable=True)
    subcategory_1_initiator = Column(Boolean, nullable=False, default=False)
    subcategory_2_initiator = Column(Boolean, nullable=False, default=False)
    subcategory_3_initiator = Column(Boolean, nullable=False, default=False)
    subcategory_4_initiator = Column(Boolean, nullable=False, default=False)
    subcategory_5_initiator = Column(Boolean, nullable=False, default=False)
    # Empty or null applies to every project type
    project_types_applicable = Column(JSON(none_as_null=True), nullable=True)
    # {subcategory_name: [{"type": "equals", "value": "yes"}, ...]}
    validation_rules = Column(JSON(none_as_null=True), nullable=True)
    repeatable_group_target_table = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    category = relationship("ItemCategory", back_populates="items")

    @property
    def subcategories(self) -> list[str]:
        return [getattr(self, slot) for slot in SUBCATEGORY_SLOTS if getattr(self, slot)]

    @property
    def is_main_question(self) -> bool:
        return not self.subcategories

    @property
    def is_initiator(self) -> bool:
        return any(bool(getattr(self, slot)) for slot in INITIATOR_SLOTS)

    @property
    def is_conditional(self) -> bool:
        return bool(self.subcategories) and not self.is_initiator

    def applies_to(self, project_type: str | None) -> bool:
        types = self.project_types_applicable or []
        if not types or project_type is None:
            return True
        return project_type in types
