from typing import Literal, Optional

from pydantic import BaseModel, Field


class ProjectCreate(BaseModel):
    brokerage_id: str = Field(..., alias="brokerageId")
    name: str
    description: Optional[str] = None
    project_type: Optional[str] = Field(None, alias="projectType")
    applicant_count: Literal["one_applicant", "two_applicants", "three_or_more_applicants"] = Field(
        "one_applicant", alias="applicantCount"
    )
    has_guarantor: bool = Field(False, alias="hasGuarantor")

    model_config = {"populate_by_name": True}


class DocumentCreate(BaseModel):
    """Reference to a file already uploaded to external storage."""
    item_id: Optional[str] = Field(None, alias="itemId")
    participant_designation: Optional[Literal["solo_applicant", "applicant_one", "applicant_two"]] = Field(
        None, alias="participantDesignation"
    )
    file_name: str = Field(..., alias="fileName")
    file_path: str = Field(..., alias="filePath")
    file_size: Optional[int] = Field(None, alias="fileSize")
    mime_type: Optional[str] = Field(None, alias="mimeType")

    model_config = {"populate_by_name": True}
