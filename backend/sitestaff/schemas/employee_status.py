"""
Employee status API schemas.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from sitestaff.core.config import settings


class StatusResponse(BaseModel):
    id: int
    name: str
    group: str

    class Config:
        from_attributes = True


class StatusMappingResponse(BaseModel):
    id: str
    employee_id: str
    status_id: int
    status_name: str
    status_group: str
    is_active: bool
    is_upload: bool
    created_by: int
    updated_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StatusViewResponse(BaseModel):
    mapping_id: str
    status_id: int
    status_name: str
    status_group: str
    is_active: bool
    is_upload: bool
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EmployeeStatusesResponse(BaseModel):
    employee_id: str
    statuses: List[StatusMappingResponse]
    display_status: Optional[str] = None
    pending_export: bool = False


class BatchStatusRequest(BaseModel):
    employee_ids: List[str] = Field(..., min_length=1, max_length=settings.STATUS_BATCH_MAX_IDS)


class BatchStatusResponse(BaseModel):
    statuses: Dict[str, List[StatusViewResponse]]


class SetStatusRequest(BaseModel):
    status_id: int


class MarkEditedRequest(BaseModel):
    is_upload: bool = True


class UploadFlagRequest(BaseModel):
    is_upload: bool


class TransitionResponse(BaseModel):
    employee_id: str
    action: str
    applied: bool
    steps: List[str] = []
    skipped_reason: Optional[str] = None
    statuses: List[StatusMappingResponse] = []
