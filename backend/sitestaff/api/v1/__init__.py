from fastapi import APIRouter

from sitestaff.api.v1 import employee_statuses

api_router = APIRouter()
api_router.include_router(employee_statuses.router, tags=["employee-statuses"])
