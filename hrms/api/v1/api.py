from fastapi import APIRouter
from hrms.api.v1.endpoints.auth import login, menu_permissions
from hrms.api.v1.endpoints.hr import employee_ratings, top_employees, work_logs
from hrms.api.v1.endpoints.performance import kpi, kra, kri
from hrms.api.v1.endpoints.task import task_reports

api_router = APIRouter()

# Authentication routes
api_router.include_router(login.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(menu_permissions.router, prefix="/menu-permissions", tags=["Authentication"])

# Performance routes
api_router.include_router(kpi.router, prefix="/kpi", tags=["Performance"])
api_router.include_router(kri.router, prefix="/kri", tags=["Performance"])
api_router.include_router(kra.router, prefix="/kra", tags=["Performance"])

# Task routes
api_router.include_router(task_reports.router, prefix="/tasks", tags=["Task"])

# HR routes
api_router.include_router(work_logs.router, prefix="/work-logs", tags=["Human Resource"])
api_router.include_router(employee_ratings.router, prefix="/employee-ratings", tags=["Human Resource"])
api_router.include_router(top_employees.router, prefix="/top-employees", tags=["Human Resource"])
