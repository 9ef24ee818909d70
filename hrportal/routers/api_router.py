from fastapi import APIRouter
from hrportal.routers import (
    auth, roles, employees, leave, tasks, projects, progress,
    attendance, documents, notifications, admin
)

# Centralized API router hub
# Routers are aggregated here and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(roles.router, tags=["Roles"])
api_router.include_router(employees.router, tags=["Employees"])
api_router.include_router(leave.router, tags=["Leave"])
api_router.include_router(tasks.router, tags=["Tasks"])
api_router.include_router(projects.router, tags=["Projects"])
api_router.include_router(progress.router, tags=["Progress Reports"])
api_router.include_router(attendance.router, tags=["Attendance"])
api_router.include_router(documents.router, tags=["Documents"])
api_router.include_router(notifications.router, tags=["Notifications"])
api_router.include_router(admin.router, tags=["Administration"])
