from fastapi import HTTPException, Request, status

from app.services.automation import AutomationService

def get_automation_service(request: Request) -> AutomationService:
    service = getattr(request.app.state, "automation_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Automation service is not initialised"
        )
    return service
