
from typing import Optional


class AutomationError(Exception):
    """Base class for every failure raised inside the automation core."""


class ConfigurationMissing(AutomationError):
    """A required endpoint or credential is absent. Raised before any network I/O."""

    def __init__(self, setting: str):
        self.setting = setting
        super().__init__(f"{setting} is not configured")


class PlatformError(AutomationError):
    """A single Workflow Platform call failed."""


class PlatformUnreachable(PlatformError):
    """Network failure or timeout talking to the Workflow Platform."""


class PlatformRejected(PlatformError):
    def __init__(self, status_code: int, body: str, operation: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        self.operation = operation
        super().__init__(f"{operation or 'request'} rejected ({status_code}): {body}")

    @property
    def is_duplicate(self) -> bool:
        """The platform refused a create because the path is already taken."""
        if self.status_code == 409:
            return True
        return self.status_code in (400, 500) and "already exists" in (self.body or "").lower()


class PlanInvalid(AutomationError):
    """A compiled plan references a path it does not create. Compiler defect."""
