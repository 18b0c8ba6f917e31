from typing import List, Dict
from pydantic import BaseModel, Field
from datetime import datetime

class AbsorbedError(BaseModel):
    """A best-effort failure that was logged instead of raised"""

    resource: str = Field(..., description="Resource the failing step acted on")

    operation: str = Field(..., description="Step that failed, e.g. teardown or close")

    message: str = Field(..., description="String form of the underlying exception")

    error_type: str = Field(..., description="Class name of the underlying exception")

    timestamp: datetime = Field(default_factory=datetime.now)

    @classmethod
    def from_exception(cls, resource: str, operation: str, error: BaseException) -> "AbsorbedError":
        return cls(
            resource=resource,
            operation=operation,
            message=str(error),
            error_type=type(error).__name__,
        )

class TeardownReport(BaseModel):
    """Outcome of a best-effort teardown sequence"""

    steps: List[str] = Field(
        default_factory=list,
        description="Teardown steps attempted, in order"
    )

    errors: List[AbsorbedError] = Field(
        default_factory=list,
        description="Failures absorbed while tearing down"
    )

    @property
    def ok(self) -> bool:
        return not self.errors

class RegistrationReport(BaseModel):
    """Outcome of registering the handler fan-out against the broker"""

    registered: List[str] = Field(
        default_factory=list,
        description="Exchange names with an active subscription"
    )

    failures: Dict[str, str] = Field(
        default_factory=dict,
        description="Exchange name to error message for skipped entries"
    )

    @property
    def ok(self) -> bool:
        return not self.failures
