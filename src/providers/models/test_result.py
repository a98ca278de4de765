"""Connection test result schema."""
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

TestType = Literal["connection"]
TestStatus = Literal["success", "failed"]


class TestResult(BaseModel):
    """Outcome of a provider health probe."""

    __test__ = False  # not a pytest test class

    test_type: TestType = "connection"
    status: TestStatus = Field(description="Probe outcome")
    response_time_ms: int = Field(description="Wall-clock time around the probe")
    error_message: Optional[str] = None
    error_details: Optional[Dict[str, Any]] = Field(
        None, description="code, status and provider_error of the failure"
    )
    tested_at: str = Field(description="ISO-8601 completion timestamp")
