# agent/models.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rapidworker.model import ActionStep


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RequestJob(_WireModel):
    """A pending request execution (GET /api/location/request)."""
    id: str
    request: Dict[str, Any] = Field(default_factory=dict)
    test_variables: Dict[str, Any] = Field(default_factory=dict, alias="testVariables")
    env_variables: Dict[str, Any] = Field(default_factory=dict, alias="envVariables")

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> str:
        return str(v)

    @field_validator("request", "test_variables", "env_variables", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return v if v is not None else {}


class TestStep(_WireModel):
    action: str
    parameters: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("parameters", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return v if v is not None else {}


class TestJob(_WireModel):
    """A pending test execution (GET /api/location/execution)."""

    id: str
    actions: List[TestStep] = Field(default_factory=list)
    test_variables: Dict[str, Any] = Field(default_factory=dict, alias="testVariables")
    env_variables: Dict[str, Any] = Field(default_factory=dict, alias="envVariables")

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> str:
        return str(v)

    @field_validator("actions", "test_variables", "env_variables", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any, info) -> Any:
        if v is not None:
            return v
        return [] if info.field_name == "actions" else {}

    def steps(self) -> List[ActionStep]:
        return [ActionStep(action=s.action, parameters=s.parameters) for s in self.actions]


class RequestBatch(_WireModel):
    """Envelope only; each job is validated on its own when it runs."""
    requests: Optional[List[Any]] = None


class TestBatch(_WireModel):
    executions: Optional[List[Any]] = None


class RequestResultPayload(_WireModel):
    """Body of POST /api/location/request/{id}."""
    response: Optional[Dict[str, Any]] = None
    execution_time: Optional[float] = Field(default=None, alias="executionTime")


class TestResultPayload(_WireModel):
    """Body of POST /api/location/execution/{id}."""
    success: bool
    action_reports: List[Dict[str, Any]] = Field(default_factory=list, alias="actionReports")
    execution_time: Optional[float] = Field(default=None, alias="executionTime")
