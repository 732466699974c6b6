from pydantic import BaseModel, Field, field_validator
from typing import Optional, List


def _validate_project_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Project name cannot be empty.")
    if "/" in value or "\\" in value or ".." in value:
        raise ValueError("Project name must not contain path separators or '..'")
    return value


class PromptRequest(BaseModel):
    """Request to scaffold a backend and a frontend project"""
    content: str

    @field_validator("content")
    @classmethod
    def check_content(cls, value: str) -> str:
        return _validate_project_name(value)


class ProjectCreate(BaseModel):
    """Request to scaffold a single project"""
    projectName: str

    @field_validator("projectName")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _validate_project_name(value)


class ProjectResult(BaseModel):
    """Outcome of a scaffolding command"""
    name: str
    path: str
    message: str


class FrontendResult(ProjectResult):
    """Outcome of a vanilla frontend scaffold, including its dev server"""
    port: Optional[int] = None
    url: Optional[str] = None
    server_started: bool = False
    server_error: Optional[str] = None


class OutputDirs(BaseModel):
    backend: str
    frontend: str


class PromptResponse(BaseModel):
    """Response for the prompt endpoint"""
    message: str
    output_dir: OutputDirs
    info: OutputDirs


class RunningServer(BaseModel):
    """A dev server that reached the started state"""
    port: int
    project_name: str
    process_id: Optional[int] = None


class ServerList(BaseModel):
    """Snapshot of running dev servers and claimed ports"""
    servers: List[RunningServer]
    allocated_ports: List[int] = Field(default_factory=list)
