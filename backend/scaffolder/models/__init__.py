from .project import (
    PromptRequest,
    ProjectCreate,
    ProjectResult,
    FrontendResult,
    OutputDirs,
    PromptResponse,
    RunningServer,
    ServerList
)

__all__ = [
    "PromptRequest",
    "ProjectCreate",
    "ProjectResult",
    "FrontendResult",
    "OutputDirs",
    "PromptResponse",
    "RunningServer",
    "ServerList"
]
