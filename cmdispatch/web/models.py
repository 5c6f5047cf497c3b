from pydantic import BaseModel


class ArgInfo(BaseModel):
    name: str
    type: str
    description: str = ""
    required: bool = True
    options: list[str] = []


class CommandInfo(BaseModel):
    name: str
    super_command: str | None = None
    description: str = ""
    usage: str
    path: str
    args: list[ArgInfo]


class HealthResponse(BaseModel):
    status: str
    app: str
    commands: int
