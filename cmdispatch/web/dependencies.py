from __future__ import annotations

from fastapi import Request

from cmdispatch.config import Settings
from cmdispatch.web.models import CommandInfo


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_command_index(request: Request) -> list[CommandInfo]:
    return request.app.state.command_index
