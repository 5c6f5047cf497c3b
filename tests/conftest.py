import io

import pytest
from fastapi.testclient import TestClient

from cmdispatch.args import ArgSpec, ArgType
from cmdispatch.config import Settings
from cmdispatch.dispatcher import StringArgsDispatcher
from cmdispatch.results import PrintlnTo
from cmdispatch.super_dispatcher import SuperStringArgsDispatcher
from cmdispatch.web.app import create_app

TEST_SETTINGS = Settings(
    app_name="testapp",
    log_level="DEBUG",
    log_json=False,
    catch_exceptions=True,
    route_prefix="/commands",
)


def greet(name: str) -> str:
    return "Hello, " + name


def add(a: int, b: int) -> int:
    return a + b


def divide(a: float, b: float) -> float:
    return a / b


@pytest.fixture
def settings() -> Settings:
    return TEST_SETTINGS


@pytest.fixture
def out() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def logged() -> list:
    return []


@pytest.fixture
def dispatcher(logged, out) -> StringArgsDispatcher:
    d = StringArgsDispatcher(lambda command, args: logged.append((command, args)))
    d.add_command("greet", "Say hello", greet, [ArgSpec("name", ArgType.STRING, "Who to greet")], PrintlnTo(out))
    d.add_command("add", "Add two integers", add, [ArgSpec("a", ArgType.INT), ArgSpec("b", ArgType.INT)])
    d.add_command("divide", "Divide a by b", divide, None)
    return d


@pytest.fixture
def super_dispatcher(logged) -> SuperStringArgsDispatcher:
    d = SuperStringArgsDispatcher(lambda command, args: logged.append((command, args)))
    math = d.add_super_command("math")
    math.add_command("add", "Add two integers", add, None)
    math.add_command("divide", "Divide a by b", divide, None)
    hello = d.add_super_command("hello")
    hello.add_default_command("Say hello", greet, None)
    return d


@pytest.fixture
def client(dispatcher: StringArgsDispatcher, settings: Settings) -> TestClient:
    app = create_app(dispatcher, settings)
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def super_client(super_dispatcher: SuperStringArgsDispatcher, settings: Settings) -> TestClient:
    app = create_app(super_dispatcher, settings)
    return TestClient(app, raise_server_exceptions=False)
