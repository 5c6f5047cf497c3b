from __future__ import annotations

import inspect
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from cmdispatch.exceptions import BindingError


class ArgType(str, Enum):
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    SELECT = "select"
    JSON = "json"  # lists, dicts, tuples, sets and pydantic models


class _Required:
    def __repr__(self) -> str:
        return "REQUIRED"

    def __bool__(self) -> bool:
        return False


REQUIRED: Any = _Required()


@dataclass(frozen=True)
class ArgSpec:
    name: str
    type: ArgType | None = None  # None: take it from the handler annotation
    description: str = ""
    default: Any = REQUIRED
    options: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.name or not self.name.isidentifier():
            raise BindingError(f"invalid argument name: {self.name!r}")
        if isinstance(self.type, str) and not isinstance(self.type, ArgType):
            object.__setattr__(self, "type", ArgType(self.type))
        object.__setattr__(self, "options", tuple(str(o) for o in self.options))

    @property
    def required(self) -> bool:
        return self.default is REQUIRED

    @property
    def type_name(self) -> str:
        return self.type.value if self.type is not None else "any"

    def usage(self) -> str:
        text = f"<{self.name}:{self.type_name}>"
        return text if self.required else f"[{text}]"


class Args(Sequence[ArgSpec]):
    """Ordered, immutable argument schema of one command."""

    def __init__(self, specs: Iterable[ArgSpec] = ()) -> None:
        self._specs: tuple[ArgSpec, ...] = tuple(specs)
        seen: set[str] = set()
        for position, spec in enumerate(self._specs):
            if spec.name in seen:
                raise BindingError("duplicate argument name", position, spec.name)
            seen.add(spec.name)

    @classmethod
    def from_function(cls, func: Callable[..., Any], descriptions: dict[str, str] | None = None) -> Args:
        """Infer a schema from a handler signature.

        Types come from the annotations, defaults from the parameter defaults.
        A leading context parameter is skipped.
        """
        from cmdispatch.binder import handler_parameters

        descriptions = descriptions or {}
        specs = []
        for hp in handler_parameters(func):
            default = REQUIRED if hp.param.default is inspect.Parameter.empty else hp.param.default
            specs.append(
                ArgSpec(
                    name=hp.param.name,
                    type=hp.arg_type,
                    description=descriptions.get(hp.param.name, ""),
                    default=default,
                    options=hp.options,
                )
            )
        return cls(specs)

    def names(self) -> list[str]:
        return [spec.name for spec in self._specs]

    def get(self, name: str) -> ArgSpec | None:
        for spec in self._specs:
            if spec.name == name:
                return spec
        return None

    def has_descriptions(self) -> bool:
        return any(spec.description for spec in self._specs)

    def __getitem__(self, index):  # type: ignore[override]
        return self._specs[index]

    def __len__(self) -> int:
        return len(self._specs)

    def __iter__(self) -> Iterator[ArgSpec]:
        return iter(self._specs)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Args):
            return self._specs == other._specs
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._specs)

    def __str__(self) -> str:
        return " ".join(spec.usage() for spec in self._specs)

    def __repr__(self) -> str:
        return f"Args({list(self._specs)!r})"


NO_ARGS = Args()
