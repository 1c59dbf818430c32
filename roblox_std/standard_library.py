"""Descriptor model for selene standard libraries.

A standard library tells the linter which globals exist and how they may be
used. It is stored as YAML, and may name a ``base`` library it extends.
"""

import enum
import logging
from dataclasses import dataclass, field
from importlib import resources
from typing import Any, Dict, List, Optional, Union

import yaml

from roblox_std.errors import MalformedInput

logger = logging.getLogger(__name__)

BUILTIN_LIBRARIES = ("lua51", "luau", "roblox_base")


class PropertyWritability(enum.Enum):
    READ_ONLY = "read-only"
    NEW_FIELDS = "new-fields"
    OVERRIDE_FIELDS = "override-fields"
    FULL_WRITE = "full-write"


class Observes(enum.Enum):
    READ_WRITE = "read-write"
    READ = "read"
    WRITE = "write"


class ArgumentKind(enum.Enum):
    ANY = "any"
    BOOL = "bool"
    FUNCTION = "function"
    NIL = "nil"
    NUMBER = "number"
    STRING = "string"
    TABLE = "table"
    VARARG = "..."


@dataclass(frozen=True)
class Constant:
    """Only these literal strings are accepted."""

    values: List[str]


@dataclass(frozen=True)
class Display:
    """Not checked, but shown to the user under this name."""

    text: str


ArgumentType = Union[ArgumentKind, Constant, Display]


@dataclass(frozen=True)
class Required:
    message: Optional[str] = None


@dataclass(frozen=True)
class NotRequired:
    pass


@dataclass(frozen=True)
class Argument:
    argument_type: ArgumentType = ArgumentKind.ANY
    required: Union[Required, NotRequired] = Required()
    observes: Observes = Observes.READ_WRITE


@dataclass(frozen=True)
class StructKind:
    name: str


@dataclass(frozen=True)
class PropertyKind:
    writability: PropertyWritability


@dataclass(frozen=True)
class FunctionBehavior:
    arguments: List[Argument] = field(default_factory=list)
    method: bool = False
    must_use: bool = False


@dataclass(frozen=True)
class AnyKind:
    pass


@dataclass(frozen=True)
class RemovedKind:
    pass


FieldKind = Union[StructKind, PropertyKind, FunctionBehavior, AnyKind, RemovedKind]


@dataclass
class Deprecated:
    message: str
    replace: List[str] = field(default_factory=list)


@dataclass
class Field:
    field_kind: FieldKind
    deprecated: Optional[Deprecated] = None

    def toDict(self) -> Dict[str, Any]:
        kind = self.field_kind
        out: Dict[str, Any]

        if isinstance(kind, StructKind):
            out = {"struct": kind.name}
        elif isinstance(kind, PropertyKind):
            out = {"property": kind.writability.value}
        elif isinstance(kind, FunctionBehavior):
            out = {"args": [argumentToDict(argument) for argument in kind.arguments]}
            if kind.method:
                out["method"] = True
            if kind.must_use:
                out["must_use"] = True
        elif isinstance(kind, AnyKind):
            out = {"any": True}
        elif isinstance(kind, RemovedKind):
            out = {"removed": True}
        else:
            raise TypeError(f"unknown field kind {kind!r}")

        if self.deprecated is not None:
            out["deprecated"] = {
                "message": self.deprecated.message,
                "replace": list(self.deprecated.replace),
            }

        return out

    @classmethod
    def fromDict(cls, data: Dict[str, Any]) -> "Field":
        kind: FieldKind
        if "struct" in data:
            kind = StructKind(data["struct"])
        elif "property" in data:
            kind = PropertyKind(PropertyWritability(data["property"]))
        elif "args" in data:
            kind = FunctionBehavior(
                arguments=[argumentFromDict(argument) for argument in data["args"] or []],
                method=bool(data.get("method", False)),
                must_use=bool(data.get("must_use", False)),
            )
        elif data.get("any"):
            kind = AnyKind()
        elif data.get("removed"):
            kind = RemovedKind()
        else:
            raise ValueError(f"unknown field {data!r}")

        deprecated = None
        if data.get("deprecated") is not None:
            deprecated = Deprecated(
                message=data["deprecated"]["message"],
                replace=list(data["deprecated"].get("replace") or []),
            )

        return cls(kind, deprecated)


def argumentToDict(argument: Argument) -> Dict[str, Any]:
    argumentType = argument.argument_type
    out: Dict[str, Any] = {}

    if isinstance(argumentType, Constant):
        out["type"] = list(argumentType.values)
    elif isinstance(argumentType, Display):
        out["type"] = {"display": argumentType.text}
    else:
        out["type"] = argumentType.value

    if isinstance(argument.required, NotRequired):
        out["required"] = False
    elif argument.required.message is not None:
        out["required"] = argument.required.message

    if argument.observes != Observes.READ_WRITE:
        out["observes"] = argument.observes.value

    return out


def argumentFromDict(data: Dict[str, Any]) -> Argument:
    rawType = data.get("type", "any")
    argumentType: ArgumentType
    if isinstance(rawType, list):
        argumentType = Constant([str(value) for value in rawType])
    elif isinstance(rawType, dict):
        argumentType = Display(rawType["display"])
    else:
        argumentType = ArgumentKind(rawType)

    rawRequired = data.get("required", True)
    required: Union[Required, NotRequired]
    if rawRequired is False:
        required = NotRequired()
    elif rawRequired is True:
        required = Required()
    else:
        required = Required(str(rawRequired))

    return Argument(
        argument_type=argumentType,
        required=required,
        observes=Observes(data.get("observes", Observes.READ_WRITE.value)),
    )


@dataclass
class RobloxClass:
    superclass: str
    events: List[str] = field(default_factory=list)
    properties: List[str] = field(default_factory=list)


class _Dumper(yaml.SafeDumper):
    # Shared lists would otherwise come out as &id001 anchors
    def ignore_aliases(self, data):
        return True


def _isUnder(name: str, prefix: str) -> bool:
    return name == prefix or name.startswith(prefix + ".")


@dataclass
class StandardLibrary:
    name: Optional[str] = None
    base: Optional[str] = None
    globals: Dict[str, Field] = field(default_factory=dict)
    structs: Dict[str, Dict[str, Field]] = field(default_factory=dict)
    roblox_classes: Dict[str, RobloxClass] = field(default_factory=dict)
    last_updated: Optional[int] = None
    last_selene_version: Optional[str] = None

    def toDict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}

        for key in ("base", "name", "last_updated", "last_selene_version"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value

        out["globals"] = {name: value.toDict() for name, value in self.globals.items()}

        if self.structs:
            out["structs"] = {
                structName: {name: value.toDict() for name, value in members.items()}
                for structName, members in self.structs.items()
            }

        if self.roblox_classes:
            out["roblox_classes"] = {
                className: {
                    "superclass": klass.superclass,
                    "events": list(klass.events),
                    "properties": list(klass.properties),
                }
                for className, klass in self.roblox_classes.items()
            }

        return out

    def toYaml(self) -> str:
        return yaml.dump(
            self.toDict(),
            Dumper=_Dumper,
            sort_keys=True,
            default_flow_style=False,
            allow_unicode=True,
        )

    @classmethod
    def fromDict(cls, data: Dict[str, Any]) -> "StandardLibrary":
        return cls(
            name=data.get("name"),
            base=data.get("base"),
            globals={
                name: Field.fromDict(value)
                for name, value in (data.get("globals") or {}).items()
            },
            structs={
                structName: {
                    name: Field.fromDict(value) for name, value in (members or {}).items()
                }
                for structName, members in (data.get("structs") or {}).items()
            },
            roblox_classes={
                className: RobloxClass(
                    superclass=klass["superclass"],
                    events=list(klass.get("events") or []),
                    properties=list(klass.get("properties") or []),
                )
                for className, klass in (data.get("roblox_classes") or {}).items()
            },
            last_updated=data.get("last_updated"),
            last_selene_version=data.get("last_selene_version"),
        )

    @classmethod
    def fromYaml(cls, text: str) -> "StandardLibrary":
        return cls.fromDict(yaml.safe_load(text) or {})

    @classmethod
    def fromBuiltinName(cls, name: str) -> Optional["StandardLibrary"]:
        """Load a builtin library on its own, without resolving its base."""
        if name not in BUILTIN_LIBRARIES:
            return None

        path = resources.files("roblox_std").joinpath("builtin").joinpath(f"{name}.yml")
        return cls.fromYaml(path.read_text(encoding="utf-8"))

    @classmethod
    def fromName(cls, name: str) -> Optional["StandardLibrary"]:
        """Load a builtin library, extended by its whole base chain."""
        std = cls.fromBuiltinName(name)
        if std is None:
            return None

        std._extendWithBase()
        return std

    @classmethod
    def robloxBase(cls) -> "StandardLibrary":
        std = cls.fromBuiltinName("roblox_base")
        assert std is not None
        return std

    def _extendWithBase(self):
        if self.base is None:
            return

        base = StandardLibrary.fromName(self.base)
        if base is None:
            raise MalformedInput(f"unknown base standard library {self.base}")

        logger.debug("Extending %s with %s", self.name, self.base)
        self.extend(base)

    def extend(self, other: "StandardLibrary"):
        """Merge ``other`` underneath this library; entries already here win.

        A removed global here hides that global, and everything below it, in ``other``.
        """
        removed = [
            name
            for name, value in self.globals.items()
            if isinstance(value.field_kind, RemovedKind)
        ]

        merged = {
            name: value
            for name, value in other.globals.items()
            if not any(_isUnder(name, prefix) for prefix in removed)
        }
        for name, value in self.globals.items():
            if name not in removed:
                merged[name] = value
        self.globals = merged

        structs = dict(other.structs)
        structs.update(self.structs)
        self.structs = structs

        robloxClasses = dict(other.roblox_classes)
        robloxClasses.update(self.roblox_classes)
        self.roblox_classes = robloxClasses
