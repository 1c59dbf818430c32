"""Tests for the standard library model and its YAML format."""

import pytest
import yaml

from roblox_std.standard_library import (
    AnyKind,
    Argument,
    ArgumentKind,
    Constant,
    Deprecated,
    Display,
    Field,
    FunctionBehavior,
    NotRequired,
    Observes,
    PropertyKind,
    PropertyWritability,
    RemovedKind,
    Required,
    RobloxClass,
    StandardLibrary,
    StructKind,
    argumentFromDict,
    argumentToDict,
)


# === Fields ===


def test_field_kinds_to_dict():
    assert Field(StructKind("Event")).toDict() == {"struct": "Event"}
    assert Field(PropertyKind(PropertyWritability.READ_ONLY)).toDict() == {
        "property": "read-only"
    }
    assert Field(AnyKind()).toDict() == {"any": True}
    assert Field(RemovedKind()).toDict() == {"removed": True}


def test_function_to_dict_omits_defaults():
    assert Field(FunctionBehavior()).toDict() == {"args": []}
    assert Field(FunctionBehavior(method=True, must_use=True)).toDict() == {
        "args": [],
        "method": True,
        "must_use": True,
    }


def test_deprecated_to_dict():
    field = Field(AnyKind(), Deprecated("this property is deprecated."))
    assert field.toDict() == {
        "any": True,
        "deprecated": {"message": "this property is deprecated.", "replace": []},
    }


def test_argument_to_dict():
    assert argumentToDict(Argument()) == {"type": "any"}
    assert argumentToDict(Argument(ArgumentKind.VARARG, NotRequired())) == {
        "type": "...",
        "required": False,
    }
    assert argumentToDict(
        Argument(Constant(["a", "b"]), Required("pass a mode"), Observes.READ)
    ) == {"type": ["a", "b"], "required": "pass a mode", "observes": "read"}
    assert argumentToDict(Argument(Display("Color3"))) == {"type": {"display": "Color3"}}


def test_argument_from_dict():
    assert argumentFromDict({"type": "number"}) == Argument(ArgumentKind.NUMBER, Required())
    assert argumentFromDict({"type": ["a"], "required": False}) == Argument(
        Constant(["a"]), NotRequired()
    )
    assert argumentFromDict({"observes": "write", "required": "why"}) == Argument(
        ArgumentKind.ANY, Required("why"), Observes.WRITE
    )


def test_field_from_dict():
    field = Field.fromDict(
        {
            "args": [{"type": "string"}],
            "method": True,
            "deprecated": {"message": "use task.wait instead", "replace": ["task.wait(%1)"]},
        }
    )
    assert field == Field(
        FunctionBehavior([Argument(ArgumentKind.STRING)], method=True),
        Deprecated("use task.wait instead", ["task.wait(%1)"]),
    )


def test_field_from_dict_rejects_unknown():
    with pytest.raises(ValueError):
        Field.fromDict({"colour": "red"})


# === YAML ===


def test_yaml_keys_are_sorted():
    std = StandardLibrary(name="test")
    std.globals["zeta"] = Field(AnyKind())
    std.globals["alpha"] = Field(AnyKind())
    std.structs["Thing"] = {"b": Field(AnyKind()), "*": Field(StructKind("Instance"))}

    text = std.toYaml()
    assert text.index("alpha") < text.index("zeta")
    assert text.index("'*'") < text.index("b:")


def test_yaml_has_no_aliases():
    shared = Field(FunctionBehavior([Argument(Constant(["A", "B"]))]))
    std = StandardLibrary(name="test", globals={"one": shared, "two": shared})
    text = std.toYaml()
    assert "&id" not in text
    assert "*id" not in text


def test_yaml_round_trip():
    std = StandardLibrary(
        name="roblox",
        base="luau",
        globals={"Instance.new": Field(FunctionBehavior([Argument(Constant(["Part"]))], must_use=True))},
        structs={"Part": {"*": Field(StructKind("Instance")), "Anchored": Field(AnyKind())}},
        roblox_classes={"Part": RobloxClass("BasePart", [], ["Shape"])},
        last_updated=1700000000,
        last_selene_version="0.1.0",
    )
    assert StandardLibrary.fromYaml(std.toYaml()) == std


def test_yaml_omits_empty_sections():
    parsed = yaml.safe_load(StandardLibrary(name="bare").toYaml())
    assert parsed == {"name": "bare", "globals": {}}


# === Builtins ===


def test_builtin_roblox_base():
    std = StandardLibrary.robloxBase()
    assert std.name == "roblox"
    assert std.base == "luau"
    assert "Event" in std.structs
    assert "EnumItem" in std.structs
    assert "Instance" in std.structs
    assert "print" not in std.globals


def test_unknown_builtin():
    assert StandardLibrary.fromBuiltinName("lua99") is None
    assert StandardLibrary.fromName("lua99") is None


def test_from_name_resolves_base_chain():
    std = StandardLibrary.fromName("roblox_base")
    assert "task.wait" in std.globals
    assert "typeof" in std.globals
    assert "print" in std.globals
    assert std.globals["wait"].deprecated.replace == ["task.wait(%1)"]


def test_luau_removes_module():
    assert "module" in StandardLibrary.fromBuiltinName("lua51").globals
    assert "module" not in StandardLibrary.fromName("luau").globals


def test_task_cancel_takes_a_thread():
    std = StandardLibrary.robloxBase()
    assert std.globals["task.cancel"].field_kind.arguments == [Argument(Display("thread"))]
    assert argumentToDict(std.globals["task.cancel"].field_kind.arguments[0]) == {
        "type": {"display": "thread"}
    }


# === extend ===


def test_extend_prefers_own_entries():
    std = StandardLibrary(
        globals={"wait": Field(AnyKind())},
        structs={"Event": {"Connect": Field(AnyKind())}},
        roblox_classes={"Part": RobloxClass("BasePart")},
    )
    other = StandardLibrary(
        globals={"wait": Field(FunctionBehavior()), "print": Field(AnyKind())},
        structs={"Event": {}, "EnumItem": {}},
        roblox_classes={"Part": RobloxClass("Instance"), "Folder": RobloxClass("Instance")},
    )
    std.extend(other)

    assert std.globals == {"wait": Field(AnyKind()), "print": Field(AnyKind())}
    assert std.structs["Event"] == {"Connect": Field(AnyKind())}
    assert "EnumItem" in std.structs
    assert std.roblox_classes["Part"].superclass == "BasePart"
    assert std.roblox_classes["Folder"].superclass == "Instance"


def test_extend_removed_hides_nested_globals():
    std = StandardLibrary(globals={"debug": Field(RemovedKind())})
    other = StandardLibrary(
        globals={
            "debug": Field(AnyKind()),
            "debug.traceback": Field(FunctionBehavior()),
            "debugger": Field(AnyKind()),
        }
    )
    std.extend(other)
    assert std.globals == {"debugger": Field(AnyKind())}
