# Builds the selene standard library for Roblox out of the API Dump
import logging
from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple

from roblox_std import __version__
from roblox_std.api import (
    API_DUMP_URL,
    ROOT_CLASS,
    ApiClass,
    ApiDump,
    ApiMember,
    dataTypeHasCustomMethods,
    fetchApiDump,
    isDefaultSecurity,
    tagsOf,
)
from roblox_std.errors import MalformedInput, UnknownMember
from roblox_std.standard_library import (
    AnyKind,
    Argument,
    ArgumentKind,
    Constant,
    Deprecated,
    Field,
    FunctionBehavior,
    NotRequired,
    Observes,
    PropertyKind,
    PropertyWritability,
    Required,
    RobloxClass,
    StandardLibrary,
    StructKind,
)

logger = logging.getLogger(__name__)

# Globals that always exist, and the class they hold
WELL_KNOWN_GLOBALS: List[Tuple[str, str]] = [
    ("game", "DataModel"),
    ("plugin", "Plugin"),
    ("script", "Script"),
    ("workspace", "Workspace"),
]

READ_ONLY_TAG = "ReadOnly"
DEPRECATED_TAG = "Deprecated"
NOT_CREATABLE_TAG = "NotCreatable"
SERVICE_TAG = "Service"

DEPRECATED_MESSAGE = "this property is deprecated."

GENERATED_HEADER = "# This file was @generated by generate-roblox-std at {time}\n"


def formatLocalTime(time: datetime) -> str:
    """Render an aware datetime as "2026-10-19 00:53:07.214252 +02:00"."""
    offset = time.utcoffset()
    minutes = int(offset.total_seconds()) // 60 if offset is not None else 0
    sign = "-" if minutes < 0 else "+"
    hours, minutes = divmod(abs(minutes), 60)
    return time.strftime("%Y-%m-%d %H:%M:%S.%f ") + f"{sign}{hours:02}:{minutes:02}"


def structField(name: str) -> Field:
    return Field(StructKind(name))


class RobloxGenerator:
    def __init__(self, api: ApiDump, strict: bool = False):
        self.api = api
        # Raise on member kinds we don't know about instead of skipping them
        self.strict = strict
        self.std = StandardLibrary.robloxBase()
        self.classes: Dict[str, ApiClass] = {
            klass["Name"]: klass for klass in api["Classes"]
        }

    def startGeneration(self) -> Tuple[bytes, StandardLibrary]:
        logger.info(
            "Generating from %d classes and %d enums",
            len(self.api["Classes"]),
            len(self.api["Enums"]),
        )

        for globalName, className in WELL_KNOWN_GLOBALS:
            self.writeClass(globalName, className)

        self.writeEnums()
        self.writeInstanceNew()
        self.writeGetService()
        self.writeRobloxClasses()

        time = datetime.now().astimezone()
        self.std.last_updated = int(time.timestamp())
        self.std.last_selene_version = __version__

        out = GENERATED_HEADER.format(time=formatLocalTime(time)) + self.std.toYaml()
        data = out.encode("utf-8")
        logger.info("Generated %d structs, %d bytes", len(self.std.structs), len(data))

        if self.std.base is None:
            raise MalformedInput("roblox_base has no base library")
        base = StandardLibrary.fromName(self.std.base)
        if base is None:
            raise MalformedInput(f"unknown base standard library {self.std.base}")
        self.std.extend(base)

        return data, self.std

    def findClass(self, className: str) -> ApiClass:
        klass = self.classes.get(className)
        if klass is None:
            raise MalformedInput(f"class {className} is not in the API dump")
        return klass

    def writeClass(self, globalName: str, className: str):
        self.writeClassStruct(className)
        self.std.globals[globalName] = structField(className)

    def writeClassStruct(self, className: str):
        structs = self.std.structs
        if className in structs:
            return

        # Reserve the name first, properties can refer back to their own class
        structs[className] = {}

        table: Dict[str, Field] = {"*": structField("Instance")}
        self.writeClassMembers(table, className)

        if className not in structs:
            raise MalformedInput(f"reserved struct {className} disappeared")
        structs[className] = table

    def writeClassMembers(self, table: Dict[str, Field], className: str):
        # Members of subclasses shadow the ones they inherit
        shadowed: Set[str] = set()
        visited: Set[str] = set()

        while className != ROOT_CLASS:
            if className in visited:
                raise MalformedInput(f"superclass cycle through {className}")
            visited.add(className)

            klass = self.findClass(className)
            written: Set[str] = set()

            for member in klass.get("Members", []):
                field = self.classifyMember(className, member)
                if field is None or member["Name"] in shadowed:
                    continue

                table[member["Name"]] = field
                written.add(member["Name"])

            shadowed |= written
            className = klass["Superclass"]

    def classifyMember(self, className: str, member: ApiMember) -> Optional[Field]:
        memberType = member.get("MemberType")
        tags = tagsOf(member)
        field: Optional[Field] = None

        if memberType == "Callback":
            field = Field(PropertyKind(PropertyWritability.OVERRIDE_FIELDS))
        elif memberType == "Event":
            field = structField("Event")
        elif memberType == "Function":
            field = Field(
                FunctionBehavior(
                    arguments=[
                        Argument(ArgumentKind.ANY, NotRequired(), Observes.READ_WRITE)
                        for _ in member.get("Parameters", [])
                    ],
                    method=True,
                    must_use=False,
                )
            )
        elif memberType == "Property":
            field = self.classifyProperty(member, tags)
        else:
            # CI should catch new member kinds, users shouldn't break on them
            if self.strict:
                raise UnknownMember(
                    f"unknown member {member.get('Name')!r} of type {memberType!r} "
                    f"found in Roblox API dump for {className}"
                )
            logger.debug("Skipping unknown member %s.%s", className, member.get("Name"))
            return None

        if field is not None and DEPRECATED_TAG in tags:
            field.deprecated = Deprecated(message=DEPRECATED_MESSAGE, replace=[])

        return field

    def classifyProperty(self, member: ApiMember, tags: List[str]) -> Optional[Field]:
        if not isDefaultSecurity(member.get("Security")):
            return None

        defaultField = Field(
            PropertyKind(
                PropertyWritability.READ_ONLY
                if READ_ONLY_TAG in tags
                else PropertyWritability.OVERRIDE_FIELDS
            )
        )

        valueType = member.get("ValueType") or {}
        category = valueType.get("Category")

        if category == "Class":
            self.writeClassStruct(valueType["Name"])
            return structField(valueType["Name"])
        elif category == "DataType":
            # The linter can't know what methods these have, so don't check them at all
            if dataTypeHasCustomMethods(valueType["Name"]):
                return Field(AnyKind())
            return defaultField

        return defaultField

    def writeEnums(self):
        for enum in self.api["Enums"]:
            self.std.globals[f"Enum.{enum['Name']}.GetEnumItems"] = Field(
                FunctionBehavior(arguments=[], method=True, must_use=True)
            )

            for item in enum.get("Items", []):
                self.std.globals[f"Enum.{enum['Name']}.{item['Name']}"] = structField(
                    "EnumItem"
                )

    def writeInstanceNew(self):
        instanceNames = [
            klass["Name"]
            for klass in self.api["Classes"]
            if NOT_CREATABLE_TAG not in tagsOf(klass)
        ]

        self.std.globals["Instance.new"] = Field(
            FunctionBehavior(
                arguments=[
                    Argument(Constant(instanceNames), Required(None), Observes.READ_WRITE)
                ],
                method=False,
                # Only true because the second (parent) parameter isn't allowed
                must_use=True,
            )
        )

    def writeGetService(self):
        serviceNames = [
            klass["Name"] for klass in self.api["Classes"] if SERVICE_TAG in tagsOf(klass)
        ]

        dataModel = self.std.structs.get("DataModel")
        if dataModel is None:
            raise MalformedInput("DataModel struct was never written")
        if "GetService" not in dataModel:
            raise MalformedInput("DataModel has no GetService member")

        # Replace the whole field, anything else on it (like deprecation) is dropped
        dataModel["GetService"] = Field(
            FunctionBehavior(
                arguments=[
                    Argument(Constant(serviceNames), Required(None), Observes.READ_WRITE)
                ],
                method=True,
                must_use=True,
            )
        )

    def writeRobloxClasses(self):
        for klass in self.api["Classes"]:
            events: List[str] = []
            properties: List[str] = []

            for member in klass.get("Members", []):
                if member.get("MemberType") == "Event":
                    events.append(member["Name"])
                elif member.get("MemberType") == "Property":
                    properties.append(member["Name"])

            self.std.roblox_classes[klass["Name"]] = RobloxClass(
                superclass=klass["Superclass"],
                events=events,
                properties=properties,
            )


def generateFromApiDump(api: ApiDump, strict: bool = False) -> Tuple[bytes, StandardLibrary]:
    return RobloxGenerator(api, strict=strict).startGeneration()


def generate(url: str = API_DUMP_URL, strict: bool = False) -> Tuple[bytes, StandardLibrary]:
    """Fetch the API dump and build the Roblox standard library from it.

    Returns the YAML (with a generated header) and the library itself. The
    returned library is extended with its base, the YAML only points at it.
    """
    return generateFromApiDump(fetchApiDump(url), strict=strict)
