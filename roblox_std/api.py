# Type hints and loaders for the Roblox API Dump
import json
import logging
from pathlib import Path
from typing import Any, List, Literal, Optional, Union, TypedDict

import requests

from roblox_std.errors import FetchFailed, ParseFailed

logger = logging.getLogger(__name__)

API_DUMP_URL = "https://raw.githubusercontent.com/MaximumADHD/Roblox-Client-Tracker/roblox/API-Dump.json"

# Seconds before giving up on the API dump download
REQUEST_TIMEOUT = 30

ROOT_CLASS = "<<<ROOT>>>"

DEFAULT_SECURITY = "None"

# DataTypes which are plain values. Everything else (Vector3, CFrame, Color3...)
# has methods on it that the API dump doesn't describe.
PLAIN_DATA_TYPES = {
    "Content",
}

ApiDeprecatedInfo = TypedDict(
    "ApiDeprecatedInfo",
    {
        "PreferredDescriptorName": str,
        "ThreadSafety": str,
    },
)

ApiTags = Optional[List[str | ApiDeprecatedInfo]]

ApiValueType = TypedDict(
    "ApiValueType",
    {
        "Name": str,
        "Category": Union[
            Literal["Primitive"],
            Literal["Class"],
            Literal["DataType"],
            Literal["Enum"],
            Literal["Group"],
        ],
    },
)

ApiParameter = TypedDict(
    "ApiParameter",
    {
        "Name": str,
        "Type": ApiValueType,
        "Default": Optional[str],
    },
)

ApiPropertySecurityLevel = TypedDict(
    "ApiPropertySecurityLevel",
    {
        "Read": str,
        "Write": str,
    },
)

ApiProperty = TypedDict(
    "ApiProperty",
    {
        "Name": str,
        "MemberType": Literal["Property"],
        "Tags": ApiTags,
        "ValueType": ApiValueType,
        "Security": Union[str, ApiPropertySecurityLevel],
    },
)

ApiFunction = TypedDict(
    "ApiFunction",
    {
        "Name": str,
        "MemberType": Literal["Function"],
        "Parameters": List[ApiParameter],
        "Tags": ApiTags,
    },
)

ApiEvent = TypedDict(
    "ApiEvent",
    {
        "Name": str,
        "MemberType": Literal["Event"],
        "Tags": ApiTags,
    },
)

ApiCallback = TypedDict(
    "ApiCallback",
    {
        "Name": str,
        "MemberType": Literal["Callback"],
        "Tags": ApiTags,
    },
)

ApiMember = Union[ApiProperty, ApiFunction, ApiEvent, ApiCallback]

ApiClass = TypedDict(
    "ApiClass",
    {
        "Name": str,
        "Superclass": str,
        "Members": List[ApiMember],
        "Tags": ApiTags,
    },
)

ApiEnumItem = TypedDict(
    "ApiEnumItem",
    {
        "Name": str,
        "Value": int,
    },
)

ApiEnum = TypedDict(
    "ApiEnum",
    {
        "Name": str,
        "Items": List[ApiEnumItem],
    },
)

ApiDump = TypedDict(
    "ApiDump",
    {
        "Classes": List[ApiClass],
        "Enums": List[ApiEnum],
    },
)


def tagsOf(item: Union[ApiMember, ApiClass]) -> List[str]:
    """Tags of a member or class. Missing tags are empty, and structured tags
    (like PreferredDescriptorName) are dropped since only the names matter here."""
    tags = item.get("Tags")
    if tags is None:
        return []
    return [tag for tag in tags if isinstance(tag, str)]


def isDefaultSecurity(security: Union[str, ApiPropertySecurityLevel, None]) -> bool:
    if security is None:
        return True
    if isinstance(security, str):
        return security == DEFAULT_SECURITY
    return (
        security.get("Read", DEFAULT_SECURITY) == DEFAULT_SECURITY
        and security.get("Write", DEFAULT_SECURITY) == DEFAULT_SECURITY
    )


def dataTypeHasCustomMethods(name: str) -> bool:
    # Datatypes like CFrame have methods on them, which the API dump doesn't give us,
    # so properties of them can't be typed as plain properties.
    return name not in PLAIN_DATA_TYPES


def validateApiDump(data: Any) -> ApiDump:
    if not isinstance(data, dict):
        raise ParseFailed()

    for key in ("Classes", "Enums"):
        if not isinstance(data.get(key), list):
            logger.debug("API dump is missing a %s list", key)
            raise ParseFailed()

    for klass in data["Classes"]:
        if not isinstance(klass, dict) or not isinstance(klass.get("Name"), str):
            raise ParseFailed()
        if not isinstance(klass.get("Superclass"), str):
            raise ParseFailed()

        # Missing lists are empty, but a null or mistyped one is a broken dump
        members = klass.setdefault("Members", [])
        if not isinstance(members, list):
            logger.debug("Members of %s is not a list", klass["Name"])
            raise ParseFailed()
        for member in members:
            if not isinstance(member, dict) or not isinstance(member.get("Name"), str):
                raise ParseFailed()

    for enum in data["Enums"]:
        if not isinstance(enum, dict) or not isinstance(enum.get("Name"), str):
            raise ParseFailed()

        items = enum.setdefault("Items", [])
        if not isinstance(items, list):
            logger.debug("Items of %s is not a list", enum["Name"])
            raise ParseFailed()
        for item in items:
            if not isinstance(item, dict) or not isinstance(item.get("Name"), str):
                raise ParseFailed()

    return data


def fetchApiDump(url: str = API_DUMP_URL, timeout: float = REQUEST_TIMEOUT) -> ApiDump:
    logger.info("Fetching API dump from %s", url)

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as error:
        raise FetchFailed() from error

    try:
        data = response.json()
    except ValueError as error:
        raise ParseFailed() from error

    return validateApiDump(data)


def loadApiDump(path: Union[str, Path]) -> ApiDump:
    logger.info("Loading API dump from %s", path)

    with open(path, "r", encoding="utf-8") as file:
        try:
            data = json.load(file)
        except ValueError as error:
            raise ParseFailed() from error

    return validateApiDump(data)
