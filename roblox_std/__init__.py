"""Generates the selene standard library for Roblox from the API Dump."""

__version__ = "0.1.0"

from roblox_std.generate_std import RobloxGenerator, generate, generateFromApiDump  # noqa: E402
from roblox_std.standard_library import StandardLibrary  # noqa: E402

__all__ = [
    "RobloxGenerator",
    "StandardLibrary",
    "__version__",
    "generate",
    "generateFromApiDump",
]
