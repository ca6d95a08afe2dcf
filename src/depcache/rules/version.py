import re

# 1:Major, 2:Minor, 3:Patch, 4:Prerelease, 5:Build
EXACT_VERSION_REGEX = re.compile(
    r"^[=v]*"
    r"(0|[1-9]\d*)\."
    r"(0|[1-9]\d*)\."
    r"(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


def is_exact_version(version_str: str) -> bool:
    """Whether ``version_str`` names one release (``1.2.3``, ``=1.2.3``, ``v1.2.3-beta.1``)."""
    return EXACT_VERSION_REGEX.match(version_str.strip()) is not None
