"""
Runtime version checks.

Versions are compared with semantic-version ordering; a leading "v"
(as reported by Node.js) is accepted.
"""

import semver

from ..models.environment import ExecutionEnvironment

V2_API_VERSION = 2


def parse_version(version: str) -> semver.Version:
    version = version.strip()
    if version[:1] in ("v", "="):
        version = version[1:]
    return semver.Version.parse(version)


def version_lt(version: str, other: str) -> bool:
    return parse_version(version) < parse_version(other)


def is_runtime_supported(runtime_api_version: int, environment: ExecutionEnvironment) -> bool:
    """False only for API version 2 builds on an environment below the minimum."""
    if runtime_api_version != V2_API_VERSION:
        return True
    return not version_lt(environment.version, environment.v2_min_version)
