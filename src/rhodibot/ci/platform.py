"""Detect the CI/CD platform from environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from enum import Enum


class CIPlatform(str, Enum):
    """Known CI/CD platforms."""

    GITHUB_ACTIONS = "github"
    GITLAB_CI = "gitlab"
    CIRCLECI = "circleci"
    TRAVIS = "travis"
    JENKINS = "jenkins"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES: dict[CIPlatform, str] = {
    CIPlatform.GITHUB_ACTIONS: "GitHub Actions",
    CIPlatform.GITLAB_CI: "GitLab CI",
    CIPlatform.CIRCLECI: "CircleCI",
    CIPlatform.TRAVIS: "Travis CI",
    CIPlatform.JENKINS: "Jenkins",
    CIPlatform.UNKNOWN: "Unknown",
}

# Checked in order; first variable present wins.
_MARKERS: tuple[tuple[str, CIPlatform], ...] = (
    ("GITHUB_ACTIONS", CIPlatform.GITHUB_ACTIONS),
    ("GITLAB_CI", CIPlatform.GITLAB_CI),
    ("CIRCLECI", CIPlatform.CIRCLECI),
    ("TRAVIS", CIPlatform.TRAVIS),
    ("JENKINS_URL", CIPlatform.JENKINS),
)


def detect_platform(env: Mapping[str, str] | None = None) -> CIPlatform:
    environ = os.environ if env is None else env
    for variable, platform in _MARKERS:
        if variable in environ:
            return platform
    return CIPlatform.UNKNOWN
