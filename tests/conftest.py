"""Shared pytest fixtures and configuration."""

import pytest

from releasebot.release import CRPEnvironment, Release, ReleaseConfig, RepoMapping, Repository


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")


# Shared fixtures


@pytest.fixture
def ios_repository() -> Repository:
    return Repository(full_name="acme/mobile-ios", base_branch="develop")


@pytest.fixture
def release(ios_repository: Repository) -> Release:
    """A release of the "app" iOS app."""
    return Release(repository=ios_repository, branch="release/app/1.0.0")


@pytest.fixture
def release_config() -> ReleaseConfig:
    """Release configuration with ABC and DEF whitelisted."""
    return ReleaseConfig(
        known_projects={"ABC": 10001, "DEF": 10002},
        repos={
            "ios": RepoMapping(
                repository="acme/mobile-ios",
                platform="iOS",
                store="AppStore",
                environment=CRPEnvironment.APP_STORE,
            ),
            "android": RepoMapping(
                repository="acme/mobile-android",
                base_branch="master",
                platform="Android",
                store="PlayStore",
                environment=CRPEnvironment.PLAY_STORE,
            ),
        },
        accountable_person_id="acc-default",
        accountable_people={"telus": "acc-telus"},
    )
