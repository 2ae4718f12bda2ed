"""Unit tests for the CRP issue builder."""

from datetime import date

import pytest

from releasebot.changelog import build_changelog_document, group_changelog
from releasebot.release import Release, ReleaseConfig, ReleaseType, build_crp_issue_fields
from releasebot.release.issue import (
    ACCOUNTABLE_PERSON_FIELD,
    CHANGELOG_FIELD,
    ENVIRONMENTS_FIELD,
    RELEASE_TYPE_FIELD,
    TARGET_DATE_FIELD,
    target_date,
)

BASE_URL = "https://acme.atlassian.net"


@pytest.mark.unit
class TestReleaseType:
    """Tests for ReleaseType.from_version."""

    @pytest.mark.parametrize(
        ("version", "expected"),
        [
            ("2.0.0", ReleaseType.MAJOR),
            ("3", ReleaseType.MAJOR),
            ("1.4.0", ReleaseType.MINOR),
            ("1.4", ReleaseType.MINOR),
            ("1.4.2", ReleaseType.PATCH),
            ("1.4.2-rc1", ReleaseType.PATCH),
            ("1.0.0.1", ReleaseType.PATCH),
        ],
    )
    def test_from_version(self, version: str, expected: ReleaseType) -> None:
        assert ReleaseType.from_version(version) is expected


@pytest.mark.unit
class TestBuildCrpIssueFields:
    """Tests for build_crp_issue_fields."""

    def test_fields(self, release_config: ReleaseConfig, release: Release) -> None:
        sections = group_changelog(["[ABC-1] Login"], release)
        changelog = build_changelog_document(sections, BASE_URL)

        fields = build_crp_issue_fields(
            release_config,
            release_config.resolve_repo("ios"),
            release,
            changelog,
            today=date(2024, 5, 1),
        )

        assert fields["project"] == {"id": "13402"}
        assert fields["issuetype"] == {"id": "11439"}
        assert fields["summary"] == "Publish iOS app App v1.0.0 to the AppStore"
        assert fields[CHANGELOG_FIELD] == changelog.to_adf()
        assert fields[ENVIRONMENTS_FIELD] == [{"id": "12395"}]
        assert fields[RELEASE_TYPE_FIELD] == {"id": ReleaseType.MAJOR.value}
        assert fields[TARGET_DATE_FIELD] == "2024-05-08"
        assert fields[ACCOUNTABLE_PERSON_FIELD] == {"accountId": "acc-default"}

    def test_target_date(self, release_config: ReleaseConfig) -> None:
        config = release_config.model_copy(update={"release_estimate_days": 14})

        assert target_date(config, date(2024, 12, 25)) == date(2025, 1, 8)
