"""Package metadata tests."""

import pytest

import releasebot


@pytest.mark.unit
class TestVersion:
    """Tests for the package version."""

    def test_has_version(self) -> None:
        assert isinstance(releasebot.__version__, str)

    def test_version_is_semver(self) -> None:
        parts = releasebot.__version__.split(".")

        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)
