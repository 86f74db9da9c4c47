"""Unit tests for version extraction and consistency checks."""

import pytest

from moodle_image.contexts.inspection.exceptions import (
    UnsupportedVersionError,
    VersionMismatchError,
    VersionNotFoundError,
)
from moodle_image.contexts.inspection.versions import (
    ImageVersions,
    check_moodle_branch_supported,
    check_php_version_consistency,
    check_php_version_supported,
    extract_databases,
    extract_image_versions,
    extract_moodle_branch,
    extract_php_version,
    moodle_release_from_branch,
    parse_version,
)

DOCKERFILE = """\
FROM nginx:1.27-bookworm
RUN apt-get install -y php8.3-fpm php8.3-cli php8.3-pgsql supervisor cron
# Moodle release branch: stable405
RUN git clone --branch MOODLE_405_STABLE https://github.com/moodle/moodle.git /var/www/moodle
"""

SUPERVISOR = """\
[program:php-fpm]
command=/usr/sbin/php-fpm8.3 --nodaemonize --fpm-config /etc/php/8.3/fpm/php-fpm.conf
autorestart=true
"""

DATABASE_LABELS = {"pgsql": "PostgreSQL", "mysql": "MySQL"}


@pytest.mark.unit
def test_extract_php_version():
    assert extract_php_version(DOCKERFILE) == "8.3"


@pytest.mark.unit
def test_extract_moodle_branch():
    assert extract_moodle_branch(DOCKERFILE) == "405"


@pytest.mark.unit
def test_extract_php_version_not_found():
    with pytest.raises(VersionNotFoundError) as exc_info:
        extract_php_version("FROM nginx:latest\n")

    assert "PHP version not found in Dockerfile" in str(exc_info.value)
    assert exc_info.value.source == "Dockerfile"


@pytest.mark.unit
def test_extract_databases_follows_config_order():
    dockerfile = "RUN apt-get install php8.3-mysql php8.3-pgsql"
    assert extract_databases(dockerfile, DATABASE_LABELS) == ["PostgreSQL", "MySQL"]


@pytest.mark.unit
def test_extract_image_versions():
    versions = extract_image_versions(DOCKERFILE, DATABASE_LABELS)

    assert versions.php == "8.3"
    assert versions.moodle_branch == "405"
    assert versions.moodle_release == "4.5"
    assert versions.databases == ["PostgreSQL"]
    assert versions.database_label == "PostgreSQL"


@pytest.mark.unit
def test_database_label_joins_labels():
    versions = ImageVersions(php="8.3", moodle_branch="405", databases=["PostgreSQL", "MySQL"])
    assert versions.database_label == "PostgreSQL | MySQL"


@pytest.mark.unit
@pytest.mark.parametrize(
    "branch, release",
    [("39", "3.9"), ("310", "3.10"), ("311", "3.11"), ("400", "4.0"), ("405", "4.5"), ("500", "5.0"), ("501", "5.1")],
)
def test_moodle_release_from_branch(branch, release):
    assert moodle_release_from_branch(branch) == release


@pytest.mark.unit
def test_parse_version_is_numeric():
    assert parse_version("8.10") > parse_version("8.9")


class TestPhpVersionConsistency:
    """Dockerfile php8.X must match php-fpm8.X and /etc/php/8.X/ in supervisord.conf."""

    @pytest.mark.unit
    def test_consistent_versions_pass(self):
        assert check_php_version_consistency(DOCKERFILE, SUPERVISOR) == "8.3"

    @pytest.mark.unit
    def test_fpm_mismatch_cites_both_versions(self):
        supervisor = SUPERVISOR.replace("php-fpm8.3", "php-fpm8.2")

        with pytest.raises(VersionMismatchError) as exc_info:
            check_php_version_consistency(DOCKERFILE, supervisor)

        message = str(exc_info.value)
        assert "(8.3)" in message
        assert "(8.2)" in message
        assert exc_info.value.expected == "8.3"
        assert exc_info.value.actual == "8.2"

    @pytest.mark.unit
    def test_config_path_mismatch(self):
        supervisor = SUPERVISOR.replace("/etc/php/8.3/", "/etc/php/8.2/")

        with pytest.raises(VersionMismatchError) as exc_info:
            check_php_version_consistency(DOCKERFILE, supervisor)

        assert "config path" in str(exc_info.value)
        assert exc_info.value.actual == "8.2"

    @pytest.mark.unit
    def test_missing_fpm_is_not_found_not_mismatch(self):
        supervisor = "[program:php]\ncommand=/usr/sbin/php-fpm --nodaemonize\n"

        with pytest.raises(VersionNotFoundError) as exc_info:
            check_php_version_consistency(DOCKERFILE, supervisor)

        assert "PHP-FPM version not found in supervisord.conf" in str(exc_info.value)

    @pytest.mark.unit
    def test_missing_config_path(self):
        supervisor = "[program:php-fpm]\ncommand=/usr/sbin/php-fpm8.3 --nodaemonize\n"

        with pytest.raises(VersionNotFoundError) as exc_info:
            check_php_version_consistency(DOCKERFILE, supervisor)

        assert exc_info.value.token == "PHP config path"


class TestSupportedVersions:
    """Supported PHP releases and minimum Moodle branch."""

    SUPPORTED = ["8.1", "8.2", "8.3", "8.4"]

    @pytest.mark.unit
    def test_supported_php_passes(self):
        check_php_version_supported("8.3", self.SUPPORTED, "8.1")

    @pytest.mark.unit
    def test_unlisted_php_fails(self):
        with pytest.raises(UnsupportedVersionError, match="supported versions"):
            check_php_version_supported("7.4", self.SUPPORTED, "8.1")

    @pytest.mark.unit
    def test_php_below_minimum_fails(self):
        with pytest.raises(UnsupportedVersionError, match="8.2 or higher"):
            check_php_version_supported("8.1", self.SUPPORTED, "8.2")

    @pytest.mark.unit
    def test_moodle_branch_at_minimum_passes(self):
        check_moodle_branch_supported("400", 400)

    @pytest.mark.unit
    def test_moodle_branch_below_minimum_fails(self):
        with pytest.raises(UnsupportedVersionError) as exc_info:
            check_moodle_branch_supported("311", 400)

        assert "4.0 or higher" in str(exc_info.value)
        assert exc_info.value.version == "311"
