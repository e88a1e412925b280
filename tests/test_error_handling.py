"""
Error taxonomy and configuration tests.

This test suite covers:
- the shape shared by service exceptions (message, details, code, http_status)
- MergeConflictError being a conflict, not a not-found
- settings validation
"""

import pytest
from pydantic import ValidationError

from app.config import Environment, Settings
from app.exceptions import (
    ConflictError,
    MergeConflictError,
    NotFoundError,
    ServiceValidationError,
)


# =============================================================================
# EXCEPTION SHAPE
# =============================================================================


@pytest.mark.parametrize(
    "exc_cls, status",
    [
        (ServiceValidationError, 400),
        (NotFoundError, 404),
        (ConflictError, 409),
        (MergeConflictError, 409),
    ],
)
def test_http_status(exc_cls, status):
    assert exc_cls.http_status == status


def test_to_dict_includes_only_set_fields():
    assert NotFoundError("Shopping item 3 not found").to_dict() == {
        "message": "Shopping item 3 not found"
    }

    err = ServiceValidationError("Bad input", details={"field": "text"}, code="blank")
    assert err.to_dict() == {
        "message": "Bad input",
        "code": "blank",
        "details": {"field": "text"},
    }
    assert str(err) == "Bad input"


def test_merge_conflict_error_defaults():
    err = MergeConflictError(details={"key": "g|flour", "attempts": 5})

    assert isinstance(err, ConflictError)
    assert not isinstance(err, NotFoundError)
    assert err.code == "merge_conflict"
    assert err.to_dict()["details"] == {"key": "g|flour", "attempts": 5}
    assert str(err) == "Merge conflict"


def test_errors_are_distinct():
    with pytest.raises(ConflictError):
        raise MergeConflictError()
    with pytest.raises(NotFoundError):
        raise NotFoundError()
    assert not issubclass(NotFoundError, ConflictError)


# =============================================================================
# SETTINGS
# =============================================================================


def test_settings_defaults():
    cfg = Settings(_env_file=None)

    assert cfg.app_name == "Mise"
    assert cfg.merge_max_retries >= 1
    assert cfg.guess_categories is True


def test_settings_log_level_normalized():
    assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_level="chatty")


def test_settings_environment():
    cfg = Settings(_env_file=None, environment="TESTING")

    assert cfg.environment is Environment.TESTING


def test_settings_retry_bounds():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, merge_max_retries=0)
    with pytest.raises(ValidationError):
        Settings(_env_file=None, merge_retry_delay_sec=-1)
