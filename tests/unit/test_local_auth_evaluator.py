"""LocalAuthEvaluator tests: super-user bypass, any/all semantics, company scope."""

import pytest

from authcore.application.services.local_auth_evaluator import LocalAuthEvaluator
from authcore.application.services.permission_codec import PermissionCodec
from authcore.domain.entities.principal import Principal
from authcore.domain.exceptions import (
    InsufficientPermissionException,
    UnknownPermissionKeyException,
)


@pytest.fixture
def evaluator() -> LocalAuthEvaluator:
    return LocalAuthEvaluator()


def test_no_principal_denied(evaluator: LocalAuthEvaluator) -> None:
    assert evaluator.check(None, "") is False
    assert evaluator.check(None, "1") is False


def test_super_user_bypass(evaluator: LocalAuthEvaluator, make_principal) -> None:
    """Code 'a' satisfies any requirement, even codes it does not literally hold."""
    principal = make_principal(permissions="a")
    assert evaluator.check(principal, "xyz", match_all=True) is True


def test_empty_requirement_granted(evaluator: LocalAuthEvaluator, make_principal) -> None:
    assert evaluator.check(make_principal(permissions=""), "") is True


def test_any_of_is_default(evaluator: LocalAuthEvaluator, make_principal) -> None:
    principal = make_principal(permissions="12")
    assert evaluator.check(principal, "29") is True
    assert evaluator.check(principal, "89") is False


def test_match_all(evaluator: LocalAuthEvaluator, make_principal) -> None:
    principal = make_principal(permissions="12")
    assert evaluator.check(principal, "21", match_all=True) is True
    assert evaluator.check(principal, "129", match_all=True) is False


def test_company_scoped_check(evaluator: LocalAuthEvaluator) -> None:
    principal = Principal(
        id="u1",
        company_id="c1",
        permissions="1",
        company_permissions={"c1": "1", "c2": "a"},
    )
    assert evaluator.check(principal, "2", company_id="c1") is False
    assert evaluator.check(principal, "2", company_id="c2") is True
    assert evaluator.check(principal, "1", company_id="c3") is False


def test_custom_super_user_code(make_principal) -> None:
    evaluator = LocalAuthEvaluator(super_user_code="z")
    assert evaluator.check(make_principal(permissions="z"), "123", match_all=True)
    assert not evaluator.check(make_principal(permissions="a"), "123", match_all=True)


def test_require_raises_on_denial(evaluator: LocalAuthEvaluator, make_principal) -> None:
    with pytest.raises(InsufficientPermissionException) as exc_info:
        evaluator.require(make_principal(permissions="1"), "2", company_id="c1")
    assert exc_info.value.details == {"required": "2", "company_id": "c1"}
    evaluator.require(make_principal(permissions="2"), "2")


def test_check_keys(evaluator: LocalAuthEvaluator, make_principal, catalog) -> None:
    codec = PermissionCodec(catalog)
    principal = make_principal(permissions="2")
    assert evaluator.check_keys(principal, ["edit"], codec) is True
    assert evaluator.check_keys(principal, ["view", "edit"], codec, match_all=True) is False
    with pytest.raises(UnknownPermissionKeyException):
        evaluator.check_keys(principal, ["delete"], codec)
