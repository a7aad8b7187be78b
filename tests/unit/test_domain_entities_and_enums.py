"""Tests for domain entities (Permission, Principal, TransferRoute) and enums."""

from datetime import UTC, datetime, timedelta

import pytest

from authcore.domain.entities.permission import Permission
from authcore.domain.entities.principal import Principal
from authcore.domain.entities.transfer_route import TransferRoute
from authcore.domain.enums import CategoryState, FieldTag, Scope, TransferPhase
from authcore.domain.exceptions import AuthenticationException, ValidationException


class TestEnums:
    def test_scope_values(self) -> None:
        assert Scope.values() == ["user", "company", "external"]

    def test_enums_are_str(self) -> None:
        assert Scope("company") is Scope.COMPANY
        assert CategoryState.INDETERMINATE == "indeterminate"
        assert TransferPhase.SUBMITTABLE.value == "submittable"


class TestPermission:
    def test_valid_permission(self) -> None:
        perm = Permission(code="1", key="view", category="Basic")
        assert perm.code == "1"
        assert perm.name == ""

    def test_multi_character_code_rejected(self) -> None:
        with pytest.raises(ValidationException) as exc_info:
            Permission(code="12", key="view")
        assert exc_info.value.details == {"field": "code"}

    def test_blank_key_rejected(self) -> None:
        with pytest.raises(ValidationException):
            Permission(code="1", key="  ")


class TestPrincipal:
    def test_permissions_for_own_company_and_default(self) -> None:
        p = Principal(id="u1", company_id="c1", permissions="12")
        assert p.permissions_for() == "12"
        assert p.permissions_for("c1") == "12"
        assert p.permissions_for("c2") == ""

    def test_permissions_for_per_company_entry(self) -> None:
        p = Principal(
            id="u1",
            company_id="c1",
            permissions="1",
            company_permissions={"c1": "1", "c2": "29"},
        )
        assert p.permissions_for("c2") == "29"

    def test_from_claims_string_permissions(self) -> None:
        p = Principal.from_claims(
            {"id": 7, "companyId": 3, "permissions": "12", "username": "ann"}, token="t"
        )
        assert p.id == "7"
        assert p.company_id == "3"
        assert p.permissions == "12"
        assert p.username == "ann"
        assert p.token == "t"

    def test_from_claims_company_list(self) -> None:
        claims = {
            "sub": "u1",
            "companyId": "c1",
            "permissions": [
                {"companyId": "c1", "permissions": "1"},
                {"companyId": "c2", "permissions": "12"},
                "garbage",
            ],
        }
        p = Principal.from_claims(claims)
        assert p.id == "u1"
        assert p.permissions == "1"
        assert p.permissions_for("c2") == "12"

    def test_from_claims_without_id_rejected(self) -> None:
        with pytest.raises(AuthenticationException):
            Principal.from_claims({"permissions": "1"})

    def test_is_expired(self) -> None:
        now = datetime.now(UTC)
        assert Principal(id="u", expires_at=now - timedelta(seconds=1)).is_expired()
        assert not Principal(id="u", expires_at=now + timedelta(hours=1)).is_expired()
        assert not Principal(id="u").is_expired()

    def test_token_not_in_repr(self) -> None:
        assert "secret-token" not in repr(Principal(id="u", token="secret-token"))


class TestTransferRoute:
    def test_required_fields_from_flags(self) -> None:
        route = TransferRoute(
            id="r",
            from_scope=Scope.USER,
            to_scope=Scope.USER,
            permission_code="p",
            requires_counterparty_user=True,
            requires_other_company=True,
        )
        assert route.required_fields == frozenset(
            {FieldTag.COUNTERPARTY_USER, FieldTag.COUNTERPARTY_COMPANY}
        )
        assert route.is_outgoing

    def test_external_source_is_not_outgoing(self) -> None:
        route = TransferRoute(
            id="r",
            from_scope=Scope.EXTERNAL,
            to_scope=Scope.COMPANY,
            permission_code="p",
            requires_source_external_name=True,
        )
        assert route.required_fields == frozenset({FieldTag.SOURCE_EXTERNAL_NAME})
        assert not route.is_outgoing
