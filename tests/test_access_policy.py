"""Tests for the page access policy decision function."""

from __future__ import annotations

import pytest

from config import Config
from services.access_policy import (
    ANONYMOUS,
    STATE_ADMIN,
    STATE_CUSTOMER,
    STATE_NO_ROLE,
    STATE_PROVIDER_UNVERIFIED,
    STATE_PROVIDER_VERIFIED,
    STATE_UNAUTHENTICATED,
    PolicyPaths,
    Principal,
    evaluate,
    identity_state,
    is_under,
)

PATHS = PolicyPaths.from_config(vars(Config))

NO_ROLE = Principal(user_id=1)
CUSTOMER = Principal(user_id=2, role="CUSTOMER")
PROVIDER = Principal(user_id=3, role="PROVIDER")
VERIFIED_PROVIDER = Principal(user_id=4, role="PROVIDER", verified=True)
ADMIN = Principal(user_id=5, role="ADMIN", verified=True)


@pytest.mark.parametrize(
    "principal, state",
    [
        (ANONYMOUS, STATE_UNAUTHENTICATED),
        (NO_ROLE, STATE_NO_ROLE),
        (CUSTOMER, STATE_CUSTOMER),
        (PROVIDER, STATE_PROVIDER_UNVERIFIED),
        (VERIFIED_PROVIDER, STATE_PROVIDER_VERIFIED),
        (ADMIN, STATE_ADMIN),
    ],
)
def test_identity_state(principal, state):
    assert identity_state(principal) == state


@pytest.mark.parametrize(
    "path, redirect_to",
    [
        ("/", None),
        ("/signin", None),
        ("/403", None),
        ("/auth/callback", None),
        ("/reset-password", None),
        ("/search", None),
        ("/listings/4", "/signin"),
        ("/dashboard", "/signin"),
        ("/admin", "/signin"),
    ],
)
def test_unauthenticated_only_reaches_public_pages(path, redirect_to):
    assert evaluate(ANONYMOUS, path, PATHS).redirect_to == redirect_to


@pytest.mark.parametrize(
    "path, redirect_to",
    [
        ("/", None),
        ("/admin", None),
        ("/admin/providers", None),
        ("/dashboard", "/admin"),
        ("/role", "/admin"),
        ("/listings/4", "/admin"),
    ],
)
def test_admin_is_kept_in_admin_area(path, redirect_to):
    assert evaluate(ADMIN, path, PATHS).redirect_to == redirect_to


def test_admin_without_verification_still_reaches_admin_area():
    unverified_admin = Principal(user_id=6, role="ADMIN")

    assert evaluate(unverified_admin, "/admin", PATHS).allowed


@pytest.mark.parametrize(
    "path, redirect_to",
    [
        ("/role", None),
        ("/verify", None),
        ("/verify/face", None),
        ("/", "/role"),
        ("/dashboard", "/role"),
        ("/admin", "/role"),
    ],
)
def test_user_without_role_must_choose_one(path, redirect_to):
    assert evaluate(NO_ROLE, path, PATHS).redirect_to == redirect_to


@pytest.mark.parametrize("principal", [CUSTOMER, PROVIDER, VERIFIED_PROVIDER])
def test_non_admin_is_forbidden_from_admin_area(principal):
    decision = evaluate(principal, "/admin/users", PATHS)

    assert decision.redirect_to == "/403"
    assert not decision.allowed


@pytest.mark.parametrize(
    "principal, redirect_to",
    [
        (CUSTOMER, "/"),
        (VERIFIED_PROVIDER, "/"),
        (PROVIDER, "/verify"),
    ],
)
def test_role_selection_cannot_be_revisited(principal, redirect_to):
    assert evaluate(principal, "/role", PATHS).redirect_to == redirect_to


@pytest.mark.parametrize("path", ["/my-listings", "/approvals", "/dashboard/stats"])
def test_unverified_provider_is_sent_to_verification(path):
    assert evaluate(PROVIDER, path, PATHS).redirect_to == "/verify"


@pytest.mark.parametrize("path", ["/my-listings", "/approvals", "/dashboard", "/"])
def test_verified_provider_reaches_provider_pages(path):
    assert evaluate(VERIFIED_PROVIDER, path, PATHS).allowed


def test_customer_reaches_ordinary_pages():
    decision = evaluate(CUSTOMER, "/dashboard", PATHS)

    assert decision.allowed
    assert decision.to_dict() == {"state": STATE_CUSTOMER, "allowed": True, "redirect": None}


def test_face_and_otp_flags_do_not_verify_a_provider():
    principal = Principal(
        user_id=7, role="PROVIDER", is_face_verified=True, is_otp_verified=True
    )

    assert evaluate(principal, "/my-listings", PATHS).redirect_to == "/verify"


def test_default_paths_are_used_without_configuration():
    assert evaluate(ANONYMOUS, "/private").redirect_to == "/signin"


@pytest.mark.parametrize(
    "path, prefix, expected",
    [
        ("/admin", "/admin", True),
        ("/admin/users", "/admin", True),
        ("/administrator", "/admin", False),
        ("/", "/", True),
        ("/x", "/", False),
    ],
)
def test_is_under(path, prefix, expected):
    assert is_under(path, prefix) is expected
