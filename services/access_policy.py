"""Page access policy.

Every page request is classified by the identity state of the caller and the
path it targets, and either allowed or redirected:

* ``unauthenticated`` callers may only see public pages; everything else
  sends them to sign-in.
* ``admin`` is absorbing: admins live in the admin area and are sent back
  there from anywhere except home.
* ``no_role`` callers must pick a role first (or be mid-verification).
* ``customer`` and ``provider_*`` callers are kept out of the admin area, off
  the role-selection page once a role exists, and unverified providers are
  sent to verification from the provider pages.

The evaluation has no side effects; callers decide how to act on the result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

ROLE_CUSTOMER = "CUSTOMER"
ROLE_PROVIDER = "PROVIDER"
ROLE_ADMIN = "ADMIN"
KNOWN_ROLES = (ROLE_CUSTOMER, ROLE_PROVIDER, ROLE_ADMIN)

STATE_UNAUTHENTICATED = "unauthenticated"
STATE_NO_ROLE = "no_role"
STATE_CUSTOMER = "customer"
STATE_PROVIDER_UNVERIFIED = "provider_unverified"
STATE_PROVIDER_VERIFIED = "provider_verified"
STATE_ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    """The caller as seen by the policy."""

    user_id: int | None = None
    role: str | None = None
    verified: bool = False
    is_face_verified: bool = False
    is_otp_verified: bool = False

    @property
    def authenticated(self) -> bool:
        return self.user_id is not None


ANONYMOUS = Principal()


@dataclass(frozen=True)
class PolicyPaths:
    """Well-known page paths the policy redirects between."""

    home: str = "/"
    sign_in: str = "/signin"
    role_selection: str = "/role"
    verification: str = "/verify"
    forbidden: str = "/403"
    admin: str = "/admin"
    public_prefixes: tuple[str, ...] = field(default_factory=tuple)
    provider_prefixes: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_config(cls, config: Mapping) -> "PolicyPaths":
        return cls(
            home=config.get("HOME_PATH", "/"),
            sign_in=config.get("SIGN_IN_PATH", "/signin"),
            role_selection=config.get("ROLE_SELECTION_PATH", "/role"),
            verification=config.get("VERIFICATION_PATH", "/verify"),
            forbidden=config.get("FORBIDDEN_PATH", "/403"),
            admin=config.get("ADMIN_PATH", "/admin"),
            public_prefixes=tuple(config.get("PUBLIC_PATH_PREFIXES", ())),
            provider_prefixes=tuple(config.get("PROVIDER_PATH_PREFIXES", ())),
        )

    def is_public(self, path: str) -> bool:
        if path in (self.home, self.sign_in, self.forbidden):
            return True
        return any(is_under(path, prefix) for prefix in self.public_prefixes)

    def is_provider_only(self, path: str) -> bool:
        return any(is_under(path, prefix) for prefix in self.provider_prefixes)


@dataclass(frozen=True)
class AccessDecision:
    state: str
    redirect_to: str | None = None

    @property
    def allowed(self) -> bool:
        return self.redirect_to is None

    def to_dict(self) -> dict:
        return {
            "state": self.state,
            "allowed": self.allowed,
            "redirect": self.redirect_to,
        }


def is_under(path: str, prefix: str) -> bool:
    """Return True when ``path`` is ``prefix`` or one of its sub-paths."""

    base = prefix.rstrip("/")
    if not base:
        return path == "/"
    return path == base or path.startswith(base + "/")


def identity_state(principal: Principal) -> str:
    if not principal.authenticated:
        return STATE_UNAUTHENTICATED
    if principal.role == ROLE_ADMIN:
        return STATE_ADMIN
    if principal.role == ROLE_CUSTOMER:
        return STATE_CUSTOMER
    if principal.role == ROLE_PROVIDER:
        if principal.verified:
            return STATE_PROVIDER_VERIFIED
        return STATE_PROVIDER_UNVERIFIED
    return STATE_NO_ROLE


def evaluate(principal: Principal, path: str, paths: PolicyPaths | None = None) -> AccessDecision:
    """Decide whether ``principal`` may open ``path``."""

    paths = paths or PolicyPaths()
    path = path or "/"
    state = identity_state(principal)

    if state == STATE_UNAUTHENTICATED:
        if paths.is_public(path):
            return AccessDecision(state)
        return AccessDecision(state, paths.sign_in)

    if state == STATE_ADMIN:
        if path == paths.home or is_under(path, paths.admin):
            return AccessDecision(state)
        return AccessDecision(state, paths.admin)

    if state == STATE_NO_ROLE:
        if is_under(path, paths.role_selection) or is_under(path, paths.verification):
            return AccessDecision(state)
        return AccessDecision(state, paths.role_selection)

    if is_under(path, paths.admin):
        return AccessDecision(state, paths.forbidden)

    if is_under(path, paths.role_selection):
        if state == STATE_PROVIDER_UNVERIFIED:
            return AccessDecision(state, paths.verification)
        return AccessDecision(state, paths.home)

    if state == STATE_PROVIDER_UNVERIFIED and paths.is_provider_only(path):
        return AccessDecision(state, paths.verification)

    return AccessDecision(state)
