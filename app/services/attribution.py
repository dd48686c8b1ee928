"""Agent attribution for tracked clicks.

Ordered chain, first hit wins:
  1. the acting user is an agent/admin -> credit themselves
  2. a referral code came with the click -> its owner
  3. the acting user has a permanent referrer -> that referrer
  4. nobody
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.orm import Session

from app.models.db import User
from app.models.db.enums import UserRole
from app.utils import get_logger

logger = get_logger(__name__)

AGENT_ROLES = (UserRole.AGENT, UserRole.ADMIN)


@dataclass(frozen=True)
class Attribution:
    agent_id: int
    source: str


AttributionStep = Callable[[Session, Optional[User], Optional[str]], Optional[Attribution]]


def normalize_referral_code(code: Optional[str]) -> Optional[str]:
    if not code or not code.strip():
        return None
    return code.strip().upper()


def attribute_self(session: Session, principal: Optional[User], referral_code: Optional[str]) -> Optional[Attribution]:
    if principal is not None and principal.role in AGENT_ROLES:
        return Attribution(agent_id=principal.id, source="self")
    return None


def attribute_referral_code(session: Session, principal: Optional[User], referral_code: Optional[str]) -> Optional[Attribution]:
    code = normalize_referral_code(referral_code)
    if code is None:
        return None
    agent = (
        session.query(User)
        .filter(User.referral_code == code, User.is_active == True)  # noqa: E712
        .first()
    )
    if agent is None:
        logger.info("Referral code did not resolve to an agent", referral_code=code)
        return None
    return Attribution(agent_id=agent.id, source="referral_code")


def attribute_stored_referrer(session: Session, principal: Optional[User], referral_code: Optional[str]) -> Optional[Attribution]:
    if principal is not None and principal.referred_by_id:
        return Attribution(agent_id=principal.referred_by_id, source="stored_referrer")
    return None


ATTRIBUTION_CHAIN: list[AttributionStep] = [
    attribute_self,
    attribute_referral_code,
    attribute_stored_referrer,
]


def attribute_agent(session: Session, principal: Optional[User], referral_code: Optional[str]) -> Optional[Attribution]:
    for step in ATTRIBUTION_CHAIN:
        result = step(session, principal, referral_code)
        if result is not None:
            return result
    return None


__all__ = ["Attribution", "ATTRIBUTION_CHAIN", "attribute_agent", "normalize_referral_code"]
