"""Organization records keyed by (domain, organization_id)."""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.organization import Organization
from .token_svc import TokenData

logger = logging.getLogger(__name__)


def _key_filter(domain: str | None, organization_id: int):
    domain_clause = (
        Organization.domain.is_(None) if domain is None else Organization.domain == domain
    )
    return domain_clause, Organization.organization_id == organization_id


async def find_organization(
    db: AsyncSession,
    domain: str | None,
    organization_id: int,
) -> Organization | None:
    stmt = select(Organization).where(*_key_filter(domain, organization_id)).limit(1)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def upsert_organization(
    db: AsyncSession,
    *,
    domain: str | None,
    organization_id: int,
    app_id: str,
    app_secret: str,
    user_id: int,
    base_url: str,
    token: TokenData,
) -> Organization:
    """Create or update the installation record with fresh credentials and token."""
    organization = await find_organization(db, domain, organization_id)
    created = organization is None
    if organization is None:
        organization = Organization(domain=domain, organization_id=organization_id)
        db.add(organization)

    organization.app_id = app_id
    organization.app_secret = app_secret
    organization.user_id = user_id
    organization.base_url = base_url
    organization.access_token = token.access_token
    organization.access_token_expires = token.access_token_expires

    await db.commit()
    await db.refresh(organization)
    logger.info("%s %r", "Installed" if created else "Reinstalled", organization)
    return organization


async def delete_organizations(
    db: AsyncSession,
    domain: str | None,
    organization_id: int,
) -> int:
    """Delete every record for the key. Returns the number removed."""
    stmt = delete(Organization).where(*_key_filter(domain, organization_id))
    result = await db.execute(stmt)
    await db.commit()
    logger.info("Uninstalled %s:%s (%d records)", domain or "-", organization_id, result.rowcount)
    return result.rowcount
