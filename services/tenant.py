"""
Loja atual (tenant) resolvida a partir do slug configurado.
Cada página resolve o contexto uma vez e passa company_id para os serviços.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from models.company import Company, CompanySettings
from services.errors import TenantError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantContext:
    company_id: int
    slug: str
    name: str


class TenantService:
    @staticmethod
    def resolve_tenant(db: Session, slug: str) -> TenantContext:
        company = db.query(Company).filter(Company.slug == slug).first()
        if not company:
            raise TenantError(
                "tenant_not_found",
                f"Loja '{slug}' não encontrada. Execute init_db.py.",
                {"slug": slug},
            )
        return TenantContext(company_id=company.id, slug=company.slug, name=company.name)

    @staticmethod
    def ensure_company(db: Session, slug: str, name: str) -> TenantContext:
        """
        Cria a loja (e suas configurações) no primeiro boot, se ainda não existir.
        """
        company = db.query(Company).filter(Company.slug == slug).first()
        if not company:
            company = Company(slug=slug, name=name)
            db.add(company)
            db.flush()
            db.add(CompanySettings(company_id=company.id, name=name))
            db.commit()
            db.refresh(company)
            logger.info("Loja criada: %s (id=%s)", slug, company.id)
        return TenantContext(company_id=company.id, slug=company.slug, name=company.name)

    @staticmethod
    def get_settings(db: Session, company_id: int) -> Optional[CompanySettings]:
        return (
            db.query(CompanySettings)
            .filter(CompanySettings.company_id == company_id)
            .first()
        )

    @staticmethod
    def save_settings(db: Session, company_id: int, **fields) -> CompanySettings:
        settings = TenantService.get_settings(db, company_id)
        if not settings:
            company = db.get(Company, company_id)
            if not company:
                raise TenantError("tenant_not_found", "Loja não encontrada", {"company_id": company_id})
            settings = CompanySettings(company_id=company_id, name=company.name)
            db.add(settings)
        for key, value in fields.items():
            if hasattr(settings, key):
                setattr(settings, key, value)
        if not settings.name:
            raise TenantError("invalid_settings", "O nome da loja é obrigatório")
        db.commit()
        db.refresh(settings)
        return settings


resolve_tenant = TenantService.resolve_tenant
ensure_company = TenantService.ensure_company
