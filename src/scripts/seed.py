"""Seed the database with demo data and print a development bearer token.

Usage:
    python -m src.scripts.seed

Creates the schema if needed, then inserts an admin, a lawyer, two clients,
one case with a document and a hearing, and a public template. Running it
twice is a no-op: the admin email is checked first.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from sqlalchemy import select

from src.config import settings
from src.db.engine import async_session_factory, close_db, init_db
from src.models import (
    Appointment,
    AppointmentType,
    Case,
    CaseStatus,
    CaseType,
    ClientProfile,
    ClientType,
    Document,
    DocumentType,
    Template,
    TemplateCategory,
    TemplateType,
    User,
    UserRole,
)
from src.security.auth import create_token

logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@juscrm.com.br"

WELCOME_TEMPLATE = (
    "Prezado(a) {{nome_cliente}},\n\n"
    "Informamos que o processo {{numero_processo}} teve nova movimentação em {{data}}.\n\n"
    "Atenciosamente,\n{{nome_advogado}}"
)


async def seed() -> User:
    """Insert the demo records and return the admin user."""
    async with async_session_factory() as db:
        result = await db.execute(select(User).where(User.email == ADMIN_EMAIL))
        existing = result.scalar_one_or_none()
        if existing is not None:
            logger.info("Seed data already present, skipping")
            return existing

        admin = User(email=ADMIN_EMAIL, name="Administrador", role=UserRole.ADMIN.value)
        lawyer = User(email="ana.souza@juscrm.com.br", name="Dra. Ana Souza", role=UserRole.LAWYER.value)
        maria = User(email="maria.silva@example.com", name="Maria Silva", role=UserRole.CLIENT.value)
        joao = User(email="joao.pereira@example.com", name="João Pereira", role=UserRole.CLIENT.value)
        db.add_all([admin, lawyer, maria, joao])
        await db.flush()

        db.add_all([
            ClientProfile(
                user_id=maria.id,
                type=ClientType.INDIVIDUAL.value,
                cpf="123.456.789-00",
                phone="(11) 98888-7777",
                city="São Paulo",
                state="SP",
                company="Metalúrgica Paulista Ltda",
                position="Operadora de máquinas",
            ),
            ClientProfile(
                user_id=joao.id,
                type=ClientType.INDIVIDUAL.value,
                cpf="987.654.321-00",
                phone="(21) 97777-6666",
                city="Rio de Janeiro",
                state="RJ",
                company="Transportes Rápidos S.A.",
                position="Motorista",
            ),
        ])

        case = Case(
            number="0001234-56.2026.5.02.0001",
            title="Horas extras não pagas — Metalúrgica Paulista",
            description="Reclamação trabalhista por horas extras e adicional noturno.",
            type=CaseType.HORAS_EXTRAS.value,
            status=CaseStatus.ACTIVE.value,
            value=Decimal("45000.00"),
            client_id=maria.id,
            lawyer_id=lawyer.id,
        )
        db.add(case)
        await db.flush()

        start = datetime.now(UTC).replace(hour=14, minute=0, second=0, microsecond=0) + timedelta(days=14)
        db.add_all([
            Document(
                case_id=case.id,
                uploaded_by_id=lawyer.id,
                name="Procuração — Maria Silva",
                type=DocumentType.PROCURATION.value,
                filename="procuracao-maria-silva.pdf",
                mime_type="application/pdf",
                size=182_304,
            ),
            Appointment(
                case_id=case.id,
                lawyer_id=lawyer.id,
                title="Audiência de conciliação",
                description="Primeira audiência na 1ª Vara do Trabalho",
                location="Fórum Trabalhista Ruy Barbosa",
                type=AppointmentType.HEARING.value,
                start_date=start,
                end_date=start + timedelta(hours=1),
            ),
            Template(
                name="Comunicado de movimentação processual",
                description="Aviso ao cliente sobre andamento do processo",
                type=TemplateType.LETTER.value,
                category=TemplateCategory.LABOR_LAW.value,
                content=WELCOME_TEMPLATE,
                variables=[
                    {"name": "nome_cliente", "label": "Nome do cliente", "type": "text", "required": True},
                    {"name": "numero_processo", "label": "Número do processo", "type": "text", "required": True},
                    {"name": "data", "label": "Data", "type": "date", "required": True},
                    {"name": "nome_advogado", "label": "Advogado(a)", "type": "text", "required": True},
                ],
                tags=["comunicado", "cliente"],
                is_public=True,
                created_by_id=lawyer.id,
            ),
        ])
        await db.commit()
        logger.info("Seed data inserted")
        return admin


async def main() -> None:
    await init_db()
    try:
        admin = await seed()
    finally:
        await close_db()

    if not settings.security.jwt_secret:
        logger.warning("JWT_SECRET not set, no development token printed")
        return

    token = create_token(
        admin.id,
        UserRole(admin.role),
        timedelta(minutes=settings.security.dev_token_ttl_minutes),
    )
    print(f"Admin bearer token:\n{token}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, stream=sys.stdout)
    asyncio.run(main())
