"""Row builders and auth helpers shared by the test modules."""

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.security import create_access_token
from caredata.models import Client, ClientService, MasterData, ServiceStatus, User
from caredata.rbac.context import AuthContext


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


def context_for(
    user: User,
    segment_id: int | None = None,
    visible: frozenset[int] | None = None,
) -> AuthContext:
    return AuthContext(
        user_id=user.id,
        username=user.username,
        role=user.role.value,
        company_id=user.company_id,
        segment_id=segment_id,
        visible_segment_ids=visible,
    )


async def add_client(
    session: AsyncSession,
    *,
    segment_id: int | None,
    last_name: str = "Smith",
) -> Client:
    client = Client(
        title="Ms",
        first_name="Jane",
        last_name=last_name,
        date_of_birth="1940-02-01",
        email="jane@example.com",
        mobile_phone="0400000000",
        address_line1="1 High St",
        post_code="2000",
        next_of_kin_name="John",
        next_of_kin_address="2 High St",
        next_of_kin_phone="0400000001",
        hcp_level="2",
        hcp_start_date="2024-01-01",
        segment_id=segment_id,
    )
    session.add(client)
    await session.flush()
    return client


async def add_master_data(
    session: AsyncSession,
    *,
    segment_id: int | None,
    category: str = "Personal Care",
    service_type: str = "Showering",
    provider: str = "CarePlus",
    active: bool = True,
) -> MasterData:
    row = MasterData(
        service_category=category,
        service_type=service_type,
        service_provider=provider,
        active=active,
        segment_id=segment_id,
    )
    session.add(row)
    await session.flush()
    return row


async def add_service(
    session: AsyncSession,
    client: Client,
    master: MasterData,
    *,
    status: ServiceStatus = ServiceStatus.PLANNED,
) -> ClientService:
    service = ClientService(
        client_id=client.id,
        service_category=master.service_category,
        service_type=master.service_type,
        service_provider=master.service_provider,
        service_start_date=date(2024, 3, 4),
        service_days=["Monday", "Thursday"],
        service_hours=2,
        status=status,
        segment_id=master.segment_id,
    )
    session.add(service)
    await session.flush()
    return service
