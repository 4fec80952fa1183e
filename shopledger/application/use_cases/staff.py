"""Staff use cases."""

from shopledger.application.dto.requests import AddStaffMemberRequest
from shopledger.application.dto.responses import StaffListResponse, StaffMemberResponse
from shopledger.application.use_cases.shops import ShopUseCaseBase
from shopledger.core.entities.catalog import StaffMember
from shopledger.core.entities.events import EntityType
from shopledger.core.entities.shop import TenantContext


def staff_to_response(member: StaffMember) -> StaffMemberResponse:
    return StaffMemberResponse(
        id=member.id,
        name=member.name,
        role=member.role,
        created_at=member.created_at,
    )


class AddStaffMemberUseCase(ShopUseCaseBase):
    async def execute(
        self, tenant: TenantContext, request: AddStaffMemberRequest
    ) -> StaffMember:
        store = await self._get_shop_store()
        member = await store.create_staff_member(
            StaffMember(shop_id=tenant.shop_id, name=request.name, role=request.role)
        )
        await self._announce(member.shop_id, EntityType.STAFF, member.id)
        return member

    def to_response(self, member: StaffMember) -> StaffMemberResponse:
        return staff_to_response(member)


class ListStaffUseCase(ShopUseCaseBase):
    async def execute(self, tenant: TenantContext) -> list[StaffMember]:
        store = await self._get_shop_store()
        return await store.list_staff(tenant.shop_id)

    def to_response(self, members: list[StaffMember]) -> StaffListResponse:
        return StaffListResponse(
            staff=[staff_to_response(m) for m in members],
            total=len(members),
        )
