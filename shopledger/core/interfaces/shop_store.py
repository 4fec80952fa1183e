"""Abstract interface for shops and back-office records."""

from abc import ABC, abstractmethod

from shopledger.core.entities.catalog import Expense, Product, StaffMember
from shopledger.core.entities.shop import Shop


class IShopStore(ABC):
    """Interface for shop, product, expense and staff persistence."""

    @abstractmethod
    async def create_shop(self, shop: Shop) -> Shop:
        pass

    @abstractmethod
    async def get_shop(self, shop_id: str) -> Shop | None:
        pass

    @abstractmethod
    async def create_product(self, product: Product) -> Product:
        pass

    @abstractmethod
    async def get_product(self, product_id: str) -> Product | None:
        pass

    @abstractmethod
    async def update_product(self, product: Product) -> Product:
        pass

    @abstractmethod
    async def list_products(self, shop_id: str) -> list[Product]:
        pass

    @abstractmethod
    async def create_expense(self, expense: Expense) -> Expense:
        pass

    @abstractmethod
    async def get_expense(self, expense_id: str) -> Expense | None:
        pass

    @abstractmethod
    async def update_expense(self, expense: Expense) -> Expense:
        pass

    @abstractmethod
    async def delete_expense(self, expense_id: str) -> None:
        pass

    @abstractmethod
    async def list_expenses(self, shop_id: str) -> list[Expense]:
        pass

    @abstractmethod
    async def create_staff_member(self, member: StaffMember) -> StaffMember:
        pass

    @abstractmethod
    async def list_staff(self, shop_id: str) -> list[StaffMember]:
        pass
