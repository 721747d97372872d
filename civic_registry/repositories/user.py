
from civic_registry.core.security import normalize_email
from civic_registry.domain.user import User
from civic_registry.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    async def get_by_email(self, email: str) -> User | None:
        return await self.find_by("email", normalize_email(email))

    async def exists_by_email(self, email: str) -> bool:
        return await self.get_by_email(email) is not None
