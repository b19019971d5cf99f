import logging
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.user_repo import UserRepository
from app.core.security import verify_password, create_access_token, get_password_hash
from app.core.exceptions import AuthenticationError, ValidationError
from app.models.user import User, UserRoleEnum, default_profile
from app.schemas.user_schema import UserCreate

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, db: AsyncSession):
        self.user_repo = UserRepository(db)

    async def verify_credential(self, email: str, password: str) -> bool:
        """
        只回答帳密是否正確，不回傳使用者
        """
        return await self.authenticate_user(email, password) is not None

    async def authenticate_user(self, email: str, password: str) -> User | None:
        """
        驗證使用者帳號密碼。
        成功回傳 User 物件，失敗回傳 None。
        """
        user = await self.user_repo.get_user_by_email(email)

        # 1. 檢查使用者是否存在
        if not user:
            return None

        # 2. 檢查密碼是否正確
        if not verify_password(plain_password=password, hashed_password=user.password_hash):
            return None

        return user

    async def login(self, email: str, password: str) -> User:
        user = await self.authenticate_user(email, password)
        if user is None:
            raise AuthenticationError("Invalid credentials")
        logger.info(f"User logged in: {user.user_id}")
        return user

    async def register_user(self, user_create: UserCreate, role: UserRoleEnum = UserRoleEnum.solver) -> User:
        """
        處理使用者註冊 (公開註冊一律為 problem_solver)
        """
        # 1. 檢查 Email 是否已被註冊
        existing_user = await self.user_repo.get_user_by_email(user_create.email)
        if existing_user:
            raise ValidationError("Email already registered")

        # 2. 雜湊密碼
        hashed_password = get_password_hash(user_create.password)

        # 3. 建立 User ORM 模型
        new_user = User(
            email=user_create.email,
            password_hash=hashed_password,
            name=user_create.name,
            role=role,
            profile=default_profile(),
        )

        # 4. 呼叫 Repository 儲存到資料庫
        created_user = await self.user_repo.create_user(new_user)
        logger.info(f"Registered user {created_user.user_id} ({created_user.role.value})")
        return created_user

    def create_login_token(self, user: User) -> str:
        """
        為指定使用者建立 access token
        """
        role = user.role.value if isinstance(user.role, UserRoleEnum) else str(user.role)
        return create_access_token(
            data={
                "sub": str(user.user_id), # 'sub' 存 user id
                "role": role,
            }
        )
