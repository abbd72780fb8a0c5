# Local application imports
from civicvoice.settings.common import CommonSettings


class DevSettings(CommonSettings):
    DEBUG_MODE: bool = True
    DATABASE_URL: str | None = "sqlite+aiosqlite:///./civicvoice.db"
    AUTO_CREATE_TABLES: bool = True
