from pathlib import Path
from typing import Annotated, List, Literal

import orjson
from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Turf Slot Booking Engine'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # CORS
    # NoDecode: dotenv values are comma separated, not JSON
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = []

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str):
            if v.lstrip().startswith('['):
                return list(orjson.loads(v))
            return [i.strip() for i in v.split(',') if i.strip()]
        elif isinstance(v, list):
            return v
        return []

    # Backends
    STORE_BACKEND: Literal['memory', 'postgres'] = 'memory'
    CHANGE_CHANNEL_BACKEND: Literal['memory', 'kvrocks'] = 'memory'

    # Slot holds
    HOLD_TTL_SECONDS: int = 300
    MAX_BOOKING_DURATION_HOURS: int = 6

    # Venue calendar
    VENUE_TIMEZONE: str = 'Asia/Kolkata'
    CALENDAR_DAYS: int = 7

    # Pricing
    PEAK_HOUR_START: int = 17
    PEAK_HOUR_END: int = 21  # inclusive

    # Loyalty: LOYALTY_POINTS_PER_UNIT points for every LOYALTY_AMOUNT_UNIT paid
    LOYALTY_AMOUNT_UNIT: int = 100
    LOYALTY_POINTS_PER_UNIT: int = 10

    # Tickets
    TICKET_CODE_PREFIX: str = 'TM'
    TICKET_CODE_LENGTH: int = 6
    TICKET_CODE_MAX_ATTEMPTS: int = 10

    # Cancellation
    CANCELLATION_MIN_LEAD_HOURS: int = 6

    # Booking notification webhook (empty = log only)
    BOOKING_NOTIFICATION_URL: str = ''
    BOOKING_NOTIFICATION_TOKEN: SecretStr = SecretStr('')
    BOOKING_NOTIFICATION_TIMEOUT: float = 5.0

    # PostgreSQL Configuration
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_USER: str = 'py_arch_lab'
    POSTGRES_PASSWORD: SecretStr = SecretStr('py_arch_lab')
    POSTGRES_DB: str = 'turf_booking'
    POSTGRES_PORT: str = '5432'

    # asyncpg pool
    ASYNCPG_POOL_MIN_SIZE: int = 2
    ASYNCPG_POOL_MAX_SIZE: int = 10
    ASYNCPG_POOL_COMMAND_TIMEOUT: float = 30.0
    ASYNCPG_POOL_TIMEOUT: float = 10.0

    # Kvrocks Configuration (Redis protocol + Kvrocks storage)
    KVROCKS_HOST: str = 'localhost'
    KVROCKS_PORT: int = 6666
    KVROCKS_DB: int = 0
    KVROCKS_PASSWORD: str = ''
    KVROCKS_KEY_PREFIX: str = ''
    KVROCKS_POOL_MAX_CONNECTIONS: int = 50
    KVROCKS_POOL_SOCKET_TIMEOUT: int = 10
    KVROCKS_POOL_SOCKET_CONNECT_TIMEOUT: int = 10

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        password = self.POSTGRES_PASSWORD.get_secret_value()
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:{password}'
            f'@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    @property
    def ASYNCPG_DSN(self) -> str:
        return self.DATABASE_URL_ASYNC.replace('postgresql+asyncpg://', 'postgresql://')


settings = Settings()
