from pydantic import Field
from pydantic_settings import BaseSettings


class RedisConfig(BaseSettings):
    """Redis connection used as the Celery broker and result backend."""

    Host: str = Field(default="redis", description="Redis host")
    Port: int = Field(default=6379, description="Redis port")
    DB: int = Field(default=0, description="Redis logical database index")
    Password: str = Field(default="", description="Redis password (empty for none)")

    @property
    def REDIS_URL(self) -> str:
        auth = f":{self.Password}@" if self.Password else ""
        return f"redis://{auth}{self.Host}:{self.Port}/{self.DB}"
