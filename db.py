# db.py
import os
from dataclasses import dataclass

import pymysql
from pymysql.constants import CLIENT
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class DatabaseSettings:
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    database: str = "inventory"

    @classmethod
    def from_env(cls) -> "DatabaseSettings":
        return cls(
            host=os.getenv("DATABASE_HOST", cls.host),
            port=int(os.getenv("DATABASE_PORT", cls.port)),
            user=os.getenv("DATABASE_USER", cls.user),
            password=os.getenv("DATABASE_PASSWORD", cls.password),
            database=os.getenv("DATABASE_NAME", cls.database),
        )


@dataclass(frozen=True)
class ServerSettings:
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServerSettings":
        return cls(
            host=os.getenv("FASTAPIHOST", cls.host),
            port=int(os.getenv("FASTAPIPORT", cls.port)),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )


def get_connection(settings: DatabaseSettings):
    return pymysql.connect(
        host=settings.host,
        user=settings.user,
        password=settings.password,
        database=settings.database,
        port=settings.port,
        charset="utf8mb4",
        cursorclass=pymysql.cursors.DictCursor,
        # UPDATE reports matched rows, not changed rows
        client_flag=CLIENT.FOUND_ROWS,
        init_command="SET time_zone = '+00:00'",
    )
