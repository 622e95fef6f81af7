"""Shared retry policy constants for lock-contention handling."""

DEFAULT_MAX_RETRIES: int = 3

# Seconds to pause before retry N (1-based). Attempts past the table use MAX_WAIT_TIME.
WAIT_TIMES: tuple[float, ...] = (0, 0.1, 0.2, 0.4, 0.8, 1.6, 3.2)
MAX_WAIT_TIME: float = 5

DEADLOCK = "deadlock"
LOCK_WAIT_TIMEOUT = "lock_wait_timeout"

DEADLOCK_ERROR_MESSAGES: dict[str, tuple[str, ...]] = {
    DEADLOCK: (
        "Deadlock found when trying to get lock",  # MySQL / MariaDB
        "deadlock detected",  # PostgreSQL
        "detected deadlock",
    ),
    LOCK_WAIT_TIMEOUT: ("Lock wait timeout exceeded",),
}

# Driver error numbers (MySQLdb, PyMySQL, mysql-connector, asyncmy, aiomysql)
MYSQL_ERROR_CODES: dict[int, str] = {
    1213: DEADLOCK,
    1205: LOCK_WAIT_TIMEOUT,
}

# SQLSTATE values (psycopg, psycopg2, asyncpg)
POSTGRES_SQLSTATES: dict[str, str] = {
    "40P01": DEADLOCK,
    "55P03": LOCK_WAIT_TIMEOUT,
}
