"""InnoDB diagnostic query constants."""

SUPPORTED_ADAPTERS: tuple[str, ...] = ("mysql", "mariadb")

VERSION_QUERY = "show variables like 'version'"
LEGACY_STATUS_COMMAND = "show innodb status"
STATUS_COMMAND = "show engine innodb status"

# SHOW INNODB STATUS was replaced by SHOW ENGINE INNODB STATUS in 5.5
STATUS_COMMAND_VERSION_BOUNDARY: tuple[int, ...] = (5, 5)

STATUS_FIELD = "Status"
LOG_PREFIX = "INNODB"
