"""
Example 03: Settings and Logging

This example demonstrates configuring RowMap from ROW_MAP_* environment variables
and turning on statement logging.
"""

import os

from row_map import Session, configure_logging, get_settings


def main():
    os.environ.setdefault("ROW_MAP_DRIVER", "sqlite")
    os.environ.setdefault("ROW_MAP_DATABASE", ":memory:")
    os.environ.setdefault("ROW_MAP_LOG_LEVEL", "DEBUG")

    settings = get_settings()
    configure_logging(settings.log_level)

    print("=== Settings ===\n")
    print(f"Driver: {settings.driver}")
    print(f"Database: {settings.database}\n")

    # Every statement is logged at DEBUG
    with Session.from_config(settings.connection_config()) as session:
        session.connection.execute("CREATE TABLE notes (id INTEGER PRIMARY KEY, body TEXT)")
        session.connection.execute("INSERT INTO notes (body) VALUES ('logged')")


if __name__ == "__main__":
    main()
