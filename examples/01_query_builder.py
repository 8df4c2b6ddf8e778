"""
Example 01: Query Builder

This example demonstrates building and running SELECT, UPDATE, DELETE and COUNT
statements with RowMap's fluent QueryBuilder.
"""

from row_map import Comparator, Connection, ConnectionConfig, QueryType, new_query


def main():
    config = ConnectionConfig(driver="sqlite", database=":memory:")

    with Connection(config) as conn:
        conn.execute(
            "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL, "
            "email TEXT NOT NULL, active INTEGER DEFAULT 1)"
        )
        conn.execute("INSERT INTO users (name, email) VALUES ('Alice', 'alice@example.com')")
        conn.execute("INSERT INTO users (name, email) VALUES ('Bob', 'bob@example.com')")
        conn.execute(
            "INSERT INTO users (name, email, active) VALUES ('Charlie', 'charlie@example.com', 0)"
        )

        print("=== Query Builder ===\n")

        # SELECT with conditions, sorting and pagination
        query = (
            new_query(QueryType.SELECT, "users", ["id", "name"], connection=conn)
            .where("active", Comparator.EQ, 1)
            .or_where("name", Comparator.EQ, "Charlie")
            .desc("id")
            .skip(1)
        )
        print(f"SQL: {query.render()}")
        for row in query.execute():
            print(f"  - {row['id']}: {row['name']}")
        print()

        # Values are quoted by the driver
        query = new_query(QueryType.SELECT, "users", ["*"], connection=conn).where(
            "name", Comparator.EQ, "O'Brien"
        )
        print(f"Quoted: {query}\n")

        # UPDATE affects rows in bulk
        result = (
            new_query(QueryType.UPDATE, "users", {"active": 0}, connection=conn)
            .where("id", Comparator.IN, [1, 2])
            .execute()
        )
        print(f"UPDATE changed {result.rowcount} rows")

        # COUNT ignores sorting and pagination
        count = (
            new_query(QueryType.COUNT, "users", connection=conn)
            .where("active", Comparator.EQ, 0)
            .execute()
            .scalar()
        )
        print(f"COUNT of inactive users: {count}")

        # DELETE
        result = (
            new_query(QueryType.DELETE, "users", connection=conn)
            .where("email", Comparator.NEQ, None)
            .where("active", Comparator.EQ, 0)
            .execute()
        )
        print(f"DELETE removed {result.rowcount} rows")


if __name__ == "__main__":
    main()
