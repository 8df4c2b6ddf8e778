"""
Example 02: Identity-Mapped Entities

This example demonstrates declaring entities, loading them through a Session and
saving changes. Every primary key maps to exactly one live object per session.
"""

from row_map import Comparator, ConnectionConfig, Entity, Session, entity


class User(Entity):
    """A blog author"""

    __entity__ = entity("users").key("id").field("name").readable("email").build()


class Post(Entity):
    """A post, optionally replying to another post"""

    __entity__ = (
        entity("posts")
        .key("id")
        .field("title")
        .reference("author", User)
        .reference("parent", "Post")
        .build()
    )


def main():
    config = ConnectionConfig(driver="sqlite", database=":memory:")

    with Session.from_config(config) as session:
        conn = session.connection
        conn.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, email TEXT)")
        conn.execute(
            "CREATE TABLE posts (id INTEGER PRIMARY KEY, author INTEGER, parent INTEGER, title TEXT)"
        )

        users = session.store(User)
        posts = session.store(Post)
        alice = users.insert({"name": "Alice", "email": "alice@example.com"})
        hello = posts.insert({"author": alice, "title": "Hello"})
        posts.insert({"author": alice, "parent": hello, "title": "Re: Hello"})

        print("=== Identity Map ===\n")

        reply = session.get(Post, 2)
        print(f"Same author object: {reply.author is hello.author}")

        # Changes are visible through every path to the same row
        reply.parent.author.name = "Alicia"
        print(f"Renamed through the reply: {hello.author.name}")

        # Saved when the entity scope ends
        with session.get(Post, 1) as post:
            post.title = "Hello, world"

        # Queries return the cached instances
        mine = posts.select().where("author", Comparator.REFS, alice).asc("id").find(2)
        print(f"Posts by {alice.name}: {[p.title for p in mine]}")
        print(f"Post count: {posts.select().count()}")

    # Leaving the session flushed the pending rename


if __name__ == "__main__":
    main()
