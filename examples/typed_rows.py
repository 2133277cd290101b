#!/usr/bin/env python3
"""
Demo: typed, filtered and paginated row listing.

Maps field names through the table's field catalog and decodes each row
into a pydantic model.

Run with:
    BASEROW_TOKEN=... BASEROW_TABLE_ID=1234 python examples/typed_rows.py
"""

import asyncio
import os

from pydantic import BaseModel

from baserow_client import BaserowClient, FilterOperator, OrderDirection


class User(BaseModel):
    id: int
    name: str
    email: str
    age: int | None = None


async def main() -> None:
    table_id = int(os.environ["BASEROW_TABLE_ID"])

    async with BaserowClient.from_env() as client:
        table = client.table_by_id(table_id).auto_map()
        query = (
            table.query()
            .size(10)
            .filter_by("age", FilterOperator.HIGHER_THAN, 18)
            .order_by("name", OrderDirection.ASC)
        )

        page = await query.get_typed(User)
        print(f"Found {page.count} total users")
        for user in page.results:
            print(f"User {user.id}: {user.name} ({user.email}) - Age: {user.age}")

        if page.has_next:
            next_page = await query.page(2).get_typed(User)
            print("\nNext page users:")
            for user in next_page.results:
                print(f"User {user.id}: {user.name} ({user.email}) - Age: {user.age}")


if __name__ == "__main__":
    asyncio.run(main())
