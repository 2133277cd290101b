#!/usr/bin/env python3
"""
Demo: create a row with raw field keys, then update it by field name.

Run with:
    BASEROW_TOKEN=... BASEROW_TABLE_ID=176 python examples/create_and_update.py
"""

import asyncio
import os

from baserow_client import BaserowClient, BaserowError


async def main() -> None:
    table_id = int(os.environ["BASEROW_TABLE_ID"])

    async with BaserowClient.from_env() as client:
        fields = await client.table_fields(table_id)
        primary = next(f for f in fields if f.primary)

        created = await client.table_by_id(table_id).create_one({primary.api_key: "test"})
        print(f"Created: {created}")

        try:
            updated = await client.table_by_id(table_id).auto_map().update(
                created["id"], {primary.name: "test (edited)"}
            )
        except BaserowError as e:
            print(f"❌ Error: {e}")
            return
        print(f"✅ Updated: {updated}")


if __name__ == "__main__":
    asyncio.run(main())
