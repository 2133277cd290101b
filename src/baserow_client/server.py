"""Run the Baserow MCP server.

    BASEROW_TOKEN=... baserow-mcp
"""

import logging

from dotenv import load_dotenv
from fastmcp import FastMCP

from baserow_client.tools import register_tools


def build_server() -> FastMCP:
    mcp = FastMCP("baserow")
    register_tools(mcp)
    return mcp


def main() -> None:
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    build_server().run()


if __name__ == "__main__":
    main()
