"""Entry point for running the game via ``python -m tictactoe``."""

from __future__ import annotations

import os

import uvicorn

from .logging_setup import setup_logging


def main() -> None:
    """Start the FastAPI-powered tic-tac-toe web server."""

    setup_logging()
    host = os.environ.get("TICTACTOE_HOST", "0.0.0.0")
    port = int(os.environ.get("TICTACTOE_PORT", "8000"))
    uvicorn.run("tictactoe.ui:app", host=host, port=port, reload=False, log_config=None)


if __name__ == "__main__":
    main()
