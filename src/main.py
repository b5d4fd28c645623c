"""Entrypoint: `uvicorn src.main:app` or the `chess-sync` script."""

import uvicorn

from src.api.server import create_app

app = create_app()


def run() -> None:
    uvicorn.run("src.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
