from __future__ import annotations

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "deathshock.main:app",
        host=os.environ.get("DEATHSHOCK_HOST", "127.0.0.1"),
        port=int(os.environ.get("DEATHSHOCK_PORT", "8765")),
    )


if __name__ == "__main__":
    main()
