"""Run the API with Uvicorn.

Usage:
    python -m contact_list

Host and port are read from ``HOST`` and ``PORT`` (defaults ``0.0.0.0``
and ``3000``).
"""

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "contact_list.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        log_config=None,
    )


if __name__ == "__main__":
    main()
