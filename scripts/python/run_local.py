"""Script to run the API locally with auto-reload."""

import os

import uvicorn


def main() -> None:
    """Run the server against the development configuration."""
    os.environ.setdefault("APP_ENV", "development")
    uvicorn.run("pantry_chef.main:app", host="127.0.0.1", port=5000, reload=True)


if __name__ == "__main__":
    main()
