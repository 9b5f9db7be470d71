"""Authentication against the OpenHIM core API."""

import hashlib

import httpx
from rich.console import Console

from core.config import Config, load_config

console = Console()


def build_auth_headers(username: str, password: str, salt: str, ts: str) -> dict[str, str]:
    """Build the OpenHIM token headers from an ``/authenticate`` challenge."""
    passhash = hashlib.sha512((salt + password).encode("utf-8")).hexdigest()
    token = hashlib.sha512((passhash + salt + ts).encode("utf-8")).hexdigest()
    return {
        "auth-username": username,
        "auth-ts": ts,
        "auth-salt": salt,
        "auth-token": token,
    }


def authenticate_url(api_url: str, username: str) -> str:
    return f"{api_url.rstrip('/')}/authenticate/{username}"


def check_auth(config: Config) -> bool:
    """Check that the OpenHIM core API knows our user."""
    api = config.api
    try:
        response = httpx.get(
            authenticate_url(api.api_url, api.username),
            verify=not api.trust_self_signed,
            timeout=10.0,
        )
    except httpx.RequestError as e:
        console.print(f"[red]OpenHIM unreachable:[/red] {api.api_url} ({e})")
        return False

    if response.status_code == 200:
        console.print(f"[green]Authenticated[/green] as {api.username} at {api.api_url}")
        return True

    console.print(f"[yellow]Not authenticated[/yellow] ({response.status_code})")
    console.print("\n[dim]Check api.username and api.api_url in your config[/dim]")
    return False


def main():
    """CLI entry point for auth check."""
    check_auth(load_config())


if __name__ == "__main__":
    main()
