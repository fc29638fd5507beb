#!/usr/bin/env python3
# scripts/check_users.py
"""
List registered users with their role and branch.

Run: python scripts/check_users.py
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv
from rich import box
from rich.console import Console
from rich.table import Table

from src.datafix.config import initialize_config
from src.datafix.core.errors import DataFixError
from src.datafix.domains.users.services.user_management import branch_label, role_counts


def build_roster(profiles) -> Table:
    """Roster table: number, full name, role, branch."""
    table = Table(box=box.ROUNDED)
    table.add_column("No", justify="right")
    table.add_column("Nama Lengkap")
    table.add_column("Role")
    table.add_column("Cabang")

    for index, profile in enumerate(profiles, start=1):
        table.add_row(
            str(index),
            profile.full_name or "-",
            profile.role.value if profile.role else "-",
            branch_label(profile),
        )
    return table


def main(users=None, console: Console = None) -> int:
    console = console or Console()
    if users is None:
        from src.datafix.repositories import get_user_repository
        users = get_user_repository()

    console.print("[bold blue]Checking registered users...[/bold blue]\n")
    try:
        profiles = users.list_profiles()
    except DataFixError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        return 1

    if not profiles:
        console.print("[yellow]No registered users.[/yellow]")
        return 0

    console.print(f"Found {len(profiles)} user(s):\n")
    console.print(build_roster(profiles))

    counts = role_counts(profiles)
    console.print("\n[bold]Statistics:[/bold]")
    console.print(f"  Admin: {counts['admin']}")
    console.print(f"  Requester: {counts['requester']}")
    console.print(f"  Total: {counts['total']}")
    return 0


if __name__ == "__main__":
    load_dotenv()
    initialize_config(str(project_root / "config"))
    sys.exit(main())
