"""CLI tool for admin operations.

Usage:
    python -m journal.cli hash-passphrase
    python -m journal.cli init-db
"""

import sys
import getpass

from journal.database import create_db_and_tables
from journal.services.auth import hash_passphrase


def hash_passphrase_command():
    """Prompt for the shared passphrase and print its bcrypt hash."""
    passphrase = getpass.getpass("Passphrase: ")
    if not passphrase:
        print("Passphrase cannot be empty.")
        sys.exit(1)

    passphrase_confirm = getpass.getpass("Confirm passphrase: ")
    if passphrase != passphrase_confirm:
        print("Passphrases do not match.")
        sys.exit(1)

    print("\nAdd this line to your .env file:")
    print(f"TJ_GATE_PASSPHRASE_HASH='{hash_passphrase(passphrase)}'")


def init_db_command():
    create_db_and_tables()
    print("Database tables created.")


COMMANDS = {
    "hash-passphrase": hash_passphrase_command,
    "init-db": init_db_command,
}


def main():
    if len(sys.argv) < 2:
        print("Usage: python -m journal.cli <command>")
        print(f"Commands: {', '.join(COMMANDS)}")
        sys.exit(1)

    command = COMMANDS.get(sys.argv[1])
    if command is None:
        print(f"Unknown command: {sys.argv[1]}")
        sys.exit(1)
    command()


if __name__ == "__main__":
    main()
