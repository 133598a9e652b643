"""
Command-line interface for the secret manager.

This module orchestrates all other components and provides
the user-facing CLI commands:
- list
- add
- replace
- reverse
- check
- install-hook
- help
"""

from __future__ import annotations

import sys
import getpass
import argparse
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .config import TOOL_NAME, TOOL_VERSION
from .errors import (
    ContentEncodingError,
    MalformedVaultFile,
    SecretManagerError,
    VaultNotFound,
)
from .file_scanner import FileScanner
from .hooks import install_hook
from .settings import Settings
from .store import VaultContext, load_store, placeholder_for, save_store
from .transformer import Transformer


# ---------------------------------------------------------------------------
# Color output helpers
# ---------------------------------------------------------------------------


class Colors:
    """ANSI color codes for terminal output."""
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    RESET = "\033[0m"
    BOLD = "\033[1m"


def colored(text: str, color: str) -> str:
    """Return colored text for terminal output."""
    return f"{color}{text}{Colors.RESET}"


def print_error(msg: str) -> None:
    """Print error message to stderr."""
    print(colored(f"✗ Error: {msg}", Colors.RED), file=sys.stderr)


def print_success(msg: str) -> None:
    """Print success message."""
    print(colored(f"✓ {msg}", Colors.GREEN))


def print_warning(msg: str) -> None:
    """Print warning message."""
    print(colored(f"⚠ Warning: {msg}", Colors.YELLOW))


def print_info(msg: str) -> None:
    """Print info message."""
    print(colored(f"ℹ {msg}", Colors.CYAN))


# ---------------------------------------------------------------------------
# CLI context
# ---------------------------------------------------------------------------


class CLIContext:
    """Shared context for CLI commands."""

    def __init__(
        self,
        config_path: Optional[str],
        store_override: Optional[str],
        verbose: bool,
        quiet: bool,
        dry_run: bool,
    ):
        self.config_path = config_path
        self.store_override = store_override
        self.verbose = verbose
        self.quiet = quiet
        self.dry_run = dry_run

        # Lazy-loaded
        self._settings: Optional[Settings] = None
        self._password: Optional[str] = None
        self._vault: Optional[VaultContext] = None

    @property
    def settings(self) -> Settings:
        """Load settings lazily."""
        if self._settings is None:
            self._settings = Settings.load(self.config_path)
        return self._settings

    @property
    def store_path(self) -> Path:
        return self.settings.store_path(self.store_override)

    def prompt_password(self, confirm: bool = False) -> str:
        """Ask for the vault password once per invocation."""
        if self._password is None:
            password = getpass.getpass("Vault password: ")
            if confirm:
                if not password:
                    raise SecretManagerError("Vault password must not be empty")
                if getpass.getpass("Confirm vault password: ") != password:
                    raise SecretManagerError("Passwords do not match")
            self._password = password
        return self._password

    @property
    def vault(self) -> VaultContext:
        """Build the vault context, prompting for the password if needed."""
        if self._vault is None:
            self._vault = VaultContext(
                path=self.store_path,
                password=self.prompt_password(),
                iterations=self.settings.kdf_iterations,
                vault_id=self.settings.vault_id,
            )
        return self._vault

    def log(self, msg: str) -> None:
        """Log message if not quiet."""
        if not self.quiet:
            print(msg)

    def log_verbose(self, msg: str) -> None:
        """Log message if verbose."""
        if self.verbose:
            print(colored(f"  → {msg}", Colors.BLUE))


# ---------------------------------------------------------------------------
# Command implementations
# ---------------------------------------------------------------------------


def cmd_list(ctx: CLIContext, args: argparse.Namespace) -> int:
    """
    List all secrets in the store.
    """
    store = load_store(ctx.vault)

    if args.json:
        print(store.dumps())
        return 0

    if not len(store):
        ctx.log(colored("No secrets stored", Colors.YELLOW))
        return 0

    print("Secrets:")
    for identifier, record in store.items():
        print(f"{identifier}: {record.secret}")
        if record.description:
            print(f"    description: {record.description}")
        if record.created and ctx.verbose:
            print(f"    created:     {record.created}")
    return 0


def cmd_add(ctx: CLIContext, args: argparse.Namespace) -> int:
    """
    Add a secret to the store, creating the store if needed.
    """
    secret = args.secret
    if secret is None:
        secret = getpass.getpass("Secret value: ")
    if not secret:
        print_error("Secret value must not be empty")
        return 1

    creating = not ctx.store_path.exists()
    if creating:
        ctx.log_verbose(f"No vault at {ctx.store_path}, a new one will be created")
    ctx.prompt_password(confirm=creating)

    store = load_store(ctx.vault, missing_ok=True)
    identifier = store.add(secret, description=args.description)
    placeholder = placeholder_for(identifier)

    if ctx.dry_run:
        ctx.log(colored("[DRY RUN] Vault not modified", Colors.YELLOW))
        ctx.log(f"Would add secret with placeholder: {placeholder}")
        return 0

    save_store(ctx.vault, store)
    ctx.log_verbose(f"Vault written: {ctx.store_path} ({len(store)} secrets)")
    print_success(f"Secret added with placeholder: {placeholder}")
    return 0


def _rewrite_tree(ctx: CLIContext, args: argparse.Namespace, reverse: bool) -> int:
    store = load_store(ctx.vault)
    transformer = Transformer(store, dry_run=ctx.dry_run)
    apply_file = transformer.reveal_file if reverse else transformer.hide_file
    verb = "Reversed placeholders in" if reverse else "Replaced secrets in"

    scanner = FileScanner(
        args.path,
        skip_binary=ctx.settings.skip_binary,
        ignore_dirs=ctx.settings.ignore,
    )

    if ctx.dry_run:
        ctx.log(colored("[DRY RUN] Preview of changes:", Colors.YELLOW))

    changed_count = 0
    failed: List[str] = []

    for file_path in scanner.scan():
        if file_path.resolve() == ctx.store_path:
            ctx.log_verbose(f"Skipping vault file: {file_path}")
            continue

        ctx.log_verbose(f"Processing: {file_path}")
        try:
            changed = apply_file(file_path)
        except SecretManagerError as e:
            print_error(str(e))
            failed.append(str(file_path))
            if not args.keep_going:
                return 1
            continue

        if changed:
            changed_count += 1
            prefix = "[DRY RUN] Would update" if ctx.dry_run else verb
            ctx.log(f"{prefix}: {file_path}")

    if failed:
        print_warning(f"Updated {changed_count} file(s), {len(failed)} failed:")
        for path in failed:
            ctx.log(f"    - {path}")
        return 1

    if changed_count == 0:
        ctx.log("No placeholders reversed." if reverse else "No secrets replaced.")
    elif not ctx.dry_run:
        print_success(f"Updated {changed_count} file(s)")
    return 0


def cmd_replace(ctx: CLIContext, args: argparse.Namespace) -> int:
    """
    Replace secrets in files with placeholders.
    """
    return _rewrite_tree(ctx, args, reverse=False)


def cmd_reverse(ctx: CLIContext, args: argparse.Namespace) -> int:
    """
    Reverse placeholders back to secrets in files.
    """
    ctx.log(colored("⚠️  WARNING: This will restore plaintext secrets", Colors.YELLOW))
    ctx.log(colored("   Do NOT commit reversed files", Colors.YELLOW))
    return _rewrite_tree(ctx, args, reverse=True)


def cmd_check(ctx: CLIContext, args: argparse.Namespace) -> int:
    """
    Report files that still contain plain-text secrets. Never writes.
    """
    store = load_store(ctx.vault)
    transformer = Transformer(store, dry_run=True)
    scanner = FileScanner(args.path, skip_binary=ctx.settings.skip_binary, ignore_dirs=ctx.settings.ignore)

    leaking: List[Path] = []
    for file_path in scanner.scan():
        if file_path.resolve() == ctx.store_path:
            continue
        try:
            if transformer.hide_file(file_path):
                leaking.append(file_path)
        except ContentEncodingError as e:
            ctx.log_verbose(f"Skipping non-UTF-8 file: {e.path}")

    if leaking:
        print_error(f"Plain-text secrets found in {len(leaking)} file(s):")
        for path in leaking:
            print(f"    - {path}", file=sys.stderr)
        print(f"Run '{TOOL_NAME} replace {args.path}' before committing.", file=sys.stderr)
        return 1

    ctx.log(colored("✓ No plain-text secrets found", Colors.GREEN))
    return 0


def cmd_install_hook(ctx: CLIContext, args: argparse.Namespace) -> int:
    """
    Install the git pre-commit hook.
    """
    result = install_hook(args.repo)

    if result.already_installed:
        print_info("Pre-commit hook already installed")
        return 0

    if result.backup_path is not None:
        print_warning(f"Existing pre-commit hook backed up to: {result.backup_path}")

    print_success("Git pre-commit hook installed successfully!")
    ctx.log("The hook will now check for plain-text secrets before each commit.")
    ctx.log(colored("To bypass the hook (not recommended), use: git commit --no-verify", Colors.YELLOW))
    return 0


def cmd_help(ctx: Optional[CLIContext], args: argparse.Namespace) -> int:
    """
    Show help message.
    """
    help_text = f"""
{colored(TOOL_NAME, Colors.BOLD)} — keep secret values out of your source tree

{colored('USAGE:', Colors.CYAN)}
  secretmgr [global options] <command> [options] [arguments]

{colored('DESCRIPTION:', Colors.CYAN)}
  Secrets live in one password-encrypted vault file (Ansible Vault
  format). Files in the tree refer to them through placeholders
  such as <!secret_3f2a...!>, which are safe to commit.

{colored('COMMANDS:', Colors.CYAN)}
  list                 List all secrets in the store
  add [SECRET]         Add a secret (prompts if omitted) and print its placeholder
  replace PATH         Replace secrets in files with placeholders
  reverse PATH         Restore secrets from placeholders
  check PATH           Fail if plain-text secrets are present (no changes)
  install-hook         Install the git pre-commit hook
  help                 Show this help message

{colored('COMMAND OPTIONS:', Colors.CYAN)}
  -s, --secrets PATH        Vault file (default: secrets.json)
  -d, --description TEXT    Description for 'add'
  --keep-going              'replace'/'reverse': continue past failing files
  --json                    'list': print the decrypted store as JSON

{colored('GLOBAL OPTIONS:', Colors.CYAN)}
  -c, --config PATH         Settings file (default: .secretmgr.yml if present)
  -n, --dry-run             Show what would happen without modifying files
  -v, --verbose             Enable verbose output
  -q, --quiet               Suppress non-error output
  -h, --help                Show this help message and exit
  --version                 Show version and exit

{colored('EXAMPLES:', Colors.CYAN)}
  secretmgr add -d "stripe test key"
  secretmgr replace src/
  secretmgr --dry-run reverse config/app.env
  secretmgr list -s vault/secrets.json

{colored('VERSION:', Colors.CYAN)}
  {TOOL_VERSION}
"""
    print(help_text)
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="secretmgr",
        description="Keep secret values out of your source tree",
        add_help=False,
    )

    # Global options
    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to settings file",
    )
    parser.add_argument(
        "-n", "--dry-run",
        action="store_true",
        help="Show what would happen without modifying files",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )
    parser.add_argument(
        "-h", "--help",
        action="store_true",
        help="Show help message",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"{TOOL_NAME} {TOOL_VERSION}",
    )

    store_option = argparse.ArgumentParser(add_help=False)
    store_option.add_argument("-s", "--secrets", default=None, help="Path to the encrypted secrets file")

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    list_parser = subparsers.add_parser("list", parents=[store_option], help="List all secrets")
    list_parser.add_argument("--json", action="store_true", help="Print the store as JSON")

    add_parser = subparsers.add_parser("add", parents=[store_option], help="Add a secret")
    add_parser.add_argument("secret", nargs="?", help="Secret value (prompted if omitted)")
    add_parser.add_argument("-d", "--description", default=None, help="Free-text description")

    replace_parser = subparsers.add_parser("replace", parents=[store_option], help="Replace secrets with placeholders")
    replace_parser.add_argument("path", help="File or directory to process")
    replace_parser.add_argument("--keep-going", action="store_true", help="Continue past failing files")

    reverse_parser = subparsers.add_parser("reverse", parents=[store_option], help="Restore secrets from placeholders")
    reverse_parser.add_argument("path", help="File or directory to process")
    reverse_parser.add_argument("--keep-going", action="store_true", help="Continue past failing files")

    check_parser = subparsers.add_parser("check", parents=[store_option], help="Fail if plain-text secrets are present")
    check_parser.add_argument("path", help="File or directory to check")

    hook_parser = subparsers.add_parser("install-hook", help="Install the git pre-commit hook")
    hook_parser.add_argument("--repo", default=".", help="Repository root")

    # help command
    subparsers.add_parser("help", help="Show help message")

    return parser


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def _describe_failure(error: SecretManagerError) -> str:
    if isinstance(error, VaultNotFound):
        return f"{error}\nRun 'add' to create a new vault, or pass the right path with -s."
    if isinstance(error, MalformedVaultFile):
        return f"Vault file is corrupt or not a vault: {error}"
    return str(error)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Show help if requested or no command
    if args.help or not args.command:
        return cmd_help(None, args)

    # Build context
    ctx = CLIContext(
        config_path=args.config,
        store_override=getattr(args, "secrets", None),
        verbose=args.verbose,
        quiet=args.quiet,
        dry_run=args.dry_run,
    )

    # Dispatch to command
    commands: Dict[str, Callable[[CLIContext, argparse.Namespace], int]] = {
        "list": cmd_list,
        "add": cmd_add,
        "replace": cmd_replace,
        "reverse": cmd_reverse,
        "check": cmd_check,
        "install-hook": cmd_install_hook,
        "help": cmd_help,
    }

    cmd_func = commands.get(args.command)
    if not cmd_func:
        print_error(f"Unknown command: {args.command}")
        return 1

    try:
        return cmd_func(ctx, args)
    except SecretManagerError as e:
        print_error(_describe_failure(e))
        return 1
    except KeyboardInterrupt:
        print_error("Interrupted")
        return 130
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
