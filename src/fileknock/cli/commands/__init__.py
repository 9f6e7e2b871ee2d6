"""CLI subcommand modules; each exposes ``register_commands(subparsers)``."""
