"""CLI subcommands for path-acl."""
