"""pr-autoupdate: keep pull request branches up to date with their base branch."""

__version__ = "0.1.0"
