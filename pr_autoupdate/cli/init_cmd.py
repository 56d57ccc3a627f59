"""Initialize pr-autoupdate in a repository."""

from pathlib import Path
from typing import Optional


WORKFLOW_TEMPLATE = '''name: Auto update PR branches

on:
  push:
    branches: [main]
  schedule:
    - cron: "0 * * * *"
  workflow_dispatch:

permissions:
  contents: write
  pull-requests: read

jobs:
  autoupdate:
    name: Update PR branches
    runs-on: ubuntu-latest

    steps:
      - uses: actions/checkout@v4

      - uses: astral-sh/setup-uv@v4

      - name: Install pr-autoupdate
        run: uv tool install pr-autoupdate

      - name: Update PR branches
        id: autoupdate
        env:
          GITHUB_TOKEN: ${{ secrets.GITHUB_TOKEN }}
          PR_FILTER: all
          PR_READY_STATE: all
          MERGE_CONFLICT_ACTION: fail
          RETRY_COUNT: 5
          RETRY_SLEEP: 300
        run: pr-autoupdate run
'''

WORKFLOW_PATH = Path(".github") / "workflows" / "autoupdate.yml"


def init_repository(target_dir: Optional[Path] = None) -> bool:
    """
    Initialize pr-autoupdate in a repository.

    Creates:
      - .github/workflows/autoupdate.yml
    """
    target = target_dir or Path.cwd()

    # Check if git repo
    if not (target / ".git").exists():
        print(f"Error: {target} is not a git repository")
        return False

    workflow_file = target / WORKFLOW_PATH
    if workflow_file.exists():
        print(f"Already exists: {workflow_file}")
        print("\nAlready configured. No changes needed.")
        return True

    workflow_file.parent.mkdir(parents=True, exist_ok=True)
    workflow_file.write_text(WORKFLOW_TEMPLATE)
    print(f"Created: {workflow_file}")

    print("\nNext steps:")
    print("  1. Adjust the branches and filters in the workflow")
    print("  2. git add . && git commit -m 'Add PR auto update'")
    print("  3. git push")

    return True
