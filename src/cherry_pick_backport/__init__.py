"""Cherry-pick backport action.

Backports the commit that triggered a run onto the branch named by a
`tests/<branch>` label of its closed pull request:
- configuration loaded from the Actions environment (or `.env`)
- structured logging
- git subprocess orchestration and pull request creation
"""

__version__ = "0.1.0"

from cherry_pick_backport.config import BackportSettings

__all__ = ["__version__", "BackportSettings"]
