"""Interactive local branch pruning for git.

Features:
- Browse local branches, sorted by name
- Highlight the current and default branches
- Show the last commit of a branch before deleting it
- Print a recovery command for every deleted branch
"""

__version__ = "0.1.0"
