"""
rtxkit - set up the rtx tool-version manager in CI.

Installs the rtx binary, restores the cache of tools it manages, runs
'rtx install' and publishes the installed tools' bin paths.
"""

__version__ = "0.1.0"
