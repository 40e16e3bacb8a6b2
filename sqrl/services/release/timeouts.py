from __future__ import annotations

# External build tools
PACKAGER_TIMEOUT_SECONDS = 10 * 60.0
RELEASER_TIMEOUT_SECONDS = 30 * 60.0

# Publishing
GIT_REMOTE = "origin"
GIT_BRANCH = "master"
