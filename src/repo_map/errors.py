"""Exception hierarchy for repo-map."""

from repo_map.utils.subprocess_utils import SubprocessError


class RepoMapError(Exception):
    """Base class for engine-level failures."""


class ToolUnavailable(RepoMapError):
    """The structural search binary could not be located."""

    def __init__(self, candidates):
        self.candidates = tuple(candidates)
        super().__init__(
            "ast-grep not found (tried: "
            + ", ".join(self.candidates)
            + "). Install it with `npm install -g @ast-grep/cli` or `cargo install ast-grep`."
        )


class InvalidGitReference(RepoMapError, ValueError):
    """A commit reference failed validation before any git invocation."""

    def __init__(self, ref):
        self.ref = ref
        super().__init__(f"Invalid git commit reference: {ref!r}")


class CacheCorrupted(RepoMapError):
    """The cache file exists but could not be parsed or validated."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Corrupt repo map cache at {path}: {reason}")


class RepositoryUnreadable(RepoMapError):
    """The repository root is missing or not a directory."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Repository root is not a readable directory: {path}")


class SubprocessTimeout(SubprocessError):
    """A structural search invocation exceeded its timeout."""

    def __init__(self, cmd: str, timeout: float):
        self.timeout = timeout
        super().__init__(cmd=cmd, returncode=-1, stderr=f"timed out after {timeout}s")


class SubprocessFailure(SubprocessError):
    """A structural search invocation failed to launch or exited abnormally."""
