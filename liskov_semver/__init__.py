"""liskov-semver: SemVer bumps decided by Liskov substitution checks."""

__version__ = "0.1.0"
