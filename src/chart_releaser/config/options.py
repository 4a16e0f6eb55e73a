"""Options controlling the upload and index commands.

Options are resolved with the following priority:
1. Explicit values (command-line flags)
2. Environment variables prefixed with ``CR_`` (e.g. ``CR_TOKEN``)
3. A YAML config file (``--config`` or ``cr.yaml`` in the working directory)
4. Built-in defaults

Config file keys may use dashes like the command-line flags
(``git-repo: charts``) or underscores (``git_repo: charts``).
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence
from urllib.parse import urlparse

import yaml

from ..constants import (
    DEFAULT_GIT_BASE_URL,
    DEFAULT_GIT_UPLOAD_URL,
    DEFAULT_INDEX_PATH,
    DEFAULT_PACKAGE_PATH,
    DEFAULT_PAGES_BRANCH,
    DEFAULT_PAGES_INDEX_PATH,
    DEFAULT_RELEASE_NAME_TEMPLATE,
    DEFAULT_REMOTE,
    DEFAULT_REQUEST_TIMEOUT,
)
from .base import Configuration, ConfigValidationResult, SerializationError

ENV_PREFIX = "CR_"
DEFAULT_CONFIG_FILE = "cr.yaml"

UPLOAD_REQUIRED = ("owner", "git_repo", "token")
INDEX_REQUIRED = ("owner", "git_repo")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass
class Options(Configuration):
    """Settings shared by the upload and index commands.

    Attributes:
        owner: GitHub user or organization owning the charts repository
        git_repo: Name of the GitHub repository holding the releases
        token: GitHub auth token, used for the API and for pushing
        package_path: Directory with chart packages; also the download cache
        git_base_url: GitHub API base URL
        git_upload_url: GitHub upload URL for release assets
        commit: Target commitish for created releases
        skip_existing: Skip packages whose release already exists
        release_name_template: Jinja2 template for release names
        release_notes_file: File inside the chart package used as release notes
        generate_release_notes: Ask GitHub to generate release notes
        make_release_latest: Mark created releases as latest
        index_path: Where the index file is written locally
        pages_branch: Branch that serves the index file
        pages_index_path: Index file path inside the pages branch
        remote: Git remote used to push the index
        push: Push the index to the pages branch
        pr: Open a pull request against the pages branch instead of pushing
        request_timeout: Timeout in seconds for each HTTP request
    """

    owner: str = ""
    git_repo: str = ""
    token: str = ""
    package_path: str = DEFAULT_PACKAGE_PATH
    git_base_url: str = DEFAULT_GIT_BASE_URL
    git_upload_url: str = DEFAULT_GIT_UPLOAD_URL
    commit: str = ""
    skip_existing: bool = False
    release_name_template: str = DEFAULT_RELEASE_NAME_TEMPLATE
    release_notes_file: str = ""
    generate_release_notes: bool = False
    make_release_latest: bool = True
    index_path: str = DEFAULT_INDEX_PATH
    pages_branch: str = DEFAULT_PAGES_BRANCH
    pages_index_path: str = DEFAULT_PAGES_INDEX_PATH
    remote: str = DEFAULT_REMOTE
    push: bool = False
    pr: bool = False
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT

    def validate(self, required: Sequence[str] = ()) -> ConfigValidationResult:
        """Validate the options.

        Args:
            required: Names of options that must be non-empty for the command

        Returns:
            ConfigValidationResult with validation status and error messages
        """
        result = ConfigValidationResult.success_result()

        for name in required:
            if not getattr(self, name):
                result.add_error(f"Option '{name.replace('_', '-')}' is required")

        for name in ("git_base_url", "git_upload_url"):
            error = _validate_http_url(name, getattr(self, name))
            if error:
                result.add_error(error)

        if not self.release_name_template.strip():
            result.add_error("Option 'release-name-template' cannot be empty")

        if self.request_timeout <= 0:
            result.add_error("Option 'request-timeout' must be a positive number of seconds")

        return result

    def to_dict(self) -> Dict[str, Any]:
        """Convert options to a dictionary keyed by field name."""
        try:
            return asdict(self)
        except Exception as e:
            raise SerializationError(f"Failed to serialize Options: {e}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Options:
        """Create Options from a mapping, coercing values to the field types.

        Unknown keys are ignored. Dashes in keys are treated as underscores.

        Raises:
            SerializationError: If a value cannot be coerced
        """
        values: Dict[str, Any] = {}
        known = {f.name: f for f in fields(cls)}
        for raw_key, raw_value in data.items():
            key = str(raw_key).replace("-", "_")
            if key not in known or raw_value is None:
                continue
            values[key] = _coerce(key, known[key].type, raw_value)
        return cls(**values)

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        """Collect option values from ``CR_*`` environment variables.

        Returns:
            Dictionary of the options present in the environment
        """
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for f in fields(cls):
            env_name = ENV_PREFIX + f.name.upper()
            if env_name in environ:
                values[f.name] = environ[env_name]
        return values

    @classmethod
    def from_file(cls, path: str | Path) -> Dict[str, Any]:
        """Read option values from a YAML config file.

        Raises:
            SerializationError: If the file is not a YAML mapping
        """
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise SerializationError(f"Failed to read config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise SerializationError(f"Config file {path} must contain a mapping")
        return data

    @classmethod
    def load(
        cls,
        config_file: Optional[str] = None,
        overrides: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> Options:
        """Resolve options from overrides, environment, config file and defaults.

        Args:
            config_file: Explicit config file; ``cr.yaml`` is used when present otherwise
            overrides: Explicit values, typically parsed flags; None values are ignored
            environ: Environment mapping, defaults to ``os.environ``

        Returns:
            New Options instance
        """
        merged: Dict[str, Any] = {}

        if config_file:
            merged.update(cls.from_file(config_file))
        elif Path(DEFAULT_CONFIG_FILE).is_file():
            merged.update(cls.from_file(DEFAULT_CONFIG_FILE))

        merged = {str(k).replace("-", "_"): v for k, v in merged.items()}
        merged.update(cls.from_environment(environ))
        for key, value in (overrides or {}).items():
            if value is not None:
                merged[key.replace("-", "_")] = value

        return cls.from_dict(merged)

    def redacted(self) -> Dict[str, Any]:
        """Return the options as a dictionary with the token masked for logging."""
        data = self.to_dict()
        if data.get("token"):
            data["token"] = "***"
        return data


def _coerce(name: str, field_type: Any, value: Any) -> Any:
    type_name = field_type if isinstance(field_type, str) else getattr(field_type, "__name__", "")
    if type_name == "bool":
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise SerializationError(f"Option '{name}' expects a boolean, got {value!r}")
    if type_name == "int":
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Option '{name}' expects an integer, got {value!r}") from e
    return str(value)


def _validate_http_url(name: str, url: str) -> Optional[str]:
    option = name.replace("_", "-")
    if not url:
        return f"Option '{option}' cannot be empty"
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return f"Option '{option}' must be an http(s) URL (e.g., 'https://api.github.com/')"
    return None
