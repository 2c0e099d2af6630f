"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field


STORE_BACKENDS = ("memory", "json", "firestore")


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        recent_default_count: Listing size when none is requested
        recent_min_count: Smallest allowed listing size
        recent_max_count: Largest allowed listing size
        search_default_radius: Radius used when none is requested
        search_display_limit: Matches shown in a search reply
        export_cap: Maximum coordinates in an export
        export_max_chars: Maximum length of export text
        store_backend: One of "memory", "json", "firestore"
        coordinates_file: JSON file path for the "json" backend
        firestore_database: Firestore database name (None for default)
        firestore_collection: Firestore collection for coordinates
        slack_webhook_url: Incoming webhook for new-coordinate notifications
        notification_timeout: Webhook request timeout in seconds
        notify_inline: Send notifications before returning instead of on
                       a background pool (for runtimes that throttle the
                       CPU once the response is sent)
        admin_api_key: Key required by destructive API endpoints
    """
    recent_default_count: int = 10
    recent_min_count: int = 1
    recent_max_count: int = 25
    search_default_radius: int = 1000
    search_display_limit: int = 15
    export_cap: int = 50
    export_max_chars: int = 1900
    store_backend: str = "json"
    coordinates_file: str = "coordinates.json"
    firestore_database: str | None = None
    firestore_collection: str = "coordinates"
    slack_webhook_url: str | None = None
    notification_timeout: int = 10
    notify_inline: bool = False
    admin_api_key: str | None = None


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    if config.recent_min_count < 1:
        errors.append(ValidationError(
            field="recent_min_count",
            message=f"Minimum count must be at least 1, got {config.recent_min_count}",
        ))

    if config.recent_min_count > config.recent_max_count:
        errors.append(ValidationError(
            field="recent_max_count",
            message=(
                f"recent_min_count ({config.recent_min_count}) > "
                f"recent_max_count ({config.recent_max_count})"
            ),
        ))

    if not config.recent_min_count <= config.recent_default_count <= config.recent_max_count:
        errors.append(ValidationError(
            field="recent_default_count",
            message=(
                f"Default count {config.recent_default_count} outside "
                f"[{config.recent_min_count}, {config.recent_max_count}]"
            ),
        ))

    if config.search_default_radius <= 0:
        errors.append(ValidationError(
            field="search_default_radius",
            message=f"Search radius must be positive, got {config.search_default_radius}",
        ))

    if config.export_cap < 1:
        errors.append(ValidationError(
            field="export_cap",
            message=f"Export cap must be at least 1, got {config.export_cap}",
        ))

    if config.export_max_chars < 1:
        errors.append(ValidationError(
            field="export_max_chars",
            message=f"Export size limit must be positive, got {config.export_max_chars}",
        ))

    if config.store_backend not in STORE_BACKENDS:
        errors.append(ValidationError(
            field="store_backend",
            message=(
                f"Unknown store backend '{config.store_backend}', "
                f"expected one of {', '.join(STORE_BACKENDS)}"
            ),
        ))

    if config.store_backend == "memory":
        errors.append(ValidationError(
            field="store_backend",
            message="Memory backend loses all coordinates on restart",
            severity="warning",
        ))

    if not config.slack_webhook_url:
        errors.append(ValidationError(
            field="slack_webhook_url",
            message="No Slack webhook configured, notifications disabled",
            severity="warning",
        ))
    elif config.slack_webhook_url.startswith("${"):
        errors.append(ValidationError(
            field="slack_webhook_url",
            message="Webhook URL not resolved (still contains placeholder)",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
