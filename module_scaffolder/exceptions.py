"""
Custom exception hierarchy for the module scaffolder.

Fatal problems are raised as ``ScaffoldError`` subclasses carrying context and
recovery suggestions. Non-fatal problems are collected as ``GenerationWarning``
records in a ``GenerationReport`` and surfaced once generation completes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ScaffoldError(Exception):
    """
    Base exception for all module scaffolder errors.

    Provides rich context and error recovery guidance.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None
    ):
        """
        Initialize the exception with context and recovery suggestions.

        Args:
            message: Human-readable error message
            context: Additional context about where/why the error occurred
            suggestions: List of potential solutions or next steps
            error_code: Unique error code for programmatic handling
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        self.error_code = error_code

    def __str__(self) -> str:
        """Return formatted error message with context."""
        lines = [self.message]

        if self.error_code:
            lines.append(f"Error Code: {self.error_code}")

        if self.context:
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestions:
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  • {suggestion}")

        return "\n".join(lines)


class DeclarationError(ScaffoldError):
    """Raised when a field declaration token is malformed."""

    def __init__(self, message: str, token: str = None, **kwargs):
        context = kwargs.get('context', {})
        if token is not None:
            context['token'] = token
        self.token = token

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Use the form name, name:type or name:kind:Related",
                "Relation and media declarations take at most three parts",
                "Make sure every field name is unique within the module"
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="DECLARATION_ERROR"
        )


class ConfigurationError(ScaffoldError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_file: str = None, **kwargs):
        context = kwargs.get('context', {})
        if config_file:
            context['config_file'] = config_file

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the configuration file syntax",
                "Verify option names against the documented settings",
                "Remove the config file to fall back to defaults"
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CONFIG_ERROR"
        )


class ArtifactWriteError(ScaffoldError):
    """Raised when a generated directory or file cannot be written."""

    def __init__(self, message: str, path: str = None, **kwargs):
        context = kwargs.get('context', {})
        if path:
            context['path'] = path
        self.path = path

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check write permissions on the project directory",
                "Make sure no file exists where a directory is expected",
                "Re-run the command once fixed; generation is re-runnable"
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="ARTIFACT_WRITE_ERROR"
        )


class TemplateRenderError(ScaffoldError):
    """Raised when a template fails to render."""

    def __init__(self, message: str, template: str = None, **kwargs):
        context = kwargs.get('context', {})
        if template:
            context['template'] = template

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the template for references to missing data keys",
                "Reinstall the package if bundled templates were modified"
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="TEMPLATE_RENDER_ERROR"
        )


class WarningKind(Enum):
    """Kinds of non-fatal diagnostics collected during generation."""

    UNKNOWN_ALIAS = "unknown_alias"
    RELATED_ARTIFACT_MISSING = "related_artifact_missing"
    REGISTRY_ANCHOR_MISSING = "registry_anchor_missing"
    REGISTRY_MANUAL_EDIT = "registry_manual_edit"
    EXTERNAL_TOOL_FAILED = "external_tool_failed"


@dataclass(frozen=True)
class GenerationWarning:
    """A recoverable problem that degraded, but did not stop, generation."""

    kind: WarningKind
    message: str
    subject: Optional[str] = None

    def __str__(self) -> str:
        if self.subject:
            return f"[{self.kind.value}] {self.subject}: {self.message}"
        return f"[{self.kind.value}] {self.message}"


@dataclass
class GenerationReport:
    """Files written and warnings collected by one generate/destroy run."""

    written: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    warnings: List[GenerationWarning] = field(default_factory=list)

    def warn(self, kind: WarningKind, message: str, subject: Optional[str] = None) -> None:
        self.warnings.append(GenerationWarning(kind, message, subject))

    def extend(self, warnings: List[GenerationWarning]) -> None:
        self.warnings.extend(warnings)

    def warnings_of(self, kind: WarningKind) -> List[GenerationWarning]:
        return [w for w in self.warnings if w.kind == kind]

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
