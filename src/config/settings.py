"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use FLEXSPAN_ prefix (e.g., FLEXSPAN_DEBUG_MODE=true).

Settings can also be loaded from a .env file in the project root.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use FLEXSPAN_ prefix. List values are given
    as JSON arrays.

    Examples:
        FLEXSPAN_META_NAME=spans
        FLEXSPAN_TRAILING_PUNCTUATION=".,;"
        FLEXSPAN_COMMAND_FORMATS='["latex", "beamer", "context"]'
    """

    model_config = SettingsConfigDict(
        env_prefix="FLEXSPAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Rule configuration
    meta_name: str = Field(
        default="flexspan",
        description="Document metadata key holding the list of rule definitions",
    )

    rules_file: Optional[str] = Field(
        default=None,
        description="Optional YAML file with rule definitions, applied before document rules",
    )

    # Scanner configuration
    option_separators: str = Field(
        default=",",
        description="Characters separating components of an option string",
    )

    trailing_punctuation: str = Field(
        default=".,;:!?",
        description="Characters captured after a right delimiter and moved outside the span",
    )

    # Document walking configuration
    opaque_types: List[str] = Field(
        default_factory=lambda: ["Code", "Math", "RawInline"],
        description="Pandoc inline types never searched for delimiters",
    )

    block_types: List[str] = Field(
        default_factory=lambda: ["Para", "Plain"],
        description="Pandoc block types whose inline content is rewritten",
    )

    # Rendering configuration
    command_formats: List[str] = Field(
        default_factory=lambda: ["latex", "beamer"],
        description="Output formats where spans become raw command invocations",
    )

    debug_mode: bool = Field(
        default=False,
        description="Emit every LOG message regardless of verbosity",
    )

    def punctuation_is(self, char: str) -> bool:
        """
        Check whether a single character counts as trailing punctuation.

        Args:
            char: Character following a right delimiter

        Returns:
            True if the character is captured as trailing punctuation

        Example:
            >>> AppSettings().punctuation_is('.')
            True
            >>> AppSettings().punctuation_is('(')
            False
        """
        return len(char) == 1 and char in self.trailing_punctuation

    def format_supportsCommands(self, fmt: Optional[str]) -> bool:
        """
        Check whether an output format receives raw command invocations.

        Pandoc passes formats with extensions (e.g. "latex+raw_tex"), so
        only the base name is compared.
        """
        if not fmt:
            return False
        base = fmt.split("+", 1)[0].split("-", 1)[0].lower()
        return base in [f.lower() for f in self.command_formats]


# Singleton instance - import this in your code
appsettings = AppSettings()
