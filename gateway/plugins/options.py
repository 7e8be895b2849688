"""Plugin option prompting - validation, coercion and answer collection."""

import logging
import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from gateway.errors import OptionValidationError
from gateway.plugins.manifest import OptionSchema, PluginManifest

logger = logging.getLogger(__name__)

OptionValue = Union[str, int, float, bool]

ENABLE_PLUGIN_MESSAGE = "Would you like to enable this plugin in system config?"
ADD_POLICIES_MESSAGE = "Would you like to add new policies to gateway config?"

# Plain decimal literals with an optional exponent, ASCII digits only
NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


@dataclass
class PromptAnswers:
    """Everything collected from the user for one plugin."""

    options: Dict[str, OptionValue] = field(default_factory=dict)
    enable_plugin: bool = False
    add_policies: bool = False


def parse_number(answer: str) -> Union[int, float]:
    """Parse a numeric answer, preferring int for integral literals.

    Raises:
        ValueError: if the answer is not a finite number
    """
    literal = answer.strip()
    if not NUMBER_PATTERN.fullmatch(literal):
        raise ValueError(f"not a numeric literal: {answer!r}")

    try:
        return int(literal)
    except ValueError:
        pass

    value = float(literal)
    if not math.isfinite(value):
        raise ValueError(f"not a finite number: {answer!r}")
    return value


def validate_option_answer(key: str, schema: OptionSchema, answer: str) -> None:
    """Check a raw answer against its option schema.

    Raises:
        OptionValidationError: if the answer must be rejected
    """
    if not schema.is_supported:
        logger.error(f"Invalid plugin option: {key}. Type must be string, boolean, or number.")
        raise OptionValidationError(
            key, f"Invalid plugin option: {key}. Type must be string, boolean, or number."
        )

    if schema.required and not answer:
        raise OptionValidationError(key, f"A value for {key} is required")

    if schema.type == "boolean" and answer not in ("true", "false"):
        raise OptionValidationError(key, f"{key} must be true or false")

    if schema.type == "number" and answer:
        try:
            parse_number(answer)
        except ValueError:
            raise OptionValidationError(key, f"{key} must be a number") from None


def coerce_option_value(schema: OptionSchema, answer: str) -> OptionValue:
    """Convert a validated answer to the option's declared type."""
    if schema.type == "number":
        return parse_number(answer)
    if schema.type == "boolean":
        return answer == "true"
    return answer


def format_default(value: Any) -> Optional[str]:
    """Render a previously configured value as prompt text."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class OptionPrompter(ABC):
    """Collects plugin options and install decisions from the user.

    Subclasses only supply the raw input primitives; validation, re-prompting
    and type coercion live here.
    """

    @abstractmethod
    def ask_text(self, message: str, default: Optional[str] = None) -> str:
        """Ask for a free-form answer."""

    @abstractmethod
    def ask_confirm(self, message: str, default: bool = True) -> bool:
        """Ask a yes/no question."""

    def report_invalid(self, error: OptionValidationError) -> None:
        """Tell the user an answer was rejected."""
        logger.info(f"Rejected answer for {error.key}: {error}")

    def collect(
        self,
        manifest: PluginManifest,
        previous: Optional[Mapping[str, Any]] = None,
        presets: Optional[Mapping[str, str]] = None,
        enable_plugin: Optional[bool] = None,
        add_policies: Optional[bool] = None,
    ) -> PromptAnswers:
        """Prompt for every declared option, then for the two decisions.

        Args:
            manifest: Plugin manifest declaring the options
            previous: Currently configured values, used as prompt defaults
            presets: Answers given up front; valid ones skip the prompt
            enable_plugin: Pre-made "enable plugin" decision, or None to ask
            add_policies: Pre-made "add policies" decision, or None to ask

        Returns:
            PromptAnswers with coerced, non-empty option values
        """
        previous = previous or {}
        presets = dict(presets or {})

        for key in presets:
            if key not in manifest.options:
                logger.warning(f"Ignoring value for undeclared option '{key}' of {manifest.plugin_name}")

        answers = PromptAnswers()
        for key, schema in manifest.options.items():
            answer = self._answer_option(key, schema, format_default(previous.get(key)), presets.get(key))
            if answer:
                answers.options[key] = coerce_option_value(schema, answer)

        if enable_plugin is None:
            enable_plugin = self.ask_confirm(ENABLE_PLUGIN_MESSAGE)
        if add_policies is None:
            add_policies = self.ask_confirm(ADD_POLICIES_MESSAGE)

        answers.enable_plugin = enable_plugin
        answers.add_policies = add_policies
        return answers

    def _answer_option(
        self, key: str, schema: OptionSchema, default: Optional[str], preset: Optional[str]
    ) -> str:
        if preset is not None:
            try:
                validate_option_answer(key, schema, preset)
                return preset
            except OptionValidationError as e:
                self.report_invalid(e)

        message = f"Set value for {key} [{schema.title or key}]"
        while True:
            answer = self.ask_text(message, default)
            try:
                validate_option_answer(key, schema, answer)
                return answer
            except OptionValidationError as e:
                self.report_invalid(e)
