"""
Configuration Validators

Validators raise to reject a raw configuration. The client only reports the
error through on_validation_error; it never stops the cycle.
"""

from typing import Any, Iterable

from pydantic import BaseModel, ValidationError

from remote_config.common.exceptions import ConfigValidationError
from remote_config.common.logging_setup import get_service_logger

logger = get_service_logger("providers.validation")


async def noop_validator(config: Any) -> None:
    """Accept everything"""
    return None


class RequiredKeysValidator:
    """Validates that a mapping configuration carries the given keys"""

    def __init__(self, required_keys: Iterable[str], allow_empty: bool = False):
        self.required_keys = list(required_keys)
        self.allow_empty = allow_empty

    def __call__(self, config: Any) -> None:
        """
        Validate configuration.

        Raises:
            ConfigValidationError: with every problem found
        """
        errors: list[str] = []

        if not isinstance(config, dict):
            errors.append(f"Expected a mapping, got {type(config).__name__}")
        else:
            for key in self.required_keys:
                if key not in config:
                    errors.append(f"Missing required key: {key}")
                elif not self.allow_empty and config[key] in (None, "", [], {}):
                    errors.append(f"Empty value for required key: {key}")

        if errors:
            logger.warning(
                f"Config validation failed: {len(errors)} errors",
                extra={"errors": errors},
            )
            raise ConfigValidationError(errors)

        logger.debug("Config validation passed")


class ModelValidator:
    """Validates the raw configuration against a pydantic model"""

    def __init__(self, model: type[BaseModel]):
        self.model = model

    def __call__(self, config: Any) -> None:
        try:
            self.model.model_validate(config)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            ]
            raise ConfigValidationError(errors) from e
