"""
Transform Providers

Map the raw endpoint result into the configuration type the application
expects. A falsy result always means "no configuration".
"""

from typing import Any, Callable

from pydantic import BaseModel


def identity_transform(config: Any) -> Any | None:
    """Return the input unchanged, collapsing falsy values to None"""
    return config if config else None


def model_transform(model: type[BaseModel]) -> Callable[[Any], BaseModel | None]:
    """
    Build a transformer that parses the raw configuration into a pydantic model.

    Parsing errors are not raised; an invalid payload becomes None so the
    transformer keeps the never-raise contract. Pair it with ModelValidator
    to get the parsing error reported.
    """

    def transform(config: Any) -> BaseModel | None:
        if not config:
            return None
        try:
            return model.model_validate(config)
        except ValueError:
            return None

    return transform
