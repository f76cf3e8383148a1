"""
Flag validation adapter.

A command's `validator` turns the raw merged flag mapping into a typed value
or reports field errors. Accepted validators:

- a pydantic model class: `Model.model_validate(raw)`, result is the model.
- a pydantic TypeAdapter: `adapter.validate_python(raw)`.
- any other callable: `validator(raw)`; it returns the typed value or raises
  arbor.ValidationError (or pydantic.ValidationError).

Either way failures surface as arbor.ValidationError with one FieldError per
offending field, so the pipeline reports them uniformly.
"""
import typing

import pydantic

from .faults import FieldError, ValidationError


def _field(location):
    return ".".join(map(str, location))


def convert(error, /):
    """
    translate a pydantic.ValidationError into an arbor ValidationError.
    """
    return ValidationError(
        [FieldError(_field(detail["loc"]), detail["msg"]) for detail in error.errors()],
        "invalid flags (%d %s)" % (error.error_count(), "error" if error.error_count() == 1 else "errors"),
    )


def booleans(validator, /):
    """
    names of a pydantic model's bool fields (bool, bool | None, ...).

    The tokenizer declares them so "--admin extra" keeps "extra" as an
    argument instead of taking it as the flag's value. Other validator
    kinds declare nothing.
    """
    if not (isinstance(validator, type) and issubclass(validator, pydantic.BaseModel)):
        return ()
    return tuple(
        name for name, field in validator.model_fields.items()
        if field.annotation is bool or bool in typing.get_args(field.annotation)
    )


def validate(validator, raw, /):
    """
    run validator against raw and return its typed output.

    - validator None: raw is returned unchanged (no coercion).

    Raises
    - ValidationError: the validator rejected raw.
    - TypeError: validator is not a supported kind.
    """
    if validator is None:
        return raw
    try:
        if isinstance(validator, type) and issubclass(validator, pydantic.BaseModel):
            return validator.model_validate(raw)
        if isinstance(validator, pydantic.TypeAdapter):
            return validator.validate_python(raw)
        if callable(validator):
            return validator(raw)
    except pydantic.ValidationError as error:
        raise convert(error) from error
    raise TypeError("validator must be a pydantic model, a TypeAdapter or a callable")


__all__ = ("booleans", "convert", "validate")
