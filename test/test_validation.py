"""
Flag validation adapter tests.

Scope
- pydantic models, TypeAdapters and plain callables as validators.
- pydantic errors converted into field-level ValidationError reports.
- Rendering of the report.
"""
import io
import unittest
from typing import TypedDict
from unittest import TestCase

import pydantic
from rich.console import Console

from arbor.faults import FieldError, FaultCode, ValidationError
from arbor.validation import booleans, validate


class GreetFlags(pydantic.BaseModel):
    name: str
    times: int = 1


class Limits(TypedDict):
    limit: int


class TestValidate(TestCase):
    """Validator kinds."""

    def testNoValidatorReturnsRaw(self):
        raw = {"name": "Alice"}
        self.assertIs(validate(None, raw), raw)

    def testModelValidates(self):
        flags = validate(GreetFlags, {"name": "Alice", "times": "2", "verbose": False})
        self.assertEqual(flags, GreetFlags(name="Alice", times=2))

    def testModelErrorsAreConverted(self):
        with self.assertRaises(ValidationError) as caught:
            validate(GreetFlags, {"times": "many"})
        error = caught.exception
        self.assertEqual(error.code, FaultCode.INVALID_FLAGS)
        self.assertEqual({field for field, _ in error.errors}, {"name", "times"})
        self.assertIsInstance(error.__cause__, pydantic.ValidationError)

    def testTypeAdapter(self):
        adapter = pydantic.TypeAdapter(Limits)
        self.assertEqual(validate(adapter, {"limit": "5"}), {"limit": 5})
        with self.assertRaises(ValidationError):
            validate(adapter, {"limit": "five"})

    def testCallable(self):
        self.assertEqual(validate(lambda raw: raw["n"] * 2, {"n": 21}), 42)

    def testCallableMayRaiseValidationError(self):
        def reject(raw):
            raise ValidationError([FieldError("n", "must be positive")])

        with self.assertRaises(ValidationError) as caught:
            validate(reject, {"n": -1})
        self.assertEqual(caught.exception.errors, (FieldError("n", "must be positive"),))

    def testUnsupportedValidator(self):
        with self.assertRaises(TypeError):
            validate(42, {})


class Switches(pydantic.BaseModel):
    admin: bool = False
    dry_run: bool | None = None
    name: str = "World"


class TestBooleans(TestCase):
    """Boolean fields declared to the tokenizer."""

    def testModelBoolFields(self):
        self.assertEqual(booleans(Switches), ("admin", "dry_run"))

    def testOtherValidatorsDeclareNothing(self):
        self.assertEqual(booleans(None), ())
        self.assertEqual(booleans(pydantic.TypeAdapter(Limits)), ())
        self.assertEqual(booleans(lambda raw: raw), ())


class TestReport(TestCase):
    """Human readable rendering."""

    def testStringListsFields(self):
        error = ValidationError([("name", "Field required"), ("", "too many flags")])
        self.assertEqual(str(error), "invalid flags\n  name: Field required\n  (flags): too many flags")

    def testRichRendering(self):
        stream = io.StringIO()
        Console(file=stream, width=80).print(ValidationError([("name", "Field required")]))
        self.assertEqual(stream.getvalue(), "Invalid flags:\n  name: Field required\n")


if __name__ == "__main__":
    unittest.main()
