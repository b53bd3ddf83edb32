"""Validated identifier types.

Every identifier is a ``str`` subclass checked against a class-level regex.
``ProcessorId("x")`` raises ``ValidationError`` for a bad value;
``ProcessorId.parse(value)`` accepts any object (``None``, ints, ...) and
raises the same error, ``ProcessorId.is_valid(value)`` only answers the question.
"""

import re

from trifonius.errors import ValidationError


class ValidatedId(str):
    """Base class for identifiers constrained by a regular expression."""

    pattern: re.Pattern = re.compile(r"^.+$")
    label: str = "identifier"

    def __new__(cls, value: str):
        if not isinstance(value, str) or not cls.pattern.match(value):
            raise ValidationError(f"invalid {cls.label} '{value}'")
        return super().__new__(cls, value)

    @classmethod
    def parse(cls, value) -> "ValidatedId":
        if isinstance(value, cls):
            return value
        if value is None:
            raise ValidationError(f"missing {cls.label}")
        return cls(str(value))

    @classmethod
    def is_valid(cls, value) -> bool:
        return isinstance(value, str) and cls.pattern.match(value) is not None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str.__repr__(self)})"


class ProcessorId(ValidatedId):
    pattern = re.compile(r"^[a-z][a-z0-9_-]{1,50}$")
    label = "processor id"


class ProcessorRealizationId(ValidatedId):
    pattern = re.compile(r"^[a-z][a-z0-9_-]{1,50}$")
    label = "processor realization id"


class ResourceId(ValidatedId):
    pattern = re.compile(r"^[a-z][a-z0-9_-]{1,50}$")
    label = "resource id"


class JunctionId(ValidatedId):
    pattern = re.compile(r"^[a-z][a-z0-9_-]{1,50}$")
    label = "junction id"


class ParameterId(ValidatedId):
    pattern = re.compile(r"^[a-z][a-z0-9_-]{1,30}$")
    label = "parameter id"


class ProfileId(ValidatedId):
    pattern = re.compile(r"^[a-z0-9][a-z0-9_-]{0,19}$")
    label = "profile id"


class PipelineId(ValidatedId):
    pattern = re.compile(r"^[a-z][a-z0-9]{0,17}$")
    label = "pipeline id"


class ServiceName(ValidatedId):
    """Name under which a processor instance is deployed on the platform."""

    pattern = re.compile(r"^[a-z][a-z0-9_-]{1,69}$")
    label = "service name"

    @classmethod
    def for_processor(cls, processor_id: str, pipeline_id: str | None = None) -> "ServiceName":
        if pipeline_id:
            return cls(f"{pipeline_id}-{processor_id}")
        return cls(processor_id)
