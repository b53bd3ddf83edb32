"""Exception hierarchy for configuration, resolution and platform API failures."""


class TrifoniusError(Exception):
    """Base class for all errors raised by the engine."""


class ValidationError(TrifoniusError):
    """Bad identifier, bad configuration or bad template, detected before deployment."""


class ResolutionError(TrifoniusError):
    """A deployment could not be resolved from configuration and caller input."""


# ── Resolution errors ─────────────────────────────────────────────


class MissingRequiredJunction(ResolutionError):
    def __init__(self, direction: str, junction_id: str):
        self.direction = direction
        self.junction_id = junction_id
        super().__init__(f"required {direction} junction resources '{junction_id}' are not provided")


class WrongResourceType(ResolutionError):
    def __init__(self, resource: str, direction: str, junction_id: str, expected: list[str]):
        self.resource = resource
        self.junction_id = junction_id
        self.expected = expected
        super().__init__(
            f"resource '{resource}' connected to {direction} junction '{junction_id}' "
            f"has wrong type, '{', '.join(expected)}' expected"
        )


class CardinalityViolation(ResolutionError):
    def __init__(self, direction: str, junction_id: str, count: int, minimum: int, maximum: int | None):
        self.junction_id = junction_id
        self.count = count
        self.minimum = minimum
        self.maximum = maximum
        if count < minimum:
            message = f"there should be at least {minimum} resource(s) connected to {direction} junction '{junction_id}' ({count} provided)"
        else:
            message = f"there can be at most {maximum} resource(s) connected to {direction} junction '{junction_id}' ({count} provided)"
        super().__init__(message)


class UnknownResource(ResolutionError):
    def __init__(self, resource: str, direction: str, junction_id: str):
        self.resource = resource
        self.junction_id = junction_id
        super().__init__(f"resource '{resource}' connected to {direction} junction '{junction_id}' does not exist")


class MissingMandatoryParameter(ResolutionError):
    def __init__(self, parameter_id: str):
        self.parameter_id = parameter_id
        super().__init__(f"mandatory deployment parameter '{parameter_id}' is not provided")


class UnresolvedPlaceholder(ResolutionError):
    def __init__(self, name: str, reason: str = "has no value"):
        self.name = name
        super().__init__(f"template resolution failed because placeholder '{name}' {reason}")


class MissingJunctionBinding(ResolutionError):
    def __init__(self, direction: str, junction_id: str, variable: str):
        self.junction_id = junction_id
        self.variable = variable
        super().__init__(f"missing {direction} junction setting '{junction_id}' for variable '{variable}'")


class MissingParameterBinding(ResolutionError):
    def __init__(self, parameter_id: str, variable: str):
        self.parameter_id = parameter_id
        self.variable = variable
        super().__init__(f"missing deployment parameter '{parameter_id}' for variable '{variable}'")


class ProfileNotFound(ResolutionError):
    def __init__(self, profile_id: str):
        self.profile_id = profile_id
        super().__init__(f"profile '{profile_id}' is not defined")


class NoProfilesDefined(ResolutionError):
    def __init__(self):
        super().__init__("no default profile defined")


class AmbiguousDefaultProfile(ResolutionError):
    def __init__(self, profile_ids: list[str]):
        self.profile_ids = profile_ids
        super().__init__(f"unable to select default profile, choose one of: {', '.join(profile_ids)}")


# ── Platform API errors ───────────────────────────────────────────


class ApiError(TrifoniusError):
    """Error reported by the platform REST API."""


class NotFound(ApiError):
    pass


class NotAuthorized(ApiError):
    pass


class UnexpectedApiError(ApiError):
    pass


class DeploymentError(TrifoniusError):
    """A resolved deployment was rejected by the platform."""


class AuthorizationFailure(DeploymentError):
    pass
