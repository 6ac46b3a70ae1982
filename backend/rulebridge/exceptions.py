"""Exceptions raised by the validation pipeline."""

from rulebridge.mvc.model_state import ModelStateDictionary


class ModelStateInvalidError(Exception):
    """Raised when an endpoint's bound models fail validation and the endpoint did not ask for model state."""

    def __init__(self, model_state: ModelStateDictionary, message: str = "One or more validation errors occurred."):
        super().__init__(message)
        self.message = message
        self.model_state = model_state

    def to_dict(self) -> dict:
        return {
            "error": "validation_error",
            "message": self.message,
            "errors": self.model_state.to_dict(),
        }
