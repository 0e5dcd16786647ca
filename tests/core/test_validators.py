import pytest
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from core.utils.validators import sanitize_validation_errors, validate_request


class SampleRequest(BaseModel):
    key: str = Field(..., min_length=1)
    expires_in: int = 3600
    owner: str | None = Field(None, pattern=r"^[a-z]+$")


class TestValidateRequest:
    def test_returns_model(self) -> None:
        request = validate_request(SampleRequest, {"key": "a.webp", "expires_in": "60"})

        assert isinstance(request, SampleRequest)
        assert request.expires_in == 60

    def test_raises_pydantic_error(self) -> None:
        with pytest.raises(PydanticValidationError):
            validate_request(SampleRequest, {})


class TestSanitizeValidationErrors:
    def _errors(self, data: dict) -> list:
        with pytest.raises(PydanticValidationError) as exc:
            SampleRequest.model_validate(data)
        return exc.value.errors()

    def test_missing_field(self) -> None:
        sanitized = sanitize_validation_errors(self._errors({}))

        assert sanitized == [{"field": "key", "message": "This field is required"}]

    def test_integer_parsing(self) -> None:
        sanitized = sanitize_validation_errors(self._errors({"key": "a", "expires_in": "soon"}))

        assert sanitized == [{"field": "expires_in", "message": "Must be a whole number"}]

    def test_pattern_mismatch(self) -> None:
        sanitized = sanitize_validation_errors(self._errors({"key": "a", "owner": "A!"}))

        assert sanitized[0]["field"] == "owner"
        assert sanitized[0]["message"] == "Contains characters that are not allowed"

    def test_internal_fields_are_dropped(self) -> None:
        sanitized = sanitize_validation_errors(self._errors({"key": ""}))

        assert set(sanitized[0]) == {"field", "message"}

    def test_value_error_prefix_removed(self) -> None:
        sanitized = sanitize_validation_errors(
            [{"loc": ("body",), "msg": "Value error, bad things"}]
        )

        assert sanitized == [{"field": "body", "message": "bad things"}]
